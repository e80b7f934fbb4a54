"""
Host list validation
Collects host identifiers from the command line, files and groups and validates them
"""
from pathlib import Path
from typing import Iterable, List

import validators

from services.errors import HostListError


class HostValidator:
    """Validates host identifiers before any connection is attempted"""

    @staticmethod
    def validate_hostname(hostname: str) -> bool:
        """Validate hostname using validators module"""
        hostname = hostname.strip()
        if not hostname:
            return False
        # Domain names, IP addresses and single-label NetBIOS style names
        return bool(
            validators.domain(hostname)
            or validators.ipv4(hostname)
            or validators.ipv6(hostname)
            or validators.hostname(hostname, may_have_port=False)
        )

    @staticmethod
    def read_hosts_file(path: str) -> List[str]:
        """Read one host per line, ignoring blank lines and # comments"""
        hosts_file = Path(path)
        try:
            lines = hosts_file.read_text().splitlines()
        except OSError as e:
            raise HostListError(f"Could not read hosts file {path}: {e}")

        hosts = []
        for line in lines:
            entry = line.split('#', 1)[0].strip()
            if entry:
                hosts.append(entry)
        return hosts

    @staticmethod
    def merge_hosts(*sources: Iterable[str]) -> List[str]:
        """Concatenate host sources, keeping the first occurrence of each host"""
        seen = set()
        merged = []
        for source in sources:
            for host in source:
                host = host.strip()
                key = host.lower()
                if host and key not in seen:
                    seen.add(key)
                    merged.append(host)
        return merged

    def validate_host_list(self, hosts: Iterable[str]) -> List[str]:
        """Return the host list unchanged or raise HostListError"""
        hosts = list(hosts)
        if not hosts:
            raise HostListError("No target hosts given")

        invalid = [host for host in hosts if not isinstance(host, str) or not self.validate_hostname(host)]
        if invalid:
            raise HostListError(f"Invalid host identifier(s): {', '.join(repr(host) for host in invalid)}")

        return [host.strip() for host in hosts]
