"""
Reclaim command handler
Collects target hosts and runs the cache reclaimer
"""
from typing import Any, Callable, List, Optional

from config import ReclaimConfig
from services.host_validator import HostValidator
from services.reclaim_reporter import ReclaimReporter
from services.reclaimer import CacheReclaimer
from services.remote_session import SessionFactory


class ReclaimHandler:
    """Handles the reclaim command"""

    def __init__(
        self,
        reclaim_config: ReclaimConfig,
        session_factory: Optional[SessionFactory] = None,
        write: Callable[[str], None] = print
    ):
        self.reclaim_config = reclaim_config
        self.session_factory = session_factory
        self.write = write
        self.host_validator = HostValidator()

    def collect_hosts(self, args: Any) -> List[str]:
        """Merge positional hosts, a hosts file and a named group"""
        file_hosts = self.host_validator.read_hosts_file(args.hosts_file) if args.hosts_file else []
        group_hosts = self.reclaim_config.get_host_group(args.group) if args.group else []
        return self.host_validator.merge_hosts(args.hosts or [], file_hosts, group_hosts)

    def handle(self, args: Any) -> int:
        hosts = self.host_validator.validate_host_list(self.collect_hosts(args))

        reclaimer = CacheReclaimer(
            settings=self.reclaim_config.get_settings(),
            session_factory=self.session_factory,
            reporter=ReclaimReporter(self.write)
        )
        outcomes = reclaimer.run(hosts, reset_secondary=args.reset_secondary)

        return 0 if all(outcome.succeeded for outcome in outcomes) else 1
