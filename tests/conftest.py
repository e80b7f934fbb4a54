"""
Shared fixtures: an in-memory stand-in for a remote host and its session
"""
import re
from typing import Any, Dict, List, Optional

import pytest

from services import powershell
from services.errors import RemoteCommandError, SessionCleanupError, SessionConnectionError
from services.reclaim_defaults import ReclaimDefaults

MB = ReclaimDefaults.BYTES_PER_MB

ELEMENT_ID = re.compile(r"\$elementId = '((?:[^']|'')*)'")


class FakeHost:
    """Remote host state answering the tagged scripts the services send"""

    def __init__(
        self,
        total_mb: float = 2000,
        free_mb: float = 1500,
        elements: Optional[Dict[str, int]] = None,
        connect_error: Optional[str] = None,
        close_error: Optional[str] = None,
        fail_element_ids: Optional[List[str]] = None,
        secondary_sizes_mb: Optional[List[float]] = None,
        recreate_directory: bool = True,
        stop_error: Optional[str] = None,
        start_error: Optional[str] = None,
        cache_info_error: Optional[str] = None,
        remove_error: Optional[str] = None,
        documents: Optional[Dict[str, Any]] = None,
    ):
        self.total_mb = total_mb
        self.free_mb = free_mb
        self.elements = dict(elements or {})
        self.connect_error = connect_error
        self.close_error = close_error
        self.fail_element_ids = set(fail_element_ids or [])
        self.secondary_sizes_mb = list(secondary_sizes_mb or [0, 0])
        self.recreate_directory = recreate_directory
        self.stop_error = stop_error
        self.start_error = start_error
        self.cache_info_error = cache_info_error
        self.remove_error = remove_error
        # Raw replies that replace the normal answer of an operation
        self.documents = dict(documents or {})
        self.events: List[str] = []
        self.deleted: List[str] = []

    def respond(self, hostname: str, script: str):
        operation = powershell.script_operation(script)
        self.events.append(operation)

        if operation in self.documents:
            return self.documents[operation]

        if operation == 'cache-info':
            if self.cache_info_error:
                raise RemoteCommandError(hostname, self.cache_info_error)
            return {
                'total': self.total_mb,
                'free': self.free_mb,
                'elements': [{'id': element_id, 'size': size} for element_id, size in self.elements.items()]
            }

        if operation == 'delete-cache-element':
            element_id = ELEMENT_ID.search(script).group(1).replace("''", "'")
            if element_id in self.fail_element_ids:
                raise RemoteCommandError(hostname, "delete-cache-element failed: access denied")
            size = self.elements.pop(element_id)
            self.free_mb += size / MB
            self.deleted.append(element_id)
            return {'id': element_id, 'deleted': True}

        if operation == 'measure-directory':
            size_mb = self.secondary_sizes_mb.pop(0)
            return {'path': 'C:\\Windows\\SoftwareDistribution', 'exists': size_mb > 0, 'bytes': int(size_mb * MB)}

        if operation == 'stop-service':
            return {'succeeded': self.stop_error is None, 'error': self.stop_error}

        if operation == 'start-service':
            return {'succeeded': self.start_error is None, 'error': self.start_error}

        if operation == 'remove-directory':
            if self.remove_error:
                raise RemoteCommandError(hostname, self.remove_error)
            return {'succeeded': True, 'error': None}

        if operation == 'directory-exists':
            return {'path': 'C:\\Windows\\SoftwareDistribution', 'exists': self.recreate_directory}

        raise AssertionError(f"unexpected script operation: {operation}")


class FakeSession:
    """RemoteSession stand-in bound to a FakeHost"""

    def __init__(self, hostname: str, host: FakeHost, log: List[str]):
        self.hostname = hostname
        self.host = host
        self.log = log
        self.is_open = False

    def open(self):
        self.log.append(f"open {self.hostname}")
        if self.host.connect_error:
            raise SessionConnectionError(self.hostname, self.host.connect_error)
        self.is_open = True

    def run_script(self, script: str, timeout=None):
        assert self.is_open, "script sent on a closed session"
        return self.host.respond(self.hostname, script)

    def close(self):
        self.log.append(f"close {self.hostname}")
        self.is_open = False
        if self.host.close_error:
            raise SessionCleanupError(self.hostname, self.host.close_error)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


class FakeFleet:
    """Collection of fake hosts plus a session factory over them"""

    def __init__(self):
        self.hosts: Dict[str, FakeHost] = {}
        self.log: List[str] = []
        self.sessions: List[FakeSession] = []

    def add(self, hostname: str, **kwargs) -> FakeHost:
        self.hosts[hostname] = FakeHost(**kwargs)
        return self.hosts[hostname]

    def session_factory(self, hostname: str) -> FakeSession:
        session = FakeSession(hostname, self.hosts[hostname], self.log)
        self.sessions.append(session)
        return session


@pytest.fixture
def fleet():
    return FakeFleet()


@pytest.fixture
def output():
    """Collects report lines instead of printing them"""
    return []
