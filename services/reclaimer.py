"""
Cache reclaimer
Walks the host list one host at a time: open session, clear caches, close, report
"""
import logging
import time
from typing import Callable, Iterable, List, Optional

from models.settings import ReclaimSettings
from services.cache_inspector import CacheInspector
from services.errors import RemoteCommandError, SessionCleanupError, SessionConnectionError
from services.host_validator import HostValidator
from services.reclaim_reporter import ReclaimReporter
from services.reclaim_results import HostOutcome, ReclamationResult
from services.remote_session import RemoteSession, SessionFactory, session_factory_for
from services.secondary_cache import SecondaryCacheReset

logger = logging.getLogger(__name__)


class CacheReclaimer:
    """Service for reclaiming cache space on a batch of hosts"""

    def __init__(
        self,
        settings: Optional[ReclaimSettings] = None,
        session_factory: Optional[SessionFactory] = None,
        reporter: Optional[ReclaimReporter] = None,
        progress: Optional[Callable[[str], None]] = None,
        sleep: Callable[[float], None] = time.sleep
    ):
        self.settings = settings or ReclaimSettings()
        self.session_factory = session_factory or session_factory_for(self.settings.ssh)
        self.reporter = reporter or ReclaimReporter()
        self.progress = progress or logger.info
        self.host_validator = HostValidator()
        self.cache_inspector = CacheInspector(self.settings.primary_cache)
        self.secondary_reset = SecondaryCacheReset(self.settings.secondary_cache, sleep=sleep)

    def run(self, hosts: Iterable[str], reset_secondary: bool = False) -> List[HostOutcome]:
        """Process every host in order, exactly once"""
        hosts = self.host_validator.validate_host_list(hosts)
        total = len(hosts)
        outcomes = []

        for index, hostname in enumerate(hosts, start=1):
            self.progress(f"[{index}/{total}] Connecting to {hostname}")
            outcome = self.reclaim_host(hostname, index, reset_secondary)
            self.reporter.host_completed(outcome)
            outcomes.append(outcome)

        self.reporter.summary(outcomes)
        return outcomes

    def reclaim_host(self, hostname: str, index: int = 1, reset_secondary: bool = False) -> HostOutcome:
        """Open a session, reclaim, and always close the session again"""
        session = self.session_factory(hostname)
        try:
            session.open()
        except SessionConnectionError as e:
            return HostOutcome(hostname=hostname, index=index, connected=False, connection_error=e.reason)

        cleanup_error = None
        try:
            result = self._reclaim_with_session(session, reset_secondary)
        finally:
            try:
                session.close()
            except SessionCleanupError as e:
                cleanup_error = e.reason

        return HostOutcome(
            hostname=hostname,
            index=index,
            connected=True,
            result=result,
            cleanup_error=cleanup_error
        )

    def _reclaim_with_session(self, session: RemoteSession, reset_secondary: bool) -> ReclamationResult:
        result = ReclamationResult(hostname=session.hostname)

        try:
            result.primary = self.cache_inspector.reclaim(session)
            result.errors.extend(result.primary.errors)

            if reset_secondary:
                result.secondary = self.secondary_reset.reset(session)
                result.errors.extend(result.secondary.errors)

        except RemoteCommandError as e:
            logger.error(f"Reclamation error on {session.hostname}: {e.reason}")
            result.errors.append(e.reason)

        return result
