"""
Client agent cache inspector and reclaimer
Reads capacity and elements through UIResource.UIResourceMgr and deletes every element
"""
import logging
from typing import Optional

from models.cache import CacheSnapshot
from models.settings import DeletionFailurePolicy, PrimaryCacheSettings
from services import powershell
from services.errors import ElementDeletionError, RemoteCommandError
from services.reclaim_results import PrimaryReclaim
from services.remote_session import RemoteSession

logger = logging.getLogger(__name__)

CACHE_INFO_SCRIPT = powershell.build_script('cache-info', r"""
$cache = (New-Object -ComObject UIResource.UIResourceMgr).GetCacheInfo()
$elements = @($cache.GetCacheElements() | ForEach-Object {
    [pscustomobject]@{ id = [string]$_.CacheElementID; size = [int64]$_.ContentSize * 1KB }
})
[pscustomobject]@{ total = $cache.TotalSize; free = $cache.FreeSize; elements = $elements } |
    ConvertTo-Json -Depth 3 -Compress
""")


def delete_element_script(element_id: str) -> str:
    """Script that deletes one cache element by id"""
    return powershell.build_script('delete-cache-element', f"""
$elementId = {powershell.quote_literal(element_id)}
$cache = (New-Object -ComObject UIResource.UIResourceMgr).GetCacheInfo()
$cache.DeleteCacheElement($elementId)
[pscustomobject]@{{ id = $elementId; deleted = $true }} | ConvertTo-Json -Compress
""")


class CacheInspector:
    """Inspects and clears the managed cache store of one host"""

    def __init__(self, settings: Optional[PrimaryCacheSettings] = None):
        self.settings = settings or PrimaryCacheSettings()

    def snapshot(self, session: RemoteSession) -> CacheSnapshot:
        """Query capacity and the full element list in one call"""
        document = session.run_script(CACHE_INFO_SCRIPT)
        return powershell.parse_model(CacheSnapshot, document, session.hostname, 'cache-info')

    def delete_element(self, session: RemoteSession, element_id: str) -> None:
        try:
            session.run_script(delete_element_script(element_id))
        except RemoteCommandError as e:
            raise ElementDeletionError(session.hostname, element_id, e.reason)

    def reclaim(self, session: RemoteSession) -> PrimaryReclaim:
        """Delete every cache element and report the space they used"""
        snapshot = self.snapshot(session)
        outcome = PrimaryReclaim(snapshot=snapshot)

        if snapshot.is_empty:
            logger.info(f"{session.hostname}: cache already empty")
            return outcome

        logger.info(
            f"{session.hostname}: deleting {snapshot.element_count} cache element(s), "
            f"{snapshot.used_mb:.2f} MB in use"
        )

        # Every element is attempted, failures do not stop the loop
        for element in snapshot.elements:
            try:
                self.delete_element(session, element.element_id)
                outcome.deleted_ids.append(element.element_id)
            except ElementDeletionError as e:
                logger.warning(str(e))
                outcome.failed_ids.append(element.element_id)

        outcome.reclaimed_mb = self._reclaimed_mb(session, snapshot)

        if outcome.failed_ids:
            message = (
                f"{session.hostname}: {len(outcome.failed_ids)} of {snapshot.element_count} "
                f"cache element deletion(s) failed"
            )
            if self.settings.deletion_failure_policy == DeletionFailurePolicy.FAIL_HOST:
                outcome.errors.append(message)
                outcome.reclaimed_mb = 0.0
            else:
                logger.warning(message)

        return outcome

    def _reclaimed_mb(self, session: RemoteSession, before: CacheSnapshot) -> float:
        """Pre-deletion usage, or the measured difference when remeasuring"""
        if not self.settings.remeasure_after_delete:
            return before.used_mb

        after = self.snapshot(session)
        return before.used_mb - after.used_mb
