"""
Reclamation report formatting
Per-host figures go to the output stream, diagnostics to the logger
"""
import logging
from typing import Callable, List

from services.reclaim_results import HostOutcome

logger = logging.getLogger(__name__)


class ReclaimReporter:
    """Prints one line per host and a closing summary"""

    def __init__(self, write: Callable[[str], None] = print):
        self.write = write

    def host_completed(self, outcome: HostOutcome) -> None:
        """Report a host after its session closed or its connection failed"""
        if not outcome.connected:
            logger.warning(f"{outcome.hostname}: connection failed: {outcome.connection_error}")
            return

        if outcome.cleanup_error:
            logger.warning(f"{outcome.hostname}: session cleanup failed: {outcome.cleanup_error}")

        result = outcome.result
        if result is None or not result.completed:
            errors = '; '.join(result.errors) if result else 'no result'
            self.write(f"{outcome.hostname}: reclamation failed: {errors}")
            return

        self.write(self.format_host_line(outcome))
        for error in result.errors:
            logger.error(f"{outcome.hostname}: {error}")

    @staticmethod
    def format_host_line(outcome: HostOutcome) -> str:
        result = outcome.result
        line = f"{outcome.hostname}: {result.total_reclaimed_mb:.2f} MB reclaimed"
        if result.primary and result.primary.was_empty:
            line += " (cache already empty)"
        if result.secondary is not None:
            line += (
                f" [cache {result.primary_reclaimed_mb:.2f} MB,"
                f" {result.secondary.path} {result.secondary_reclaimed_mb:.2f} MB]"
            )
        return line

    def summary(self, outcomes: List[HostOutcome]) -> None:
        failed = [outcome for outcome in outcomes if not outcome.succeeded]
        total = sum(
            outcome.result.total_reclaimed_mb
            for outcome in outcomes
            if outcome.result is not None
        )
        self.write(
            f"Processed {len(outcomes)} host(s), {len(failed)} failed, "
            f"{total:.2f} MB reclaimed in total"
        )
