"""
Secondary cache reset
Measures, stops the owning service, deletes and recreates a cache directory
"""
import logging
import time
from typing import Callable, Optional

from models.cache import DirectoryMeasurement
from models.settings import SecondaryCacheSettings
from services import powershell
from services.errors import HostError, RemoteCommandError, ServiceControlError, VerificationError
from services.reclaim_defaults import ReclaimDefaults
from services.reclaim_results import SecondaryReset, ServiceControlResult
from services.remote_session import RemoteSession

logger = logging.getLogger(__name__)


def measure_script(path: str) -> str:
    """Script that sums file sizes across the whole directory subtree"""
    return powershell.build_script('measure-directory', f"""
$path = {powershell.quote_literal(path)}
$exists = Test-Path -LiteralPath $path
$bytes = 0
if ($exists) {{
    $sum = (Get-ChildItem -LiteralPath $path -Recurse -Force -File -ErrorAction SilentlyContinue |
        Measure-Object -Property Length -Sum).Sum
    if ($sum) {{ $bytes = [int64]$sum }}
}}
[pscustomobject]@{{ path = $path; exists = $exists; bytes = $bytes }} | ConvertTo-Json -Compress
""")


def service_script(service_name: str, action: str) -> str:
    """Script that stops or starts a service and reports the outcome instead of failing"""
    if action == 'stop':
        cmdlet = "Stop-Service -Name $service -Force -WarningAction SilentlyContinue -ErrorAction Stop"
    else:
        cmdlet = "Start-Service -Name $service -WarningAction SilentlyContinue -ErrorAction Stop"
    return powershell.build_script(f'{action}-service', f"""
$service = {powershell.quote_literal(service_name)}
try {{
    {cmdlet}
    $result = [pscustomobject]@{{ succeeded = $true; error = $null }}
}} catch {{
    $result = [pscustomobject]@{{ succeeded = $false; error = $_.Exception.Message }}
}}
$result | ConvertTo-Json -Compress
""")


def remove_script(path: str) -> str:
    """Script that deletes a directory tree forcibly"""
    return powershell.build_script('remove-directory', f"""
$path = {powershell.quote_literal(path)}
try {{
    if (Test-Path -LiteralPath $path) {{
        Remove-Item -LiteralPath $path -Recurse -Force -ErrorAction Stop
    }}
    $result = [pscustomobject]@{{ succeeded = $true; error = $null }}
}} catch {{
    $result = [pscustomobject]@{{ succeeded = $false; error = $_.Exception.Message }}
}}
$result | ConvertTo-Json -Compress
""")


def exists_script(path: str) -> str:
    return powershell.build_script('directory-exists', f"""
$path = {powershell.quote_literal(path)}
[pscustomobject]@{{ path = $path; exists = (Test-Path -LiteralPath $path) }} | ConvertTo-Json -Compress
""")


class SecondaryCacheReset:
    """Resets the secondary cache directory of one host"""

    def __init__(self, settings: Optional[SecondaryCacheSettings] = None, sleep: Callable[[float], None] = time.sleep):
        self.settings = settings or SecondaryCacheSettings()
        self.sleep = sleep

    def measure_mb(self, session: RemoteSession) -> float:
        """Recursive size in MB; a missing directory measures zero"""
        document = session.run_script(measure_script(self.settings.path))
        measurement = powershell.parse_model(DirectoryMeasurement, document, session.hostname, 'measure-directory')
        return measurement.size_bytes / ReclaimDefaults.BYTES_PER_MB

    def control_service(self, session: RemoteSession, action: str) -> ServiceControlResult:
        """Stop or start the owning service; failures are returned, never raised"""
        service = self.settings.service_name
        try:
            document = powershell.expect_object(
                session.run_script(service_script(service, action)), session.hostname, f'{action}-service'
            )
            result = ServiceControlResult(
                service=service,
                action=action,
                succeeded=bool(document.get('succeeded')),
                error=document.get('error')
            )
        except RemoteCommandError as e:
            result = ServiceControlResult(service=service, action=action, succeeded=False, error=e.reason)

        if not result.succeeded:
            result.failure = ServiceControlError(session.hostname, service, action, result.error)
            logger.warning(str(result.failure))
        return result

    def remove_directory(self, session: RemoteSession) -> bool:
        document = powershell.expect_object(
            session.run_script(remove_script(self.settings.path)), session.hostname, 'remove-directory'
        )
        if not document.get('succeeded'):
            logger.warning(f"{session.hostname}: could not remove {self.settings.path}: {document.get('error')}")
            return False
        return True

    def directory_exists(self, session: RemoteSession) -> bool:
        document = powershell.expect_object(
            session.run_script(exists_script(self.settings.path)), session.hostname, 'directory-exists'
        )
        return bool(document.get('exists'))

    def reset(self, session: RemoteSession) -> SecondaryReset:
        """Measure, stop, delete, restart, verify and re-measure"""
        outcome = SecondaryReset(path=self.settings.path, size_before_mb=self.measure_mb(session))
        logger.info(f"{session.hostname}: {self.settings.path} holds {outcome.size_before_mb:.2f} MB")

        # The directory is removed whether or not the stop succeeded
        outcome.stop = self.control_service(session, 'stop')
        try:
            outcome.directory_removed = self.remove_directory(session)
        except RemoteCommandError as e:
            self._record_error(outcome, e)
        finally:
            outcome.start = self.control_service(session, 'start')

        self.sleep(self.settings.grace_period_seconds)

        try:
            outcome.directory_recreated = self.directory_exists(session)
        except RemoteCommandError as e:
            self._record_error(outcome, e)
        else:
            if not outcome.directory_recreated:
                self._record_error(outcome, VerificationError(
                    session.hostname,
                    f"{self.settings.path} was not recreated by {self.settings.service_name}"
                ))

        try:
            outcome.size_after_mb = self.measure_mb(session)
        except RemoteCommandError as e:
            self._record_error(outcome, e)

        return outcome

    @staticmethod
    def _record_error(outcome: SecondaryReset, error: HostError) -> None:
        logger.error(str(error))
        outcome.errors.append(error.reason)
