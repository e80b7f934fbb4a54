"""
Remote session service
One SSH connection-sharing master per host; PowerShell scripts run through it
"""
import logging
import os
from typing import Any, Callable, List, Optional

from models.settings import SSHSettings
from services import powershell
from services.errors import RemoteCommandError, SessionCleanupError, SessionConnectionError
from services.execution import CommandExecutionService, ExecutionConfig

logger = logging.getLogger(__name__)


class RemoteSession:
    """Stateful remote execution channel bound to exactly one host"""

    def __init__(self, hostname: str, settings: SSHSettings, executor: Optional[CommandExecutionService] = None):
        self.hostname = hostname
        self.settings = settings
        self.executor = executor or CommandExecutionService(ExecutionConfig(timeout=settings.command_timeout))
        # %C is expanded by ssh to a hash of the connection parameters
        self.control_path = os.path.join(settings.control_dir, "cachereclaim-%C")
        self.is_open = False

    @property
    def target(self) -> str:
        if self.settings.username:
            return f"{self.settings.username}@{self.hostname}"
        return self.hostname

    def _ssh_options(self) -> List[str]:
        """Build SSH options shared by the master and every client call"""
        options = [
            '-o', f'ConnectTimeout={self.settings.connect_timeout}',
            '-o', 'BatchMode=yes',
            '-o', f'StrictHostKeyChecking={"yes" if self.settings.strict_host_checking else "no"}',
            '-o', f'UserKnownHostsFile={self.settings.known_hosts_file}',
            '-o', 'LogLevel=ERROR',
            '-o', f'ControlPath={self.control_path}',
            '-p', str(self.settings.port)
        ]
        if self.settings.identity_file:
            options.extend(['-i', self.settings.identity_file])
        for option in self.settings.extra_options:
            options.extend(['-o', option])
        return options

    def open(self) -> None:
        """Start the connection-sharing master for this host"""
        if self.is_open:
            return

        command = ['ssh', '-M', '-N', '-f'] + self._ssh_options() + [self.target]
        logger.debug(f"Opening session to {self.hostname}")
        result = self.executor.execute_detaching(command, timeout=self.settings.connect_timeout + 5)
        if not result.success:
            raise SessionConnectionError(self.hostname, result.error_text)

        self.is_open = True

    def run_script(self, script: str, timeout: Optional[int] = None) -> Any:
        """Run a PowerShell script on the host and return its decoded JSON output"""
        if not self.is_open:
            raise RemoteCommandError(self.hostname, "session is not open")

        operation = powershell.script_operation(script) or 'script'
        command = (
            ['ssh'] + self._ssh_options() + [self.target]
            + powershell.build_invocation(self.settings.powershell_executable, script)
        )
        logger.debug(f"Running {operation} on {self.hostname}")
        result = self.executor.execute_locally(command, timeout=timeout or self.settings.command_timeout)
        if not result.success:
            raise RemoteCommandError(self.hostname, f"{operation} failed: {result.error_text}")

        return powershell.parse_json_document(result.stdout, self.hostname)

    def close(self) -> None:
        """Stop the connection-sharing master"""
        if not self.is_open:
            return

        self.is_open = False
        command = ['ssh', '-O', 'exit'] + self._ssh_options() + [self.target]
        logger.debug(f"Closing session to {self.hostname}")
        result = self.executor.execute_locally(command, timeout=self.settings.connect_timeout + 5)
        if not result.success:
            raise SessionCleanupError(self.hostname, result.error_text)

    def __enter__(self) -> 'RemoteSession':
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        try:
            self.close()
        except SessionCleanupError as e:
            if exc_type is None:
                raise
            # An error from the body takes precedence
            logger.warning(f"Session cleanup failed for {self.hostname}: {e.reason}")


SessionFactory = Callable[[str], RemoteSession]


def session_factory_for(settings: SSHSettings) -> SessionFactory:
    """Return a factory that builds one RemoteSession per host"""
    def factory(hostname: str) -> RemoteSession:
        return RemoteSession(hostname, settings)
    return factory
