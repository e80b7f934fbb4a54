"""
Command execution service
Runs local processes (including the ssh client) and normalizes their results
"""
import os
import subprocess
import tempfile
from typing import Dict, List, Optional
from pydantic import BaseModel


# =============================================================================
# **DATA STRUCTURES** - Execution configuration and results
# =============================================================================

class ExecutionConfig(BaseModel):
    """Execution configuration parameters"""
    timeout: int = 300
    capture_output: bool = True
    text: bool = True


class ExecutionResult(BaseModel):
    """Execution result data structure"""
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timeout_expired: bool = False

    @property
    def success(self) -> bool:
        return self.returncode == 0 and not self.timeout_expired

    @property
    def error_text(self) -> str:
        """Best available description of a failed execution"""
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.returncode}"


# =============================================================================
# **COMMAND EXECUTION CONCERN** - Process execution and management
# =============================================================================

class CommandExecutionService:
    """Command execution - ONLY handles process execution and result management"""

    def __init__(self, config: Optional[ExecutionConfig] = None):
        self.config = config or ExecutionConfig()

    def execute_locally(
        self,
        command: List[str],
        environment_vars: Optional[Dict[str, str]] = None,
        working_directory: Optional[str] = None,
        timeout: Optional[int] = None
    ) -> ExecutionResult:
        """Execution concern: run command locally and capture its output"""
        try:
            env = None
            if environment_vars:
                env = os.environ.copy()
                env.update(environment_vars)

            result = subprocess.run(
                command,
                timeout=timeout or self.config.timeout,
                capture_output=self.config.capture_output,
                text=self.config.text,
                env=env,
                cwd=working_directory
            )

            return ExecutionResult(
                returncode=result.returncode,
                stdout=result.stdout or "",
                stderr=result.stderr or ""
            )

        except subprocess.TimeoutExpired:
            return ExecutionResult(
                returncode=-1,
                stderr="Command timed out",
                timeout_expired=True
            )
        except OSError as e:
            return ExecutionResult(
                returncode=-1,
                stderr=f"Execution error: {str(e)}"
            )

    def execute_detaching(self, command: List[str], timeout: Optional[int] = None) -> ExecutionResult:
        """Execution concern: run a command that leaves a background process behind

        The background child inherits the stdio handles, so stderr goes to a
        temporary file instead of a pipe that would never reach EOF.
        """
        try:
            with tempfile.TemporaryFile(mode='w+') as stderr_file:
                result = subprocess.run(
                    command,
                    timeout=timeout or self.config.timeout,
                    stdin=subprocess.DEVNULL,
                    stdout=subprocess.DEVNULL,
                    stderr=stderr_file,
                    text=True
                )
                stderr_file.seek(0)
                stderr = stderr_file.read()

            return ExecutionResult(returncode=result.returncode, stderr=stderr)

        except subprocess.TimeoutExpired:
            return ExecutionResult(
                returncode=-1,
                stderr="Command timed out",
                timeout_expired=True
            )
        except OSError as e:
            return ExecutionResult(
                returncode=-1,
                stderr=f"Execution error: {str(e)}"
            )
