"""
Settings models
Validated view of the YAML settings file
"""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from services.reclaim_defaults import ReclaimDefaults


class DeletionFailurePolicy(str, Enum):
    """What a failed cache element deletion does to the host's report"""
    IGNORE = "ignore"          # keep the pre-deletion figure, record the failure
    FAIL_HOST = "fail_host"    # mark the host failed and report nothing reclaimed


class SSHSettings(BaseModel):
    """Remote channel settings"""
    username: Optional[str] = None
    port: int = Field(default=ReclaimDefaults.SSH_PORT, ge=1, le=65535)
    identity_file: Optional[str] = None
    connect_timeout: int = Field(default=ReclaimDefaults.CONNECT_TIMEOUT, ge=1)
    command_timeout: int = Field(default=ReclaimDefaults.COMMAND_TIMEOUT, ge=1)
    strict_host_checking: bool = False
    known_hosts_file: str = "/dev/null"
    control_dir: str = ReclaimDefaults.CONTROL_DIR
    extra_options: List[str] = Field(default_factory=list)
    powershell_executable: str = ReclaimDefaults.POWERSHELL_EXECUTABLE


class PrimaryCacheSettings(BaseModel):
    """Client agent cache settings"""
    deletion_failure_policy: DeletionFailurePolicy = DeletionFailurePolicy.IGNORE
    remeasure_after_delete: bool = False


class SecondaryCacheSettings(BaseModel):
    """Secondary cache directory and the service that owns it"""
    path: str = ReclaimDefaults.SECONDARY_CACHE_PATH
    service_name: str = ReclaimDefaults.SECONDARY_SERVICE_NAME
    grace_period_seconds: float = Field(default=ReclaimDefaults.GRACE_PERIOD_SECONDS, ge=0)


class SiteSettings(BaseModel):
    """Site server used for collection membership queries"""
    server: Optional[str] = None
    site_code: Optional[str] = Field(default=None, pattern=r'^[A-Za-z0-9]{3}$')


class LoggingSettings(BaseModel):
    level: str = "INFO"


class ReclaimSettings(BaseModel):
    """Complete settings tree"""
    ssh: SSHSettings = Field(default_factory=SSHSettings)
    primary_cache: PrimaryCacheSettings = Field(default_factory=PrimaryCacheSettings)
    secondary_cache: SecondaryCacheSettings = Field(default_factory=SecondaryCacheSettings)
    site: SiteSettings = Field(default_factory=SiteSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
