"""
Error taxonomy for cache reclamation and the supporting admin routines
Per-host errors are caught by the reclaimer and reported; setup errors end the run
"""
from typing import Optional


class CacheReclaimError(Exception):
    """Base class for every error raised by this package"""


class ConfigError(CacheReclaimError):
    """Settings file or host group could not be loaded"""


class HostListError(CacheReclaimError):
    """Empty or malformed host list - unrecoverable setup error"""


class HostError(CacheReclaimError):
    """Error bound to a single remote host"""

    def __init__(self, hostname: str, reason: str):
        self.hostname = hostname
        self.reason = reason
        super().__init__(f"{hostname}: {reason}")


class SessionConnectionError(HostError):
    """Remote session could not be opened"""


class SessionCleanupError(HostError):
    """Remote session could not be closed"""


class RemoteCommandError(HostError):
    """Remote script failed or returned output that could not be parsed"""


class ElementDeletionError(HostError):
    """A single cache element could not be deleted"""

    def __init__(self, hostname: str, element_id: str, reason: str):
        self.element_id = element_id
        super().__init__(hostname, f"failed to delete cache element {element_id}: {reason}")


class ServiceControlError(HostError):
    """Stopping or starting the secondary cache's owning service failed"""

    def __init__(self, hostname: str, service: str, action: str, reason: Optional[str]):
        self.service = service
        self.action = action
        super().__init__(hostname, f"could not {action} service {service}: {reason or 'unknown error'}")


class VerificationError(HostError):
    """Secondary cache directory was not recreated after the service restart"""


class MirrorError(CacheReclaimError):
    """Tree mirror could not run"""


class CollectionNotFoundError(CacheReclaimError):
    """No collection with the requested name exists on the site"""
