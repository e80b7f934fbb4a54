"""
Reclamation result data structures
Built fresh for every host and returned by value
"""
from dataclasses import dataclass, field
from typing import List, Optional

from models.cache import CacheSnapshot
from services.errors import ServiceControlError


@dataclass
class ServiceControlResult:
    """Outcome of stopping or starting a service"""
    service: str
    action: str  # 'stop' or 'start'
    succeeded: bool
    error: Optional[str] = None
    failure: Optional[ServiceControlError] = None


@dataclass
class PrimaryReclaim:
    """Result of clearing the client agent cache"""
    snapshot: CacheSnapshot
    deleted_ids: List[str] = field(default_factory=list)
    failed_ids: List[str] = field(default_factory=list)
    reclaimed_mb: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def was_empty(self) -> bool:
        return self.snapshot.is_empty


@dataclass
class SecondaryReset:
    """Result of resetting the secondary cache directory"""
    path: str
    size_before_mb: float
    size_after_mb: Optional[float] = None
    stop: Optional[ServiceControlResult] = None
    start: Optional[ServiceControlResult] = None
    directory_removed: bool = False
    directory_recreated: bool = False
    errors: List[str] = field(default_factory=list)

    @property
    def reclaimed_mb(self) -> float:
        # Zero when the second measurement failed, negative when the directory regrew
        if self.size_after_mb is None:
            return 0.0
        return self.size_before_mb - self.size_after_mb


@dataclass
class ReclamationResult:
    """Per-host reclamation figures"""
    hostname: str
    primary: Optional[PrimaryReclaim] = None
    secondary: Optional[SecondaryReset] = None
    errors: List[str] = field(default_factory=list)

    @property
    def primary_reclaimed_mb(self) -> float:
        return self.primary.reclaimed_mb if self.primary else 0.0

    @property
    def secondary_reclaimed_mb(self) -> float:
        return self.secondary.reclaimed_mb if self.secondary else 0.0

    @property
    def total_reclaimed_mb(self) -> float:
        return self.primary_reclaimed_mb + self.secondary_reclaimed_mb

    @property
    def completed(self) -> bool:
        """True when the primary cache was processed, whatever else went wrong"""
        return self.primary is not None


@dataclass
class HostOutcome:
    """Envelope for one host of a batch run"""
    hostname: str
    index: int
    connected: bool
    result: Optional[ReclamationResult] = None
    connection_error: Optional[str] = None
    cleanup_error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.connected and self.result is not None and not self.result.errors
