"""Domain package exports for update value objects and errors."""

from .errors import (
    ConfigError,
    DownloadError,
    ExtractionError,
    IntegrityError,
    LocalIOError,
    Permanent,
    SwapError,
    UpdateError,
)
from .models import (
    ArchiveEntry,
    DownloadResult,
    EntryKind,
    ExtractionStats,
    RetryPolicy,
    ServiceDirectoryState,
    UpdateOutcome,
    UpdateRequest,
)

__all__ = [
    "ArchiveEntry",
    "ConfigError",
    "DownloadError",
    "DownloadResult",
    "EntryKind",
    "ExtractionError",
    "ExtractionStats",
    "IntegrityError",
    "LocalIOError",
    "Permanent",
    "RetryPolicy",
    "ServiceDirectoryState",
    "SwapError",
    "UpdateError",
    "UpdateOutcome",
    "UpdateRequest",
]
