"""Value objects shared by the update use cases and adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Tuple

DEFAULT_ARCHIVE_NAME = "api.tar.gz"
DEFAULT_PACKAGE_DIR_NAME = "restapi"
DEFAULT_DIGEST_ALGORITHM = "md5"
DEFAULT_EXTRACT_ROOT = "/tmp"
BACKUP_SUFFIX = ".bak"
SUPPORTED_UPDATE_OPTIONS: Tuple[str, ...] = ("replace",)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with exponential backoff."""

    max_attempts: int = 3
    initial_delay_s: float = 1.0
    backoff_multiplier: float = 2.0

    def __post_init__(self) -> None:
        if int(self.max_attempts) < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1.")
        if float(self.initial_delay_s) < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0.")
        if float(self.backoff_multiplier) < 1:
            raise ValueError("RetryPolicy.backoff_multiplier must be >= 1.")


@dataclass(frozen=True)
class UpdateRequest:
    """Immutable input for one pipeline run.

    ``update_option`` and ``script_path`` are reserved extension points. They
    are validated and logged but no pipeline stage acts on them yet.
    """

    source_url: str
    expected_digest: str
    live_service_path: Path
    extract_root: Path = Path(DEFAULT_EXTRACT_ROOT)
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    work_dir: Path = Path(".")
    archive_name: str = DEFAULT_ARCHIVE_NAME
    package_dir_name: str = DEFAULT_PACKAGE_DIR_NAME
    digest_algorithm: str = DEFAULT_DIGEST_ALGORITHM
    download_timeout_s: float = 60.0
    update_option: str = "replace"
    script_path: str = ""

    @property
    def archive_path(self) -> Path:
        """Local path the package is downloaded to."""
        return Path(self.work_dir) / self.archive_name

    @property
    def extracted_tree_path(self) -> Path:
        """Directory the archive's top-level package folder lands in."""
        return Path(self.extract_root) / self.package_dir_name


@dataclass(frozen=True)
class DownloadResult:
    """Local file written by the downloader and the digest seen on the wire."""

    local_file_path: Path
    observed_digest: str
    bytes_written: int = 0


class EntryKind(str, Enum):
    DIRECTORY = "directory"
    REGULAR_FILE = "regular_file"
    OTHER = "other"


@dataclass(frozen=True)
class ArchiveEntry:
    """One tar record as seen by the extractor."""

    relative_path: str
    kind: EntryKind
    mode: int
    size: int


@dataclass(frozen=True)
class ExtractionStats:
    """Counters reported by one extraction run."""

    directories: int = 0
    files: int = 0
    skipped: int = 0
    bytes_written: int = 0


@dataclass(frozen=True)
class ServiceDirectoryState:
    """Live service path and its single backup generation."""

    live_path: Path

    @property
    def backup_path(self) -> Path:
        live = Path(self.live_path)
        return live.with_name(live.name + BACKUP_SUFFIX)


@dataclass(frozen=True)
class UpdateOutcome:
    """Summary of a completed pipeline run."""

    download: DownloadResult
    verified_digest: str
    extraction: ExtractionStats
    state: ServiceDirectoryState
    duration_s: float = 0.0


__all__ = [
    "ArchiveEntry",
    "BACKUP_SUFFIX",
    "DEFAULT_ARCHIVE_NAME",
    "DEFAULT_DIGEST_ALGORITHM",
    "DEFAULT_EXTRACT_ROOT",
    "DEFAULT_PACKAGE_DIR_NAME",
    "DownloadResult",
    "EntryKind",
    "ExtractionStats",
    "RetryPolicy",
    "SUPPORTED_UPDATE_OPTIONS",
    "ServiceDirectoryState",
    "UpdateOutcome",
    "UpdateRequest",
]
