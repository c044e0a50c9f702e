"""Typed errors raised by the update pipeline.

Every stage raises a subclass of :class:`UpdateError` carrying a stable
``code``/``message``/``hint`` triple. Only the CLI entry point maps these to
process exit codes (see ``restupdate.usecases.error_mapping``).
"""

from __future__ import annotations


class UpdateError(RuntimeError):
    """Base pipeline error with stable code/message/hint values."""

    stage = "update"

    def __init__(self, code: str, message: str, hint: str = "") -> None:
        super().__init__(message)
        self.code = str(code)
        self.message = str(message)
        self.hint = str(hint or "")

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} ({self.hint})"
        return self.message


class ConfigError(UpdateError):
    """Raised when required configuration is missing or malformed."""

    stage = "config"

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__("update.config_invalid", message, hint)


class DownloadError(UpdateError):
    """Raised when fetching the package fails."""

    stage = "download"

    def __init__(self, message: str, hint: str = "", *, status: int | None = None) -> None:
        super().__init__("update.download_failed", message, hint)
        self.status = status


class IntegrityError(UpdateError):
    """Raised when the package digest does not match the expected value."""

    stage = "verify"

    def __init__(self, message: str, hint: str = "", *, expected: str = "", actual: str = "") -> None:
        super().__init__("update.checksum_mismatch", message, hint)
        self.expected = expected
        self.actual = actual


class LocalIOError(UpdateError):
    """Raised when a local file the pipeline produced cannot be read back."""

    stage = "io"

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__("update.io_failed", message, hint)


class ExtractionError(UpdateError):
    """Raised when the package archive cannot be unpacked."""

    stage = "extract"

    def __init__(self, message: str, hint: str = "") -> None:
        super().__init__("update.extract_failed", message, hint)


class SwapError(UpdateError):
    """Raised when replacing the live service directory fails.

    ``restored`` is True when the live path still holds the previous content
    (either nothing was renamed, or the backup was moved back). When it is
    False the live path may be absent and needs operator attention.
    """

    stage = "swap"

    def __init__(self, message: str, hint: str = "", *, restored: bool) -> None:
        code = "update.swap_failed" if restored else "update.swap_failed_live_missing"
        super().__init__(code, message, hint)
        self.restored = restored


class Permanent(Exception):
    """Retry stop marker wrapping an error that will never succeed on retry."""

    def __init__(self, error: BaseException) -> None:
        super().__init__(str(error))
        self.error = error


__all__ = [
    "ConfigError",
    "DownloadError",
    "ExtractionError",
    "IntegrityError",
    "LocalIOError",
    "Permanent",
    "SwapError",
    "UpdateError",
]
