"""Translate pipeline errors into process exit codes and operator messages."""

from __future__ import annotations

from restupdate.domain.errors import (
    ConfigError,
    DownloadError,
    ExtractionError,
    IntegrityError,
    LocalIOError,
    SwapError,
    UpdateError,
)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_DOWNLOAD_FAILED = 3
EXIT_EXTRACT_FAILED = 4
EXIT_SWAP_FAILED = 5
EXIT_SWAP_LIVE_MISSING = 6
EXIT_UNEXPECTED = 70
EXIT_IO_FAILED = 74


def exit_code_for(exc: BaseException) -> int:
    """Map an exception raised by the pipeline to a process exit code.

    Configuration and integrity failures share status 1. Every other stage
    gets its own status so operators can tell "content invalid" apart from
    "service directory in unknown state".
    """
    if isinstance(exc, (ConfigError, IntegrityError)):
        return EXIT_INVALID
    if isinstance(exc, DownloadError):
        return EXIT_DOWNLOAD_FAILED
    if isinstance(exc, ExtractionError):
        return EXIT_EXTRACT_FAILED
    if isinstance(exc, LocalIOError):
        return EXIT_IO_FAILED
    if isinstance(exc, SwapError):
        return EXIT_SWAP_FAILED if exc.restored else EXIT_SWAP_LIVE_MISSING
    return EXIT_UNEXPECTED


def wants_traceback(exc: BaseException) -> bool:
    """Return whether the failure should be logged with a stack trace."""
    return not isinstance(exc, (ConfigError, IntegrityError))


def describe_failure(exc: BaseException) -> str:
    """Compose a one-line message naming the failed stage and its cause."""
    if isinstance(exc, UpdateError):
        return f"{exc.stage} failed [{exc.code}]: {exc}"
    return f"unexpected failure: {type(exc).__name__}: {exc}"


__all__ = [
    "EXIT_DOWNLOAD_FAILED",
    "EXIT_EXTRACT_FAILED",
    "EXIT_INVALID",
    "EXIT_IO_FAILED",
    "EXIT_OK",
    "EXIT_SWAP_FAILED",
    "EXIT_SWAP_LIVE_MISSING",
    "EXIT_UNEXPECTED",
    "describe_failure",
    "exit_code_for",
    "wants_traceback",
]
