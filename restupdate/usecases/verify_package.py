"""Use case for checking the downloaded package against its expected digest."""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from pathlib import Path

from restupdate.adapters.http_client import new_digest
from restupdate.domain.errors import IntegrityError, LocalIOError

log = logging.getLogger("restupdate.verify")

_HEX_DIGITS = set(string.hexdigits.lower())


def compute_file_digest(path: Path, algorithm: str) -> str:
    """Compute the hex digest of one file, reading it in chunks."""
    digest = new_digest(algorithm)
    with Path(path).open("rb") as handle:
        while True:
            chunk = handle.read(1024 * 1024)
            if not chunk:
                break
            digest.update(chunk)
    return digest.hexdigest()


def normalize_digest(value: object, *, algorithm: str) -> str:
    """Validate hex digest text and return it lowercased."""
    digest = str(value or "").strip().lower()
    expected_len = new_digest(algorithm).digest_size * 2
    if len(digest) != expected_len or any(ch not in _HEX_DIGITS for ch in digest):
        raise IntegrityError(
            "Invalid expected digest",
            f"Expected a {expected_len}-character hex {algorithm} value, got {value!r}.",
            expected=str(value or ""),
        )
    return digest


@dataclass
class VerifyPackage:
    """Recompute the package digest from disk and compare it."""

    algorithm: str = "md5"

    def __call__(self, *, path: Path, expected: str) -> str:
        """Return the verified digest.

        Raises :class:`IntegrityError` when the content does not match and
        :class:`LocalIOError` when the file cannot be read.
        """
        wanted = normalize_digest(expected, algorithm=self.algorithm)
        try:
            actual = compute_file_digest(path, self.algorithm)
        except OSError as exc:
            raise LocalIOError(f"Could not read package {path}", str(exc)) from exc
        log.info("Package %s %s is %s", path, self.algorithm, actual)
        if actual != wanted:
            raise IntegrityError(
                "Package checksum does not match",
                f"expected {self.algorithm} {wanted}, got {actual}.",
                expected=wanted,
                actual=actual,
            )
        return actual


__all__ = ["VerifyPackage", "compute_file_digest", "normalize_digest"]
