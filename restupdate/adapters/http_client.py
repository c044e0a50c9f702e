"""HTTP transport for fetching update packages.

This module wraps ``requests.Session`` so the download use case gets one
streaming GET that writes the body to disk and hashes it in the same pass.

Dependencies:
    - ``requests`` for network I/O.
    - ``restupdate.domain.errors`` for typed transient/permanent failures.

Call context:
    - Constructed by ``restupdate.usecases.download_package.DownloadPackage``.
    - Retrying is not done here; ``restupdate.usecases.retry`` owns it.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests
from requests import exceptions as req_exc

from restupdate.domain.errors import DownloadError, Permanent
from restupdate.domain.models import DownloadResult

log = logging.getLogger("restupdate.http")

# Client errors that can still succeed on a later attempt.
_RETRYABLE_CLIENT_STATUSES = {408, 425, 429}


@dataclass
class HttpConfig:
    """Timeout and transfer configuration for package downloads.

    Attributes:
        download_timeout_s: Connect/read timeout in seconds for one GET.
        chunk_size: Bytes requested per ``iter_content`` chunk.
    """
    download_timeout_s: float = 60.0
    chunk_size: int = 1024 * 1024


def new_digest(algorithm: str) -> "hashlib._Hash":
    """Create a hashlib object, failing with a readable message."""
    try:
        return hashlib.new(str(algorithm or "").strip().lower())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Unsupported digest algorithm: {algorithm!r}") from exc


class StreamingDownloader:
    """Stream one URL to a local file while computing its digest."""

    def __init__(self, cfg: Optional[HttpConfig] = None, session: Optional[requests.Session] = None) -> None:
        """Create a downloader.

        Args:
            cfg: Timeout and chunk settings; defaults to :class:`HttpConfig`.
            session: Optional pre-built session (tests inject doubles here).
        """
        self.cfg = cfg or HttpConfig()
        self.session = session or requests.Session()

    def download(self, url: str, dest: Path, *, algorithm: str) -> DownloadResult:
        """Fetch ``url`` into ``dest`` and return the observed digest.

        Args:
            url: Absolute package URL.
            dest: Local target file; truncated if it exists.
            algorithm: ``hashlib`` algorithm name used for the running digest.

        Returns:
            ``DownloadResult`` with the local path, hex digest and byte count.

        Raises:
            DownloadError: Transient network or server failure.
            Permanent: Wrapping ``DownloadError`` for client errors that a
                retry cannot fix (for example HTTP 404).

        Side Effects:
            Creates or overwrites ``dest``. A partially written file is left in
            place when the transfer fails.
        """
        digest = new_digest(algorithm)
        target = Path(dest)
        written = 0
        context = f"GET {url}"
        try:
            with target.open("wb") as handle:
                with self.session.get(url, stream=True, timeout=self.cfg.download_timeout_s) as resp:
                    self._ensure_ok(resp, context)
                    for chunk in resp.iter_content(chunk_size=self.cfg.chunk_size):
                        if not chunk:
                            continue
                        handle.write(chunk)
                        digest.update(chunk)
                        written += len(chunk)
        except req_exc.Timeout as exc:
            raise DownloadError(f"Timeout contacting {url}", str(exc)) from exc
        except req_exc.ConnectionError as exc:
            raise DownloadError(f"Could not connect to {url}", str(exc)) from exc
        except req_exc.RequestException as exc:
            raise DownloadError(f"{context} failed", str(exc)) from exc
        except OSError as exc:
            raise DownloadError(f"Failed to write package to {target}", str(exc)) from exc

        observed = digest.hexdigest()
        log.info("Downloaded %s (%d bytes), body %s is %s", url, written, digest.name, observed)
        return DownloadResult(local_file_path=target, observed_digest=observed, bytes_written=written)

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        """Raise typed download errors for non-2xx responses."""
        status = resp.status_code
        if 200 <= status < 300:
            return
        reason = getattr(resp, "reason", "") or ""
        error = DownloadError(f"{ctx}: HTTP {status}", reason, status=status)
        if 400 <= status < 500 and status not in _RETRYABLE_CLIENT_STATUSES:
            raise Permanent(error)
        raise error


__all__ = ["HttpConfig", "StreamingDownloader", "new_digest"]
