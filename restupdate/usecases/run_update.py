"""Pipeline driver: download, verify, extract, swap, clean up.

Stages run strictly in order and each must succeed before the next starts.
Failures propagate as the typed errors from ``restupdate.domain.errors``; the
driver performs no recovery beyond the download retry policy.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

import requests

from restupdate.adapters.http_client import HttpConfig, StreamingDownloader
from restupdate.domain.models import UpdateOutcome, UpdateRequest
from restupdate.usecases.download_package import DownloadPackage
from restupdate.usecases.extract_package import ExtractPackage
from restupdate.usecases.swap_service_dir import SwapServiceDir
from restupdate.usecases.verify_package import VerifyPackage

log = logging.getLogger("restupdate.pipeline")


@dataclass
class RunUpdate:
    """Use-case callable running the whole update for one request."""

    session: Optional[requests.Session] = None
    sleep: Callable[[float], None] = time.sleep
    extract: ExtractPackage = field(default_factory=ExtractPackage)
    swap: SwapServiceDir = field(default_factory=SwapServiceDir)

    def __call__(self, request: UpdateRequest) -> UpdateOutcome:
        start = time.monotonic()
        archive_path = request.archive_path
        self._log_reserved_options(request)

        downloader = StreamingDownloader(
            HttpConfig(download_timeout_s=request.download_timeout_s),
            session=self.session,
        )
        download = DownloadPackage(downloader=downloader, policy=request.retry_policy, sleep=self.sleep)
        log.info("Downloading %s to %s", request.source_url, archive_path)
        downloaded = download(
            url=request.source_url,
            dest=archive_path,
            algorithm=request.digest_algorithm,
        )

        verify = VerifyPackage(algorithm=request.digest_algorithm)
        verified = verify(path=downloaded.local_file_path, expected=request.expected_digest)

        log.info("Extracting %s into %s", downloaded.local_file_path, request.extract_root)
        stats = self.extract(
            archive_path=downloaded.local_file_path,
            extract_root=request.extract_root,
            tree_path=request.extracted_tree_path,
        )

        log.info("Swapping %s into %s", request.extracted_tree_path, request.live_service_path)
        state = self.swap(live_path=request.live_service_path, new_path=request.extracted_tree_path)

        self._remove_archive(downloaded.local_file_path)
        elapsed = round(time.monotonic() - start, 2)
        log.info("Update of %s completed in %.2fs (backup at %s)", state.live_path, elapsed, state.backup_path)
        return UpdateOutcome(
            download=downloaded,
            verified_digest=verified,
            extraction=stats,
            state=state,
            duration_s=elapsed,
        )

    @staticmethod
    def _remove_archive(path: Path) -> None:
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return
        log.debug("Removed package archive %s", path)

    @staticmethod
    def _log_reserved_options(request: UpdateRequest) -> None:
        log.debug("Update option: %s", request.update_option)
        if request.script_path:
            log.info("Post-update script %s is configured but not executed", request.script_path)


__all__ = ["RunUpdate"]
