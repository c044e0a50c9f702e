"""Use case for fetching the update package with retries."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from restupdate.adapters.http_client import StreamingDownloader
from restupdate.domain.errors import DownloadError
from restupdate.domain.models import DownloadResult, RetryPolicy
from restupdate.usecases.retry import retry_with_policy


@dataclass
class DownloadPackage:
    """Download ``url`` to ``dest`` under the configured retry policy."""

    downloader: StreamingDownloader
    policy: RetryPolicy = field(default_factory=RetryPolicy)
    sleep: Callable[[float], None] = time.sleep

    def __call__(self, *, url: str, dest: Path, algorithm: str) -> DownloadResult:
        normalized_url = str(url or "").strip()
        if not normalized_url:
            raise DownloadError("Package URL is required.")

        def _attempt() -> DownloadResult:
            return self.downloader.download(normalized_url, Path(dest), algorithm=algorithm)

        return retry_with_policy(
            self.policy,
            _attempt,
            sleep=self.sleep,
            describe=f"download {normalized_url}",
        )


__all__ = ["DownloadPackage"]
