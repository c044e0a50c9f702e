"""Use case for promoting the extracted tree to the live service path."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from restupdate.adapters.service_dir import ServiceDirectory
from restupdate.domain.errors import SwapError
from restupdate.domain.models import ServiceDirectoryState


@dataclass
class SwapServiceDir:
    """Swap ``new_path`` into ``live_path`` keeping one backup."""

    directory_factory: Callable[[Path], ServiceDirectory] = ServiceDirectory

    def __call__(self, *, live_path: Path, new_path: Path) -> ServiceDirectoryState:
        live = Path(live_path)
        incoming = Path(new_path)
        if live.resolve() == incoming.resolve():
            raise SwapError(
                "Extracted package and live service path are the same directory",
                str(live),
                restored=True,
            )
        return self.directory_factory(live).swap(incoming)


__all__ = ["SwapServiceDir"]
