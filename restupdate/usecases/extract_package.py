"""Use case for unpacking the verified package."""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from restupdate.adapters.tar_extract import TarExtractor
from restupdate.domain.errors import ExtractionError
from restupdate.domain.models import ExtractionStats

log = logging.getLogger("restupdate.extract")


@dataclass
class ExtractPackage:
    """Extract the archive into a fresh package folder and confirm it exists."""

    extractor: TarExtractor = field(default_factory=TarExtractor)

    def __call__(self, *, archive_path: Path, extract_root: Path, tree_path: Path) -> ExtractionStats:
        tree = Path(tree_path)
        self._clear_previous_tree(tree)
        stats = self.extractor.extract(Path(archive_path), Path(extract_root))
        if not tree.is_dir():
            raise ExtractionError(
                f"Package folder missing after extraction: {tree}",
                f"The archive must contain a top-level '{tree.name}' directory.",
            )
        return stats

    @staticmethod
    def _clear_previous_tree(tree: Path) -> None:
        """Remove whatever an earlier run left at ``tree``."""
        try:
            if tree.is_symlink() or tree.is_file():
                tree.unlink()
            else:
                shutil.rmtree(tree)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise ExtractionError(f"Could not clear previous package folder {tree}", str(exc)) from exc
        log.info("Removed leftover package folder %s", tree)


__all__ = ["ExtractPackage"]
