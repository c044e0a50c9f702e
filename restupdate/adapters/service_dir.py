"""Live service directory replacement with a single backup generation."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from restupdate.domain.errors import SwapError
from restupdate.domain.models import ServiceDirectoryState

log = logging.getLogger("restupdate.swap")


class ServiceDirectory:
    """Swap new content into ``live_path`` and keep the old tree as ``.bak``.

    The swap is two renames: live -> backup, then new -> live. Between them
    the live path is briefly absent. If the second rename fails the backup is
    renamed back so the service keeps its previous content.
    """

    def __init__(self, live_path: Path) -> None:
        self.state = ServiceDirectoryState(live_path=Path(live_path))

    @property
    def live_path(self) -> Path:
        return self.state.live_path

    @property
    def backup_path(self) -> Path:
        return self.state.backup_path

    def swap(self, new_path: Path) -> ServiceDirectoryState:
        """Replace the live directory with ``new_path``."""
        live = self.live_path
        backup = self.backup_path
        incoming = Path(new_path)

        self._discard_backup(backup)

        try:
            os.replace(live, backup)
        except OSError as exc:
            raise SwapError(
                f"Failed to move {live} to {backup}",
                str(exc),
                restored=True,
            ) from exc
        log.info("Moved %s to %s", live, backup)

        try:
            os.replace(incoming, live)
        except OSError as exc:
            restored = self._restore_backup(live, backup)
            hint = str(exc)
            if not restored:
                hint = f"{hint}; live path is absent, previous content is at {backup}"
            raise SwapError(
                f"Failed to move {incoming} to {live}",
                hint,
                restored=restored,
            ) from exc

        log.info("Moved %s to %s", incoming, live)
        return self.state

    @staticmethod
    def _discard_backup(backup: Path) -> None:
        """Remove the previous backup generation; a missing one is fine."""
        try:
            if backup.is_symlink() or backup.is_file():
                backup.unlink()
            elif backup.is_dir():
                shutil.rmtree(backup)
            else:
                return
        except FileNotFoundError:
            return
        except OSError as exc:
            # The following rename reports the real failure if this matters.
            log.warning("Could not remove previous backup %s: %s", backup, exc)
            return
        log.info("Removed previous backup %s", backup)

    @staticmethod
    def _restore_backup(live: Path, backup: Path) -> bool:
        """Move the backup back onto the live path after a failed swap."""
        try:
            os.replace(backup, live)
        except OSError:
            log.exception("Failed to restore %s from %s", live, backup)
            return False
        log.warning("Restored %s from %s after failed swap", live, backup)
        return True


__all__ = ["ServiceDirectory"]
