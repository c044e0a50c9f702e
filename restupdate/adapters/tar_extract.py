"""Streaming extraction of gzip-compressed tar packages.

The archive is read strictly front to back (``tarfile`` stream mode), so the
package never has to be seekable or held in memory. Only directories and
regular files are materialized; every other record type is skipped.
"""

from __future__ import annotations

import logging
import os
import tarfile
from pathlib import Path, PurePosixPath
from typing import Iterator, Tuple

from restupdate.domain.errors import ExtractionError
from restupdate.domain.models import ArchiveEntry, EntryKind, ExtractionStats

log = logging.getLogger("restupdate.extract")

_COPY_BUFSIZE = 1024 * 1024


def entry_from_member(member: tarfile.TarInfo) -> ArchiveEntry:
    """Translate a tar header into an :class:`ArchiveEntry`."""
    if member.isdir():
        kind = EntryKind.DIRECTORY
    elif member.isreg():
        kind = EntryKind.REGULAR_FILE
    else:
        kind = EntryKind.OTHER
    return ArchiveEntry(
        relative_path=member.name,
        kind=kind,
        mode=member.mode & 0o7777,
        size=int(member.size),
    )


class TarExtractor:
    """Unpack ``.tar.gz`` packages onto a destination directory."""

    def __init__(self, *, mode: str = "r|gz") -> None:
        self._mode = mode

    def extract(self, archive_path: Path, destination_root: Path) -> ExtractionStats:
        """Extract ``archive_path`` below ``destination_root``.

        Raises ``ExtractionError`` on the first unsafe entry, tar error or
        filesystem error. Files written before the failure stay on disk.
        """
        root = Path(destination_root)
        directories = files = skipped = total_bytes = 0
        try:
            root.mkdir(parents=True, exist_ok=True)
            root_resolved = root.resolve()
            with tarfile.open(archive_path, self._mode) as tar:
                for member, stream in self._iter_members(tar):
                    entry = entry_from_member(member)
                    if entry.kind is EntryKind.OTHER:
                        log.debug("Skipping %s (unsupported entry type)", entry.relative_path)
                        skipped += 1
                        continue

                    target = self._destination_for(root, root_resolved, entry.relative_path)
                    if entry.kind is EntryKind.DIRECTORY:
                        if not target.is_dir():
                            target.mkdir(parents=True, exist_ok=True)
                        directories += 1
                        continue

                    written = self._write_file(target, entry, stream)
                    log.debug("Extracted %s, %d bytes", target, written)
                    files += 1
                    total_bytes += written
        except ExtractionError:
            raise
        except (tarfile.TarError, EOFError) as exc:
            raise ExtractionError(f"Invalid package archive: {archive_path}", str(exc)) from exc
        except OSError as exc:
            raise ExtractionError(f"Failed to extract {archive_path} into {root}", str(exc)) from exc

        stats = ExtractionStats(
            directories=directories,
            files=files,
            skipped=skipped,
            bytes_written=total_bytes,
        )
        log.info(
            "Extracted %s into %s: %d directories, %d files (%d bytes), %d skipped",
            archive_path,
            root,
            stats.directories,
            stats.files,
            stats.bytes_written,
            stats.skipped,
        )
        return stats

    @staticmethod
    def _iter_members(tar: tarfile.TarFile) -> Iterator[Tuple[tarfile.TarInfo, object]]:
        """Yield members with their content stream, in archive order."""
        for member in tar:
            stream = tar.extractfile(member) if member.isreg() else None
            yield member, stream

    @staticmethod
    def _destination_for(root: Path, root_resolved: Path, name: str) -> Path:
        """Join an entry name onto the root, rejecting traversal."""
        text = str(name or "").replace("\\", "/")
        pure = PurePosixPath(text)
        if not text or pure.is_absolute() or ".." in pure.parts:
            raise ExtractionError("Archive contains unsafe path", f"Unsafe member path: {name!r}")
        target = root.joinpath(*[part for part in pure.parts if part not in ("", ".")])
        resolved = target.resolve()
        if root_resolved not in (resolved, *resolved.parents):
            raise ExtractionError(
                "Archive entry escaped extraction directory",
                f"{name!r} resolves to {resolved}",
            )
        return target

    @staticmethod
    def _write_file(target: Path, entry: ArchiveEntry, stream) -> int:
        """Write one regular file with the header's permission bits."""
        target.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(target, os.O_CREAT | os.O_WRONLY | os.O_TRUNC, entry.mode)
        written = 0
        with os.fdopen(fd, "wb") as handle:
            if stream is not None:
                while True:
                    chunk = stream.read(_COPY_BUFSIZE)
                    if not chunk:
                        break
                    handle.write(chunk)
                    written += len(chunk)
        # os.open honours the umask and leaves existing files' modes alone.
        os.chmod(target, entry.mode)
        return written


__all__ = ["TarExtractor", "entry_from_member"]
