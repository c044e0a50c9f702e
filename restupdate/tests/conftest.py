from __future__ import annotations

import io
import tarfile
from pathlib import Path
from typing import Iterable, Sequence, Tuple, Union

import pytest
from requests import exceptions as req_exc


class FakeResponse:
    """Minimal streaming response double for the downloader."""

    def __init__(self, body: bytes = b"", status_code: int = 200, *, fail_after: int | None = None) -> None:
        self.status_code = status_code
        self.reason = "OK" if status_code < 400 else "Error"
        self._body = body
        self._fail_after = fail_after
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        sent = 0
        for offset in range(0, len(self._body), max(1, chunk_size)):
            if self._fail_after is not None and sent >= self._fail_after:
                raise req_exc.ConnectionError("connection reset")
            chunk = self._body[offset : offset + chunk_size]
            sent += len(chunk)
            yield chunk

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True
        return False


class FakeSession:
    """Session double replaying scripted responses or exceptions in order."""

    def __init__(self, outcomes: Sequence[Union[FakeResponse, BaseException]]) -> None:
        self._outcomes = list(outcomes)
        self.calls: list[Tuple[str, dict]] = []

    def get(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        if not self._outcomes:
            pytest.fail("session.get called more times than scripted")
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


PackageEntry = Tuple[str, Union[bytes, None], int]


def build_package(path: Path, entries: Iterable[PackageEntry]) -> Path:
    """Write a ``.tar.gz`` with explicit headers.

    Each entry is ``(name, content, mode)``; ``content=None`` makes a directory.
    """
    with tarfile.open(path, "w:gz") as archive:
        for name, content, mode in entries:
            info = tarfile.TarInfo(name)
            info.mode = mode
            if content is None:
                info.type = tarfile.DIRTYPE
                archive.addfile(info)
            else:
                info.size = len(content)
                archive.addfile(info, io.BytesIO(content))
    return path


def package_bytes(entries: Iterable[PackageEntry], tmp_dir: Path) -> bytes:
    return build_package(tmp_dir / "built.tar.gz", entries).read_bytes()


@pytest.fixture
def fake_session():
    return FakeSession


@pytest.fixture
def fake_response():
    return FakeResponse


@pytest.fixture
def make_package():
    return build_package


@pytest.fixture
def restapi_package_bytes(tmp_path: Path) -> bytes:
    """A package with the ``restapi`` top-level folder the agent expects."""
    build_dir = tmp_path / "_build"
    build_dir.mkdir()
    return package_bytes(
        [
            ("restapi", None, 0o755),
            ("restapi/app.py", b"print('v2')\n", 0o644),
            ("restapi/bin", None, 0o755),
            ("restapi/bin/start.sh", b"#!/bin/sh\nexec python app.py\n", 0o755),
        ],
        build_dir,
    )


@pytest.fixture
def live_service(tmp_path: Path) -> Path:
    """An existing live service directory holding the previous release."""
    live = tmp_path / "srv" / "restapi"
    live.mkdir(parents=True)
    (live / "app.py").write_text("print('v1')\n", encoding="utf-8")
    return live
