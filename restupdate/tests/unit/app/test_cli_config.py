from __future__ import annotations

from pathlib import Path

import pytest

from restupdate.app.config import load_request
from restupdate.domain.errors import ConfigError


def _argv(**overrides: str) -> list[str]:
    values = {
        "--package_url": "http://updates.test/api.tar.gz",
        "--package_md5": "d41d8cd98f00b204e9800998ecf8427e",
        "--rest_path": "/srv/restapi",
    }
    values.update(overrides)
    argv: list[str] = []
    for flag, value in values.items():
        argv.extend([flag, value])
    return argv


def test_defaults_follow_legacy_flags(tmp_path: Path) -> None:
    request = load_request(_argv(), environ={}, work_dir=tmp_path)

    assert request.source_url == "http://updates.test/api.tar.gz"
    assert request.expected_digest == "d41d8cd98f00b204e9800998ecf8427e"
    assert request.live_service_path == Path("/srv/restapi")
    assert request.extract_root == Path("/tmp")
    assert request.archive_path == tmp_path / "api.tar.gz"
    assert request.extracted_tree_path == Path("/tmp/restapi")
    assert request.digest_algorithm == "md5"
    assert request.retry_policy.max_attempts == 3
    assert request.retry_policy.initial_delay_s == 1.0
    assert request.retry_policy.backoff_multiplier == 2.0
    assert request.update_option == "replace"
    assert request.script_path == ""


def test_dashed_aliases_and_tuning_flags(tmp_path: Path) -> None:
    argv = [
        "--package-url",
        "http://updates.test/p.tgz",
        "--package-digest",
        "ab" * 32,
        "--rest-path",
        "/srv/api",
        "--untar-path",
        "/var/tmp/unpack",
        "--digest-algorithm",
        "SHA256",
        "--attempts",
        "5",
        "--retry-delay",
        "0.5",
        "--timeout",
        "15",
        "--script-path",
        "scripts/post.sh",
    ]

    request = load_request(argv, environ={}, work_dir=tmp_path)

    assert request.digest_algorithm == "sha256"
    assert request.extract_root == Path("/var/tmp/unpack")
    assert request.retry_policy.max_attempts == 5
    assert request.retry_policy.initial_delay_s == 0.5
    assert request.download_timeout_s == 15.0
    assert request.script_path == "scripts/post.sh"


def test_environment_provides_defaults(tmp_path: Path) -> None:
    env = {
        "RESTUPDATE_PACKAGE_URL": "http://env.test/api.tar.gz",
        "RESTUPDATE_PACKAGE_DIGEST": "0" * 32,
        "RESTUPDATE_REST_PATH": "/srv/from-env",
        "RESTUPDATE_ATTEMPTS": "2",
    }

    request = load_request([], environ=env, work_dir=tmp_path)

    assert request.source_url == "http://env.test/api.tar.gz"
    assert request.live_service_path == Path("/srv/from-env")
    assert request.retry_policy.max_attempts == 2


def test_flags_override_environment(tmp_path: Path) -> None:
    env = {"RESTUPDATE_REST_PATH": "/srv/from-env"}

    request = load_request(_argv(**{"--rest_path": "/srv/from-flag"}), environ=env, work_dir=tmp_path)

    assert request.live_service_path == Path("/srv/from-flag")


@pytest.mark.parametrize("flag", ["--package_url", "--package_md5", "--rest_path", "--untar_path"])
def test_missing_required_value_raises_config_error(tmp_path: Path, flag: str) -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_request(_argv(**{flag: ""}), environ={}, work_dir=tmp_path)
    assert flag in excinfo.value.hint


@pytest.mark.parametrize(
    "overrides",
    [
        {"--attempts": "0"},
        {"--attempts": "many"},
        {"--retry_delay": "-1"},
        {"--timeout": "0"},
        {"--digest_algorithm": "crc32"},
        {"--update_option": "merge"},
    ],
)
def test_invalid_settings_raise_config_error(tmp_path: Path, overrides: dict) -> None:
    with pytest.raises(ConfigError):
        load_request(_argv(**overrides), environ={}, work_dir=tmp_path)


@pytest.mark.parametrize(
    "overrides",
    [
        {"--package_md5": "not-a-digest"},
        {"--package_md5": "0" * 31},
        {"--package_md5": "d41d8cd98f00b204e9800998ecf8427e", "--digest_algorithm": "sha256"},
    ],
)
def test_malformed_digest_is_rejected_before_download(tmp_path: Path, overrides: dict) -> None:
    with pytest.raises(ConfigError, match="Invalid --package_md5 value"):
        load_request(_argv(**overrides), environ={}, work_dir=tmp_path)


def test_expected_digest_is_normalized(tmp_path: Path) -> None:
    request = load_request(
        _argv(**{"--package_md5": " D41D8CD98F00B204E9800998ECF8427E "}), environ={}, work_dir=tmp_path
    )

    assert request.expected_digest == "d41d8cd98f00b204e9800998ecf8427e"


def test_relative_rest_path_is_made_absolute(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    request = load_request(_argv(**{"--rest_path": "."}), environ={}, work_dir=tmp_path)

    assert request.live_service_path == Path.cwd()
    assert request.live_service_path.name
    assert request.extract_root == Path("/tmp")


def test_root_rest_path_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Invalid --rest_path"):
        load_request(_argv(**{"--rest_path": "/"}), environ={}, work_dir=tmp_path)
