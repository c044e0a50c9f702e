"""Build the immutable :class:`UpdateRequest` from CLI flags and environment.

Flags keep the underscore spelling deployment scripts already pass
(``--package_url``) and also accept dashed aliases. Every flag that has an
environment override reads it as its default, so explicit flags win.
"""

from __future__ import annotations

import argparse
import hashlib
import os
from pathlib import Path
from typing import Mapping, Optional, Sequence

from restupdate.domain.errors import ConfigError, IntegrityError
from restupdate.domain.models import (
    DEFAULT_ARCHIVE_NAME,
    DEFAULT_DIGEST_ALGORITHM,
    DEFAULT_EXTRACT_ROOT,
    DEFAULT_PACKAGE_DIR_NAME,
    SUPPORTED_UPDATE_OPTIONS,
    RetryPolicy,
    UpdateRequest,
)
from restupdate.usecases.verify_package import normalize_digest

ENV_PREFIX = "RESTUPDATE_"
DEFAULT_ATTEMPTS = 3
DEFAULT_RETRY_DELAY_S = 1.0
DEFAULT_TIMEOUT_S = 60.0


def supported_algorithms() -> list[str]:
    """Return fixed-length digest algorithms usable for package checks."""
    return sorted(name for name in hashlib.algorithms_guaranteed if not name.startswith("shake_"))


def build_parser(environ: Optional[Mapping[str, str]] = None) -> argparse.ArgumentParser:
    """Create the argument parser with env-backed defaults."""
    env = os.environ if environ is None else environ

    def _env(name: str, fallback: str = "") -> str:
        return env.get(f"{ENV_PREFIX}{name}", fallback)

    parser = argparse.ArgumentParser(
        prog="restupdate",
        description="Download, verify and install a REST API package into its service directory.",
    )
    parser.add_argument("--package_url", "--package-url", default=_env("PACKAGE_URL"), help="Package URL")
    parser.add_argument(
        "--package_md5",
        "--package-md5",
        "--package_digest",
        "--package-digest",
        dest="package_digest",
        default=_env("PACKAGE_DIGEST"),
        help="Expected package digest (hex)",
    )
    parser.add_argument(
        "--untar_path",
        "--untar-path",
        default=_env("UNTAR_PATH", DEFAULT_EXTRACT_ROOT),
        help="Directory the package is extracted into",
    )
    parser.add_argument("--rest_path", "--rest-path", default=_env("REST_PATH"), help="Live service directory")
    parser.add_argument(
        "--update_option",
        "--update-option",
        default="replace",
        help="Update mode (reserved; only 'replace' is supported)",
    )
    parser.add_argument(
        "--script_path",
        "--script-path",
        default="",
        help="Post-update script, relative to the package (reserved, not executed)",
    )
    parser.add_argument(
        "--digest_algorithm",
        "--digest-algorithm",
        default=_env("DIGEST_ALGORITHM", DEFAULT_DIGEST_ALGORITHM),
        help="hashlib algorithm used for the package digest",
    )
    parser.add_argument("--attempts", default=_env("ATTEMPTS", str(DEFAULT_ATTEMPTS)), help="Download attempts")
    parser.add_argument(
        "--retry_delay",
        "--retry-delay",
        default=_env("RETRY_DELAY", str(DEFAULT_RETRY_DELAY_S)),
        help="Initial retry delay in seconds (doubles after each failure)",
    )
    parser.add_argument(
        "--timeout",
        default=_env("TIMEOUT", str(DEFAULT_TIMEOUT_S)),
        help="HTTP connect/read timeout in seconds",
    )
    parser.add_argument("--archive_name", "--archive-name", default=DEFAULT_ARCHIVE_NAME)
    parser.add_argument("--package_dir", "--package-dir", default=DEFAULT_PACKAGE_DIR_NAME)
    parser.add_argument("--log_level", "--log-level", default=_env("LOG_LEVEL", "INFO"))
    return parser


def request_from_args(args: argparse.Namespace, *, work_dir: Optional[Path] = None) -> UpdateRequest:
    """Validate parsed arguments and build the request."""
    url = str(args.package_url or "").strip()
    digest = str(args.package_digest or "").strip()
    untar_path = str(args.untar_path or "").strip()
    rest_path = str(args.rest_path or "").strip()

    missing = [
        flag
        for flag, value in (
            ("--package_url", url),
            ("--package_md5", digest),
            ("--untar_path", untar_path),
            ("--rest_path", rest_path),
        )
        if not value
    ]
    if missing:
        raise ConfigError("Missing required configuration", ", ".join(missing))

    algorithm = str(args.digest_algorithm or "").strip().lower()
    if algorithm not in supported_algorithms():
        raise ConfigError(
            f"Unsupported digest algorithm: {args.digest_algorithm!r}",
            f"Use one of: {', '.join(supported_algorithms())}.",
        )

    try:
        digest = normalize_digest(digest, algorithm=algorithm)
    except IntegrityError as exc:
        raise ConfigError("Invalid --package_md5 value", exc.hint) from exc

    live_path = Path(os.path.abspath(Path(rest_path).expanduser()))
    if not live_path.name:
        raise ConfigError("Invalid --rest_path", f"{rest_path!r} has no directory name to back up.")

    update_option = str(args.update_option or "").strip() or "replace"
    if update_option not in SUPPORTED_UPDATE_OPTIONS:
        raise ConfigError(
            f"Unsupported update option: {update_option!r}",
            f"Use one of: {', '.join(SUPPORTED_UPDATE_OPTIONS)}.",
        )

    archive_name = Path(str(args.archive_name or "")).name
    package_dir = Path(str(args.package_dir or "")).name
    if not archive_name or not package_dir:
        raise ConfigError("Archive and package directory names must be non-empty")

    try:
        policy = RetryPolicy(
            max_attempts=int(args.attempts),
            initial_delay_s=float(args.retry_delay),
        )
        timeout = float(args.timeout)
    except ValueError as exc:
        raise ConfigError("Invalid retry or timeout setting", str(exc)) from exc
    if timeout <= 0:
        raise ConfigError("Invalid timeout", "--timeout must be greater than zero.")

    return UpdateRequest(
        source_url=url,
        expected_digest=digest,
        live_service_path=live_path,
        extract_root=Path(untar_path).expanduser(),
        retry_policy=policy,
        work_dir=Path(work_dir) if work_dir is not None else Path.cwd(),
        archive_name=archive_name,
        package_dir_name=package_dir,
        digest_algorithm=algorithm,
        download_timeout_s=timeout,
        update_option=update_option,
        script_path=str(args.script_path or "").strip(),
    )


def load_request(
    argv: Optional[Sequence[str]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    work_dir: Optional[Path] = None,
) -> UpdateRequest:
    """Parse ``argv`` (and env defaults) into a validated request."""
    args = build_parser(environ).parse_args(argv)
    return request_from_args(args, work_dir=work_dir)


__all__ = ["build_parser", "load_request", "request_from_args", "supported_algorithms"]
