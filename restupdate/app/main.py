"""CLI entry point for the one-shot update agent."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Mapping, Optional, Sequence

import requests

from restupdate.app.config import build_parser, request_from_args
from restupdate.domain.errors import ConfigError
from restupdate.usecases.error_mapping import (
    EXIT_OK,
    describe_failure,
    exit_code_for,
    wants_traceback,
)
from restupdate.usecases.run_update import RunUpdate
from restupdate.utils.logging import configure_root

log = logging.getLogger("restupdate")


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
    work_dir: Optional[Path] = None,
    session: Optional[requests.Session] = None,
) -> int:
    """Run one update and return the process exit code."""
    env = os.environ if environ is None else environ
    parser = build_parser(env)
    args = parser.parse_args(argv)
    configure_root(args.log_level, environ=env)

    try:
        request = request_from_args(args, work_dir=work_dir)
    except ConfigError as exc:
        parser.print_usage(sys.stderr)
        log.error(describe_failure(exc))
        return exit_code_for(exc)

    try:
        RunUpdate(session=session)(request)
    except Exception as exc:
        message = describe_failure(exc)
        if wants_traceback(exc):
            log.exception(message)
        else:
            log.error(message)
        return exit_code_for(exc)
    return EXIT_OK


__all__ = ["main"]
