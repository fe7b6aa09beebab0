"""Demonstration command: structured messages to the console and two log files."""

from __future__ import annotations

import argparse
import os
from typing import Sequence

from logmgr.console import DEFAULT_CONSOLE_SINK
from logmgr.entry import Level, field
from logmgr.file_sink import DEFAULT_MAX_SIZE, AsyncFileSink, FileSink
from logmgr.logger import (
    add_sink,
    debug,
    error,
    get_level,
    info,
    set_level,
    shutdown,
    warn,
)

_ONE_DAY = 24 * 60 * 60
_ASYNC_BUFFER = 1000


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="logmgr",
        description="Write sample structured log messages to stdout, app.log and async.log.",
    )
    parser.add_argument(
        "-d",
        "--directory",
        default=".",
        help="directory for app.log and async.log (default: current directory)",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)

    set_level(Level.DEBUG)
    add_sink(DEFAULT_CONSOLE_SINK)
    add_sink(FileSink(os.path.join(args.directory, "app.log"), _ONE_DAY, DEFAULT_MAX_SIZE))
    add_sink(
        AsyncFileSink(
            os.path.join(args.directory, "async.log"), _ONE_DAY, DEFAULT_MAX_SIZE, _ASYNC_BUFFER
        )
    )

    debug("This is a debug message")
    info(
        "User logged in",
        field("user_id", 12345),
        field("action", "login"),
        field("ip", "192.168.1.1"),
    )
    warn(
        "High memory usage",
        field("memory_percent", 85.5),
        field("threshold", 80.0),
    )
    error(
        "Database connection failed",
        field("error", "connection timeout"),
        field("host", "db.example.com"),
        field("port", 5432),
        field("retries", 3),
    )
    info(
        "API request processed",
        field("method", "POST"),
        field("path", "/api/users"),
        field("status_code", 201),
        field("duration_ms", 45.67),
        field("user_id", 12345),
        field("request_id", "req-abc-123"),
    )
    if get_level() <= Level.DEBUG:
        debug(
            "Detailed debug info",
            field("internal_state", "processing"),
            field("memory_usage", "45MB"),
        )

    shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())