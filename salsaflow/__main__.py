"""
Server entry point.

Loads configuration, configures logging, and serves the app with uvicorn.
"""

from __future__ import annotations

import argparse
import sys

import structlog
import uvicorn

from salsaflow.core.config import load_settings
from salsaflow.core.errors import ConfigurationError
from salsaflow.core.logging import configure_logging
from salsaflow.main import create_app


def run(argv: list[str] | None = None) -> None:
    """CLI entry point for the server."""
    parser = argparse.ArgumentParser(description="SalsaFlow server")
    parser.add_argument(
        "--env",
        default=None,
        help="Path to a dotenv file with SALSAFLOW_* settings",
    )
    parser.add_argument("--host", default=None, help="Listen host (overrides SALSAFLOW_HOST)")
    parser.add_argument("--port", type=int, default=None, help="Listen port (overrides SALSAFLOW_PORT)")
    args = parser.parse_args(argv)

    overrides = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port

    try:
        settings = load_settings(args.env, **overrides)
    except ConfigurationError as exc:
        print("Configuration error:", file=sys.stderr)
        for problem in exc.problems:
            print(f"  - {problem}", file=sys.stderr)
        sys.exit(1)

    configure_logging(settings.log_level, settings.log_format)
    log = structlog.get_logger()
    log.info("salsaflow.config_loaded", env_file=args.env, host=settings.host, port=settings.port)

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
