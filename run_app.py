from __future__ import annotations

import argparse
import logging
import os
import sys

import uvicorn
from uvicorn.main import STARTUP_FAILURE

from backend.logging_setup import (
    announce_log_destination,
    configure_file_logging,
    get_uvicorn_log_config,
)

LOGGER = logging.getLogger("run_app")

configure_file_logging(default_level=logging.WARNING)


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Start de KPI tracker API")
    parser.add_argument("--host", default=os.getenv("TRACKER_HOST", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=int(os.getenv("TRACKER_PORT", "8000")))
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    announce_log_destination()

    from backend.app import app as backend_app

    config = uvicorn.Config(
        backend_app,
        host=args.host,
        port=args.port,
        log_level=os.getenv("UVICORN_LOG_LEVEL", "info"),
        log_config=get_uvicorn_log_config(),
    )
    server = uvicorn.Server(config)
    LOGGER.info("API start op %s:%s", args.host, args.port)
    server.run()

    if not server.started:
        sys.exit(STARTUP_FAILURE)


if __name__ == "__main__":
    main()
