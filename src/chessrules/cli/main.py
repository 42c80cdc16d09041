from __future__ import annotations

import argparse
from typing import List, Optional

import uvicorn

from ..protocol.http.app import create_app


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve the chess rules HTTP API")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port (default: 8000)")
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=("critical", "error", "warning", "info", "debug"),
        help="Log level for the app and uvicorn (default: info)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    uvicorn.run(
        create_app(log_level=args.log_level),
        host=args.host,
        port=args.port,
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
