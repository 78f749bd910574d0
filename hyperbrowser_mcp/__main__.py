"""Command line entry point."""
import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from .config import DEFAULT_PORT, Settings
from .transports import run_sse, run_stdio

logger = logging.getLogger("hyperbrowser_mcp")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Hyperbrowser MCP server")
    parser.add_argument("--sse", action="store_true", help="Serve over HTTP with SSE instead of stdio")
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Require a bearer API key on the SSE endpoints (only together with --sse)",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", DEFAULT_PORT)), help="Port to bind to")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"])
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    # stderr only: stdout carries the stdio protocol
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    settings = Settings.from_env()
    try:
        if args.sse:
            run_sse(settings, args.host, args.port, require_auth=args.serve, log_level=args.log_level)
        else:
            asyncio.run(run_stdio(settings))
    except KeyboardInterrupt:
        pass
    except Exception:
        logger.exception("Fatal error in main()")
        sys.exit(1)


if __name__ == "__main__":
    main()
