"""Entry point for buildfacts-mcp server."""

import argparse
import asyncio
import logging
import os
import sys

from .config import configure
from .server import create_server


def configure_logging(level: str | None = None) -> None:
    """Configure logging based on environment."""
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Build Facts MCP Server - Extract build facts from MSBuild event streams"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (DEBUG, INFO, WARNING, ERROR). Defaults to LOG_LEVEL or INFO.",
    )
    parser.add_argument(
        "--no-build-tree",
        action="store_true",
        default=False,
        help="Disable event tree construction. Events are still forwarded to observers "
        "but no per-target-framework results are produced.",
    )
    return parser.parse_args(argv)


async def main() -> None:
    """Main entry point."""
    args = parse_args()
    configure_logging(args.log_level)
    logger = logging.getLogger(__name__)

    config = configure()
    if args.no_build_tree:
        from dataclasses import replace

        config = configure(replace(config, build_tree=False))

    logger.info(f"Starting Build Facts MCP Server (core compile target: {config.core_compile_target})...")

    mcp = create_server()

    try:
        await mcp.run_stdio_async()
    except Exception:
        logger.exception("Server error")
        raise
    finally:
        logger.info("Server stopped")


def run() -> None:
    """Run the server."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
