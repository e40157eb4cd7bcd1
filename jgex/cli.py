"""
Command line entry point.

    jgex <config_file>          run the Gods of Olympus demo
    jgex <config_file> drop     drop the graph instead
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from jgex.config import get_settings
from jgex.exceptions import GraphAppError
from jgex.graph.janusgraph_app import JanusGraphApp

logger = logging.getLogger(__name__)


class ThirdPartyNoiseFilter(logging.Filter):
    """
    Filter for third-party library logs.

    Removes known noisy patterns while preserving warnings, errors, and
    useful info messages.
    """

    # Patterns that are known to be noisy/repetitive at INFO level
    NOISE_PATTERNS = [
        # gremlinpython connection setup
        "Creating Client with url",
        "Creating DriverRemoteConnection with url",
        "Creating Connection",
        # aiohttp / asyncio transport chatter
        "Using selector",
        "Unclosed client session",
    ]

    def filter(self, record: logging.LogRecord) -> bool:
        # Always allow warnings, errors, and critical
        if record.levelno >= logging.WARNING:
            return True

        message = record.getMessage()
        for pattern in self.NOISE_PATTERNS:
            if pattern in message:
                return False
        return True


def setup_logging(debug: bool) -> None:
    # DEBUG mode: full details with timestamps and module names
    # INFO mode: clean output for progress visibility
    if debug:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        log_level = logging.DEBUG
    else:
        log_format = "%(message)s"
        log_level = logging.INFO

    logging.basicConfig(level=log_level, format=log_format, force=True)

    noise_filter = ThirdPartyNoiseFilter()
    for third_party_logger in ["gremlinpython", "aiohttp", "asyncio"]:
        logging.getLogger(third_party_logger).addFilter(noise_filter)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jgex",
        description="Load and query the Gods of Olympus graph in JanusGraph.",
    )
    parser.add_argument("config_file", help="graph configuration file (YAML)")
    parser.add_argument(
        "action",
        nargs="?",
        help="'drop' to drop the graph instead of running the demo",
    )
    parser.add_argument(
        "--print-schema-request",
        action="store_true",
        help="print the Groovy schema script for the configuration and exit",
    )
    parser.add_argument("--debug", action="store_true", help="enable debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(args.debug or settings.debug)

    drop = args.action is not None and args.action.lower() == "drop"
    app = JanusGraphApp(args.config_file, settings=settings)

    if args.print_schema_request:
        try:
            app.configure()
        except GraphAppError as e:
            logger.error(str(e))
            return 1
        print(app.create_schema_request())
        return 0

    if drop:
        try:
            app.open_graph()
            app.drop_graph()
        except Exception as e:
            logger.error(f"Failed to drop graph: {e}", exc_info=not isinstance(e, GraphAppError))
            return 1
        finally:
            app.close_graph()
        return 0

    return 0 if app.run_app() else 1


if __name__ == "__main__":
    sys.exit(main())
