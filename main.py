#!/usr/bin/env python3
"""IRC Logger: records every line from an IRC connection into MongoDB."""

import argparse
import logging
import os
import sys

from irc_logger.config import load_config
from irc_logger.database import open_collection
from irc_logger.errors import IrcLoggerError, exit_status
from irc_logger.pipeline import Pipeline
from irc_logger.session import connect_session

logger = logging.getLogger(__name__)


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="IRC Logger")
    parser.add_argument(
        "--config", default=os.environ.get("IRC_LOGGER_CONFIG", "config.json"),
        help="Path to the JSON/YAML config file (default: config.json)",
    )
    parser.add_argument(
        "--log-level", default=os.environ.get("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    return parser


def run(config_path: str):
    """Start up, run the pipeline, and raise the error that ended it."""
    irc_config, db_config = load_config(config_path)
    logger.info("Config: server=%s:%d, channels=%s, db=%s:%d/%s, debug=%s",
                irc_config.server, irc_config.port, ",".join(irc_config.channels),
                db_config.host, db_config.port, db_config.name, db_config.debug)

    collection = open_collection(db_config)
    session = connect_session(irc_config)

    pipeline = Pipeline(session, collection, debug=db_config.debug)
    raise pipeline.run()


def main(argv: list[str] | None = None):
    args = build_cli_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        stream=sys.stderr,
    )

    try:
        run(args.config)
    except IrcLoggerError as exc:
        logger.error("%s", exc)
        sys.exit(exit_status(exc))


if __name__ == "__main__":
    main()
