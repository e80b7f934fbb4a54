#!/usr/bin/env python3
"""
cachereclaim command line
Administrative routines for managed endpoint caches
"""
import argparse
import logging
import sys
from typing import List, Optional

from config import ReclaimConfig
from handlers.members_handler import MembersHandler
from handlers.mirror_handler import MirrorHandler
from handlers.reclaim_handler import ReclaimHandler
from services.errors import CacheReclaimError, ConfigError, HostListError, MirrorError

logger = logging.getLogger("cachereclaim")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_SETUP_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cachereclaim",
        description="Reclaim cache space on managed endpoints and related admin routines"
    )
    parser.add_argument("--config", help="settings file (default: $CACHERECLAIM_CONFIG or /etc/cachereclaim/cachereclaim.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reclaim = subparsers.add_parser("reclaim", help="clear the client cache on one or more hosts")
    reclaim.add_argument("hosts", nargs="*", metavar="HOST", help="target host")
    reclaim.add_argument("--hosts-file", help="file with one host per line")
    reclaim.add_argument("--group", help="named host group from the configuration")
    reclaim.add_argument(
        "--reset-secondary",
        action="store_true",
        help="also reset the secondary cache directory (stops and restarts its service)"
    )

    mirror = subparsers.add_parser("mirror", help="copy files by extension into a mirrored tree")
    mirror.add_argument("source", help="source directory")
    mirror.add_argument("destination", help="destination directory")
    mirror.add_argument("--ext", action="append", required=True, help="file extension to copy (repeatable)")
    mirror.add_argument("--overwrite", action="store_true", help="replace files that already exist")

    members = subparsers.add_parser("members", help="list the members of a collection")
    members.add_argument("collection", help="collection name")
    members.add_argument("--site-server", help="site server host (default from configuration)")
    members.add_argument("--site-code", help="three character site code (default from configuration)")

    return parser


def configure_logging(level_name: str, verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        reclaim_config = ReclaimConfig(args.config)
    except ConfigError as e:
        configure_logging("INFO", args.verbose)
        logger.error(str(e))
        return EXIT_SETUP_ERROR

    configure_logging(reclaim_config.get_settings().logging.level, args.verbose)

    handlers = {
        'reclaim': lambda: ReclaimHandler(reclaim_config),
        'mirror': lambda: MirrorHandler(),
        'members': lambda: MembersHandler(reclaim_config),
    }

    try:
        return handlers[args.command]().handle(args)
    except (HostListError, ConfigError, MirrorError) as e:
        logger.error(str(e))
        return EXIT_SETUP_ERROR
    except CacheReclaimError as e:
        logger.error(str(e))
        return EXIT_FAILURE


if __name__ == '__main__':
    sys.exit(main())
