"""Command line tool for inflating a helm chart into kubernetes manifests."""

import argparse
import asyncio
import logging
import sys
import traceback

from helm_inflator.exceptions import InflatorException
from . import generate, version

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inflate a helm chart into kubernetes resource manifests.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    generate.GenerateAction.register(subparsers)
    version.VersionAction.register(subparsers)
    return parser


def main(argv: list[str] | None = None) -> None:
    """helm-inflator command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args(argv)

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except InflatorException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("helm-inflator error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
