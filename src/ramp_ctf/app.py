from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from ramp_ctf.core.config import AppConfig
from ramp_ctf.core.errors import SolverError
from ramp_ctf.core.logging_config import configure_logging
from ramp_ctf.core.pipeline import solve

logger = logging.getLogger(__name__)

EPILOG = """\
Examples:
  ramp-ctf           Run the solver
  ramp-ctf --debug   Run with debug output
"""


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ramp-ctf",
        description="Ramp CTF Challenge Solver",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    config = AppConfig.load(debug=args.debug)
    configure_logging(config)
    logger.info("Ramp CTF Challenge Solver v1.0.0")

    try:
        result = asyncio.run(solve(config))
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130
    except SolverError as e:
        logger.error("Failed to solve challenge: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.exception("Unexpected error")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Hidden URL: {result.url}")
    if result.flag is not None:
        print(f"Flag: {result.flag}")
    else:
        print("Flag: not retrieved, open the URL above in a browser")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
