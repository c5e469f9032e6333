import argparse
import sys

from ssi import __version__
from ssi.config import LOG_LEVEL, LOG_LEVELS, configure_logging
from ssi.shell import main_loop


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="ssi",
        description="Simple shell interpreter with background job control",
    )
    parser.add_argument("--version", "-v", action="store_true",
                        help="Show version information")
    parser.add_argument("--log-level", default=LOG_LEVEL,
                        choices=LOG_LEVELS,
                        type=str.upper, help="Diagnostic log level (stderr)")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.version:
        print(f"ssi version {__version__}")
        return 0

    configure_logging(args.log_level)
    return main_loop()


if __name__ == "__main__":
    sys.exit(main())
