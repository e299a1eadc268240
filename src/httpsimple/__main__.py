"""Print the document at a URL to standard output.

Usage:
  httpsimple <url> [-v | --verbose]
  httpsimple -h | --help
  httpsimple --version

Options:
  -v --verbose            Show verbose details in the log.
  -h --help               Show this help information.
     --version            Show the version.

The exit status is 0 when the server answers with a 2xx status, 1 for any
other HTTP status, and 2 when no HTTP response was received.
"""

import logging
import os
import sys

from docopt import docopt

from httpsimple.client import default_client
from httpsimple.error import HTTPSimpleError
from httpsimple.status import is_success
from httpsimple.version import __version__


def main(argv=None) -> int:
    args = docopt(__doc__, argv=argv, version=f"httpsimple {__version__}")

    if not os.getenv("NO_COLOR"):
        logging.addLevelName(logging.WARNING, f"\033[1;33mWARN\033[1;0m")
        logging.addLevelName(logging.ERROR, "\033[1;31mERROR\033[1;0m")

    logger = logging.getLogger()
    if args["--verbose"]:
        logger.setLevel(logging.DEBUG)
        fmt = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
    else:
        logger.setLevel(logging.INFO)
        fmt = "%(asctime)s [%(levelname)s] %(message)s"
        logging.getLogger("httpx").disabled = True

    log_formatter = logging.Formatter(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")
    log_handler = logging.StreamHandler(sys.stderr)
    log_handler.setFormatter(log_formatter)
    logger.addHandler(log_handler)

    try:
        status = default_client().getprint(args["<url>"])
    except (HTTPSimpleError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    finally:
        logger.removeHandler(log_handler)

    return 0 if is_success(status) else 1


if __name__ == "__main__":
    sys.exit(main())
