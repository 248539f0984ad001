"""Application entry point for crumbler.

Parses the command line, loads the configuration, initializes logging and
runs the selected mode.
"""

import logging
import sys

from crumbler.cli.app import App, parse_args
from crumbler.core.config import ConfigManager
from crumbler.core.errors import ConfigError
from crumbler.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """
    Application entry point.

    Returns:
        Exit code (0 for success)
    """
    args = parse_args(argv)

    try:
        settings = ConfigManager().settings
    except (ConfigError, OSError) as e:
        print(f"crumbler: error: {e}", file=sys.stderr)
        return 1

    # Initialize logging
    debug = settings["debug"] if args.debug is None else args.debug
    setup_logging(debug_mode=debug)

    logger.debug("Running %s mode with %s", args.mode, args.browser or settings["browser"])
    return App(args, settings).run()


if __name__ == "__main__":
    sys.exit(main())
