"""Browser cookie extraction for command line HTTP clients."""

from crumbler.core.constants import APP_VERSION as __version__

__all__ = ["__version__"]
