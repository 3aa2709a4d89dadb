"""Duckboard - Build-status dashboard for the Duck CI server."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the dashboard version string."""
    return __version__
