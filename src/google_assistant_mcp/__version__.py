"""Version information for mcp-google-assistant."""

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "mcp-google-assistant"


def _get_version() -> str:
    """Get version from the package VERSION file, installed metadata, or fallback."""
    pkg_version = Path(__file__).parent / "VERSION"
    if pkg_version.exists():
        return pkg_version.read_text().strip()

    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "0.1.0"


__version__ = _get_version()
