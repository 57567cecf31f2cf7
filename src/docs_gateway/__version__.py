"""Version information for docs-gateway."""

from pathlib import Path


def _get_version() -> str:
    """Get version from the VERSION file next to the package, if shipped."""
    pkg_version = Path(__file__).parent / "VERSION"
    if pkg_version.exists():
        return pkg_version.read_text().strip()

    return "0.1.0"


__version__ = _get_version()
