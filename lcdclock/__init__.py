"""
lcdclock - alarm scheduling core for a personal LCD-style clock
"""

import tomllib
from pathlib import Path


def _get_version() -> str:
    """Read the project version from pyproject.toml when running from a checkout."""
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    if not pyproject_path.exists():
        return "0.0.0-unknown"
    data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
    return data["project"]["version"]


__version__ = _get_version()
__logo__ = "⏰"
