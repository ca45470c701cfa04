"""
Home-relative path construction.

All files the updater touches outside the destination directory live under
the user's home. Every such path, and every ``~`` expansion, goes through
this module so a synthetic home can be injected.
"""

import os
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, os.PathLike, Path]

CONFIG_RELATIVE_PATH = Path(".config") / "tb-updater.json"
APPLICATIONS_RELATIVE_DIR = Path(".local") / "share" / "applications"
LAUNCHER_NAME = "thunderbird.desktop"
DEFAULT_DEST_DIR = "~/Downloads"


def default_home() -> Path:
    """Return ``$HOME`` as a Path."""
    home = os.environ.get("HOME")
    if not home:
        raise RuntimeError("HOME environment variable is not set")
    return Path(home)


def home_path(base: PathLike, relative: PathLike) -> Path:
    """Join a home-relative component onto a base directory."""
    relative = Path(relative)
    if relative.is_absolute():
        raise ValueError(f"Expected a home-relative path, got {relative}")
    return Path(base) / relative


def expand_home(path: PathLike, home: Optional[PathLike] = None) -> Path:
    """
    Expand a leading ``~`` against the given home directory.

    Only the bare ``~`` and ``~/...`` forms are expanded; ``~user`` is left
    untouched.

    Args:
        path: Path that may start with ``~``
        home: Home directory to expand against (defaults to ``$HOME``)

    Returns:
        The expanded path
    """
    text = os.fspath(path)
    if text == "~" or text.startswith("~/"):
        base = Path(home) if home is not None else default_home()
        return base / text[2:] if len(text) > 1 else base
    return Path(text)


def config_path(home: PathLike) -> Path:
    return home_path(home, CONFIG_RELATIVE_PATH)


def launcher_path(home: PathLike) -> Path:
    return home_path(home, APPLICATIONS_RELATIVE_DIR / LAUNCHER_NAME)
