# __init__.py
"""
Thunderbird Updater

Keeps a user-local Thunderbird install on Linux x86_64 current. Each run
discovers the newest upstream release, compares it with the version recorded
in ``~/.config/tb-updater.json`` and, when it is newer, streams the official
tarball through a bzip2 decompressor into the chosen destination directory.

Features:
- Release discovery by scraping the release notes index or reading the
  product-details JSON
- Streaming download with a progress bar and bounded memory
- Extraction that refuses archive entries escaping the destination
- State recorded only after a successful install
- One-time installation of a desktop launcher
- Usable as a command-line tool or as a library

License: GPL-3.0-or-later
"""

from .exceptions import (
    UpdaterError,
    ConfigIOError,
    NetworkError,
    ParseError,
    ExtractionError,
    LauncherIOError,
)
from .version import Version, compare_versions
from .models import ConfigRecord, UpdateStatus
from .settings import UpdaterSettings
from .strategies import (
    HtmlReleaseStrategy,
    JsonReleaseStrategy,
    ReleaseDiscoverer,
    extract_versions,
)
from .downloader import Downloader
from .packaging import TarBz2PackageHandler
from .state import StateStore
from .launcher import LauncherInstaller
from .updater import ThunderbirdUpdater

__version__ = "1.0.0"
__license__ = "GPL-3.0-or-later"

__all__ = [
    # Core classes
    "ThunderbirdUpdater",
    "Downloader",
    "TarBz2PackageHandler",
    "ReleaseDiscoverer",
    "HtmlReleaseStrategy",
    "JsonReleaseStrategy",
    "StateStore",
    "LauncherInstaller",
    # Types
    "Version",
    "ConfigRecord",
    "UpdateStatus",
    "UpdaterSettings",
    # Exceptions
    "UpdaterError",
    "ConfigIOError",
    "NetworkError",
    "ParseError",
    "ExtractionError",
    "LauncherIOError",
    # Utility functions
    "compare_versions",
    "extract_versions",
]
