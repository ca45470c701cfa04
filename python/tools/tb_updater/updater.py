"""The ThunderbirdUpdater class, orchestrating the update process asynchronously."""

import sys
from pathlib import Path
from typing import Optional

import aiohttp
from loguru import logger

from .downloader import Downloader
from .exceptions import (
    ConfigIOError, ExtractionError, LauncherIOError, NetworkError, ParseError,
)
from .launcher import LauncherInstaller
from .models import ConfigRecord, ProgressCallback, ReleaseStrategy, UpdateStatus
from .packaging import TarBz2PackageHandler
from .paths import DEFAULT_DEST_DIR
from .settings import UpdaterSettings
from .state import StateStore
from .strategies import HtmlReleaseStrategy, JsonReleaseStrategy, ReleaseDiscoverer
from .version import Version

EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def build_strategy(settings: UpdaterSettings) -> ReleaseStrategy:
    """Create the release discovery strategy named in the settings."""
    if settings.release_source == "json":
        return JsonReleaseStrategy(settings.json_index_url, settings.json_version_key)
    return HtmlReleaseStrategy(settings.index_url, settings.version_selector)


class ThunderbirdUpdater:
    """
    Keeps a user-local Thunderbird install current.

    A run goes through these steps:
    1. Work out the installed version and destination from the state file.
    2. Install the desktop launcher if it is missing.
    3. Discover the newest upstream release.
    4. Stop if it is not newer than what is installed.
    5. Stream, decompress and extract the release archive.
    6. Record the new version, only after extraction succeeded.
    """

    def __init__(
        self,
        settings: UpdaterSettings,
        *,
        strategy: Optional[ReleaseStrategy] = None,
        package_handler: Optional[TarBz2PackageHandler] = None,
        progress_callback: Optional[ProgressCallback] = None,
        show_progress: bool = True,
    ):
        """
        Initialize the ThunderbirdUpdater.

        Args:
            settings: Runtime settings (URLs, home directory, tuning).
            strategy: Release discovery strategy; derived from settings if None.
            package_handler: Archive extractor; tar.bz2 by default.
            progress_callback: Optional async callback for status updates.
            show_progress: Whether to draw the download progress bar.
        """
        self.settings = settings
        self.store = StateStore(settings.config_path)
        self.launcher = LauncherInstaller(settings.launcher_path)
        self.discoverer = ReleaseDiscoverer(strategy or build_strategy(settings))
        self.package_handler = package_handler or TarBz2PackageHandler()
        self.show_progress = show_progress
        self.status: UpdateStatus = UpdateStatus.IDLE
        self._progress_callback = progress_callback

    async def _report_progress(self, status: UpdateStatus, progress: float, message: str) -> None:
        """
        Report progress to the callback if provided.
        """
        self.status = status
        logger.info(f"[{status.value}] {message} ({progress:.1%})")
        if self._progress_callback:
            await self._progress_callback(status, progress, message)

    async def resolve_state(
        self, dest_dir: Optional[str]
    ) -> tuple[ConfigRecord, Version, Optional[str]]:
        """
        Decide where to install and which version is already there.

        An explicit ``dest_dir`` wins over the stored one. Moving to a new
        destination means nothing is known to be installed there yet.

        Returns:
            The record to persist on success, the installed version, and the
            stored destination if this run moves away from it.
        """
        stored = await self.store.load()
        if stored is None:
            record = ConfigRecord.first_run(dest_dir or DEFAULT_DEST_DIR)
            return record, record.version, None

        if dest_dir is None or self.settings.expand(dest_dir) == self.settings.expand(stored.dest_dir):
            return stored, stored.version, None

        logger.info(
            f"Destination changed from {stored.dest_dir} to {dest_dir}, "
            "installing afresh"
        )
        return stored.with_install(Version.zero(), dest_dir), Version.zero(), stored.dest_dir

    def ensure_launcher(self, install_dir: Path) -> None:
        try:
            self.launcher.ensure(install_dir)
        except LauncherIOError as e:
            logger.warning(f"{e}; continuing without a launcher")

    def retarget_launcher(self, old_dir: Path, new_dir: Path) -> None:
        try:
            self.launcher.retarget(old_dir, new_dir)
        except LauncherIOError as e:
            logger.warning(f"{e}; launcher still points at {old_dir}")

    async def check_for_updates(self, session: aiohttp.ClientSession) -> Version:
        """
        Discover the newest upstream release.

        Raises:
            NetworkError: If the release index could not be fetched.
            ParseError: If no version could be read from it.
        """
        await self._report_progress(UpdateStatus.CHECKING, 0.0, "Checking for updates...")
        latest = await self.discoverer.latest(session)
        if latest is None:
            raise ParseError("Could not parse version numbers")
        return latest

    def _session(self) -> aiohttp.ClientSession:
        timeout = aiohttp.ClientTimeout(
            total=None,
            sock_connect=self.settings.request_timeout,
            sock_read=self.settings.request_timeout,
        )
        return aiohttp.ClientSession(timeout=timeout)

    async def run(self, dest_dir: Optional[str] = None, check_only: bool = False) -> int:
        """
        Execute the full update process.

        Args:
            dest_dir: Destination given on the command line, if any.
            check_only: Report an available update without installing it.

        Returns:
            int: Process exit code.
        """
        record, installed, moved_from = await self.resolve_state(dest_dir)
        install_dir = self.settings.expand(record.dest_dir)
        self.ensure_launcher(install_dir)

        async with self._session() as session:
            try:
                latest = await self.check_for_updates(session)
            except NetworkError as e:
                await self._report_progress(UpdateStatus.FAILED, 0.0, str(e))
                print(f"Network error, could not access the thunderbird website: {e}", file=sys.stderr)
                return EXIT_FAILURE
            except ParseError as e:
                await self._report_progress(UpdateStatus.FAILED, 0.0, str(e))
                print(f"{e}", file=sys.stderr)
                return EXIT_FAILURE

            if latest <= installed:
                await self._report_progress(UpdateStatus.UP_TO_DATE, 1.0, f"Already up to date: {installed}")
                print(f"Latest release is {latest} and we already have {installed}")
                return EXIT_SUCCESS

            await self._report_progress(UpdateStatus.UPDATE_AVAILABLE, 1.0, f"Update available: {latest}")
            if check_only:
                print(f"Update available: {latest} (installed: {installed})")
                return EXIT_SUCCESS

            print(f"Downloading version {latest}")
            await self._report_progress(UpdateStatus.DOWNLOADING, 0.0, f"Downloading {latest} into {install_dir}")
            downloader = Downloader(
                session,
                self.settings,
                package_handler=self.package_handler,
                progress_callback=self._progress_callback,
                show_progress=self.show_progress,
            )
            try:
                entries = await downloader.install(latest, install_dir)
            except (NetworkError, ExtractionError) as e:
                await self._report_progress(UpdateStatus.FAILED, 0.0, f"Update process failed: {e}")
                print(f"Encountered the following error: {e}", file=sys.stderr)
                return EXIT_FAILURE

        await self._report_progress(UpdateStatus.EXTRACTING, 1.0, f"Extracted {entries} entries into {install_dir}")
        print("Successfully updated thunderbird, please restart it")
        if moved_from is not None:
            self.retarget_launcher(self.settings.expand(moved_from), install_dir)

        await self._report_progress(UpdateStatus.FINALIZING, 0.0, "Saving state...")
        try:
            await self.store.save(record.with_install(latest))
        except ConfigIOError as e:
            print(f"Failed to save config/state: {e}", file=sys.stderr)
            return EXIT_SUCCESS

        await self._report_progress(UpdateStatus.COMPLETE, 1.0, f"Update to version {latest} installed successfully.")
        return EXIT_SUCCESS
