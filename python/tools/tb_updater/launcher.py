"""Desktop launcher installation."""

from pathlib import Path

from loguru import logger

from .exceptions import LauncherIOError

PLACEHOLDER = "PLACEHOLDER"

DESKTOP_TEMPLATE = """\
[Desktop Entry]
Version=1.0
Type=Application
Name=Thunderbird
GenericName=Mail Client
Comment=Send and receive mail with Thunderbird
Exec=PLACEHOLDER/thunderbird/thunderbird %u
Icon=PLACEHOLDER/thunderbird/chrome/icons/default/default128.png
Terminal=false
Categories=Network;Email;
MimeType=message/rfc822;x-scheme-handler/mailto;application/x-xpinstall;
StartupNotify=true
StartupWMClass=thunderbird
Actions=ComposeMessage;OpenAddressBook;

[Desktop Action ComposeMessage]
Name=Write new message
Exec=PLACEHOLDER/thunderbird/thunderbird -compose

[Desktop Action OpenAddressBook]
Name=Open address book
Exec=PLACEHOLDER/thunderbird/thunderbird -addressbook
"""


def render_launcher(install_dir: Path, template: str = DESKTOP_TEMPLATE) -> str:
    return template.replace(PLACEHOLDER, str(install_dir))


class LauncherInstaller:
    """Writes the per-user ``.desktop`` entry once, and retargets it after a move."""

    def __init__(self, path: Path, template: str = DESKTOP_TEMPLATE):
        self.path = Path(path)
        self.template = template

    def exists(self) -> bool:
        return self.path.exists()

    def ensure(self, install_dir: Path) -> bool:
        """
        Install the launcher if it is not there yet.

        Args:
            install_dir: Already expanded directory the archive is unpacked into.

        Returns:
            bool: True if a launcher was written, False if one already existed.

        Raises:
            LauncherIOError: If the directory or file could not be written.
        """
        if self.exists():
            logger.debug(f"Launcher already present at {self.path}")
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LauncherIOError(
                f"Failed to create {self.path.parent}", path=self.path, original_error=e
            ) from e
        try:
            # "x" never clobbers a launcher created behind our back.
            with self.path.open("x", encoding="utf-8") as f:
                f.write(render_launcher(install_dir, self.template))
        except FileExistsError:
            return False
        except OSError as e:
            raise LauncherIOError(
                f"Failed to write .desktop to {self.path}", path=self.path, original_error=e
            ) from e
        logger.info(f"Installed launcher {self.path} for {install_dir}")
        return True

    def retarget(self, old_dir: Path, new_dir: Path) -> bool:
        """
        Point a launcher written for ``old_dir`` at ``new_dir``.

        Only a launcher that still matches what was rendered for ``old_dir``
        is rewritten; one edited by the user is left alone. A missing
        launcher is simply installed for ``new_dir``.

        Returns:
            bool: True if the launcher now points at ``new_dir`` because of
                this call.

        Raises:
            LauncherIOError: If the launcher could not be read or written.
        """
        try:
            current = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return self.ensure(new_dir)
        except (OSError, UnicodeDecodeError) as e:
            raise LauncherIOError(
                f"Failed to read {self.path}", path=self.path, original_error=e
            ) from e

        if current == render_launcher(new_dir, self.template):
            return False
        if current != render_launcher(old_dir, self.template):
            logger.info(f"Launcher {self.path} was edited, leaving it alone")
            return False
        try:
            self.path.write_text(render_launcher(new_dir, self.template), encoding="utf-8")
        except OSError as e:
            raise LauncherIOError(
                f"Failed to write .desktop to {self.path}", path=self.path, original_error=e
            ) from e
        logger.info(f"Launcher {self.path} now points at {new_dir}")
        return True
