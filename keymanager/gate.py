"""Availability checks for the external SSH tools."""

import shutil
from typing import Callable, Iterable, Optional

from .errors import InstallPermissionError, MissingCommandError
from .installer import Installer, is_privileged
from .logging import get_logger

REQUIRED_COMMANDS = ("ssh-keygen", "ssh-copy-id", "ssh", "ssh-keyscan")
PASSWORD_TOOL = "sshpass"


class CommandGate:
    """Makes sure required executables exist, installing them when absent."""

    def __init__(self, installer: Installer,
                 which: Callable[[str], Optional[str]] = shutil.which,
                 privileged: Callable[[], bool] = is_privileged):
        """Initialize the gate with an installer and PATH lookup."""
        self.installer = installer
        self.which = which
        self.privileged = privileged
        self.logger = get_logger(__name__)

    def is_available(self, command: str) -> bool:
        return self.which(command) is not None

    def ensure(self, commands: Iterable[str] = REQUIRED_COMMANDS):
        """
        Ensure every command is on PATH.

        Missing commands are installed through the installer and checked
        again. Raises MissingCommandError if one is still absent, or the
        installer's EnvironmentSetupError if installation is impossible.
        """
        for command in commands:
            if self.is_available(command):
                continue

            self.logger.warning(f"Command not found: {command}")
            self.installer.install(command)

            if not self.is_available(command):
                self.logger.error(f"Failed to install {command}.")
                raise MissingCommandError(command, "installation did not provide it")

            self.logger.info(f"Installed {command}")

    def ensure_password_tool(self):
        """Ensure sshpass is available; installing it requires root."""
        if self.is_available(PASSWORD_TOOL):
            return

        self.logger.warning(f"{PASSWORD_TOOL} is not installed.")
        if not self.privileged():
            raise InstallPermissionError(
                f"Insufficient permissions to install {PASSWORD_TOOL}. "
                "Please install it manually."
            )

        self.installer.install(PASSWORD_TOOL, use_sudo=False)
        if not self.is_available(PASSWORD_TOOL):
            raise MissingCommandError(PASSWORD_TOOL, "installation did not provide it")
