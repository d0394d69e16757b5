"""Package installation for missing SSH tooling."""

import os
from pathlib import Path
from typing import List, Optional

from .errors import EnvironmentSetupError, UnsupportedPlatformError
from .logging import get_logger
from .runner import CommandRunner

DEBIAN_MARKER = Path("/etc/debian_version")
REDHAT_MARKER = Path("/etc/redhat-release")

# Commands are shipped by a different package name on each family
PACKAGES = {
    "debian": {
        "ssh": "openssh-client",
        "ssh-keygen": "openssh-client",
        "ssh-copy-id": "openssh-client",
        "ssh-keyscan": "openssh-client",
        "sshpass": "sshpass",
    },
    "redhat": {
        "ssh": "openssh-clients",
        "ssh-keygen": "openssh-clients",
        "ssh-copy-id": "openssh-clients",
        "ssh-keyscan": "openssh-clients",
        "sshpass": "sshpass",
    },
}


def is_privileged() -> bool:
    """True when the process runs as root."""
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class Installer:
    """Installs a command so it becomes available on PATH."""

    def install(self, command: str, use_sudo: bool = True):
        """Attempt to install the package providing a command."""
        raise NotImplementedError


class PackageManagerInstaller(Installer):
    """Installer backed by apt-get or yum."""

    def __init__(self, runner: CommandRunner, debian_marker: Path = DEBIAN_MARKER,
                 redhat_marker: Path = REDHAT_MARKER):
        """Initialize the installer with the platform marker files to probe."""
        self.runner = runner
        self.debian_marker = Path(debian_marker)
        self.redhat_marker = Path(redhat_marker)
        self.logger = get_logger(__name__)

    def detect_platform(self) -> Optional[str]:
        """Return 'debian', 'redhat' or None when neither marker exists."""
        if self.debian_marker.is_file():
            return "debian"
        if self.redhat_marker.is_file():
            return "redhat"
        return None

    def package_for(self, platform: str, command: str) -> str:
        return PACKAGES.get(platform, {}).get(command, command)

    def install_commands(self, platform: str, package: str, use_sudo: bool) -> List[List[str]]:
        """Build the package manager invocations for one package."""
        prefix = ["sudo"] if use_sudo and not is_privileged() else []
        if platform == "debian":
            return [
                prefix + ["apt-get", "update"],
                prefix + ["apt-get", "install", "-y", package],
            ]
        return [prefix + ["yum", "install", "-y", package]]

    def install(self, command: str, use_sudo: bool = True):
        """Install the package providing a command, raising on failure."""
        platform = self.detect_platform()
        if platform is None:
            raise UnsupportedPlatformError(
                f"Unsupported system. Please install {command} manually."
            )

        package = self.package_for(platform, command)
        self.logger.info(f"Attempting to install {command} (package {package})...")

        for argv in self.install_commands(platform, package, use_sudo):
            result = self.runner.run(argv)
            if not result.ok:
                raise EnvironmentSetupError(
                    f"Failed to install {command}: {' '.join(argv)} "
                    f"{result.failure_reason}"
                )
