"""Error types raised by the key manager pipeline."""


class KeyManagerError(Exception):
    """Base class for fatal key manager errors."""

    exit_code = 1


class InputError(KeyManagerError):
    """Malformed target address or command line value."""

    exit_code = 2


class EnvironmentSetupError(KeyManagerError):
    """The local machine cannot provide a required tool."""

    exit_code = 3


class UnsupportedPlatformError(EnvironmentSetupError):
    """No supported package manager was detected."""


class MissingCommandError(EnvironmentSetupError):
    """A required command is still missing after installation."""

    def __init__(self, command: str, detail: str = ""):
        self.command = command
        message = f"Required command not available: {command}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InstallPermissionError(EnvironmentSetupError):
    """Installing a tool needs privileges the process does not hold."""


class ProvisioningError(KeyManagerError):
    """Local key pair could not be generated."""

    exit_code = 4


class TransferError(KeyManagerError):
    """Public key could not be copied to the remote host."""

    exit_code = 5
