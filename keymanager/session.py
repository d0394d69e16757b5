"""Interactive SSH session launcher."""

from .errors import EnvironmentSetupError
from .logging import get_logger
from .models import KeyIdentity, Target
from .runner import CommandRunner


class SessionLauncher:
    """Opens the final interactive shell on the target."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner
        self.logger = get_logger(__name__)

    def build_command(self, identity: KeyIdentity, target: Target) -> list:
        # IPv6 literals are bracketed in the connection string
        return [
            "ssh",
            "-p", str(target.port),
            "-i", str(identity.private_key_path),
            target.connection_string,
        ]

    def launch(self, identity: KeyIdentity, target: Target) -> int:
        """Run ssh attached to the terminal and return the remote exit status."""
        argv = self.build_command(identity, target)
        self.logger.info(f"Connecting to {target.connection_string} on port {target.port}...")
        result = self.runner.run_interactive(argv)
        if result.not_found:
            raise EnvironmentSetupError("ssh is not available to open the session")
        return result.returncode
