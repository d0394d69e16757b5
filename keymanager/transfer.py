"""Public key transfer to the remote authorized_keys."""

from typing import Optional

from .errors import TransferError
from .gate import CommandGate
from .logging import get_logger, log_command_failure, log_transfer, mask_command
from .models import KeyIdentity, Target, TrustRecord
from .runner import CommandRunner
from .trust import TrustStore


class KeyTransfer:
    """Copies a public key with ssh-copy-id, optionally through sshpass."""

    def __init__(self, runner: CommandRunner, gate: CommandGate, trust_store: TrustStore):
        """Initialize the transfer with its collaborators."""
        self.runner = runner
        self.gate = gate
        self.trust_store = trust_store
        self.logger = get_logger(__name__)

    def build_command(self, identity: KeyIdentity, target: Target,
                      credential: Optional[str] = None) -> list:
        argv = [
            "ssh-copy-id",
            "-i", str(identity.public_key_path),
            "-p", str(target.port),
            target.copy_destination,
        ]
        if credential:
            # sshpass -e reads the password from SSHPASS
            argv = ["sshpass", "-e"] + argv
        return argv

    def copy(self, identity: KeyIdentity, target: Target,
             credential: Optional[str] = None) -> TrustRecord:
        """Copy the identity's public key to the target, raising TransferError on failure."""
        if credential:
            self.gate.ensure_password_tool()

        trust = self.trust_store.ensure_trusted(target)

        log_transfer(self.logger, identity.name, target.copy_destination, target.port,
                     with_password=bool(credential))

        argv = self.build_command(identity, target, credential)
        env = {"SSHPASS": credential} if credential else None
        result = self.runner.run(argv, env=env, secrets=(credential,) if credential else ())

        if not result.ok:
            log_command_failure(self.logger, mask_command(argv), result.returncode, result.stderr)
            raise TransferError(
                f"Copying key {identity.name} to {target.copy_destination} "
                f"on port {target.port} failed: {result.failure_reason}"
            )

        self.logger.info(f"Key {identity.name} copied to {target.copy_destination}")
        return trust
