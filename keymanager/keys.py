"""Key provisioning decision and key pair generation."""

import base64
import hashlib
import os
import socket
from typing import Optional

import paramiko

from .config import Config
from .errors import ProvisioningError
from .logging import get_logger
from .models import KeyIdentity, ProvisioningPlan
from .runner import CommandRunner

logger = get_logger(__name__)


def decide(key_exists: bool, update_requested: bool,
           force_copy_requested: bool) -> ProvisioningPlan:
    """
    Decide whether the key must be generated and/or copied.

    Rules, first match wins:
      1. key pair incomplete or update requested -> generate and copy
      2. copy forced                            -> copy only
      3. otherwise                              -> nothing to do

    A freshly generated key has never been distributed, so generation
    always implies a copy.
    """
    if not key_exists or update_requested:
        return ProvisioningPlan(must_generate=True, must_copy=True)
    if force_copy_requested:
        return ProvisioningPlan(must_generate=False, must_copy=True)
    return ProvisioningPlan(must_generate=False, must_copy=False)


def key_comment(user: Optional[str] = None) -> str:
    """Comment embedded in generated public keys: <user>@<local hostname>."""
    return f"{user or Config.SSH_USER}@{socket.gethostname()}"


def get_key_fingerprint(public_key_line: str) -> str:
    """Calculate the SHA256 fingerprint of an OpenSSH public key line."""
    try:
        blob = paramiko.PublicBlob.from_string(public_key_line.strip())
    except (ValueError, paramiko.SSHException) as e:
        raise ProvisioningError(f"Unreadable public key: {e}") from e
    sha256_hash = hashlib.sha256(blob.key_blob).digest()
    return "SHA256:" + base64.b64encode(sha256_hash).decode().rstrip('=')


def prepare_key_directory(identity: KeyIdentity):
    """Create the key storage directory with owner-only permissions."""
    directory = identity.private_key_path.parent
    try:
        directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as e:
        raise ProvisioningError(f"Cannot create key directory {directory}: {e}") from e
    if not os.access(directory, os.W_OK):
        raise ProvisioningError(f"Key directory is not writable: {directory}")


class KeyGenerator:
    """Creates a key pair at an identity's paths, overwriting existing files."""

    def __init__(self, key_type: str = None, key_bits: int = None):
        self.key_type = (key_type or Config.KEY_TYPE).lower()
        self.key_bits = key_bits or Config.KEY_BITS

    def generate(self, identity: KeyIdentity, comment: str) -> str:
        """Generate the key pair and return its fingerprint."""
        prepare_key_directory(identity)
        logger.info(f"Creating a {self.key_type} key with name {identity.name}...")

        self._generate(identity, comment)

        if not identity.exists:
            raise ProvisioningError(
                f"Key generation did not produce {identity.private_key_path} "
                f"and {identity.public_key_path}"
            )

        fingerprint = get_key_fingerprint(identity.public_key_path.read_text())
        logger.info(f"SSH key {identity.name} created/updated ({fingerprint})")
        return fingerprint

    def _generate(self, identity: KeyIdentity, comment: str):
        raise NotImplementedError


class SshKeygenGenerator(KeyGenerator):
    """Generates keys with ssh-keygen, without a passphrase."""

    def __init__(self, runner: CommandRunner, key_type: str = None, key_bits: int = None):
        super().__init__(key_type, key_bits)
        self.runner = runner

    def build_command(self, identity: KeyIdentity, comment: str) -> list:
        argv = ["ssh-keygen", "-t", self.key_type]
        if self.key_type != "ed25519":
            argv += ["-b", str(self.key_bits)]
        argv += ["-C", comment, "-N", "", "-f", str(identity.private_key_path)]
        return argv

    def _generate(self, identity: KeyIdentity, comment: str):
        # Answer the overwrite prompt when a previous key exists
        result = self.runner.run(self.build_command(identity, comment), input_text="y\n")
        if not result.ok:
            raise ProvisioningError(
                f"ssh-keygen failed for {identity.private_key_path}: {result.failure_reason}"
            )


class ParamikoKeyGenerator(KeyGenerator):
    """Generates keys in-process with paramiko."""

    def _new_key(self) -> paramiko.PKey:
        if self.key_type == "rsa":
            return paramiko.RSAKey.generate(self.key_bits)
        if self.key_type == "ecdsa":
            bits = self.key_bits if self.key_bits in (256, 384, 521) else None
            return paramiko.ECDSAKey.generate(bits=bits)
        # paramiko has no Ed25519 key generation
        raise ProvisioningError(f"Key type {self.key_type} is not supported by the paramiko backend")

    def _generate(self, identity: KeyIdentity, comment: str):
        key = self._new_key()
        try:
            # Unlink first so an existing read-only key does not block the rewrite
            for path in (identity.private_key_path, identity.public_key_path):
                if path.exists():
                    path.unlink()

            key.write_private_key_file(str(identity.private_key_path))
            identity.public_key_path.write_text(
                f"{key.get_name()} {key.get_base64()} {comment}\n"
            )

            os.chmod(identity.private_key_path, 0o600)
            os.chmod(identity.public_key_path, 0o644)
        except (OSError, paramiko.SSHException) as e:
            raise ProvisioningError(f"Error writing key {identity.private_key_path}: {e}") from e


def create_generator(runner: CommandRunner, backend: str = None) -> KeyGenerator:
    """Return the key generator configured for this installation."""
    backend = backend or Config.KEY_BACKEND
    if backend == "paramiko":
        return ParamikoKeyGenerator()
    return SshKeygenGenerator(runner)

