"""Data models for the SSH key manager."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .address import AddressFamily, require_valid
from .config import Config
from .errors import InputError


@dataclass(frozen=True)
class Target:
    """Represents the remote host this invocation provisions."""

    host: str
    port: int = 22
    user: str = "root"
    family: AddressFamily = field(init=False)

    def __post_init__(self):
        """Validate the target data."""
        if not self.user:
            raise InputError("SSH user not specified")
        if not isinstance(self.port, int) or self.port < 1 or self.port > 65535:
            raise InputError(f"Invalid SSH port: {self.port!r}")
        # Family must be known before any connection string is built
        object.__setattr__(self, "family", require_valid(self.host))

    @property
    def connection_host(self) -> str:
        """Host as it appears in a user@host connection string."""
        if self.family is AddressFamily.IPV6:
            return f"[{self.host}]"
        return self.host

    @property
    def connection_string(self) -> str:
        return f"{self.user}@{self.connection_host}"

    @property
    def copy_destination(self) -> str:
        return f"{self.user}@{self.host}"

    @property
    def known_hosts_name(self) -> str:
        """Name OpenSSH records for this host in known_hosts."""
        if self.port == 22:
            return self.host
        return f"[{self.host}]:{self.port}"


@dataclass(frozen=True)
class KeyIdentity:
    """Represents a named local key pair."""

    name: str
    private_key_path: Path
    public_key_path: Path

    @classmethod
    def for_name(cls, name: str, ssh_dir: Union[str, Path, None] = None) -> "KeyIdentity":
        """Build the identity for a key name inside the key storage directory."""
        if not name or "/" in name:
            raise InputError(f"Invalid key name: {name!r}")
        private_key = Path(ssh_dir or Config.ssh_dir()) / name
        return cls(
            name=name,
            private_key_path=private_key,
            public_key_path=private_key.with_name(f"{name}.pub"),
        )

    @property
    def exists(self) -> bool:
        """Both halves of the key pair are present on disk."""
        return self.private_key_path.is_file() and self.public_key_path.is_file()


@dataclass(frozen=True)
class ProvisioningPlan:
    """Generate/copy decision for one invocation."""

    must_generate: bool
    must_copy: bool


@dataclass(frozen=True)
class TrustRecord:
    """Whether the target's host key is recorded in the trust store."""

    present: bool
    appended: bool = False


@dataclass(frozen=True)
class RunOptions:
    """Immutable options for one invocation, built once from parsed input."""

    target: Target
    update_key: bool = False
    force_copy: bool = False
    password: Optional[str] = field(default=None, repr=False)
    key_name: str = "id_rsa"
    quiet: bool = False
    connect: bool = True
    ssh_dir: Path = field(default_factory=Config.ssh_dir)
    known_hosts_file: Path = field(default_factory=Config.known_hosts_file)

    def __post_init__(self):
        """Validate the key name before any stage runs."""
        KeyIdentity.for_name(self.key_name, self.ssh_dir)

    @property
    def identity(self) -> KeyIdentity:
        return KeyIdentity.for_name(self.key_name, self.ssh_dir)

    @property
    def has_credential(self) -> bool:
        return bool(self.password)


@dataclass
class ProvisioningOutcome:
    """What the pipeline did, returned to the caller before the session starts."""

    plan: ProvisioningPlan
    identity: KeyIdentity
    target: Target
    trust: Optional[TrustRecord] = None
    generated: bool = False
    transferred: bool = False
    session_command: list = field(default_factory=list)
