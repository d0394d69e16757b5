"""Known-hosts trust reconciliation."""

import os
from pathlib import Path
from typing import Optional

import paramiko

from .config import Config
from .errors import TransferError
from .logging import get_logger
from .models import Target, TrustRecord
from .runner import CommandRunner


class TrustStore:
    """
    Append-only view of an OpenSSH known_hosts file.

    Entries are never rewritten or removed. There is no locking, so two
    invocations racing on the same file may both append the same host.
    """

    def __init__(self, path: Path, runner: CommandRunner, scan_timeout: Optional[int] = None):
        """Initialize the trust store for a known_hosts path."""
        self.path = Path(path)
        self.runner = runner
        self.scan_timeout = scan_timeout if scan_timeout is not None else Config.KEYSCAN_TIMEOUT
        self.logger = get_logger(__name__)

    def _load(self) -> paramiko.HostKeys:
        host_keys = paramiko.HostKeys()
        if self.path.is_file():
            try:
                host_keys.load(str(self.path))
            except (OSError, UnicodeDecodeError, paramiko.SSHException) as e:
                self.logger.warning(f"Could not parse {self.path}: {e}")
        return host_keys

    def is_trusted(self, target: Target) -> bool:
        """Check whether the target's host key is already recorded."""
        if not self.path.is_file():
            return False

        # OpenSSH records non-default ports as [host]:port, so a port-22
        # entry says nothing about another port
        name = target.known_hosts_name

        # HostKeys matches hashed (|1|...) entries as well as plain ones
        if self._load().lookup(name) is not None:
            return True

        # Plain text fallback for entries paramiko cannot parse
        try:
            content = self.path.read_text(errors="replace")
        except OSError as e:
            self.logger.warning(f"Could not read {self.path}: {e}")
            return False
        for line in content.splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if name in line.split(None, 1)[0].split(","):
                return True
        return False

    def scan_command(self, target: Target) -> list:
        """Build the ssh-keyscan invocation; all key types are requested."""
        return [
            "ssh-keyscan", "-H",
            "-p", str(target.port),
            "-T", str(self.scan_timeout),
            target.host,
        ]

    def ensure_trusted(self, target: Target) -> TrustRecord:
        """Record the target's host keys unless they are already trusted."""
        if self.is_trusted(target):
            self.logger.info(f"Host {target.known_hosts_name} already in {self.path}")
            return TrustRecord(present=True)

        self.logger.info(f"Fetching host keys for {target.host} on port {target.port}...")
        result = self.runner.run(self.scan_command(target))
        entries = [
            line for line in result.stdout.splitlines()
            if line.strip() and not line.startswith("#")
        ]
        if not result.ok or not entries:
            reason = result.failure_reason if not result.ok else "no host keys returned"
            raise TransferError(f"Could not fetch host keys for {target.host}: {reason}")

        self._append(entries)
        self.logger.info(f"Recorded {len(entries)} host key(s) for {target.known_hosts_name}")
        return TrustRecord(present=True, appended=True)

    def _append(self, entries):
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o600)
            with os.fdopen(fd, "a") as f:
                for entry in entries:
                    f.write(entry.rstrip("\n") + "\n")
        except OSError as e:
            raise TransferError(f"Could not update {self.path}: {e}") from e
