"""External command execution with typed results."""

import os
import subprocess
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence

from .logging import get_logger, mask_command


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    argv: tuple
    returncode: Optional[int]
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    not_found: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and not self.not_found

    @property
    def failure_reason(self) -> str:
        """Short description of why the command did not succeed."""
        if self.not_found:
            return f"{self.argv[0]} not found"
        if self.timed_out:
            return "timed out"
        detail = self.stderr.strip().splitlines()[-1] if self.stderr.strip() else ""
        reason = f"exit status {self.returncode}"
        return f"{reason}: {detail}" if detail else reason


class CommandRunner:
    """Runs external tools and reports the outcome as a CommandResult."""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize the runner with a default timeout in seconds."""
        self.timeout = timeout
        self.logger = get_logger(__name__)

    def run(self, argv: Sequence[str], input_text: Optional[str] = None,
            env: Optional[Mapping[str, str]] = None, timeout: Optional[float] = None,
            secrets: Sequence[str] = ()) -> CommandResult:
        """Run a command to completion, capturing its output."""
        argv = tuple(str(a) for a in argv)
        self.logger.debug(f"Running: {mask_command(argv, secrets)}")
        try:
            completed = subprocess.run(
                argv,
                input=input_text,
                capture_output=True,
                text=True,
                env=self._merge_env(env),
                timeout=timeout if timeout is not None else self.timeout,
            )
        except FileNotFoundError:
            return CommandResult(argv=argv, returncode=None, not_found=True)
        except subprocess.TimeoutExpired as e:
            return CommandResult(
                argv=argv,
                returncode=None,
                stdout=_text(e.stdout),
                stderr=_text(e.stderr),
                timed_out=True,
            )
        return CommandResult(
            argv=argv,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

    def run_interactive(self, argv: Sequence[str],
                        env: Optional[Mapping[str, str]] = None,
                        secrets: Sequence[str] = ()) -> CommandResult:
        """Run a command attached to the terminal, without a timeout."""
        argv = tuple(str(a) for a in argv)
        self.logger.debug(f"Running interactively: {mask_command(argv, secrets)}")
        try:
            completed = subprocess.run(argv, env=self._merge_env(env))
        except FileNotFoundError:
            return CommandResult(argv=argv, returncode=None, not_found=True)
        return CommandResult(argv=argv, returncode=completed.returncode)

    @staticmethod
    def _merge_env(env: Optional[Mapping[str, str]]):
        if not env:
            return None
        merged = dict(os.environ)
        merged.update(env)
        return merged


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
