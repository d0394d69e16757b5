"""Logging configuration for the SSH key manager."""

import logging
import logging.handlers
import sys
from typing import Optional, Sequence

from .config import Config

LOGGER_NAME = "keymanager"


class KeyManagerLogger:
    """Custom logger for the SSH key manager."""

    def __init__(self, name: str = LOGGER_NAME, log_file: Optional[str] = None,
                 quiet: bool = False):
        """Initialize the key manager logger."""
        self.logger = logging.getLogger(name)
        self.log_file = log_file if log_file is not None else Config.LOG_FILE
        self.log_level = getattr(logging, Config.LOG_LEVEL.upper(), logging.INFO)
        self.quiet = quiet

        self._setup_logger()

    def _setup_logger(self):
        """Setup logger with console and file handlers."""
        # Clear existing handlers
        for handler in self.logger.handlers:
            handler.close()
        self.logger.handlers.clear()
        self.logger.propagate = False

        if self.quiet:
            # Failures are still reported through the exit status
            self.logger.setLevel(logging.CRITICAL + 1)
            self.logger.addHandler(logging.NullHandler())
            return

        self.logger.setLevel(self.log_level)

        formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if not self.log_file:
            return

        # File handler with rotation
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                self.log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5
            )
            file_handler.setLevel(self.log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)
        except OSError as e:
            self.logger.warning(f"Could not setup file logging: {e}")

    def get_logger(self) -> logging.Logger:
        """Get the configured logger."""
        return self.logger


def setup_logging(quiet: bool = False, log_file: Optional[str] = None) -> logging.Logger:
    """Setup logging for the key manager."""
    return KeyManagerLogger(log_file=log_file, quiet=quiet).get_logger()


def get_logger(module: str) -> logging.Logger:
    """Return a child of the key manager logger for a module."""
    return logging.getLogger(f"{LOGGER_NAME}.{module.rsplit('.', 1)[-1]}")


def mask_command(argv: Sequence[str], secrets: Sequence[str] = ()) -> str:
    """Render a command line for logs with any secret values hidden."""
    hidden = {s for s in secrets if s}
    return " ".join("****" if part in hidden else part for part in argv)


def log_plan(logger: logging.Logger, key_name: str, target: str,
             must_generate: bool, must_copy: bool):
    """Log the provisioning decision."""
    logger.info(
        f"Provisioning plan - Key: {key_name}, Target: {target}, "
        f"Generate: {must_generate}, Copy: {must_copy}"
    )


def log_command_failure(logger: logging.Logger, command: str, returncode: Optional[int],
                        stderr: str = ""):
    """Log a failed external command."""
    detail = stderr.strip().splitlines()[-1] if stderr.strip() else "no output"
    logger.error(f"Command FAILED - {command} (exit {returncode}): {detail}")


def log_transfer(logger: logging.Logger, key_name: str, destination: str, port: int,
                 with_password: bool):
    """Log a key copy attempt."""
    method = "password" if with_password else "existing trust"
    logger.info(
        f"Copying key {key_name} to {destination} on port {port} "
        f"(auth: {method})"
    )
