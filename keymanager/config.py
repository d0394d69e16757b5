"""Configuration module for the SSH key manager."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _timeout(value: str) -> Optional[float]:
    """Convert a timeout setting to seconds, treating 0 as no timeout."""
    seconds = float(value)
    return seconds if seconds > 0 else None


class Config:
    """Configuration class for the SSH key manager."""

    # Remote account used for key copy and the interactive session
    SSH_USER = os.getenv("KEYMANAGER_SSH_USER", "root")
    SSH_PORT = 22

    # Local key storage and trust store
    SSH_DIR = os.path.expanduser(os.getenv("KEYMANAGER_SSH_DIR", "~/.ssh"))
    KNOWN_HOSTS_FILE = os.path.expanduser(
        os.getenv("KEYMANAGER_KNOWN_HOSTS", os.path.join(SSH_DIR, "known_hosts"))
    )

    # Key generation
    KEY_NAME = os.getenv("KEYMANAGER_KEY_NAME", "id_rsa")
    KEY_TYPE = os.getenv("KEYMANAGER_KEY_TYPE", "rsa")
    KEY_BITS = int(os.getenv("KEYMANAGER_KEY_BITS", "4096"))
    KEY_BACKEND = os.getenv("KEYMANAGER_KEY_BACKEND", "ssh-keygen")

    # External command timeouts (seconds, 0 disables)
    COMMAND_TIMEOUT = _timeout(os.getenv("KEYMANAGER_COMMAND_TIMEOUT", "0"))
    KEYSCAN_TIMEOUT = int(os.getenv("KEYMANAGER_KEYSCAN_TIMEOUT", "5"))

    # Logging configuration
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE", "")

    KEY_TYPES = ("rsa", "ecdsa", "ed25519")
    KEY_BACKENDS = ("ssh-keygen", "paramiko")
    PARAMIKO_KEY_TYPES = ("rsa", "ecdsa")

    @classmethod
    def validate(cls):
        """Validate the configuration."""
        if cls.KEY_TYPE not in cls.KEY_TYPES:
            raise ValueError(f"Unsupported key type: {cls.KEY_TYPE}")

        if cls.KEY_BACKEND not in cls.KEY_BACKENDS:
            raise ValueError(f"Unsupported key backend: {cls.KEY_BACKEND}")

        if cls.KEY_TYPE == "rsa" and cls.KEY_BITS < 2048:
            raise ValueError("RSA keys must be at least 2048 bits")

        if cls.KEY_TYPE == "ecdsa" and cls.KEY_BITS not in (256, 384, 521):
            raise ValueError("ECDSA keys must be 256, 384 or 521 bits")

        if cls.KEY_BACKEND == "paramiko" and cls.KEY_TYPE not in cls.PARAMIKO_KEY_TYPES:
            raise ValueError(f"paramiko cannot generate {cls.KEY_TYPE} keys")

        if cls.KEYSCAN_TIMEOUT < 1:
            raise ValueError("Invalid keyscan timeout")

        if not cls.SSH_USER:
            raise ValueError("SSH user is required")

    @classmethod
    def ssh_dir(cls) -> Path:
        """Return the key storage directory as a path."""
        return Path(cls.SSH_DIR)

    @classmethod
    def known_hosts_file(cls) -> Path:
        """Return the trust store path."""
        return Path(cls.KNOWN_HOSTS_FILE)
