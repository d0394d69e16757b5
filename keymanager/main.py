"""Main entry point for the SSH key manager."""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import Config
from .errors import InputError, KeyManagerError
from .logging import setup_logging
from .models import RunOptions, Target
from .provisioner import KeyProvisioner

__version__ = "1.0.0"


class KeyManagerMain:
    """Main application class for the key manager."""

    def __init__(self, quiet: bool = False):
        """Initialize the key manager application."""
        self.logger = setup_logging(quiet=quiet)

    def run(self, options: RunOptions) -> int:
        """Provision the target and connect; return the process exit status."""
        try:
            Config.validate()
        except ValueError as e:
            self.logger.error(f"Configuration error: {e}")
            return 1

        try:
            provisioner = KeyProvisioner.create(options)
            return provisioner.run()

        except KeyboardInterrupt:
            self.logger.info("Received keyboard interrupt")
            return 130
        except KeyManagerError as e:
            self.logger.error(f"Error: {e}")
            return e.exit_code
        except Exception as e:
            self.logger.exception(f"Unexpected error: {e}")
            return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(
        prog="keymanager",
        description="Manage SSH keys and connections to a remote server (IPv4/IPv6).",
    )
    parser.add_argument('server_ip', help='IP address of the target server (IPv4/IPv6)')
    parser.add_argument('-u', dest='update_key', action='store_true',
                        help='Regenerate the SSH key and copy it to the server')
    parser.add_argument('-p', dest='password', metavar='password',
                        help='Password of the remote user, used to copy the key with sshpass')
    parser.add_argument('-P', dest='port', metavar='port', type=int, default=Config.SSH_PORT,
                        help=f'SSH port of the target server (default: {Config.SSH_PORT})')
    parser.add_argument('-c', dest='force_copy', action='store_true',
                        help='Force copying the SSH key to the server')
    parser.add_argument('-n', dest='key_name', metavar='keyname', default=Config.KEY_NAME,
                        help=f'Filename of the SSH key (default: {Config.KEY_NAME})')
    parser.add_argument('-q', dest='quiet', action='store_true',
                        help='Quiet mode: suppress output for automation tools')
    parser.add_argument('--user', default=Config.SSH_USER,
                        help=f'Remote account (default: {Config.SSH_USER})')
    parser.add_argument('--ssh-dir', type=Path, default=None,
                        help=f'Key storage directory (default: {Config.SSH_DIR})')
    parser.add_argument('--no-connect', dest='connect', action='store_false',
                        help='Provision only, do not open an interactive session')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def build_options(args: argparse.Namespace) -> RunOptions:
    """Build the immutable run options from parsed arguments."""
    target = Target(host=args.server_ip, port=args.port, user=args.user)

    extra = {}
    if args.ssh_dir is not None:
        ssh_dir = args.ssh_dir.expanduser()
        extra = {"ssh_dir": ssh_dir, "known_hosts_file": ssh_dir / "known_hosts"}

    return RunOptions(
        target=target,
        update_key=args.update_key,
        force_copy=args.force_copy,
        password=args.password or None,
        key_name=args.key_name,
        quiet=args.quiet,
        connect=args.connect,
        **extra,
    )


def main(argv: Optional[List[str]] = None):
    """Main function with command line argument parsing."""
    parser = build_parser()
    args = parser.parse_args(argv)

    app = KeyManagerMain(quiet=args.quiet)

    try:
        options = build_options(args)
    except InputError as e:
        app.logger.error(f"Error: {e}")
        sys.exit(e.exit_code)

    sys.exit(app.run(options))


if __name__ == '__main__':
    main()
