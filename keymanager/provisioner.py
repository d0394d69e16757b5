"""Provisioning pipeline: tools, key, trust, transfer, session."""

from typing import Optional

from .config import Config
from .gate import REQUIRED_COMMANDS, CommandGate
from .installer import PackageManagerInstaller
from .keys import KeyGenerator, create_generator, decide, key_comment
from .logging import get_logger, log_plan
from .models import ProvisioningOutcome, RunOptions, TrustRecord
from .runner import CommandRunner
from .session import SessionLauncher
from .transfer import KeyTransfer
from .trust import TrustStore


class KeyProvisioner:
    """Runs the provisioning stages for one target, in order."""

    def __init__(self, options: RunOptions, gate: CommandGate, generator: KeyGenerator,
                 trust_store: TrustStore, transfer: KeyTransfer,
                 session: Optional[SessionLauncher] = None):
        """Initialize the provisioner with its collaborators."""
        self.options = options
        self.gate = gate
        self.generator = generator
        self.trust_store = trust_store
        self.transfer = transfer
        self.session = session
        self.logger = get_logger(__name__)

    @classmethod
    def create(cls, options: RunOptions, runner: Optional[CommandRunner] = None) -> "KeyProvisioner":
        """Wire the real collaborators for an invocation."""
        runner = runner or CommandRunner(timeout=Config.COMMAND_TIMEOUT)
        gate = CommandGate(PackageManagerInstaller(runner))
        trust_store = TrustStore(options.known_hosts_file, runner)
        return cls(
            options=options,
            gate=gate,
            generator=create_generator(runner),
            trust_store=trust_store,
            transfer=KeyTransfer(runner, gate, trust_store),
            session=SessionLauncher(runner),
        )

    def provision(self) -> ProvisioningOutcome:
        """Ensure tools, key pair and remote authorization; do not connect."""
        options = self.options
        target = options.target
        identity = options.identity

        self.gate.ensure(REQUIRED_COMMANDS)

        plan = decide(identity.exists, options.update_key, options.force_copy)
        log_plan(self.logger, identity.name, target.host, plan.must_generate, plan.must_copy)
        outcome = ProvisioningOutcome(plan=plan, identity=identity, target=target)

        if plan.must_generate:
            if identity.exists:
                self.logger.info(f"Update requested, replacing key {identity.name}")
            else:
                self.logger.info(f"SSH key {identity.name} not found")
            self.generator.generate(identity, key_comment(target.user))
            outcome.generated = True
        elif plan.must_copy:
            self.logger.info(f"Copy requested for key {identity.name} to {target.host}")

        trusted = self.trust_store.is_trusted(target)
        outcome.trust = TrustRecord(present=trusted)

        if trusted and not plan.must_copy:
            self.logger.info(f"{target.host} is already trusted, skipping key copy")
        elif plan.must_copy:
            credential = options.password if options.has_credential else None
            outcome.trust = self.transfer.copy(identity, target, credential)
            outcome.transferred = True
        else:
            self.logger.info(f"No key copy required for {target.host}")

        if self.session is not None:
            outcome.session_command = self.session.build_command(identity, target)
        return outcome

    def run(self) -> int:
        """Provision, then open the interactive session unless disabled."""
        self.provision()

        if not self.options.connect or self.session is None:
            self.logger.info("Provisioning complete")
            return 0

        return self.session.launch(self.options.identity, self.options.target)
