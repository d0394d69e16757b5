import pytest

from keymanager import main as cli
from keymanager.errors import TransferError


class StubProvisioner:
    def __init__(self, options, status=0, error=None):
        self.options = options
        self.status = status
        self.error = error

    def run(self):
        if self.error is not None:
            raise self.error
        return self.status


@pytest.fixture
def created(monkeypatch):
    """Capture the options the CLI builds instead of provisioning."""
    seen = {}

    def install(status=0, error=None):
        def create(options, runner=None):
            seen["options"] = options
            return StubProvisioner(options, status, error)
        monkeypatch.setattr(cli.KeyProvisioner, "create", staticmethod(create))
        return seen

    return install


def run_main(argv):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)
    return excinfo.value.code


def test_help_exits_zero(capsys):
    assert run_main(["-h"]) == 0
    assert "server_ip" in capsys.readouterr().out


def test_unknown_flag_exits_non_zero(capsys, created):
    seen = created()
    assert run_main(["192.168.1.100", "-x"]) != 0
    assert "unrecognized arguments" in capsys.readouterr().err
    assert seen == {}


def test_invalid_target_is_rejected_before_provisioning(capsys, created):
    seen = created()
    assert run_main(["not-an-ip"]) == 2
    assert "not-an-ip" in capsys.readouterr().out
    assert seen == {}


def test_invalid_port(created):
    seen = created()
    assert run_main(["192.168.1.100", "-P", "70000"]) == 2
    assert seen == {}


def test_ipv6_target_accepted_at_entry(created, tmp_path):
    seen = created()
    assert run_main(["2001:db8::1", "-P", "2222", "--ssh-dir", str(tmp_path)]) == 0
    options = seen["options"]
    assert options.target.connection_string == "root@[2001:db8::1]"
    assert options.target.port == 2222
    assert options.known_hosts_file == tmp_path / "known_hosts"


def test_flags_are_mapped_to_options(created, tmp_path):
    seen = created()
    code = run_main([
        "192.168.1.100", "-u", "-c", "-p", "secret123", "-n", "deploy_key",
        "--user", "admin", "--no-connect", "--ssh-dir", str(tmp_path),
    ])
    assert code == 0
    options = seen["options"]
    assert options.update_key and options.force_copy
    assert options.password == "secret123"
    assert options.key_name == "deploy_key"
    assert options.identity.private_key_path == tmp_path / "deploy_key"
    assert options.target.user == "admin"
    assert not options.connect


def test_defaults(created, tmp_path):
    seen = created()
    run_main(["192.168.1.100", "--ssh-dir", str(tmp_path)])
    options = seen["options"]
    assert options.target.port == 22
    assert options.key_name == "id_rsa"
    assert options.password is None
    assert not options.update_key and not options.force_copy
    assert options.connect


def test_error_exit_codes(created, capsys):
    created(error=TransferError("Permission denied"))
    assert run_main(["192.168.1.100"]) == TransferError.exit_code
    assert "Permission denied" in capsys.readouterr().out


def test_quiet_mode_still_signals_failure(created, capsys):
    created(error=TransferError("Permission denied"))
    assert run_main(["192.168.1.100", "-q"]) == TransferError.exit_code
    assert capsys.readouterr().out == ""


def test_quiet_invalid_target(capsys):
    assert run_main(["not-an-ip", "-q"]) == 2
    assert capsys.readouterr().out == ""


def test_session_status_is_exit_status(created):
    created(status=3)
    assert run_main(["192.168.1.100"]) == 3


def test_keyboard_interrupt(created):
    created(error=KeyboardInterrupt())
    assert run_main(["192.168.1.100"]) == 130
