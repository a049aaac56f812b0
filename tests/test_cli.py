# tests/test_cli.py
"""Tests for the filetoken command line."""

import json

import pytest

from filetoken import FileRegistry, file_signature
from filetoken.cli import main
from filetoken.server import RegistryServer

from conftest import ALICE, BOB, NAME, NAME2, SIGNATURE, SIGNATURE2


@pytest.fixture
def data_dir(temp_dir):
    return temp_dir / "data"


@pytest.fixture
def run(data_dir, capsys):
    """Run the CLI against a temp data dir; returns (exit code, stdout, stderr)."""
    def _run(*argv):
        code = main(["--data-dir", str(data_dir), *argv])
        captured = capsys.readouterr()
        return code, captured.out, captured.err
    return _run


class TestLocalCommands:
    """Commands against the local registry."""

    def test_hash(self, run, temp_dir):
        path = temp_dir / "report.txt"
        path.write_text("quarterly numbers")

        code, out, _ = run("hash", str(path))

        assert code == 0
        assert out.strip() == file_signature(path)

    def test_register_file(self, run, temp_dir, data_dir):
        """register hashes the file and stores it under the data dir."""
        path = temp_dir / "report.txt"
        path.write_text("quarterly numbers")

        code, out, _ = run("register", str(path), "--name", NAME, "--owner", ALICE)

        assert code == 0
        assert "as file 1" in out
        registry = FileRegistry(data_dir / "registry")
        assert registry.lookup_id_by_signature(file_signature(path)) == 1

    def test_register_signature_and_lookups(self, run):
        run("register", "--signature", SIGNATURE, "--name", NAME, "--owner", ALICE)
        run("register", "--signature", SIGNATURE2, "--name", NAME2, "--owner", BOB)

        assert run("id", SIGNATURE2)[1].strip() == "2"
        assert run("owner", "1")[1].strip() == ALICE
        assert run("owner-by-signature", SIGNATURE2)[1].strip() == BOB
        assert run("files", ALICE, "--json")[1].strip() == "[1]"
        assert run("files", "nobody", "--json")[1].strip() == "[]"

    def test_errors_exit_nonzero(self, run):
        """Registry errors print the message and exit 1."""
        code, _, err = run("register", "--signature", "too short", "--name", NAME, "--owner", ALICE)
        assert code == 1
        assert "The signature must be 64 characters long" in err

        run("register", "--signature", SIGNATURE, "--name", NAME, "--owner", ALICE)
        code, _, err = run("register", "--signature", SIGNATURE, "--name", NAME, "--owner", BOB)
        assert code == 1
        assert "The signature already exists" in err

        code, _, err = run("owner", "0")
        assert code == 1
        assert "Invalid file id" in err

        code, _, err = run("owner", "5")
        assert code == 1
        assert "There is no file with that id" in err

    def test_register_requires_owner(self, run):
        code, _, err = run("register", "--signature", SIGNATURE, "--name", NAME)

        assert code == 1
        assert "--owner" in err

    def test_events(self, run):
        run("register", "--signature", SIGNATURE, "--name", NAME, "--owner", ALICE)
        run("register", "--signature", SIGNATURE2, "--name", NAME2, "--owner", BOB)

        code, out, _ = run("events", "--after", "1")

        assert code == 0
        assert [json.loads(line) for line in out.splitlines()] == [
            {"id": 2, "name": NAME2, "signature": SIGNATURE2},
        ]

    def test_accounts(self, run):
        """Registering with --account records the account address."""
        code, out, _ = run("account", "create", "alice", "--display-name", "Alice")
        assert code == 0
        address = out.split("Address: ")[1].strip()

        assert address in run("account", "list")[1]

        run("register", "--signature", SIGNATURE, "--name", NAME, "--account", "alice")
        assert run("owner", "1")[1].strip() == address

    def test_unknown_account(self, run):
        code, _, err = run("register", "--signature", SIGNATURE, "--name", NAME, "--account", "ghost")

        assert code == 1
        assert "Unknown account" in err

    def test_invalid_config_file(self, run, temp_dir):
        config = temp_dir / "broken.yaml"
        config.write_text("port: [8545\n")

        code, _, err = run("--config", str(config), "files", ALICE)

        assert code == 1
        assert "Invalid config file" in err

    def test_invalid_setting_from_environment(self, run, temp_dir, monkeypatch):
        path = temp_dir / "report.txt"
        path.write_text("quarterly numbers")
        monkeypatch.setenv("FILETOKEN_HASH_ALGORITHM", "md5")

        code, out, err = run("hash", str(path))

        assert code == 1
        assert out == ""
        assert "Unsupported hash_algorithm" in err

    def test_no_command(self, run):
        assert run()[0] == 1


class TestRemoteCommands:
    """Commands against a running server via --server."""

    @pytest.fixture
    def server(self):
        server = RegistryServer(FileRegistry(), port=0)
        server.start_background()
        yield server
        server.shutdown()

    def test_register_and_lookup(self, run, server):
        code, _, _ = run("--server", server.url, "register", "--signature", SIGNATURE,
                         "--name", NAME, "--owner", ALICE)
        assert code == 0

        assert run("--server", server.url, "id", SIGNATURE)[1].strip() == "1"
        assert run("--server", server.url, "owner", "1")[1].strip() == ALICE
        assert json.loads(run("--server", server.url, "events")[1]) == {
            "id": 1, "name": NAME, "signature": SIGNATURE,
        }

    def test_remote_error(self, run, server):
        code, _, err = run("--server", server.url, "id", SIGNATURE)

        assert code == 1
        assert "There is no file with that signature" in err
