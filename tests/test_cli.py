"""Tests for the dentaldesk CLI."""

import json

import pytest
from click.testing import CliRunner

from dentaldesk.cli import cli
from dentaldesk.storage import USER_KEY, JsonFileKeyValueStore


@pytest.fixture
def storage(tmp_path):
    return tmp_path / "storage.json"


def invoke(storage, *args, input=None):
    runner = CliRunner()
    return runner.invoke(
        cli, ["--storage", str(storage), "--fast", *args], input=input
    )


class TestCli:
    def test_seed_then_stats(self, storage):
        result = invoke(storage, "seed")
        assert result.exit_code == 0, result.output
        assert "5 patients, 5 incidents" in result.output

        result = invoke(storage, "stats")
        assert result.exit_code == 0, result.output
        assert "Patients:          5" in result.output
        assert "Revenue:           $200.00" in result.output

    def test_stats_is_default_command(self, storage):
        result = CliRunner().invoke(
            cli,
            [],
            env={"DENTALDESK_STORAGE_PATH": str(storage), "DENTALDESK_FAST": "1"},
        )
        assert result.exit_code == 0, result.output
        assert "Patients:          0" in result.output

    def test_login_and_logout(self, storage):
        result = invoke(storage, "login", "admin@entnt.in", "--password", "admin123")
        assert result.exit_code == 0, result.output
        assert "Signed in as admin@entnt.in (Admin)" in result.output
        assert JsonFileKeyValueStore(storage).get_item(USER_KEY) is not None

        result = invoke(storage, "logout")
        assert result.exit_code == 0
        assert JsonFileKeyValueStore(storage).get_item(USER_KEY) is None

    def test_login_prompts_for_password(self, storage):
        result = invoke(storage, "login", "jane@entnt.in", input="patient123\n")
        assert result.exit_code == 0, result.output
        assert "(Patient)" in result.output

    def test_bad_login(self, storage):
        result = invoke(storage, "login", "admin@entnt.in", "--password", "nope")
        assert result.exit_code == 1
        assert "Invalid email or password" in result.output

    def test_export(self, storage, tmp_path):
        invoke(storage, "seed")
        target = tmp_path / "backup.json"

        result = invoke(storage, "export", "--output", str(target))

        assert result.exit_code == 0, result.output
        data = json.loads(target.read_text())
        assert len(data["patients"]) == 5
        assert data["version"] == "1.0"

    def test_history(self, storage):
        invoke(storage, "seed")
        result = invoke(storage, "history")
        assert result.exit_code == 0, result.output
        assert "READ   patients" in result.output
        assert "READ   incidents" in result.output

    def test_corrupt_storage_is_reported(self, storage):
        storage.write_text("{not json")
        result = invoke(storage, "stats")
        assert result.exit_code == 1
        assert "not valid JSON" in result.output

    def test_clear_requires_confirmation(self, storage):
        invoke(storage, "seed")

        result = invoke(storage, "clear", input="n\n")
        assert result.exit_code == 1
        assert JsonFileKeyValueStore(storage).keys() != []

        result = invoke(storage, "clear", "--yes")
        assert result.exit_code == 0
        assert JsonFileKeyValueStore(storage).keys() == []
