"""Unit tests for the restore command."""

import json
import shutil
from pathlib import Path
from unittest.mock import patch

from tidyctl.cli.main import app
from tidyctl.utils.shell import CommandResult
from typer.testing import CliRunner

runner = CliRunner()


def delete(path: Path, name: str) -> str:
    """Delete one path and return the new transaction ID."""
    result = runner.invoke(app, ["delete", str(path), "-n", name, "-y"])
    assert result.exit_code == 0
    history = json.loads(runner.invoke(app, ["history", "-f", "json"]).stdout)
    return str(history[0]["id"])


class TestRestoreCommand:
    """Tests for tidyctl restore."""

    def test_empty_history(self) -> None:
        result = runner.invoke(app, ["restore", "-y"])

        assert result.exit_code == 0
        assert "No delete history." in result.stdout

    def test_restores_most_recent(self, sample_tree: Path) -> None:
        delete(sample_tree / "a.txt", "First")
        delete(sample_tree / "sub", "Second")

        result = runner.invoke(app, ["restore", "-y"])

        assert result.exit_code == 0
        assert "Restored 1 path(s) from 1 transaction(s)." in result.stdout
        assert (sample_tree / "sub" / "c.log").exists()
        assert not (sample_tree / "a.txt").exists()

    def test_restores_selected_transactions(self, sample_tree: Path) -> None:
        first = delete(sample_tree / "a.txt", "First")
        second = delete(sample_tree / "sub", "Second")

        result = runner.invoke(app, ["restore", first[:6], second, first, "-y"])

        assert result.exit_code == 0
        assert (sample_tree / "a.txt").exists()
        assert (sample_tree / "sub" / "b.txt").exists()
        assert "No delete history." in runner.invoke(app, ["history"]).stdout

    def test_dry_run(self, sample_tree: Path) -> None:
        delete(sample_tree / "a.txt", "First")

        result = runner.invoke(app, ["restore", "--dry-run"])

        assert result.exit_code == 0
        assert "Dry run, no changes made." in result.stdout
        assert not (sample_tree / "a.txt").exists()

    def test_confirmation_declined(self, sample_tree: Path) -> None:
        delete(sample_tree / "a.txt", "First")

        result = runner.invoke(app, ["restore"], input="n\n")

        assert result.exit_code == 0
        assert "Cancelled." in result.stdout
        assert not (sample_tree / "a.txt").exists()

    def test_occupied_destination(self, sample_tree: Path) -> None:
        delete(sample_tree / "a.txt", "First")
        (sample_tree / "a.txt").write_text("new")

        result = runner.invoke(app, ["restore", "-y"])

        assert result.exit_code == 1
        assert "Restore aborted" in result.output
        assert (sample_tree / "a.txt").read_text() == "new"

    def test_unknown_transaction(self, sample_tree: Path) -> None:
        delete(sample_tree / "a.txt", "First")

        result = runner.invoke(app, ["restore", "not-an-id", "-y"])

        assert result.exit_code == 1
        assert not (sample_tree / "a.txt").exists()


def fake_sudo_mv(args: list[str], **_: object) -> CommandResult:
    """Stand-in for run_elevated that performs the ``mv -T -- src dst``."""
    shutil.move(args[3], args[4])
    return CommandResult(stdout="", stderr="", returncode=0)


class TestPrivilegedRestore:
    """Tests for restoring entries that need sudo."""

    def test_sudo_delete_is_restored_with_sudo(self, sample_tree: Path) -> None:
        with patch("tidyctl.trash.gateway.run_elevated", side_effect=fake_sudo_mv) as mock_run:
            deleted = runner.invoke(app, ["delete", str(sample_tree / "a.txt"), "--sudo", "-y"])
            assert deleted.exit_code == 0

            result = runner.invoke(app, ["restore", "-y"])

        assert result.exit_code == 0
        assert (sample_tree / "a.txt").read_bytes() == b"a" * 10
        assert mock_run.call_count == 2
        assert mock_run.call_args.args[0][-1] == str(sample_tree / "a.txt")

    def test_sudo_flag_forces_elevated_restore(self, sample_tree: Path) -> None:
        delete(sample_tree / "a.txt", "Plain")

        with patch("tidyctl.trash.gateway.run_elevated", side_effect=fake_sudo_mv) as mock_run:
            result = runner.invoke(app, ["restore", "--sudo", "-y"])

        assert result.exit_code == 0
        assert (sample_tree / "a.txt").exists()
        mock_run.assert_called_once()

    def test_plain_delete_restores_without_sudo(self, sample_tree: Path) -> None:
        delete(sample_tree / "a.txt", "Plain")

        with patch("tidyctl.trash.gateway.run_elevated") as mock_run:
            result = runner.invoke(app, ["restore", "-y"])

        assert result.exit_code == 0
        mock_run.assert_not_called()
