"""Tests for best-effort shell commands."""

import subprocess
from unittest.mock import patch

from src.baker.shell import ShellRunner


class TestShellRunner:
    @patch("src.baker.shell.subprocess.run")
    def test_success(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "status"], returncode=0, stdout="clean", stderr="",
        )
        runner = ShellRunner()
        result = runner.run(["git", "status"], cwd="/tmp")

        assert result.ok
        assert result.stdout == "clean"
        mock_run.assert_called_once_with(
            ["git", "status"], cwd="/tmp", capture_output=True, text=True, check=False,
        )
        assert runner.history == [result]

    @patch("src.baker.shell.subprocess.run")
    def test_failure_is_not_raised(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "commit"], returncode=1, stdout="", stderr="nothing to commit",
        )
        result = ShellRunner().run(["git", "commit"])
        assert not result.ok
        assert result.stderr == "nothing to commit"

    @patch("src.baker.shell.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_executable(self, mock_run):
        result = ShellRunner().run(["rsync", "-havz"])
        assert result.returncode == 127
        assert not result.ok

    @patch("src.baker.shell.subprocess.run")
    def test_dry_run(self, mock_run):
        result = ShellRunner(dry_run=True).run(["rsync", "a", "b"])
        assert result.ok
        assert result.skipped
        mock_run.assert_not_called()

    @patch("src.baker.shell.subprocess.run")
    def test_dry_run_recorded_in_history(self, mock_run):
        runner = ShellRunner(dry_run=True)
        runner.run(["git", "add", "-A", "."])
        runner.run(["git", "push", "origin", "master"])
        assert [r.args for r in runner.history] == [
            ["git", "add", "-A", "."],
            ["git", "push", "origin", "master"],
        ]
        assert all(r.skipped and r.returncode == 0 for r in runner.history)
        mock_run.assert_not_called()

    @patch("src.baker.shell.subprocess.run")
    def test_args_stringified(self, mock_run, tmp_path):
        mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0)
        ShellRunner().run(["rsync", tmp_path / "src"])
        assert mock_run.call_args[0][0] == ["rsync", str(tmp_path / "src")]
