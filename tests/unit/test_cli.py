"""Unit tests for the boardsync CLI."""

from pathlib import Path
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from boardsync.cli import SetupError, build_tracker, load_settings, main, select_project
from boardsync.config import BoardSyncConfig
from boardsync.tracker import GhCliTransport, HttpTransport, ProjectSelector


@pytest.fixture(autouse=True)
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run in an empty directory so no boardsync.yaml is picked up and logs stay local."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    monkeypatch.delenv("BOARDSYNC_LOG_DIR", raising=False)
    monkeypatch.delenv("BOARDSYNC_LOG_LEVEL", raising=False)
    return work


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _args(kanban_csv: Path, assignees_csv: Path, *extra: str) -> list[str]:
    return ["run", "owner/repo", str(kanban_csv), str(assignees_csv), *extra]


@pytest.mark.unit
class TestRunCommand:
    """Tests for the run command."""

    def test_all_linked_exits_zero(
        self, runner: CliRunner, fake_gateway, kanban_csv: Path, assignees_csv: Path
    ) -> None:
        with patch("boardsync.cli.build_tracker", return_value=fake_gateway):
            result = runner.invoke(
                main, _args(kanban_csv, assignees_csv, "--project-title", "Kanban - v1")
            )

        assert result.exit_code == 0, result.output
        assert "[linked] row 1: Fix login bug -> https://github.com/owner/repo/issues/1" in (
            result.output
        )
        assert "3 record(s): 3 created, 3 linked" in result.output
        assert [p.assignee for p in fake_gateway.created] == ["alice-gh", "bob-gh", ""]
        assert fake_gateway.closed

    def test_record_failure_exits_nonzero(
        self,
        runner: CliRunner,
        fake_gateway,
        create_failure,
        kanban_csv: Path,
        assignees_csv: Path,
    ) -> None:
        fake_gateway.create_errors["Add dark mode"] = [create_failure]

        with patch("boardsync.cli.build_tracker", return_value=fake_gateway):
            result = runner.invoke(
                main, _args(kanban_csv, assignees_csv, "--project-title", "Kanban - v1")
            )

        assert result.exit_code == 1
        assert "[create_failed] row 2: Add dark mode" in result.output
        assert "[linked] row 3: Write docs" in result.output

    def test_project_not_found_aborts(
        self, runner: CliRunner, fake_gateway, kanban_csv: Path, assignees_csv: Path
    ) -> None:
        with patch("boardsync.cli.build_tracker", return_value=fake_gateway):
            result = runner.invoke(
                main, _args(kanban_csv, assignees_csv, "--project-title", "Nope")
            )

        assert result.exit_code == 1
        assert "Project error" in result.output
        assert fake_gateway.created == []
        assert fake_gateway.closed

    def test_project_id_skips_lookup(
        self, runner: CliRunner, fake_gateway, kanban_csv: Path, assignees_csv: Path
    ) -> None:
        with patch("boardsync.cli.build_tracker", return_value=fake_gateway):
            result = runner.invoke(
                main, _args(kanban_csv, assignees_csv, "--project-id", "PVT_direct")
            )

        assert result.exit_code == 0, result.output
        assert {project for project, _ in fake_gateway.linked} == {"PVT_direct"}

    def test_malformed_input_aborts_before_tracker(
        self, runner: CliRunner, tmp_path: Path, assignees_csv: Path
    ) -> None:
        empty = tmp_path / "empty.csv"
        empty.write_text("")

        with patch("boardsync.cli.build_tracker") as mock_build:
            result = runner.invoke(
                main, _args(empty, assignees_csv, "--project-title", "Kanban - v1")
            )

        assert result.exit_code == 1
        assert "Input error" in result.output
        mock_build.assert_not_called()

    def test_missing_kanban_file(
        self, runner: CliRunner, tmp_path: Path, assignees_csv: Path
    ) -> None:
        result = runner.invoke(
            main, _args(tmp_path / "missing.csv", assignees_csv, "--project-id", "PVT_1")
        )

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_project_selector_required(
        self, runner: CliRunner, kanban_csv: Path, assignees_csv: Path
    ) -> None:
        result = runner.invoke(main, _args(kanban_csv, assignees_csv))

        assert result.exit_code == 2
        assert "--project-title" in result.output

    def test_bad_repo(self, runner: CliRunner, kanban_csv: Path, assignees_csv: Path) -> None:
        result = runner.invoke(
            main, ["run", "just-a-name", str(kanban_csv), str(assignees_csv), "--project-id", "x"]
        )

        assert result.exit_code == 2
        assert "owner/name" in result.output

    def test_dry_run_makes_no_tracker_calls(
        self, runner: CliRunner, kanban_csv: Path, assignees_csv: Path
    ) -> None:
        with patch("boardsync.cli.build_tracker") as mock_build:
            result = runner.invoke(main, _args(kanban_csv, assignees_csv, "--dry-run"))

        assert result.exit_code == 0, result.output
        assert "--- row 1: Fix login bug" in result.output
        assert "labels: bug, urgent" in result.output
        assert "assignee: alice-gh" in result.output
        assert "Description:\nLogin fails on Safari" in result.output
        mock_build.assert_not_called()

    def test_missing_token(
        self,
        runner: CliRunner,
        monkeypatch: pytest.MonkeyPatch,
        kanban_csv: Path,
        assignees_csv: Path,
    ) -> None:
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("GH_TOKEN", raising=False)

        result = runner.invoke(main, _args(kanban_csv, assignees_csv, "--project-id", "PVT_1"))

        assert result.exit_code == 1
        assert "GITHUB_TOKEN" in result.output

    def test_invalid_config(
        self, runner: CliRunner, workdir: Path, kanban_csv: Path, assignees_csv: Path
    ) -> None:
        (workdir / "boardsync.yaml").write_text("backend: svn\n")

        result = runner.invoke(main, _args(kanban_csv, assignees_csv, "--project-id", "PVT_1"))

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_invalid_logging_config(
        self, runner: CliRunner, workdir: Path, kanban_csv: Path, assignees_csv: Path
    ) -> None:
        (workdir / "boardsync.yaml").write_text("logging:\n  level: 10\n")

        result = runner.invoke(main, _args(kanban_csv, assignees_csv, "--project-id", "PVT_1"))

        assert result.exit_code == 1
        assert "logging.level" in result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)

    def test_writes_log_file(
        self,
        runner: CliRunner,
        fake_gateway,
        workdir: Path,
        kanban_csv: Path,
        assignees_csv: Path,
    ) -> None:
        with patch("boardsync.cli.build_tracker", return_value=fake_gateway):
            runner.invoke(main, _args(kanban_csv, assignees_csv, "--project-id", "PVT_1"))

        content = (workdir / "logs" / "boardsync.log").read_text()
        assert "Added to project: Fix login bug" in content


@pytest.mark.unit
class TestHelpers:
    """Tests for CLI helper functions."""

    def test_select_project_by_title(self) -> None:
        assert select_project(None, "Kanban - v1", None) == ProjectSelector(title="Kanban - v1")

    def test_select_project_generic_option(self) -> None:
        assert select_project(None, None, "PVT_1") == ProjectSelector(project_id="PVT_1")

    def test_select_project_rejects_two(self) -> None:
        with pytest.raises(click.UsageError):
            select_project("PVT_1", "Kanban - v1", None)

    def test_load_settings_overrides(self, workdir: Path) -> None:
        (workdir / "boardsync.yaml").write_text("backend: api\ntimeout: 10\nmax_retries: 1\n")

        config = load_settings(None, backend="gh", timeout=3.0, max_retries=0)

        assert config.backend == "gh"
        assert config.timeout == 3.0
        assert config.max_retries == 0

    def test_build_tracker_api(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_TOKEN", "secret")

        tracker = build_tracker("owner/repo", BoardSyncConfig(timeout=9.0))

        assert isinstance(tracker.transport, HttpTransport)
        assert tracker.transport.token == "secret"
        assert tracker.transport.timeout == 9.0

    def test_build_tracker_gh(self) -> None:
        with patch.object(GhCliTransport, "check_available", return_value=True):
            tracker = build_tracker("owner/repo", BoardSyncConfig(backend="gh"))

        assert isinstance(tracker.transport, GhCliTransport)

    def test_build_tracker_gh_missing(self) -> None:
        with patch.object(GhCliTransport, "check_available", return_value=False):
            with pytest.raises(SetupError, match="gh CLI not found"):
                build_tracker("owner/repo", BoardSyncConfig(backend="gh"))
