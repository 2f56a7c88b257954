"""CLI tests: every command runs in-process against a temporary planner file."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import click
import pytest
from click.testing import CliRunner

from dayclock.cli import _parse_date, _parse_now, main
from dayclock.tasks.io import load_planner, save_planner

from conftest import DAY, DAY_ISO


@pytest.fixture
def cli_runner():
    """Click CliRunner for invoking the CLI in-process."""
    return CliRunner()


@pytest.fixture
def planner_file(tmp_path: Path, planner) -> Path:
    path = tmp_path / "planner.json"
    save_planner(path, planner)
    return path


def _invoke(runner, path, *args):
    return runner.invoke(main, ["--store", str(path), *args])


# ── Main entry and help ────────────────────────────────────────────────


class TestCliHelpAndVersion:
    def test_help_long(self, cli_runner):
        r = cli_runner.invoke(main, ["--help"])
        assert r.exit_code == 0
        assert "24-hour dial" in r.output

    def test_help_short(self, cli_runner):
        r = cli_runner.invoke(main, ["-h"])
        assert r.exit_code == 0

    def test_version(self, cli_runner):
        r = cli_runner.invoke(main, ["--version"])
        assert r.exit_code == 0
        assert "dayclock" in r.output.lower()

    @pytest.mark.parametrize("cmd", ["day", "show", "dial", "move", "check", "done", "add", "rm", "item", "idea", "project"])
    def test_subcommand_help(self, cli_runner, cmd):
        r = cli_runner.invoke(main, [cmd, "--help"])
        assert r.exit_code == 0


# ── Parsing helpers ────────────────────────────────────────────────────


class TestParsing:
    def test_parse_date(self):
        assert _parse_date(DAY_ISO) == DAY

    def test_parse_date_rejects_garbage(self):
        with pytest.raises(click.BadParameter):
            _parse_date("19.10.2026")

    def test_parse_now(self):
        assert _parse_now("13:05", DAY).hour == 13
        assert _parse_now("", DAY) is None

    def test_parse_now_rejects_bad_time(self):
        with pytest.raises(click.BadParameter):
            _parse_now("1pm", DAY)


# ── day / dial ─────────────────────────────────────────────────────────


class TestDayAndDial:
    def test_day_lists_tasks(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "day", DAY_ISO, "--now", "13:30")
        assert r.exit_code == 0, r.output
        assert "School run" in r.output
        assert "13:00-14:00" in r.output
        assert "am/pm" in r.output

    def test_empty_day(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "day", "2030-01-01")
        assert r.exit_code == 0
        assert "No tasks" in r.output

    def test_bad_date(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "day", "tomorrow-ish")
        assert r.exit_code != 0

    def test_dial_to_stdout(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "dial", DAY_ISO, "--now", "13:30")
        assert r.exit_code == 0
        assert r.output.startswith("<svg")
        assert 'class="hand"' in r.output

    def test_dial_to_file(self, cli_runner, planner_file, tmp_path):
        out = tmp_path / "svg" / "day.svg"
        r = _invoke(cli_runner, planner_file, "dial", DAY_ISO, "-o", str(out), "--select", "t3")
        assert r.exit_code == 0
        text = out.read_text(encoding="utf-8")
        assert text.count('stroke="white"') == 2

    def test_corrupt_store(self, cli_runner, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        r = _invoke(cli_runner, path, "day", DAY_ISO)
        assert r.exit_code == 1


# ── move / check ───────────────────────────────────────────────────────


class TestMoveAndCheck:
    def test_move_writes_store(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "move", "t2", "15:00")
        assert r.exit_code == 0, r.output
        saved = load_planner(planner_file).get_task("t2")
        assert (saved.start_time, saved.end_time) == ("15:00", "16:00")

    def test_move_reports_clamp(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "move", "t2", "09:00", "--date", DAY_ISO)
        assert r.exit_code == 0
        assert "12:00" in r.output
        assert "WARN" in r.output

    def test_move_unknown_task(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "move", "ghost", "10:00")
        assert r.exit_code == 1

    def test_move_bad_time(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "move", "t1", "25:00")
        assert r.exit_code == 2

    def test_check_completes_task(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "check", "t1", "t1-i3")
        assert r.exit_code == 0, r.output
        assert "3/3" in r.output
        assert load_planner(planner_file).get_task("t1").completed

    def test_check_unknown_item(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "check", "t1", "nope")
        assert r.exit_code == 1


# ── add / project ──────────────────────────────────────────────────────


class TestAddAndProject:
    def test_add_task(self, cli_runner, planner_file):
        r = _invoke(
            cli_runner, planner_file,
            "add", "Piano", "--date", DAY_ISO, "--start", "16:00", "--end", "17:00",
            "--project", "p1", "--item", "Books", "--item", "Snack", "--id", "t9",
        )
        assert r.exit_code == 0, r.output
        task = load_planner(planner_file).get_task("t9")
        assert [i.id for i in task.checklist] == ["i1", "i2"]
        assert task.title == "Piano"

    def test_add_rejects_reversed_times(self, cli_runner, planner_file):
        r = _invoke(
            cli_runner, planner_file,
            "add", "Late", "--date", DAY_ISO, "--start", "23:00", "--end", "01:00",
        )
        assert r.exit_code == 1
        assert "midnight" in r.output
        assert len(load_planner(planner_file).tasks) == 4

    def test_add_rejects_unknown_project(self, cli_runner, planner_file):
        r = _invoke(
            cli_runner, planner_file,
            "add", "X", "--start", "10:00", "--end", "11:00", "--project", "p404",
        )
        assert r.exit_code == 1

    def test_add_project(self, cli_runner, tmp_path):
        path = tmp_path / "fresh.json"
        r = _invoke(cli_runner, path, "project", "add", "Garden", "--id", "g")
        assert r.exit_code == 0, r.output
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["projects"] == [{"id": "g", "name": "Garden", "color": "#34d399"}]

    def test_duplicate_project(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "project", "add", "Again", "--id", "p1")
        assert r.exit_code == 1


# ── Robustness against bad store data ──────────────────────────────────


def _write_planner(path: Path, tasks: list) -> Path:
    path.write_text(json.dumps({"version": 1, "projects": [], "tasks": tasks}), encoding="utf-8")
    return path


class TestBadStoreData:
    def test_malformed_time_is_reported(self, cli_runner, tmp_path, make_task):
        task = make_task("a").to_dict()
        task["startTime"] = "9:00"
        path = _write_planner(tmp_path / "p.json", [task])

        r = _invoke(cli_runner, path, "day", DAY_ISO, "--now", "09:30")
        assert r.exit_code == 1
        assert isinstance(r.exception, SystemExit)
        assert "9:00" in r.output

    def test_malformed_time_in_dial(self, cli_runner, tmp_path, make_task):
        task = make_task("a").to_dict()
        task["endTime"] = "10:5"
        path = _write_planner(tmp_path / "p.json", [task])
        r = _invoke(cli_runner, path, "dial", "2030-01-01")
        assert r.exit_code == 0
        r = _invoke(cli_runner, path, "dial", DAY_ISO, "--now", "23:00")
        assert r.exit_code == 1
        assert isinstance(r.exception, SystemExit)

    def test_non_object_task_is_reported(self, cli_runner, tmp_path):
        path = _write_planner(tmp_path / "p.json", ["oops"])
        r = _invoke(cli_runner, path, "day", DAY_ISO)
        assert r.exit_code == 1
        assert isinstance(r.exception, SystemExit)

    def test_snap_must_be_positive(self, cli_runner, planner_file):
        r = cli_runner.invoke(main, ["--store", str(planner_file), "--snap", "0", "day"])
        assert r.exit_code == 2


# ── Ids and task detail ────────────────────────────────────────────────


class TestIdsAndDetail:
    def test_day_shows_task_ids(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "day", DAY_ISO, "--now", "13:30")
        assert r.exit_code == 0, r.output
        for task_id in ("t1", "t2", "t3"):
            assert task_id in r.output

    def test_day_details_selected_task(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "day", DAY_ISO, "--now", "09:30")
        assert r.exit_code == 0, r.output
        assert "Checklist 2/3" in r.output
        assert "t1-i3" in r.output
        assert "[x] t1-i1" in r.output

    def test_day_select_option(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "day", DAY_ISO, "--now", "09:30", "--select", "t3")
        assert "id=t3" in r.output
        assert "no checklist" in r.output

    def test_show_lists_items_and_ideas(self, cli_runner, planner_file):
        assert _invoke(
            cli_runner, planner_file, "idea", "add", "t1", "Morning vlog", "--type", "story",
            "--id", "c1",
        ).exit_code == 0

        r = _invoke(cli_runner, planner_file, "show", "t1")
        assert r.exit_code == 0, r.output
        assert "School run" in r.output
        assert "t1-i2" in r.output
        assert "c1" in r.output and "story" in r.output

    def test_show_unknown_task(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "show", "ghost")
        assert r.exit_code == 1


# ── Editing commands ───────────────────────────────────────────────────


class TestEditing:
    def test_item_add_reopens_and_rm_completes(self, cli_runner, planner_file):
        _invoke(cli_runner, planner_file, "check", "t1", "t1-i3")
        assert load_planner(planner_file).get_task("t1").completed

        r = _invoke(cli_runner, planner_file, "item", "add", "t1", "Water bottle", "--id", "w")
        assert r.exit_code == 0, r.output
        task = load_planner(planner_file).get_task("t1")
        assert task.get_item("w").text == "Water bottle"
        assert not task.completed

        r = _invoke(cli_runner, planner_file, "item", "rm", "t1", "w")
        assert r.exit_code == 0, r.output
        assert load_planner(planner_file).get_task("t1").completed

    def test_item_rm_unknown(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "item", "rm", "t1", "nope")
        assert r.exit_code == 1

    def test_done_and_undo(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "done", "t2")
        assert r.exit_code == 0, r.output
        assert load_planner(planner_file).get_task("t2").completed

        _invoke(cli_runner, planner_file, "done", "t2", "--undo")
        assert not load_planner(planner_file).get_task("t2").completed

    def test_done_refused_with_checklist(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "done", "t1")
        assert r.exit_code == 1
        assert not load_planner(planner_file).get_task("t1").completed

    def test_idea_rm(self, cli_runner, planner_file):
        _invoke(cli_runner, planner_file, "idea", "add", "t2", "Pool clip", "--id", "c9")
        r = _invoke(cli_runner, planner_file, "idea", "rm", "t2", "c9")
        assert r.exit_code == 0, r.output
        assert load_planner(planner_file).get_task("t2").content_ideas == []

    def test_rm_task(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "rm", "t3")
        assert r.exit_code == 0
        assert load_planner(planner_file).get_task("t3") is None
        assert _invoke(cli_runner, planner_file, "rm", "t3").exit_code == 1

    def test_project_rm_and_ls(self, cli_runner, planner_file):
        r = _invoke(cli_runner, planner_file, "project", "ls")
        assert "Family" in r.output

        r = _invoke(cli_runner, planner_file, "project", "rm", "p1")
        assert r.exit_code == 0, r.output
        planner = load_planner(planner_file)
        assert planner.projects == []
        assert planner.get_task("t1").project_id == "p1"
        assert _invoke(cli_runner, planner_file, "project", "rm", "p1").exit_code == 1


# ── REST-backed commands ───────────────────────────────────────────────


def _response(payload):
    resp = MagicMock()
    resp.read.return_value = json.dumps(payload).encode("utf-8") if payload is not None else b""
    resp.__enter__.return_value = resp
    return resp


@pytest.fixture
def fake_api(planner):
    """Serve the planner fixture over a patched urlopen; records (method, url, body)."""
    calls = []

    def fake_urlopen(req, timeout=None):
        body = json.loads(req.data) if req.data else None
        calls.append((req.get_method(), req.full_url, body))
        if req.get_method() == "GET" and req.full_url.endswith("/tasks"):
            return _response([t.to_dict() for t in planner.tasks])
        if req.get_method() == "GET" and req.full_url.endswith("/projects"):
            return _response([p.to_dict() for p in planner.projects])
        return _response(body)

    with patch("dayclock.store.urlopen", side_effect=fake_urlopen):
        yield calls


class TestApiBackedCommands:
    def test_move_finds_task_date_over_api(self, cli_runner, fake_api):
        r = cli_runner.invoke(main, ["--api-url", "https://api.example", "move", "t2", "15:00"])
        assert r.exit_code == 0, r.output
        puts = [c for c in fake_api if c[0] == "PUT"]
        assert puts[-1][1] == "https://api.example/tasks/t2"
        assert puts[-1][2]["startTime"] == "15:00"

    def test_check_over_api(self, cli_runner, fake_api):
        r = cli_runner.invoke(main, ["--api-url", "https://api.example", "check", "t1", "t1-i3"])
        assert r.exit_code == 0, r.output
        assert [c for c in fake_api if c[0] == "PUT"][-1][2]["completed"] is True

    def test_add_checks_project_over_api(self, cli_runner, fake_api):
        r = cli_runner.invoke(
            main,
            ["--api-url", "https://api.example", "add", "X", "--start", "10:00",
             "--end", "11:00", "--project", "p404"],
        )
        assert r.exit_code == 1
        assert not [c for c in fake_api if c[0] == "POST"]
