#!/usr/bin/env python3
from __future__ import annotations

import io
import logging

import pytest

from boxmenu import cli
from boxmenu.actions import ActionResult
from boxmenu.app import MenuApp
from boxmenu.errors import PreconditionError, TerminalError


@pytest.fixture
def item_file(tmp_path):
    path = tmp_path / "items.tsv"
    path.write_text(
        "Firefox\tfirefox\twin-1\n"
        "\n"
        "Terminal\tkitty\twin-2\n"
        "Plain entry\n",
        encoding="utf-8",
    )
    return str(path)


def test_parse_items_fields_and_defaults():
    items = cli.parse_items(["a\tb\tc\n", "  \n", "only\r\n", "x\ty\n"])
    assert [(i.label, i.secondary, i.payload) for i in items] == [
        ("a", "b", "c"),
        ("only", "", "only"),
        ("x", "y", "x"),
    ]


def test_read_items_errors(tmp_path):
    with pytest.raises(PreconditionError):
        cli.read_items(str(tmp_path / "missing.tsv"))
    empty = tmp_path / "empty.tsv"
    empty.write_text("\n\n", encoding="utf-8")
    with pytest.raises(PreconditionError, match="No items"):
        cli.read_items(str(empty))


def test_pick_list(item_file, capsys):
    assert cli.main(["pick", item_file, "--list"]) == 0
    assert capsys.readouterr().out.splitlines() == [
        "firefox :: Firefox",
        "kitty :: Terminal",
        "Plain entry",
    ]


def test_pick_index(item_file, capsys):
    assert cli.main(["pick", item_file, "--index", "1"]) == 0
    assert capsys.readouterr().out == "win-2\n"


def test_pick_index_out_of_range(item_file, capsys):
    assert cli.main(["pick", item_file, "--index", "7"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "out of range" in captured.err


def test_pick_match(item_file, capsys):
    assert cli.main(["pick", item_file, "--match", "plain"]) == 0
    assert capsys.readouterr().out == "Plain entry\n"
    assert cli.main(["pick", item_file, "--match", "chrome"]) == 1
    assert "No item matches" in capsys.readouterr().err


def test_direct_flags_are_exclusive(item_file):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["pick", item_file, "--list", "--index", "0"])
    assert excinfo.value.code == 2


def test_pick_reads_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("one\ttag\tp1\ntwo\n"))
    assert cli.main(["pick", "--index", "0"]) == 0
    assert capsys.readouterr().out == "p1\n"


def test_missing_file_exits_2(tmp_path, capsys):
    assert cli.main(["pick", str(tmp_path / "nope.tsv"), "--list"]) == 2
    assert "Cannot read items" in capsys.readouterr().err


def test_bad_config_exits_2(item_file, capsys):
    assert cli.main(["pick", item_file, "--page-size", "0"]) == 2
    assert "page_size" in capsys.readouterr().err


def test_interactive_pick_prints_choice(item_file, monkeypatch, capsys):
    seen = {}

    def fake_run(self, session=None):
        seen["config"] = self.config
        seen["preview"] = self.model.items[0].preview
        return self.model.activate(self.apply)

    monkeypatch.setattr(MenuApp, "run", fake_run)
    assert cli.main(["pick", item_file, "--wrap", "--preview", "--page-size", "4"]) == 0
    assert capsys.readouterr().out == "win-1\n"
    assert seen["config"].edge_policy == "wrap"
    assert seen["config"].page_size == 4
    assert seen["config"].preview_height == cli.PICK_PREVIEW_HEIGHT
    assert seen["preview"] == "win-1"


def test_interactive_pick_without_choice(item_file, monkeypatch, capsys):
    monkeypatch.setattr(MenuApp, "run", lambda self, session=None: None)
    assert cli.main(["pick", item_file]) == 1
    assert capsys.readouterr().out == ""


def test_terminal_failure_exits_2(item_file, monkeypatch, capsys):
    def fail(self, session=None):
        raise TerminalError("Cannot take over the terminal: not a tty")

    monkeypatch.setattr(MenuApp, "run", fail)
    assert cli.main(["pick", item_file]) == 2
    assert "not a tty" in capsys.readouterr().err


def test_interrupt_exits_130(item_file, monkeypatch):
    def interrupt(self, session=None):
        raise KeyboardInterrupt

    monkeypatch.setattr(MenuApp, "run", interrupt)
    assert cli.main(["pick", item_file]) == 130


def test_demo_runs_and_prints_final_position(monkeypatch, capsys):
    def fake_run(self, session=None):
        assert self.config.title_rows == 2
        assert self.hotkeys["l"] == ("set", "left")
        self.apply(("set", "left"))
        return self.apply(("quit",))

    monkeypatch.setattr(MenuApp, "run", fake_run)
    assert cli.main(["demo"]) == 0
    assert capsys.readouterr().out == "Final position: left\n"


def test_panel_demo_actions():
    demo = cli.PanelDemo(samples=3)
    items = demo.items()
    assert items[-1].label == "Quit"
    assert [i.label for i in items if i.active] == ["Right"]
    assert demo.apply(("set", "right")).message == "Already on the right"
    assert demo.apply(("toggle",)).ok
    assert demo.position == "left"
    assert not demo.apply(("fail",)).ok
    with pytest.raises(RuntimeError):
        demo.apply(("raise",))
    assert demo.apply(("quit",)).quit
    demo.refresh()
    assert demo.rescans == 1
    assert [i.label for i in demo.items() if i.active] == ["Left"]


def test_log_file_receives_diagnostics(item_file, tmp_path):
    log_path = tmp_path / "boxmenu.log"
    logger = logging.getLogger("boxmenu")
    try:
        assert cli.main(["pick", item_file, "--index", "0", "--log-file", str(log_path), "--debug"]) == 0
        logging.getLogger("boxmenu.cli").debug("probe message")
        for handler in logger.handlers:
            handler.flush()
        assert "probe message" in log_path.read_text(encoding="utf-8")
    finally:
        for handler in list(logger.handlers):
            if isinstance(handler, logging.FileHandler):
                logger.removeHandler(handler)
                handler.close()
        logger.setLevel(logging.NOTSET)


def test_parser_requires_a_command():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_pick_result_helper():
    assert cli._emit_payload(5) == ActionResult.quit_session(output="5")
