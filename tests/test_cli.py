"""
Tests for the command line: stdin filtering, batch processing and exit codes.

Run: pytest tests/test_cli.py -v
"""

import io
import sys

import pytest

from md2sl.cli import main
from md2sl.conversion import FileOutcome, Mode, ReportStyle, discover_files, exit_status, report_lines


def feed_stdin(monkeypatch, data):
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data), encoding="utf-8"))


@pytest.fixture
def tree(tmp_path):
    (tmp_path / "a.md").write_text("A. B.\n", encoding="utf-8")
    (tmp_path / "b.md").write_text("Done.\n", encoding="utf-8")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.md").write_text("C. D.\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("E. F.\n", encoding="utf-8")
    return tmp_path


class TestStdin:
    def test_formats_to_stdout(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, b"A. B.\n")
        assert main([]) == 0
        assert capsys.readouterr().out == "A.\nB.\n"

    def test_check_reports_change(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, b"A. B.\n")
        assert main(["--mode", "check"]) == 1

    def test_check_unchanged(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, b"A.\nB.\n")
        assert main(["--mode", "check"]) == 0

    def test_options_reach_the_formatter(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, b"See [a](http://x).\n")
        assert main(["-a", "outsource-inline"]) == 0
        assert capsys.readouterr().out == "See [a][1].\n\n[1]: http://x\n"

    def test_invalid_utf8(self, monkeypatch, capsys):
        feed_stdin(monkeypatch, b"A.\xff\n")
        assert main([]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "invalid UTF-8 at byte 2" in captured.err


class TestConfigErrors:
    def test_bad_width(self, capsys):
        assert main(["-w", "wide", "x.md"]) == 2
        assert capsys.readouterr().err.startswith("md2sl: ")

    def test_bad_language(self, capsys):
        assert main(["-l", "xx", "x.md"]) == 2

    def test_unknown_mode_rejected_by_parser(self):
        with pytest.raises(SystemExit) as excinfo:
            main(["--mode", "dry-run"])
        assert excinfo.value.code == 2


class TestBatch:
    def test_formats_in_place_and_reports_state(self, tree, capsys):
        assert main([str(tree), "-r", "state", "-j", "2"]) == 0
        assert capsys.readouterr().out.splitlines() == [
            f"C:{tree / 'a.md'}",
            f"U:{tree / 'b.md'}",
            f"C:{tree / 'sub' / 'c.md'}",
        ]
        assert (tree / "a.md").read_text(encoding="utf-8") == "A.\nB.\n"
        assert (tree / "notes.txt").read_text(encoding="utf-8") == "E. F.\n"

    def test_check_leaves_files_alone(self, tree, capsys):
        assert main([str(tree), "-m", "check", "-r", "changed"]) == 1
        assert capsys.readouterr().out.splitlines() == [str(tree / "a.md"), str(tree / "sub" / "c.md")]
        assert (tree / "a.md").read_text(encoding="utf-8") == "A. B.\n"

    def test_both_writes_and_fails(self, tree):
        assert main([str(tree), "-m", "both"]) == 1
        assert main([str(tree), "-m", "both"]) == 0

    def test_explicit_file_kept_whatever_its_extension(self, tree):
        assert main([str(tree / "notes.txt")]) == 0
        assert (tree / "notes.txt").read_text(encoding="utf-8") == "E.\nF.\n"

    def test_missing_file_fails_but_others_proceed(self, tree, caplog):
        assert main([str(tree / "missing.md"), str(tree / "a.md")]) == 1
        assert (tree / "a.md").read_text(encoding="utf-8") == "A.\nB.\n"
        assert "missing.md" in caplog.text

    def test_invalid_utf8_file(self, tree):
        (tree / "bad.md").write_bytes(b"\xfe")
        assert main([str(tree / "bad.md")]) == 1


class TestReporting:
    def test_discovery_order_and_duplicates(self, tree):
        files = discover_files([tree / "b.md", tree, tree / "b.md"])
        assert files == [tree / "b.md", tree / "a.md", tree / "sub" / "c.md"]

    def test_report_skips_failures(self, tmp_path):
        outcomes = [FileOutcome(tmp_path / "x.md", error="boom"), FileOutcome(tmp_path / "y.md", changed=True)]
        assert report_lines(outcomes, ReportStyle.STATE) == [f"C:{tmp_path / 'y.md'}"]
        assert report_lines(outcomes, ReportStyle.NONE) == []

    def test_exit_status(self, tmp_path):
        changed = [FileOutcome(tmp_path / "y.md", changed=True)]
        assert exit_status(changed, Mode.FORMAT) == 0
        assert exit_status(changed, Mode.CHECK) == 1
        assert exit_status([FileOutcome(tmp_path / "x.md", error="boom")], Mode.FORMAT) == 1
