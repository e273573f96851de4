"""Tests for CLI commands."""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from notedex.cli import _setup_logging, app
from notedex.config import CACHE_FILENAME, CONFIG_FILENAME
from notedex.index.storage import load_cache

from conftest import BASE_NS, set_mtime

runner = CliRunner()


@pytest.fixture
def home(tmp_path: Path) -> Path:
    return tmp_path / "home"


@pytest.fixture
def configured(write_note, notes_root: Path, home: Path) -> Path:
    """A notes directory that has been registered with ``config``."""
    write_note(
        "old.md",
        '<note comment="Remember this" tags="todo,important" heading="Reminder">',
        mtime_ns=BASE_NS,
    )
    write_note(
        "new.md",
        '<note comment="Newer thought" tags="todo">\n'
        '<note term="REST" definition="Representational state transfer">',
        mtime_ns=BASE_NS + 10,
    )
    result = runner.invoke(app, ["config", str(notes_root), "--home", str(home)])
    assert result.exit_code == 0, result.output
    return notes_root


class TestSetupLogging:
    """Tests for _setup_logging helper."""

    def test_setup_logging_verbose(self) -> None:
        with patch("notedex.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=True)
            assert mock_config.call_args[1]["level"] == logging.DEBUG

    def test_setup_logging_normal(self) -> None:
        with patch("notedex.cli.logging.basicConfig") as mock_config:
            _setup_logging(verbose=False)
            assert mock_config.call_args[1]["level"] == logging.INFO


class TestConfigCommand:
    """Tests for the config command."""

    def test_writes_config_and_cache(self, configured: Path, home: Path) -> None:
        assert (home / CONFIG_FILENAME).exists()
        assert len(load_cache(home / CACHE_FILENAME)) == 2

    def test_reports_stats(self, write_note, notes_root: Path, home: Path) -> None:
        write_note("a.md", '<note term="a" definition="b">')

        result = runner.invoke(app, ["config", str(notes_root), "--home", str(home)])

        assert result.exit_code == 0
        assert "parsed: 1" in result.stdout

    def test_root_name_is_not_markup(self, tmp_path: Path, home: Path) -> None:
        root = tmp_path / "notes[red]"
        root.mkdir()

        result = runner.invoke(app, ["config", str(root), "--home", str(home)])

        assert result.exit_code == 0
        assert "notes[red]" in result.stdout

    def test_rejects_missing_root(self, tmp_path: Path, home: Path) -> None:
        result = runner.invoke(app, ["config", str(tmp_path / "nope"), "--home", str(home)])

        assert result.exit_code != 0

    def test_parse_error_leaves_no_cache(self, write_note, notes_root: Path, home: Path) -> None:
        write_note("bad.md", '<note comment="hi">')

        result = runner.invoke(app, ["config", str(notes_root), "--home", str(home)])

        assert result.exit_code == 1
        assert "expected attribute: tags" in result.stdout
        assert not (home / CACHE_FILENAME).exists()


class TestRefreshCommand:
    """Tests for the refresh command."""

    def test_refresh_reuses_cache(self, configured: Path, home: Path) -> None:
        result = runner.invoke(app, ["refresh", "--home", str(home)])

        assert result.exit_code == 0
        assert "reused: 2" in result.stdout
        assert "parsed: 0" in result.stdout

    def test_refresh_picks_up_changes(self, configured: Path, home: Path) -> None:
        set_mtime(configured / "old.md", BASE_NS + 100)

        result = runner.invoke(app, ["refresh", "--home", str(home)])

        assert "reused: 1" in result.stdout
        assert "parsed: 1" in result.stdout

    def test_refresh_without_config(self, home: Path) -> None:
        result = runner.invoke(app, ["refresh", "--home", str(home)])

        assert result.exit_code == 1
        assert "No configuration" in result.stdout

    def test_corrupt_cache_is_fatal(self, configured: Path, home: Path) -> None:
        (home / CACHE_FILENAME).write_bytes(b"garbage")

        result = runner.invoke(app, ["refresh", "--home", str(home)])

        assert result.exit_code == 1
        assert "cannot decode cache" in result.stdout
        assert (home / CACHE_FILENAME).read_bytes() == b"garbage"


class TestDefineCommand:
    """Tests for the define command."""

    def test_define_found(self, configured: Path, home: Path) -> None:
        result = runner.invoke(app, ["define", "REST", "--home", str(home)])

        assert result.exit_code == 0
        assert "Representational state transfer:  REST" in result.stdout

    def test_define_missing(self, configured: Path, home: Path) -> None:
        result = runner.invoke(app, ["define", "SOAP", "--home", str(home)])

        assert result.exit_code == 0
        assert "No definition found for SOAP" in result.stdout


class TestSearchCommand:
    """Tests for the search command."""

    def test_search_orders_by_mtime(self, configured: Path, home: Path) -> None:
        result = runner.invoke(app, ["search", "todo", "--home", str(home)])

        assert result.exit_code == 0
        output = result.stdout
        assert "Reminder" in output
        assert output.index("Remember this") < output.index("Newer thought")

    def test_search_sees_new_files(self, configured: Path, write_note, home: Path) -> None:
        write_note("newest.md", '<note comment="Brand new" tags="todo">', mtime_ns=BASE_NS + 50)

        result = runner.invoke(app, ["search", "todo", "--home", str(home)])

        assert "Brand new" in result.stdout

    def test_search_missing_tag(self, configured: Path, home: Path) -> None:
        result = runner.invoke(app, ["search", "nothing", "--home", str(home)])

        assert result.exit_code == 0
        assert "No comments tagged nothing" in result.stdout
