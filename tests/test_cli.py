"""Test suite for CLI commands."""
import os
from argparse import Namespace
from pathlib import Path

import pytest

from pa.cli import main as cli
from pa.cli.terminal import TerminalHost, fuzzy_match


@pytest.fixture
def wired(monkeypatch, ops):
    """Route every CLI command to the fake-backed operations."""
    monkeypatch.setattr(cli, "_build_operations", lambda: ops)
    return ops


def _target(site=None, account=None, **extra):
    return Namespace(site=site, account=account, **extra)


class TestCommands:
    """Test suite for the cmd_* handlers."""

    def test_add_and_show(self, wired, host, capsys):
        """Test that add saves and show copies to the clipboard."""
        cli.cmd_add(_target("acme.com", "alice", generate=True))
        cli.cmd_show(_target("acme.com", "alice"))

        out = capsys.readouterr().out
        assert "Saved 'acme.com:alice'" in out
        assert "copied to clipboard" in out
        assert len(host.copied) == 1
        assert host.copied[0].decode() not in out

    def test_add_invalid_site_exits_2(self, wired, capsys):
        """Test that an invalid identifier is a usage error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.cmd_add(_target("my bank", "alice", generate=True))

        assert exc_info.value.code == 2
        assert "whitespace" in capsys.readouterr().err

    def test_list(self, wired, capsys):
        """Test that list prints aligned rows."""
        wired.add("acme.com", "alice", password="a")
        wired.add("github.com", "bob", password="b")

        cli.cmd_list(Namespace())

        lines = capsys.readouterr().out.splitlines()
        assert lines == ["acme.com     alice", "github.com   bob"]

    def test_list_empty(self, wired, capsys):
        """Test that an empty store says so on stderr."""
        cli.cmd_list(Namespace())
        assert "No passwords stored" in capsys.readouterr().err

    def test_delete_with_yes(self, wired, capsys):
        """Test that --yes deletes without asking."""
        wired.add("acme.com", "alice", password="a")

        cli.cmd_delete(_target("acme.com", "alice", yes=True))

        assert "Deleted 'acme.com:alice'" in capsys.readouterr().out
        assert not wired.store.exists("acme.com", "alice")

    def test_edit_with_yes(self, wired, capsys):
        """Test that edit reports the updated entry."""
        wired.add("acme.com", "alice", password="a")

        cli.cmd_edit(_target("acme.com", "alice", generate=True, yes=True))

        assert "Updated 'acme.com:alice'" in capsys.readouterr().out

    def test_rename(self, wired, capsys):
        """Test that rename reports old and new identifiers."""
        wired.add("acme.com", "alice", password="a")

        cli.cmd_rename(_target("acme.com", "alice", new_site="acme.org", new_account=None, yes=True))

        assert "Renamed 'acme.com:alice' to 'acme.org:alice'" in capsys.readouterr().out

    def test_rename_unchanged(self, wired, capsys):
        """Test that renaming to the same identifier reports unchanged."""
        wired.add("acme.com", "alice", password="a")

        cli.cmd_rename(_target("acme.com", "alice", new_site="acme.com", new_account="alice", yes=True))

        assert "unchanged" in capsys.readouterr().out

    def test_version(self, capsys):
        """Test the version command."""
        cli.cmd_version(Namespace())
        assert capsys.readouterr().out.strip() == f"pa {cli.VERSION}"


class TestMain:
    """Test suite for argument parsing, routing and exit codes."""

    def test_no_command_exits_2(self, capsys):
        """Test that running without a command prints help and exits 2."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 2

    def test_declined_delete_exits_0(self, wired, host, capsys):
        """Test that an aborted workflow is reported but is not an error."""
        wired.add("acme.com", "alice", password="a")
        host.confirms = [False]

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["del", "acme.com", "alice"])

        assert exc_info.value.code == 0
        assert "Aborted" in capsys.readouterr().err
        assert wired.store.exists("acme.com", "alice")

    def test_not_found_exits_1(self, wired, capsys):
        """Test that a missing entry is a runtime error."""
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["show", "acme.com", "nobody"])

        assert exc_info.value.code == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_add_conflict_exits_1(self, wired, capsys):
        """Test that adding an existing entry is a runtime error."""
        wired.add("acme.com", "alice", password="a")

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["add", "-g", "acme.com", "alice"])

        assert exc_info.value.code == 1
        assert "already exists" in capsys.readouterr().err

    def test_generate_flags(self):
        """Test that -g/-n set generate and the default is to ask."""
        parser, _ = cli.build_parser()
        assert parser.parse_args(["add", "s", "a"]).generate is None
        assert parser.parse_args(["add", "-g", "s", "a"]).generate is True
        assert parser.parse_args(["add", "-n", "s", "a"]).generate is False

    def test_aliases_route(self, wired, capsys):
        """Test that command aliases reach the same handlers."""
        wired.add("acme.com", "alice", password="a")

        cli.main(["mv", "acme.com", "alice", "--new-account", "bob", "-y"])
        cli.main(["ls"])

        assert "acme.com   bob" in capsys.readouterr().out

    def test_config_show(self, tmp_path, monkeypatch, capsys):
        """Test that config show prints the effective store directory."""
        monkeypatch.setenv("PA_CONFIG", str(tmp_path / "missing.yml"))
        monkeypatch.setenv("PA_DIR", str(tmp_path / "store"))

        cli.main(["config", "show"])

        out = capsys.readouterr().out
        assert "file not found" in out
        assert str(tmp_path / "store") in out

    def test_bad_config_exits_1(self, tmp_path, monkeypatch, capsys):
        """Test that an invalid config file is a runtime error."""
        config = tmp_path / "config.yml"
        config.write_text("selector: {alignment: sideways}\n")
        monkeypatch.setenv("PA_CONFIG", str(config))

        with pytest.raises(SystemExit) as exc_info:
            cli.main(["list"])

        assert exc_info.value.code == 1


class TestTerminalHost:
    """Test suite for the terminal host."""

    @pytest.mark.parametrize("query,text,expected", [
        ("gh", "github.com   bob", True),
        ("gcb", "github.com   bob", True),
        ("ACME", "acme.com   alice", True),
        ("bg", "github.com   bob", False),
        ("", "anything", True),
    ])
    def test_fuzzy_match(self, query, text, expected):
        """Test subsequence matching."""
        assert fuzzy_match(query, text) is expected

    def test_confirm_answers(self, monkeypatch):
        """Test that only y/yes confirm and empty uses the default."""
        host = TerminalHost()
        answers = iter(["y", "no", "", "YES"])
        monkeypatch.setattr("builtins.input", lambda prompt: next(answers))

        assert host.confirm("Sure?") is True
        assert host.confirm("Sure?") is False
        assert host.confirm("Sure?") is False
        assert host.confirm("Sure?") is True

    def test_width_leaves_room_for_row_decoration(self, monkeypatch):
        """Test that absolute rows plus the menu prefix fit the terminal."""
        from pa.store.domains.models import Entry
        from pa.store.workflows import selector

        monkeypatch.setattr("shutil.get_terminal_size", lambda *args, **kwargs: os.terminal_size((80, 24)))
        host = TerminalHost()
        rows = selector.build_candidates([Entry("acme.com", "alice")], "absolute", host.width())

        assert host.width() < 80
        assert len(f"{999:>3}) {rows[0].display}") <= 80
        assert rows[0].display.endswith("alice")

    def test_prompt_default(self, monkeypatch):
        """Test that an empty answer returns the default."""
        monkeypatch.setattr("builtins.input", lambda prompt: "")
        assert TerminalHost().prompt("New site", default="acme.com") == "acme.com"

    def test_menu_select_by_number_and_query(self, monkeypatch, capsys):
        """Test the numbered menu used when fzf is not installed."""
        monkeypatch.setattr("shutil.which", lambda name: None)
        displays = ["acme.com   alice", "acme.com   bob", "github.com   bob"]
        host = TerminalHost()

        answers = iter(["3"])
        monkeypatch.setattr("builtins.input", lambda prompt: next(answers))
        assert host.select("Show: ", displays) == 2

        answers = iter(["acme", "2"])
        assert host.select("Show: ", displays) == 1

        answers = iter(["gitbob"])
        assert host.select("Show: ", displays) == 2

        answers = iter([""])
        assert host.select("Show: ", displays) is None

    def test_clipboard_failure_raises(self, monkeypatch):
        """Test that clipboard errors become PaError."""
        import pyperclip
        from pa.store.domains.models import PaError

        def broken(text):
            raise pyperclip.PyperclipException("no clipboard")

        monkeypatch.setattr(pyperclip, "copy", broken)
        with pytest.raises(PaError):
            TerminalHost().copy_to_clipboard(b"secret")
