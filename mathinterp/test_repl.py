import pytest

from mathinterp import repl as repl_module
from mathinterp.commands import CommandTable


def test_evaluates_expression(repl):
    assert repl.evaluate_line("(2+3)*4") == (True, "Result: 20.00000000")


def test_blank_line_is_ignored(repl):
    assert repl.evaluate_line("   ") == (True, "")


def test_last_result_is_stored(repl):
    repl.evaluate_line("2*3")
    assert repl.evaluate_line("last + 1") == (True, "Result: 7.000000000")


def test_failed_line_keeps_last(repl):
    repl.evaluate_line("5")
    ok, out = repl.evaluate_line("1 +")
    assert not ok
    assert out.startswith("Error: ")
    assert repl.parser.symbols.get("last") == 5


def test_soft_failure_is_still_a_result(repl):
    assert repl.evaluate_line("1/0") == (True, "Result: NaN")


def test_lexer_error_reported(repl):
    ok, out = repl.evaluate_line("1 @ 2")
    assert not ok
    assert "Unrecognized character" in out


def test_negative_number_is_not_a_command(repl):
    assert repl.evaluate_line("-5 + 3") == (True, "Result: -2.000000000")


def test_unknown_dash_word_goes_to_parser(repl):
    ok, out = repl.evaluate_line("-foo")
    assert not ok
    assert out.startswith("Error: ")


def test_long_line_rejected(repl):
    ok, out = repl.evaluate_line("1" * 512)
    assert not ok
    assert out == "Error: Input exceeds 511 characters"


def test_longest_accepted_line(repl):
    line = "1+" * 255 + "1"
    assert len(line) == 511
    assert repl.evaluate_line(line) == (True, "Result: 256.0000000")


def test_show_lists_variables(repl):
    repl.evaluate_line("a = 5")
    ok, out = repl.evaluate_line("-show")
    assert ok
    assert "-- a : 5.000000000" in out
    assert "-- last : 5.000000000" in out


def test_clear_vars(repl):
    repl.evaluate_line("a = 5")
    assert repl.evaluate_line("-clear-vars") == (True, "All variables deleted")
    assert repl.parser.symbols.count == 0
    assert repl.evaluate_line("a") == (True, "Result: NaN")


def test_help_lists_commands(repl):
    ok, out = repl.evaluate_line("-help")
    assert ok
    for name in ("-exit", "-clear", "-clear-vars", "-show", "-info"):
        assert name in out


def test_info_reports_precision(repl):
    ok, out = repl.evaluate_line("-info")
    assert ok
    assert "256 bits" in out
    assert "77 significant digits" in out


def test_exit_stops_loop(repl):
    assert repl.evaluate_line("-exit") == (True, "")
    assert not repl.running


def test_command_must_fill_the_line(repl):
    ok, out = repl.evaluate_line("-exit now")
    assert not ok
    assert out.startswith("Error: ")
    assert repl.running
    assert repl.evaluate_line("-exit  ") == (True, "")
    assert not repl.running


def test_clear_screen_command(repl, monkeypatch):
    calls = []
    monkeypatch.setattr("mathinterp.commands.clear_screen", lambda: calls.append(True))
    assert repl.evaluate_line("-clear") == (True, "")
    assert calls == [True]


def test_command_table_rejects_duplicates():
    table = CommandTable()
    table.register("-x", lambda: None)
    assert table.exists("-x")
    assert table.execute("-y") is None
    assert table.execute("-x y") is None
    with pytest.raises(ValueError):
        table.register("-x", lambda: None)


class FakeSession:
    """Stands in for PromptSession, replaying scripted input."""

    def __init__(self, lines):
        self.lines = list(lines)

    def prompt(self, message, completer=None):
        if not self.lines:
            raise EOFError
        line = self.lines.pop(0)
        if line is KeyboardInterrupt:
            raise KeyboardInterrupt
        return line


def test_repl_loop_runs_until_exit(repl, monkeypatch, capsys):
    session = FakeSession(["x = 2", KeyboardInterrupt, "x ^ 3", "-exit", "never read"])
    monkeypatch.setattr(repl_module, "PromptSession", lambda **kwargs: session)
    repl.repl_loop()
    out = capsys.readouterr().out
    assert "Result: 2.000000000" in out
    assert "^C" in out
    assert "Result: 8.000000000" in out
    assert session.lines == ["never read"]
    assert repl.parser.symbols.buckets is None


def test_repl_loop_ends_on_eof(repl, monkeypatch, capsys):
    monkeypatch.setattr(repl_module, "PromptSession", lambda **kwargs: FakeSession([]))
    repl.repl_loop()
    assert "Exiting." in capsys.readouterr().out


def test_nested_parens_up_to_line_limit(repl):
    assert repl.evaluate_line("(" * 255 + "1" + ")" * 255) == (True, "Result: 1.000000000")
    assert repl.evaluate_line("sqrt(" * 85 + "1" + ")" * 85) == (True, "Result: 1.000000000")
