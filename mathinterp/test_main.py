import pytest

from mathinterp.main import build_arg_parser, main
from mathinterp.repl import REPL


@pytest.fixture
def history(tmp_path):
    return str(tmp_path / "history")


def test_expression_mode_prints_results(history, capsys):
    assert main(["--history-file", history, "-e", "1+1", "-e", "2^10"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == ["Result: 2.000000000", "Result: 1024.000000"]


def test_expressions_share_variables(history, capsys):
    assert main(["--history-file", history, "-e", "a = 4", "-e", "sqrt(a) * last"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "Result: 8.000000000"


def test_failing_expression_sets_status(history, capsys):
    assert main(["--history-file", history, "-e", "1 +", "-e", "3"]) == 1
    out = capsys.readouterr().out.splitlines()
    assert out[0].startswith("Error: ")
    assert out[1] == "Result: 3.000000000"


def test_interactive_mode_runs_loop(history, monkeypatch):
    calls = []
    monkeypatch.setattr(REPL, "repl_loop", lambda self: calls.append(self.settings.history_file))
    assert main(["--history-file", history, "--log-level", "error"]) == 0
    assert calls == [history]


def test_arg_parser_defaults():
    args = build_arg_parser().parse_args([])
    assert args.log_level is None
    assert args.history_file is None
    assert args.expr is None
