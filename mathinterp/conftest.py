import pytest

from mathinterp.config import Settings
from mathinterp.lexer import Lexer, TokenBuffer
from mathinterp.parser import Parser
from mathinterp.repl import REPL


@pytest.fixture
def session():
    """A lexer and parser sharing one token buffer, as the REPL wires them."""
    tokens = TokenBuffer()
    lexer = Lexer(tokens)
    parser = Parser(tokens)
    yield lexer, parser
    parser.destroy()


@pytest.fixture
def run(session):
    """Tokenize, parse and evaluate one line; returns the value."""
    lexer, parser = session

    def _run(line):
        lexer.tokenize(line)
        return parser.evaluate(parser.parse())

    return _run


@pytest.fixture
def repl(tmp_path):
    settings = Settings(history_file=str(tmp_path / "history"))
    r = REPL(settings)
    yield r
    r.parser.destroy()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
