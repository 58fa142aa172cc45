# repl.py
"""Interactive read-eval-print loop around the tokenize -> parse -> evaluate pipeline."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import FileHistory

from .commands import build_command_table
from .config import Settings
from .errors import EvalError, LexerError, ParseError
from .lexer import Lexer, TokenBuffer
from .numeric import format_value
from .parser import Parser

logger = logging.getLogger(__name__)

LAST_RESULT_NAME = "last"

BANNER = (
    "This is a simple math interpreter of math equations. Here you can:\n"
    "1- Get the response of a math equation.\n"
    "2- Create variables with numeric values.\n"
    "Type -help for commands, -exit or Ctrl-D to quit.\n"
)


class REPL:
    """Read-Eval-Print Loop for the interpreter."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings if settings is not None else Settings()
        self.tokens = TokenBuffer()
        self.lexer = Lexer(self.tokens)
        self.parser = Parser(self.tokens)
        self.commands = build_command_table(self)
        self.running = True

    def stop(self) -> None:
        self.running = False

    def evaluate_line(self, line: str) -> Tuple[bool, str]:
        """Run one input line (command or statement). Returns (ok, output)."""
        if not line.strip():
            return True, ""
        if len(line) > self.settings.max_line_length:
            return False, f"Error: Input exceeds {self.settings.max_line_length} characters"

        if line.startswith('-'):
            out = self.commands.execute(line)
            if out is not None:
                return True, out

        try:
            self.lexer.tokenize(line)
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("%s", self.tokens.dump())
            root = self.parser.parse()
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Abstract Syntax Tree:\n%s", self.parser.dump_tree())
            value = self.parser.evaluate(root)
        except LexerError as e:
            logger.error("Tokenization failed for: %s", line)
            return False, f"Error: {e}"
        except ParseError as e:
            logger.error("Parsing failed for: %s", line)
            return False, f"Error: {e}"
        except EvalError as e:
            logger.error("Evaluation failed for: %s", line)
            return False, f"Error: {e}"

        self.parser.symbols.insert_or_update(LAST_RESULT_NAME, value)
        return True, f"Result: {format_value(value)}"

    def _completion_words(self) -> List[str]:
        return self.commands.names() + ['sqrt'] + self.parser.symbols.names()

    def repl_loop(self) -> None:
        """Interactive loop with persistent history and name completion."""
        print(BANNER)
        session: PromptSession = PromptSession(history=FileHistory(self.settings.history_file))
        try:
            while self.running:
                try:
                    completer = WordCompleter(self._completion_words(), WORD=True)
                    line = session.prompt(self.settings.prompt, completer=completer)
                except KeyboardInterrupt:
                    print("^C")
                    continue
                except EOFError:
                    print("Exiting.")
                    break
                ok, out = self.evaluate_line(line)
                if out:
                    print(out)
        finally:
            self.parser.destroy()
