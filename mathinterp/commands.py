# commands.py
"""REPL command table.

Commands are single words starting with '-', each mapped to a zero-argument
action. The whole line, stripped of surrounding whitespace, must name a
command; anything else (``-5 + 3``, ``-exit now``) goes on to evaluation.
"""

from __future__ import annotations

import decimal
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from prompt_toolkit.shortcuts import clear as clear_screen

from . import __version__
from .numeric import PRECISION_BITS, PRECISION_DIGITS, format_value

if TYPE_CHECKING:
    from .repl import REPL

logger = logging.getLogger(__name__)

Action = Callable[[], Optional[str]]


@dataclass
class Command:
    name: str
    action: Action
    summary: str


class CommandTable:
    """Dispatch table from command word to action."""

    def __init__(self):
        self._commands: Dict[str, Command] = {}

    def register(self, name: str, action: Action, summary: str = "") -> None:
        if name in self._commands:
            raise ValueError(f"Command already registered: {name}")
        self._commands[name] = Command(name, action, summary)

    def exists(self, word: str) -> bool:
        return word in self._commands

    def names(self) -> List[str]:
        return list(self._commands)

    def execute(self, line: str) -> Optional[str]:
        """Run the command named by ``line``.

        Returns the command's output ('' when it prints nothing), or None when
        the line is not a command.
        """
        name = line.strip()
        if name not in self._commands:
            return None
        logger.debug("Executing command %s", name)
        return self._commands[name].action() or ''

    def help_text(self) -> str:
        lines = ["Commands:"]
        for command in self._commands.values():
            lines.append(f"  {command.name:<12} {command.summary}")
        return "\n".join(lines)


HELP_HEADER = (
    "Evaluate arithmetic expressions with 256-bit precision.\n"
    "Operators: + - * / % ^ (right-assoc), parentheses, sqrt(x)\n"
    "Variables: name = expression; the last result is stored in 'last'.\n"
    "Soft errors (division by zero, sqrt of a negative, undefined names) give NaN.\n"
)


def build_command_table(repl: 'REPL') -> CommandTable:
    """Create the standard commands bound to ``repl``."""
    table = CommandTable()

    def exit_command() -> None:
        repl.stop()

    def clear_command() -> None:
        clear_screen()

    def clear_vars_command() -> str:
        repl.parser.symbols.clear()
        return "All variables deleted"

    def help_command() -> str:
        return HELP_HEADER + table.help_text()

    def show_command() -> str:
        lines = ["=== === === Variables === === ==="]
        for name, value in repl.parser.symbols.items():
            lines.append(f"-- {name} : {format_value(value)}")
        lines.append("==== === === === === === === ====")
        return "\n".join(lines)

    def info_command() -> str:
        backend = getattr(decimal, '__libmpdec_version__', 'pure Python')
        return "\n".join([
            "=== Math Interpreter Information ===",
            f"Version: {__version__}",
            f"Precision: {PRECISION_BITS} bits ({PRECISION_DIGITS} significant digits)",
            f"Decimal backend: {backend}",
            "Features: Variables, Arithmetic, Square root",
            "=====================================",
        ])

    table.register("-clear-vars", clear_vars_command, "delete all variables")
    table.register("-help", help_command, "show this help")
    table.register("-info", info_command, "information about the interpreter")
    table.register("-exit", exit_command, "leave the interpreter")
    table.register("-clear", clear_command, "clear the terminal")
    table.register("-show", show_command, "list the current variables")
    return table
