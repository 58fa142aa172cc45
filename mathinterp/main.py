# main.py
"""Command-line entry point."""

import argparse
from typing import List, Optional

from .config import configure_logging, load_settings
from .repl import REPL


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mathinterp",
        description="Interactive arbitrary-precision arithmetic interpreter.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Default: WARNING.",
    )
    parser.add_argument(
        "--history-file",
        type=str,
        help="File used to persist input history (default: ~/.mathinterp_history).",
    )
    parser.add_argument(
        "-e", "--expr",
        action="append",
        metavar="EXPR",
        help="Evaluate EXPR and exit instead of starting the REPL. May be repeated.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    settings = load_settings(log_level=args.log_level, history_file=args.history_file)
    configure_logging(settings.log_level)

    repl = REPL(settings)
    if args.expr:
        status = 0
        try:
            for expr in args.expr:
                ok, out = repl.evaluate_line(expr)
                if out:
                    print(out)
                if not ok:
                    status = 1
        finally:
            repl.parser.destroy()
        return status

    repl.repl_loop()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
