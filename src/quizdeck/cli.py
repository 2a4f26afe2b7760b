"""Command line entry point for quizdeck."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from rich.console import Console

from .bank import BankLoadError, QuestionBank, load_bank, load_default_bank
from .config import (
    CONFIG_FILENAME,
    ConfigOverrides,
    QuizdeckConfig,
    QuizdeckConfigError,
    load_config,
    write_config_template,
)
from .logs import LOGGER_NAME, setup_logging
from .selector import flatten_quiz, format_quiz_label, quiz_menu
from .session import InputProvider, resolve_quiz_id, run_quiz_session
from .tracker import ProgressTracker


def _load_bank(config: QuizdeckConfig, logger: logging.Logger) -> QuestionBank:
    if config.bank_path is None:
        bank = load_default_bank()
        logger.debug("Loaded bundled bank", extra={"quizzes": len(bank)})
        return bank
    bank = load_bank(config.bank_path)
    logger.debug(
        "Loaded bank",
        extra={"path": config.bank_path, "quizzes": len(bank)},
    )
    return bank


def _cmd_init(args: argparse.Namespace) -> int:
    path = Path(args.path or CONFIG_FILENAME).expanduser().resolve()
    try:
        write_config_template(path, overwrite=bool(args.force))
    except QuizdeckConfigError as exc:
        print(f"Error: {exc} (use --force to overwrite)", file=sys.stderr)
        return 1
    print(f"Created template {path}")
    return 0


def _cmd_list(bank: QuestionBank, config: QuizdeckConfig) -> int:
    for idx, entry in enumerate(quiz_menu(bank, config.quiz_order), start=1):
        marker = "*" if entry.available else " "
        print(f"{idx}. {marker} {entry.label} ({entry.quiz_id}) - {entry.blurb}")
    return 0


def _cmd_show(
    args: argparse.Namespace, bank: QuestionBank, config: QuizdeckConfig
) -> int:
    quiz_id = resolve_quiz_id(args.quiz, config.quiz_order)
    questions = flatten_quiz(bank, quiz_id)
    if not questions:
        print(f"No questions available for {format_quiz_label(quiz_id)}.")
        return 1
    for question in questions:
        print(f"#{question.number} [{question.category}] {question.prompt}")
    return 0


def _cmd_start(
    args: argparse.Namespace,
    bank: QuestionBank,
    config: QuizdeckConfig,
    *,
    console: Console | None,
    input_provider: InputProvider | None,
) -> int:
    tracker = ProgressTracker.with_default_quiz(
        bank, config.quiz_order, default=config.default_quiz
    )
    if args.quiz:
        tracker.select_quiz(resolve_quiz_id(args.quiz, config.quiz_order))

    if args.tui:
        from .view.quiz import QuizApp

        QuizApp(
            tracker, quiz_order=config.quiz_order, fallback=config.fallback
        ).run()
        return 0

    console = console or Console()
    provider = input_provider or (lambda: console.input("[bold cyan]> [/]"))
    run_quiz_session(
        tracker,
        console,
        provider,
        quiz_order=config.quiz_order,
        fallback=config.fallback,
    )
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        type=Path,
        help=f"Path to a TOML config file (defaults to ./{CONFIG_FILENAME}).",
    )
    common.add_argument(
        "--bank",
        type=Path,
        help="JSON question bank to use instead of the configured one.",
    )
    common.add_argument(
        "--log-level",
        help="Set the file logging level (defaults to INFO).",
    )
    common.add_argument(
        "--verbose",
        action="store_true",
        default=None,
        help="Echo log records to stderr.",
    )

    p = argparse.ArgumentParser(
        prog="quizdeck",
        description="Multiple-choice quizzes with instant explanations",
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_init = sub.add_parser("init", help="Create a quizdeck.toml template")
    sp_init.add_argument("--path", help="Where to write the template")
    sp_init.add_argument(
        "--force", action="store_true", help="Overwrite an existing file"
    )

    sub.add_parser(
        "list", parents=[common], help="List quiz slots and availability"
    )

    sp_show = sub.add_parser(
        "show", parents=[common], help="Print a quiz's questions in order"
    )
    sp_show.add_argument("quiz", help="Quiz id or menu number")

    sp_start = sub.add_parser(
        "start", parents=[common], help="Start a quiz session"
    )
    sp_start.add_argument(
        "quiz", nargs="?", help="Quiz id or menu number to open first"
    )
    sp_start.add_argument(
        "--tui", action="store_true", help="Use the Textual interface"
    )
    return p


def main(
    argv: Sequence[str] | None = None,
    *,
    console: Console | None = None,
    input_provider: InputProvider | None = None,
) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    if args.command == "init":
        return _cmd_init(args)

    try:
        result = load_config(
            config_path=args.config,
            overrides=ConfigOverrides(
                bank_path=args.bank,
                log_level=args.log_level,
                verbose=args.verbose,
            ),
        )
    except QuizdeckConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    config = result.config

    setup_logging(
        config.log_dir, level=config.log_level, verbose=config.verbose
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.debug(
        "quizdeck %s invoked",
        args.command,
        extra={"config_path": result.config_path},
    )

    try:
        bank = _load_bank(config, logger)
    except BankLoadError as exc:
        logger.error("Failed to load question bank: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.command == "list":
        return _cmd_list(bank, config)
    if args.command == "show":
        return _cmd_show(args, bank, config)
    if args.command == "start":
        return _cmd_start(
            args,
            bank,
            config,
            console=console,
            input_provider=input_provider,
        )
    parser.print_help()  # pragma: no cover - subparsers are required
    return 2


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
