"""Rich-powered console loop around a :class:`ProgressTracker`.

The loop renders whatever the tracker's snapshot describes (quiz picker,
current question with feedback, empty-quiz notice or completion panel),
reads one command per iteration and forwards it to the tracker. All state
lives in the tracker; this module only translates text commands and renders.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Callable, Literal

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .bank import EnrichedQuestion
from .feedback import FALLBACK_RATIONALE, feedback_for, rationale_for
from .selector import DEFAULT_QUIZ_ORDER, format_quiz_label, quiz_menu
from .tracker import ProgressTracker, SessionSnapshot

InputProvider = Callable[[], str]
ExitAction = Literal["quit", "interrupted"]
CommandType = Literal[
    "quiz", "select", "submit", "next", "replay", "why", "menu", "quit"
]

_KEYWORDS: dict[str, CommandType] = {
    "s": "submit",
    "submit": "submit",
    "n": "next",
    "next": "next",
    "finish": "next",
    "r": "replay",
    "replay": "replay",
    "m": "menu",
    "menu": "menu",
    "q": "quit",
    "quit": "quit",
    "exit": "quit",
}


@dataclass(frozen=True)
class SessionCommand:
    """Normalized user command parsed from console input."""

    type: CommandType
    arg: str | None = None


@dataclass(frozen=True)
class SessionOutcome:
    """Return value from ``run_quiz_session``."""

    exit_action: ExitAction
    snapshot: SessionSnapshot


def parse_session_command(raw: str | None) -> SessionCommand | None:
    """Parse raw user input into a structured command.

    Keywords win over choice keys, so a choice keyed ``N`` or ``S`` cannot be
    picked from the console.
    """

    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    head, _, rest = text.partition(" ")
    lowered = head.lower()
    rest = rest.strip()
    if lowered in _KEYWORDS and not rest:
        return SessionCommand(_KEYWORDS[lowered])
    if lowered in {"quiz", "why"}:
        return SessionCommand(lowered, rest) if rest else None  # type: ignore[arg-type]
    if not rest and head.isalnum():
        return SessionCommand("select", head)
    return None


def run_quiz_session(
    tracker: ProgressTracker,
    console: Console,
    input_provider: InputProvider,
    *,
    quiz_order: Sequence[str] = DEFAULT_QUIZ_ORDER,
    fallback: str = FALLBACK_RATIONALE,
) -> SessionOutcome:
    """Run an interactive session until the user quits or input runs out."""

    while True:
        render_snapshot(
            console, tracker, quiz_order=quiz_order, fallback=fallback
        )
        try:
            raw = input_provider()
        except (EOFError, KeyboardInterrupt, StopIteration):
            console.print("\n[bold yellow]Session interrupted.[/]")
            return SessionOutcome("interrupted", tracker.snapshot())
        command = parse_session_command(raw)
        if command is None:
            console.print("[red]Unrecognized command. Try again.[/]")
            continue
        if command.type == "quit":
            console.print("\n[bold yellow]See you next time.[/]")
            return SessionOutcome("quit", tracker.snapshot())
        _apply_command(
            command,
            tracker,
            console,
            quiz_order=quiz_order,
            fallback=fallback,
        )


def _apply_command(
    command: SessionCommand,
    tracker: ProgressTracker,
    console: Console,
    *,
    quiz_order: Sequence[str],
    fallback: str,
) -> None:
    if command.type == "quiz" and command.arg:
        tracker.select_quiz(resolve_quiz_id(command.arg, quiz_order))
        return
    if command.type == "select" and command.arg:
        if tracker.active_quiz_id is None and command.arg.isdigit():
            tracker.select_quiz(resolve_quiz_id(command.arg, quiz_order))
            return
        _select(tracker, console, command.arg)
        return
    if command.type == "submit":
        if not tracker.submit():
            console.print("[red]Pick an answer before submitting.[/]")
        return
    if command.type == "next":
        if not tracker.advance():
            console.print("[red]Submit your answer before moving on.[/]")
        return
    if command.type == "replay":
        if not tracker.replay():
            console.print("[red]Pick a quiz first.[/]")
        return
    if command.type == "menu":
        tracker.exit_quiz()
        return
    if command.type == "why" and command.arg:
        _explain(tracker, console, command.arg, fallback)


def _select(tracker: ProgressTracker, console: Console, raw: str) -> None:
    question = tracker.current_question
    key = resolve_choice_key(question, raw) if question else None
    if key is None or not tracker.select_choice(key):
        console.print(
            "[red]'%s' is not a valid choice right now.[/red]" % raw,
        )


def _explain(
    tracker: ProgressTracker, console: Console, raw: str, fallback: str
) -> None:
    snapshot = tracker.snapshot()
    question = snapshot.question
    if question is None or snapshot.finished:
        console.print("[red]There is no question to explain.[/]")
        return
    if not snapshot.submitted:
        console.print("[yellow]Submit first, then ask why.[/]")
        return
    key = resolve_choice_key(question, raw)
    if key is None:
        console.print(
            "[red]'%s' is not a choice for this question.[/red]" % raw,
        )
        return
    correct = key == question.correct_answer
    console.print(
        Panel(
            rationale_for(question, key, fallback),
            title=f"Why {key}",
            border_style="green" if correct else "red",
        )
    )


def resolve_quiz_id(raw: str, quiz_order: Sequence[str]) -> str:
    """Map a 1-based menu number onto ``quiz_order``; ids pass through."""
    text = raw.strip()
    if text.isdigit() and 1 <= int(text) <= len(quiz_order):
        return quiz_order[int(text) - 1]
    return text


def resolve_choice_key(
    question: EnrichedQuestion, raw: str
) -> str | None:
    """Match ``raw`` to a choice key, exactly first, then ignoring case."""
    text = raw.strip()
    if question.has_choice(text):
        return text
    for key in question.choice_keys():
        if key.lower() == text.lower():
            return key
    return None


def render_snapshot(
    console: Console,
    tracker: ProgressTracker,
    *,
    quiz_order: Sequence[str] = DEFAULT_QUIZ_ORDER,
    fallback: str = FALLBACK_RATIONALE,
) -> None:
    snapshot = tracker.snapshot()
    console.print()
    if snapshot.active_quiz_id is None:
        _render_menu(console, tracker, quiz_order)
    elif snapshot.total == 0:
        console.print(
            Panel(
                "No questions available for this quiz yet.\n"
                "Pick another quiz while this one is being prepared.",
                title=format_quiz_label(snapshot.active_quiz_id),
                border_style="yellow",
            )
        )
        console.print(Text("Commands: quiz <n>, menu, quit", style="dim"))
    elif snapshot.finished:
        _render_finished(console, snapshot)
    else:
        _render_question(console, snapshot, fallback)


def _render_menu(
    console: Console, tracker: ProgressTracker, quiz_order: Sequence[str]
) -> None:
    console.rule(Text("Pick your quiz", style="bold"))
    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Quiz", style="bold")
    table.add_column("About")
    for idx, entry in enumerate(quiz_menu(tracker.bank, quiz_order), start=1):
        style = "" if entry.available else "dim"
        table.add_row(str(idx), entry.label, Text(entry.blurb, style=style))
    console.print(table)
    console.print(
        Text(
            "Pick a quiz to get started: enter its number or 'quiz <id>'. "
            "You will see one question at a time with instant feedback.",
            style="dim",
        )
    )


def _render_question(
    console: Console, snapshot: SessionSnapshot, fallback: str
) -> None:
    question = snapshot.question
    if question is None:
        return
    header = Text.assemble(
        (format_quiz_label(snapshot.active_quiz_id or ""), "bold cyan"),
        ("  ", ""),
        (question.category, "magenta"),
        (f"  Question {snapshot.position + 1} of {snapshot.total}", "dim"),
    )
    console.rule(header)
    console.print(Text(question.prompt, style="bold"))

    table = Table(show_header=False, box=box.SIMPLE, expand=True)
    table.add_column("Key", justify="center", style="cyan")
    table.add_column("Choice")
    for key, text in question.choices.items():
        picked = key == snapshot.selected_choice
        row = Text(("• " if picked else "  ") + text)
        if picked and snapshot.submitted:
            row.stylize(
                "bold green" if key == question.correct_answer else "bold red"
            )
        elif picked:
            row.stylize("bold")
        table.add_row(key, row)
    console.print(table)

    feedback = feedback_for(snapshot, fallback)
    if feedback is not None:
        console.print(
            Panel(
                feedback.rationale,
                title=feedback.headline,
                border_style="green" if feedback.correct else "red",
            )
        )
        step = "finish" if snapshot.is_last else "next"
        hint = f"Commands: {step}, why <key>, choice key to re-pick, menu, quit"
    else:
        hint = (
            "Commands: choice key, submit, menu, quit "
            "(submit first, then ask why)"
        )
    console.print(Text(hint, style="dim"))


def _render_finished(console: Console, snapshot: SessionSnapshot) -> None:
    label = format_quiz_label(snapshot.active_quiz_id or "Quiz")
    console.print(
        Panel(
            "Keep the streak going - pick another quiz or replay this one "
            "to reinforce the explanations.",
            title=f"Nice run through {label}.",
            border_style="green",
        )
    )
    console.print(Text("Commands: replay, menu, quit", style="dim"))
