from __future__ import annotations

from typing import Sequence

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, Vertical
from textual.widget import Widget
from textual.widgets import Button, Static

from ..feedback import FALLBACK_RATIONALE, feedback_for, rationale_for
from ..selector import DEFAULT_QUIZ_ORDER, format_quiz_label, quiz_menu
from ..session import resolve_choice_key, resolve_quiz_id
from ..tracker import ProgressTracker, SessionSnapshot


class QuizApp(App):
    CSS_PATH = None
    CSS = """
#menu { height: auto; }
#choices Button.selected { background: $accent; color: black; }
#choices Button.correct { background: $success; }
#choices Button.wrong { background: $error; }
#feedback.correct { color: $success; }
#feedback.wrong { color: $error; }
#status { color: $text-muted; }
"""
    BINDINGS = [
        ("1", "quiz_1", "Quiz 1"),
        ("2", "quiz_2", "Quiz 2"),
        ("3", "quiz_3", "Quiz 3"),
        ("a", "select_a", "Select A"),
        ("b", "select_b", "Select B"),
        ("c", "select_c", "Select C"),
        ("d", "select_d", "Select D"),
        ("enter", "submit", "Submit"),
        ("s", "submit", "Submit"),
        ("n", "next", "Next"),
        ("r", "replay", "Replay"),
        ("m", "menu", "Menu"),
        ("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        tracker: ProgressTracker,
        *,
        quiz_order: Sequence[str] = DEFAULT_QUIZ_ORDER,
        fallback: str = FALLBACK_RATIONALE,
    ):
        super().__init__()
        self._tracker = tracker
        self._quiz_order = tuple(quiz_order)
        self._fallback = fallback
        self._stage_ready = False

    def compose(self) -> ComposeResult:
        with Horizontal(id="menu"):
            entries = quiz_menu(self._tracker.bank, self._quiz_order)
            for idx, entry in enumerate(entries, start=1):
                yield Button(entry.label, id=f"quiz-{idx}")
        with Container(id="stage"):
            for widget in self._stage_widgets():
                yield widget
        yield Static(self.status_text(), id="status")

    # Pure helpers (testable without running the App)
    @property
    def tracker(self) -> ProgressTracker:
        return self._tracker

    def choose_quiz(self, ref: str) -> bool:
        changed = self._tracker.select_quiz(
            resolve_quiz_id(ref, self._quiz_order)
        )
        self._update_stage()
        return changed

    def select_answer(self, raw: str) -> bool:
        question = self._tracker.current_question
        key = resolve_choice_key(question, raw) if question else None
        if key is None:
            return False
        changed = self._tracker.select_choice(key)
        self._update_stage()
        return changed

    def submit_answer(self) -> bool:
        changed = self._tracker.submit()
        self._update_stage()
        return changed

    def next_question(self) -> bool:
        changed = self._tracker.advance()
        self._update_stage()
        return changed

    def replay_quiz(self) -> bool:
        changed = self._tracker.replay()
        self._update_stage()
        return changed

    def leave_quiz(self) -> bool:
        changed = self._tracker.exit_quiz()
        self._update_stage()
        return changed

    def status_text(self) -> str:
        snapshot = self._tracker.snapshot()
        if snapshot.active_quiz_id is None:
            return "No quiz selected"
        label = format_quiz_label(snapshot.active_quiz_id)
        if snapshot.total == 0:
            return f"{label}: no questions"
        if snapshot.finished:
            return f"{label}: finished"
        return f"{label}: question {snapshot.position + 1}/{snapshot.total}"

    def _stage_widgets(self) -> list[Widget]:
        snapshot = self._tracker.snapshot()
        if snapshot.active_quiz_id is None:
            return [
                Static(
                    "Pick a quiz to get started. You will see one question "
                    "at a time with instant feedback.",
                    id="empty",
                )
            ]
        if snapshot.total == 0:
            return [
                Static(
                    "No questions available for this quiz yet. Pick another "
                    "quiz while this one is being prepared.",
                    id="empty",
                )
            ]
        if snapshot.finished:
            label = format_quiz_label(snapshot.active_quiz_id)
            return [
                Static(f"Nice run through {label}.", id="finished"),
                Button("Replay this quiz", id="replay"),
                Button("Pick another quiz", id="menu"),
            ]
        return [QuestionView(snapshot, fallback=self._fallback)]

    def on_mount(self) -> None:
        self._stage_ready = True

    def _update_stage(self) -> None:
        if not self._stage_ready:
            return
        self.call_later(self._rebuild_stage)

    async def _rebuild_stage(self) -> None:
        # Old children must be gone before ids like "empty" are reused.
        stage = self.query_one("#stage", Container)
        await stage.remove_children()
        await stage.mount(*self._stage_widgets())
        self.query_one("#status", Static).update(self.status_text())

    # Actions and events
    def action_quiz_1(self) -> None:
        self.choose_quiz("1")

    def action_quiz_2(self) -> None:
        self.choose_quiz("2")

    def action_quiz_3(self) -> None:
        self.choose_quiz("3")

    def action_select_a(self) -> None:
        self.select_answer("A")

    def action_select_b(self) -> None:
        self.select_answer("B")

    def action_select_c(self) -> None:
        self.select_answer("C")

    def action_select_d(self) -> None:
        self.select_answer("D")

    def action_submit(self) -> None:
        self.submit_answer()

    def action_next(self) -> None:
        self.next_question()

    def action_replay(self) -> None:
        self.replay_quiz()

    def action_menu(self) -> None:
        self.leave_quiz()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = getattr(event.button, "id", "") or ""
        if bid.startswith("quiz-"):
            self.choose_quiz(bid[len("quiz-"):])
        elif bid.startswith("choice-"):
            question = self._tracker.current_question
            index = int(bid[len("choice-"):])
            if question is not None and index < len(question.choice_keys()):
                self.select_answer(question.choice_keys()[index])
        elif bid == "submit":
            self.submit_answer()
        elif bid == "next":
            self.next_question()
        elif bid == "replay":
            self.replay_quiz()
        elif bid == "menu":
            self.leave_quiz()


class QuestionView(Widget):
    """Renders the current question, its choices and the graded feedback.

    Once the answer is submitted each choice button carries its rationale as a
    tooltip, so hovering explains why an option is right or wrong.
    """

    def __init__(
        self,
        snapshot: SessionSnapshot,
        *,
        fallback: str = FALLBACK_RATIONALE,
    ) -> None:
        super().__init__()
        self.snapshot = snapshot
        self.fallback = fallback

    def compose(self) -> ComposeResult:
        snapshot = self.snapshot
        question = snapshot.question
        if question is None:
            return
        yield Static(self.header_text(), id="header")
        yield Static(question.prompt, id="stem")
        with Vertical(id="choices"):
            for idx, (key, text) in enumerate(question.choices.items()):
                btn = Button(f"{key}) {text}", id=f"choice-{idx}")
                css = self.choice_class(key)
                if css:
                    btn.add_class(css)
                tip = self.explanation_for(key)
                if tip:
                    btn.tooltip = tip
                yield btn
        feedback = feedback_for(snapshot, self.fallback)
        status = Static(self.feedback_text(), id="feedback")
        if feedback is not None:
            status.add_class("correct" if feedback.correct else "wrong")
        yield status
        yield Static(self.hint_text(), id="hint")
        if snapshot.submitted:
            label = "Finish" if snapshot.is_last else "Next"
            yield Button(label, id="next")
        else:
            yield Button(
                "Submit",
                id="submit",
                disabled=snapshot.selected_choice is None,
            )

    def header_text(self) -> str:
        snapshot = self.snapshot
        question = snapshot.question
        label = format_quiz_label(snapshot.active_quiz_id or "")
        category = question.category if question else ""
        return (
            f"{label} | {category} | "
            f"Question {snapshot.position + 1} of {snapshot.total}"
        )

    def choice_class(self, key: str) -> str | None:
        snapshot = self.snapshot
        if key != snapshot.selected_choice:
            return None
        if not snapshot.submitted or snapshot.question is None:
            return "selected"
        return (
            "correct" if key == snapshot.question.correct_answer else "wrong"
        )

    def explanation_for(self, key: str) -> str | None:
        """Rationale for ``key``, only revealed after submitting."""
        if not self.snapshot.submitted or self.snapshot.question is None:
            return None
        return rationale_for(self.snapshot.question, key, self.fallback)

    def feedback_text(self) -> str:
        feedback = feedback_for(self.snapshot, self.fallback)
        if feedback is None:
            return ""
        return f"{feedback.headline}: {feedback.rationale}"

    def hint_text(self) -> str:
        if self.snapshot.submitted:
            return "Hover to see why each option is right or wrong."
        return "Submit first, then hover to see reasoning."
