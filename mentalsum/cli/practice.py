"""
Interactive practice loop.

Wall-clock time spent at the prompt is converted into 1-second ticks for
the SessionController, so the controller stays the only owner of the
countdown. A problem that ran out of time while the learner was typing is
recorded as a timeout and the late answer is discarded.
"""

from __future__ import annotations

import time

from loguru import logger
from rich.prompt import Prompt

from mentalsum.cli.display import (
    console,
    render_feedback,
    render_problem,
    render_session_header,
    render_session_summary,
)
from mentalsum.core.errors import InvalidAnswerError
from mentalsum.core.models import Session
from mentalsum.session.controller import SessionController

PAUSE_COMMANDS = {"p", "pause"}


class TickClock:
    """Turns monotonic wall time into whole-second ticks, carrying the remainder."""

    def __init__(self) -> None:
        self._mark = time.monotonic()
        self._carry = 0.0

    def restart(self) -> None:
        self._mark = time.monotonic()

    def take_ticks(self) -> int:
        now = time.monotonic()
        self._carry += now - self._mark
        self._mark = now
        ticks = int(self._carry)
        self._carry -= ticks
        return ticks

    def reset(self) -> None:
        self._carry = 0.0
        self.restart()


def run_practice(controller: SessionController, feedback_pause: float = 1.0) -> Session | None:
    """
    Run one session to completion at the terminal.

    Returns:
        The completed session, or None if no session could be started
    """
    session = controller.session
    if session is None:
        return None

    render_session_header(controller.user, controller)
    show_hint = controller.user.preferences.show_strategies
    clock = TickClock()

    try:
        while not controller.is_completed:
            render_problem(controller, show_hint)
            clock.reset()
            outcome = None
            while outcome is None and not controller.is_completed:
                raw = Prompt.ask("Answer", default="", show_default=False, console=console).strip()
                timed_out = controller.elapse(clock.take_ticks())
                if timed_out is not None:
                    outcome = timed_out
                    break
                if raw.lower() in PAUSE_COMMANDS:
                    controller.pause()
                    Prompt.ask(
                        "[yellow]⏸ Paused[/] [dim]press Enter to resume[/]",
                        default="",
                        show_default=False,
                        console=console,
                    )
                    controller.resume()
                    clock.restart()
                    continue
                try:
                    outcome = controller.submit_answer(raw)
                except InvalidAnswerError:
                    console.print("[dim]Please enter a whole number (or p to pause).[/]")
            if outcome is not None:
                render_feedback(outcome)
                if feedback_pause and not controller.is_completed:
                    time.sleep(feedback_pause)
    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Ending session early...[/]")
        logger.info("Session interrupted by user")
        controller.end_session()

    render_session_summary(session, controller.user)
    return session
