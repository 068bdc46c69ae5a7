"""
Rich rendering for the MentalSum CLI.

Pure display helpers: every function takes domain objects and prints
to the shared console, nothing here mutates state.
"""

from __future__ import annotations

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from mentalsum.core.models import Problem, Session, User
from mentalsum.core.preferences import UserPreferences
from mentalsum.core.strategies import STRATEGY_CATALOG, concise_hint
from mentalsum.core.thresholds import accuracy_color, performance_category, session_stars
from mentalsum.core.types import Operation
from mentalsum.profile.service import format_relative_date
from mentalsum.session.controller import SessionController

console = Console()

CATEGORY_STYLES = {
    "untried": "dim",
    "weak": "red",
    "good": "yellow",
    "mastered": "green",
}


def _pct(value: float) -> Text:
    return Text(f"{value * 100:.0f}%", style=accuracy_color(value))


# =============================================================================
# Practice
# =============================================================================


def render_session_header(user: User, controller: SessionController) -> None:
    session = controller.session
    focus = STRATEGY_CATALOG[session.focused_strategy].name if session.focused_strategy else "Adaptive"
    console.print(
        Panel(
            f"[bold cyan]PRACTICE SESSION[/]\n"
            f"Learner: {user.name}\n"
            f"Problems: {session.session_length}  ·  {controller.time_limit}s each\n"
            f"Focus: {focus}\n"
            f"[dim]Type p to pause, Ctrl+C to finish early[/]",
            title="🧮",
            border_style="cyan",
        )
    )


def render_problem(controller: SessionController, show_hint: bool) -> None:
    problem = controller.current_problem
    progress = controller.progress()
    header = f"Problem {progress.index + 1}/{progress.total}"
    body = Text(f"{problem.expression} = ?", style="bold white")
    if show_hint:
        body.append(f"\n{concise_hint(problem)}", style="dim italic")
    console.print(
        Panel(
            body,
            title=header,
            title_align="left",
            subtitle=f"{controller.time_remaining}s left",
            border_style="blue",
            padding=(0, 1),
        )
    )


def render_feedback(problem: Problem) -> None:
    if problem.timed_out:
        console.print(f"[yellow]⏱ Time's up![/] {problem.expression} = [bold]{problem.correct_answer}[/]")
    elif problem.is_correct:
        console.print(f"[green]✓ Correct[/] [dim]({problem.time_spent}s)[/]")
    else:
        console.print(
            f"[red]✗ Incorrect[/] {problem.expression} = [bold]{problem.correct_answer}[/] "
            f"[dim](you answered {problem.user_answer})[/]"
        )


def render_session_summary(session: Session, user: User) -> None:
    stats = user.statistics
    answered = session.total_correct + session.total_wrong
    if answered == 0:
        console.print(Panel("[dim]No problems were answered.[/]", title="Session complete"))
        return

    stars = "★" * session_stars(session.accuracy) + "☆" * (3 - session_stars(session.accuracy))
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Score", f"{session.total_correct}/{answered}")
    table.add_row("Accuracy", _pct(session.accuracy))
    table.add_row("Average time", f"{session.average_time:.1f}s")
    table.add_row("Current streak", str(stats.current_streak))
    table.add_row("Best streak", str(stats.best_streak))
    console.print(Panel(table, title=f"Session complete  {stars}", border_style="green"))


# =============================================================================
# Reports
# =============================================================================


def render_problems(problems: list[Problem]) -> None:
    table = Table(title="Generated Problems")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Problem", style="bold")
    table.add_column("Answer", justify="right")
    table.add_column("Strategy", style="cyan")
    table.add_column("Difficulty", style="dim")
    for i, problem in enumerate(problems, 1):
        table.add_row(
            str(i),
            problem.expression,
            str(problem.correct_answer),
            STRATEGY_CATALOG[problem.intended_strategy].name,
            problem.difficulty.value,
        )
    console.print(table)


def render_strategy_table(user: User | None) -> None:
    table = Table(title="Strategies")
    table.add_column("ID", style="dim")
    table.add_column("Strategy", style="cyan")
    table.add_column("Operation")
    table.add_column("Attempts", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Status")
    for sid, info in STRATEGY_CATALOG.items():
        if user is None:
            table.add_row(sid.value, info.name, info.operation.value, "-", "-", "")
            continue
        metrics = user.statistics.strategy_performance[sid]
        category = performance_category(metrics)
        accuracy = _pct(metrics.accuracy) if metrics.total_attempts else Text("-", style="dim")
        table.add_row(
            sid.value,
            info.name,
            info.operation.value,
            str(metrics.total_attempts),
            accuracy,
            Text(category, style=CATEGORY_STYLES[category]),
        )
    console.print(table)


def render_strategy_detail(strategy_id) -> None:
    info = STRATEGY_CATALOG[strategy_id]
    steps = "\n".join(f"  {i}. {step}" for i, step in enumerate(info.steps, 1))
    console.print(
        Panel(
            f"{info.description}\n\n[bold]Example:[/] {info.example}\n\n[bold]Steps:[/]\n{steps}",
            title=f"{info.name} ({info.operation.value})",
            border_style="cyan",
        )
    )


def render_statistics(user: User) -> None:
    stats = user.statistics
    overall = stats.correct_answers / stats.total_problems if stats.total_problems else 0.0

    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value")
    summary.add_row("Sessions", str(stats.total_sessions))
    summary.add_row("Problems", str(stats.total_problems))
    summary.add_row("Accuracy", _pct(overall) if stats.total_problems else Text("-", style="dim"))
    summary.add_row("Average time", f"{stats.average_time_per_problem:.1f}s")
    summary.add_row("Current streak", str(stats.current_streak))
    summary.add_row("Best streak", str(stats.best_streak))
    summary.add_row("Last session", format_relative_date(stats.last_session_date))
    console.print(Panel(summary, title=f"📊 {user.name}", border_style="cyan"))

    table = Table(title="By operation")
    table.add_column("Operation", style="cyan")
    table.add_column("Attempted", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Avg time", justify="right")
    table.add_column("Fastest", justify="right")
    for op in Operation:
        op_stats = stats.operation_stats[op]
        if op_stats.attempted:
            accuracy = _pct(op_stats.correct / op_stats.attempted)
            avg, fastest = f"{op_stats.average_time:.1f}s", f"{op_stats.fastest_time}s"
        else:
            accuracy, avg, fastest = Text("-", style="dim"), "-", "-"
        table.add_row(f"{op.symbol} {op.value}", str(op_stats.attempted), accuracy, avg, fastest)
    console.print(table)


def render_review(problems: list[Problem]) -> None:
    if not problems:
        console.print("[green]No missed problems to review.[/]")
        return
    table = Table(title="Recently missed")
    table.add_column("Problem", style="bold")
    table.add_column("Answer", justify="right", style="green")
    table.add_column("Yours", justify="right", style="red")
    table.add_column("When", style="dim")
    table.add_column("Hint", style="italic")
    for problem in problems:
        yours = "timeout" if problem.timed_out else str(problem.user_answer)
        table.add_row(
            problem.expression,
            str(problem.correct_answer),
            yours,
            format_relative_date(problem.completed_at),
            concise_hint(problem),
        )
    console.print(table)


def render_users(users: list[User], current_id: str | None) -> None:
    if not users:
        console.print("[dim]No users yet. Create one with[/] [bold]mentalsum users create NAME[/]")
        return
    table = Table(title="Users")
    table.add_column("", width=1)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Last session")
    for user in users:
        table.add_row(
            "●" if user.id == current_id else "",
            user.id[:8],
            user.name,
            str(user.statistics.total_sessions),
            format_relative_date(user.statistics.last_session_date),
        )
    console.print(table)


def render_preferences(preferences: UserPreferences) -> None:
    table = Table(title="Settings", show_header=False)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    table.add_row("difficulty_level", preferences.difficulty_level.value)
    table.add_row("session_length", str(preferences.session_length))
    table.add_row("time_limit", f"{preferences.time_limit}s")
    table.add_row("show_strategies", "on" if preferences.show_strategies else "off")
    for op in Operation:
        enabled = preferences.enabled_operations.is_enabled(op)
        low, high = preferences.number_ranges.for_operation(op).normalized()
        state = "[green]on[/]" if enabled else "[red]off[/]"
        table.add_row(f"{op.value}", f"{state}  range {low}-{high}")
    console.print(table)
