"""
MentalSum CLI - adaptive mental-arithmetic practice in the terminal.

Commands:
    mentalsum practice                 - Timed adaptive session
    mentalsum practice -s MultiplicationTimes9
                                       - Focused practice on one strategy
    mentalsum problem -n 5             - Print generated problems
    mentalsum strategies [ID]          - Strategy catalog and your progress
    mentalsum stats                    - Lifetime statistics
    mentalsum review                   - Recently missed problems
    mentalsum users list|create|select|delete
    mentalsum settings show|set|ops|range
    mentalsum export PATH / import PATH
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from pydantic import ValidationError

from config import Settings, get_settings
from mentalsum.cli.display import (
    console,
    render_preferences,
    render_problems,
    render_review,
    render_statistics,
    render_strategy_detail,
    render_strategy_table,
    render_users,
)
from mentalsum.cli.practice import run_practice
from mentalsum.core.errors import MentalSumError, StorageError, UserNotFoundError
from mentalsum.core.models import User
from mentalsum.core.preferences import UserPreferences
from mentalsum.core.strategies import STRATEGY_CATALOG
from mentalsum.core.types import Operation, StrategyId, initialize_strategy_performance
from mentalsum.engine.problem_engine import ProblemEngine
from mentalsum.profile.service import UserService
from mentalsum.session.controller import SessionController
from mentalsum.storage.sql_store import SqlStore

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="mentalsum",
    help="🧮 MentalSum - adaptive mental-arithmetic practice",
    add_completion=True,
    rich_markup_mode="rich",
)
users_app = typer.Typer(help="Manage learner profiles")
settings_app = typer.Typer(help="View and change practice settings")
app.add_typer(users_app, name="users")
app.add_typer(settings_app, name="settings")

PREFERENCE_KEYS = {
    "difficulty": "difficulty_level",
    "difficulty_level": "difficulty_level",
    "length": "session_length",
    "session_length": "session_length",
    "time": "time_limit",
    "time_limit": "time_limit",
    "hints": "show_strategies",
    "show_strategies": "show_strategies",
}


def configure_logging(settings: Settings) -> None:
    """Route loguru to stderr (and optionally a rotating file) at the configured level."""
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level, format="<level>{message}</level>")
    if settings.log_file:
        logger.add(settings.log_file, level=settings.log_level, rotation="1 MB", retention=3)


class CLIContext:
    """
    Dependency container for CLI commands.

    The store is opened lazily so commands that never touch the database
    (strategy detail, help) do not create one.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._store: SqlStore | None = None
        self._engine: ProblemEngine | None = None

    @property
    def store(self) -> SqlStore:
        if self._store is None:
            self._store = SqlStore.from_settings(self.settings)
        return self._store

    @property
    def users(self) -> UserService:
        return UserService(self.store)

    @property
    def engine(self) -> ProblemEngine:
        if self._engine is None:
            self._engine = ProblemEngine.seeded(self.settings.random_seed)
        return self._engine


def _fail(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(code=1)


def _require_user(ctx: CLIContext) -> User:
    user = ctx.users.get_current_user()
    if user is None:
        _fail("No learner selected. Create one with [bold]mentalsum users create NAME[/bold]")
    return user


def _parse_strategy(value: str | None) -> StrategyId | None:
    if value is None:
        return None
    strategy_id = StrategyId.parse(value)
    if strategy_id is None:
        lowered = value.lower()
        for sid, info in STRATEGY_CATALOG.items():
            if lowered in (sid.value.lower(), info.name.lower()):
                strategy_id = sid
                break
    if strategy_id is None:
        _fail(f"Unknown strategy: {value}. Run [bold]mentalsum strategies[/bold] for the list")
    return strategy_id


def _parse_operation(value: str) -> Operation:
    lowered = value.lower()
    for op in Operation:
        if lowered in (op.value, op.value[:3], op.symbol):
            return op
    _fail(f"Unknown operation: {value}")


@app.callback()
def main_callback() -> None:
    """Adaptive mental-arithmetic practice."""
    configure_logging(get_settings())


# =============================================================================
# Practice Commands
# =============================================================================


@app.command()
def practice(
    strategy: Annotated[
        str | None, typer.Option("--strategy", "-s", help="Practise one strategy only")
    ] = None,
    length: Annotated[
        int | None, typer.Option("--length", "-n", min=1, help="Problems in this session")
    ] = None,
    time_limit: Annotated[
        int | None, typer.Option("--time-limit", "-t", min=1, help="Seconds per problem")
    ] = None,
) -> None:
    """
    Start a timed practice session.

    Examples:
        mentalsum practice                      # Adaptive session
        mentalsum practice -s AdditionDoubles   # Focused practice
        mentalsum practice -n 5 -t 15           # Short, fast session
    """
    ctx = CLIContext()
    user = _require_user(ctx)
    focus = _parse_strategy(strategy)

    overrides = {}
    if length is not None:
        overrides["session_length"] = length
    if time_limit is not None:
        overrides["time_limit"] = time_limit
    preferences = user.preferences.model_copy(update=overrides) if overrides else None

    controller = SessionController(
        user,
        ctx.store,
        engine=ctx.engine,
        history_limit=ctx.settings.problem_history_limit,
        preferences=preferences,
    )
    if controller.start_session(focus) is None:
        _fail("No operations are enabled. Turn one on with [bold]mentalsum settings ops OPERATION on[/bold]")

    run_practice(controller, feedback_pause=ctx.settings.feedback_pause_seconds)


@app.command()
def problem(
    strategy: Annotated[
        str | None, typer.Option("--strategy", "-s", help="Generate for one strategy only")
    ] = None,
    count: Annotated[int, typer.Option("--count", "-n", min=1, help="Number of problems")] = 5,
) -> None:
    """Print generated problems without starting a session."""
    ctx = CLIContext()
    user = ctx.users.get_current_user()
    preferences = user.preferences if user else UserPreferences()
    performance = user.statistics.strategy_performance if user else initialize_strategy_performance()

    problems = ctx.engine.generate_batch(preferences, performance, count, _parse_strategy(strategy))
    if not problems:
        _fail("No operations are enabled")
    render_problems(problems)


# =============================================================================
# Progress Commands
# =============================================================================


@app.command()
def strategies(
    strategy: Annotated[str | None, typer.Argument(help="Show details for one strategy")] = None,
) -> None:
    """Show the strategy catalog with your accuracy per strategy."""
    if strategy is not None:
        render_strategy_detail(_parse_strategy(strategy))
        return
    ctx = CLIContext()
    render_strategy_table(ctx.users.get_current_user())


@app.command()
def stats() -> None:
    """Show lifetime and per-operation statistics."""
    ctx = CLIContext()
    render_statistics(_require_user(ctx))


@app.command()
def review(
    limit: Annotated[int, typer.Option("--limit", "-l", min=1, help="Problems to show")] = 10,
) -> None:
    """List recently missed problems with strategy hints."""
    ctx = CLIContext()
    user = _require_user(ctx)
    render_review(ctx.users.incorrect_problems(user, limit))


# =============================================================================
# Users
# =============================================================================


@users_app.command("list")
def users_list() -> None:
    """List learners (● marks the current one)."""
    ctx = CLIContext()
    render_users(ctx.users.list_users(), ctx.store.get_current_user_id())


@users_app.command("create")
def users_create(
    name: Annotated[str, typer.Argument(help="Learner name")],
    select: Annotated[bool, typer.Option("--select", help="Make this the current learner")] = False,
) -> None:
    """Create a learner profile."""
    ctx = CLIContext()
    try:
        user = ctx.users.create_user(name)
    except ValueError as e:
        _fail(str(e))
    if select:
        ctx.users.select_user(user.id)
    console.print(f"[green]✓[/green] Created [cyan]{user.name}[/cyan] ({user.id[:8]})")


@users_app.command("select")
def users_select(
    key: Annotated[str, typer.Argument(help="Learner id, id prefix or name")],
) -> None:
    """Switch the current learner."""
    ctx = CLIContext()
    try:
        user = ctx.users.select_user(ctx.users.find_user(key).id)
    except UserNotFoundError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Now practising as [cyan]{user.name}[/cyan]")


@users_app.command("delete")
def users_delete(
    key: Annotated[str, typer.Argument(help="Learner id, id prefix or name")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete a learner and all of their sessions."""
    ctx = CLIContext()
    try:
        user = ctx.users.find_user(key)
    except UserNotFoundError as e:
        _fail(str(e))
    if not yes and not typer.confirm(f"Delete {user.name} and all their sessions?"):
        raise typer.Exit()
    ctx.users.delete_user(user.id)
    console.print(f"[green]✓[/green] Deleted [cyan]{user.name}[/cyan]")


# =============================================================================
# Settings
# =============================================================================


@settings_app.command("show")
def settings_show() -> None:
    """Show the current learner's practice settings."""
    ctx = CLIContext()
    render_preferences(_require_user(ctx).preferences)


@settings_app.command("set")
def settings_set(
    key: Annotated[str, typer.Argument(help="difficulty, session_length, time_limit or show_strategies")],
    value: Annotated[str, typer.Argument(help="New value")],
) -> None:
    """Change one practice setting."""
    ctx = CLIContext()
    user = _require_user(ctx)
    field = PREFERENCE_KEYS.get(key.lower())
    if field is None:
        _fail(f"Unknown setting: {key}. Choose from {', '.join(sorted(set(PREFERENCE_KEYS.values())))}")
    try:
        updated = ctx.users.update_preferences(user.id, **{field: value.lower()})
    except ValidationError as e:
        _fail(f"Invalid value for {field}: {e.errors()[0]['msg']}")
    render_preferences(updated.preferences)


@settings_app.command("ops")
def settings_ops(
    operation: Annotated[str, typer.Argument(help="addition, subtraction, multiplication or division")],
    state: Annotated[str, typer.Argument(help="on or off")],
) -> None:
    """Enable or disable an operation."""
    ctx = CLIContext()
    user = _require_user(ctx)
    op = _parse_operation(operation)
    if state.lower() not in ("on", "off"):
        _fail("State must be 'on' or 'off'")
    updated = ctx.users.set_operation_enabled(user.id, op, state.lower() == "on")
    if not updated.preferences.enabled_operations.enabled():
        console.print("[yellow]⚠ Every operation is now disabled; practice needs at least one[/yellow]")
    render_preferences(updated.preferences)


@settings_app.command("range")
def settings_range(
    operation: Annotated[str, typer.Argument(help="addition, subtraction, multiplication or division")],
    low: Annotated[int, typer.Argument(help="Smallest operand")],
    high: Annotated[int, typer.Argument(help="Largest operand")],
) -> None:
    """Set the operand range for an operation."""
    ctx = CLIContext()
    user = _require_user(ctx)
    updated = ctx.users.set_number_range(user.id, _parse_operation(operation), low, high)
    render_preferences(updated.preferences)


# =============================================================================
# Backup
# =============================================================================


@app.command("export")
def export_data(
    path: Annotated[Path, typer.Argument(help="Backup file to write")],
) -> None:
    """Export every learner and session to a JSON backup."""
    ctx = CLIContext()
    data = ctx.store.export_data()
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    console.print(
        f"[green]✓[/green] Exported {len(data['users'])} users and "
        f"{len(data['sessions'])} sessions to {path}"
    )


@app.command("import")
def import_data(
    path: Annotated[Path, typer.Argument(help="Backup file to read")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Replace all data with a JSON backup."""
    if not path.exists():
        _fail(f"File not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        _fail(f"Not a valid JSON file: {e}")
    if not yes and not typer.confirm("This replaces all existing users and sessions. Continue?"):
        raise typer.Exit()
    ctx = CLIContext()
    try:
        ctx.store.import_data(data)
    except StorageError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Imported backup from {path}")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    try:
        app()
    except MentalSumError as e:
        logger.error(str(e))
        console.print(f"[red]✗[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
