"""Flask CLI commands for LifeTrack."""

from __future__ import annotations

from datetime import date

import click
from flask import current_app

from .extensions import get_session_factory
from .services.profiles import ensure_local_profile


def _profile_id() -> int:
    config = current_app.config["LIFETRACK_CONFIG"]
    return ensure_local_profile(get_session_factory(), config.PROFILE_USERNAME).id


def init_app(app) -> None:
    """Register CLI commands on the Flask app."""

    @app.cli.command("lifetrack-seed")
    @click.option("--demo", is_flag=True, default=False, help="Seed demo habits with history")
    def lifetrack_seed(demo: bool) -> None:
        """Seed application data (demo)."""

        if not demo:
            click.echo("No action specified. Use --demo to seed demo data.")
            return

        from .services.demo_seed import run_demo_seed

        summary = run_demo_seed(get_session_factory(), user_id=_profile_id())
        click.echo(f"Demo seed completed: {summary.habits} habits, {summary.logs} logs.")

    @app.cli.command("lifetrack-stats")
    @click.option(
        "--today",
        "today_raw",
        default=None,
        help="Reference day as YYYY-MM-DD (defaults to the current date)",
    )
    def lifetrack_stats(today_raw: str | None) -> None:
        """Print streaks and completion rates for active habits."""

        from .domain.calendar import parse_day_key
        from .infra.repositories.habit import SQLModelHabitRepository
        from .services.tracking import load_snapshots

        try:
            today = parse_day_key(today_raw) if today_raw else date.today()
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--today") from exc

        repo = SQLModelHabitRepository(get_session_factory())
        snapshots = load_snapshots(repo, user_id=_profile_id(), today=today)
        if not snapshots:
            click.echo("No active habits.")
            return
        for snapshot in snapshots:
            stats = snapshot.stats
            click.echo(
                f"{snapshot.habit.name}: streak {stats.current_streak} "
                f"(best {stats.longest_streak}), "
                f"{stats.completion_rate}% of {stats.total_expected} expected days"
            )
