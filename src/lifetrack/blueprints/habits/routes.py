"""Habit routes."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any

from flask import (
    current_app,
    flash,
    g,
    jsonify,
    redirect,
    render_template,
    request,
    url_for,
)
from sqlalchemy.exc import SQLAlchemyError

from ...constants.habits import (
    DAYS_OF_WEEK,
    DEFAULT_HABIT_COLOR,
    DEFAULT_PERIOD,
    HABIT_COLORS,
    PERIOD_DAYS,
)
from ...domain.calendar import parse_day_key
from ...domain.frequency import describe_frequency, frequency_from_habit, parse_frequency_days
from ...domain.repositories.habit import HabitNotFoundError
from ...extensions import get_session_factory
from ...infra.repositories.habit import SQLModelHabitRepository
from ...logging_config import get_logger
from ...models.habit import FrequencyType, Habit, HabitType
from ...services import insights
from ...services.habits import HabitStats
from ...services.profiles import ensure_local_profile
from ...services.tracking import HabitSnapshot, habit_stats, load_snapshots
from . import bp
from .forms import HabitForm, HabitUpdateForm, ToggleLogForm

logger = get_logger(__name__)

DETAIL_LOOKBACK_DAYS = 30


def _prefers_json_response() -> bool:
    accepts = request.accept_mimetypes
    return request.is_json or accepts["application/json"] > accepts["text/html"]


def _repository() -> SQLModelHabitRepository:
    return SQLModelHabitRepository(get_session_factory())


def _current_user_id() -> int:
    """Resolve the owning profile once per request."""

    if "lifetrack_user_id" not in g:
        config = current_app.config["LIFETRACK_CONFIG"]
        profile = ensure_local_profile(get_session_factory(), config.PROFILE_USERNAME)
        g.lifetrack_user_id = profile.id
    return g.lifetrack_user_id


def _today() -> date:
    provider = current_app.config.get("LIFETRACK_TODAY_PROVIDER") or date.today
    return provider()


def _resolve_period() -> str:
    period = request.args.get("period", DEFAULT_PERIOD)
    return period if period in PERIOD_DAYS else DEFAULT_PERIOD


def _request_payload() -> dict[str, Any]:
    if request.is_json:
        return dict(request.get_json(silent=True) or {})
    payload: dict[str, Any] = {key: value for key, value in request.form.items()}
    days = request.form.getlist("frequency_days")
    if days:
        payload["frequency_days"] = days
    return payload


def _polarity_labels(habit: Habit) -> dict[str, str]:
    """Wording for a completed/missed cell; BAD habits log clean days."""

    if habit.habit_type is HabitType.BAD:
        return {"done": "Clean day", "missed": "Slipped"}
    return {"done": "Done", "missed": "Missed"}


def _present_habit(snapshot: HabitSnapshot, *, today: date, days: int) -> dict[str, Any]:
    habit = snapshot.habit
    return {
        "id": habit.id,
        "name": habit.name,
        "description": habit.description or "",
        "color": habit.color or DEFAULT_HABIT_COLOR,
        "icon": habit.icon or "",
        "habit_type": habit.habit_type.value,
        "frequency_type": habit.frequency_type.value,
        "frequency_label": describe_frequency(snapshot.frequency),
        "labels": _polarity_labels(habit),
        "stats": snapshot.stats.to_dict(),
        "days": [status.to_dict() for status in snapshot.grid(today=today, days=days)],
    }


def _habit_payload(habit: Habit) -> dict[str, Any]:
    return {
        "id": habit.id,
        "name": habit.name,
        "description": habit.description,
        "color": habit.color,
        "icon": habit.icon,
        "habit_type": habit.habit_type.value,
        "frequency_type": habit.frequency_type.value,
        "frequency_value": habit.frequency_value,
        "frequency_days": sorted(parse_frequency_days(habit.frequency_days)),
        "is_archived": habit.is_archived,
    }


def _form_context(values: dict[str, Any], errors: dict[str, list[str]], **extra: Any) -> dict:
    selected_days = values.get("frequency_days") or []
    if isinstance(selected_days, str):
        selected_days = sorted(parse_frequency_days(selected_days))
    return {
        "form": values,
        "errors": errors,
        "selected_days": {int(day) for day in selected_days if str(day).isdigit()},
        "habit_types": list(HabitType),
        "frequency_types": list(FrequencyType),
        "days_of_week": DAYS_OF_WEEK,
        "colors": HABIT_COLORS,
        **extra,
    }


@bp.errorhandler(HabitNotFoundError)
def _habit_not_found(exc: HabitNotFoundError):
    if _prefers_json_response():
        return jsonify({"error": "habit_not_found", "habit_id": exc.habit_id}), 404
    return render_template("habits/missing.html", habit_id=exc.habit_id), 404


@bp.get("/")
def list_habits():
    """Show active habits with their day grid, stats and dashboard charts."""

    today = _today()
    period = _resolve_period()
    days = PERIOD_DAYS[period]
    snapshots = load_snapshots(_repository(), user_id=_current_user_id(), today=today)

    habits_view = [_present_habit(snapshot, today=today, days=days) for snapshot in snapshots]
    summary = insights.summarize(snapshots, today=today)

    if _prefers_json_response():
        return jsonify(
            {
                "period": period,
                "today": today.isoformat(),
                "habits": habits_view,
                "summary": {
                    "total_habits": summary.total_habits,
                    "completed_today": summary.completed_today,
                    "longest_streak": summary.longest_streak,
                    "average_completion_rate": summary.average_completion_rate,
                },
            }
        )

    heatmap_cells = insights.heatmap(snapshots, today=today)
    return render_template(
        "habits/index.html",
        habits=habits_view,
        period=period,
        periods=list(PERIOD_DAYS),
        today=today,
        summary=summary,
        completion_chart=insights.completion_chart(snapshots),
        daily_completions=insights.daily_completions(snapshots, today=today),
        best_habit=insights.best_habit(snapshots),
        heatmap_weeks=insights.heatmap_weeks(heatmap_cells),
    )


@bp.route("/new", methods=("GET", "POST"))
def new_habit():
    """Render and process the habit creation form."""

    if request.method == "GET":
        return render_template(
            "habits/form.html", **_form_context({}, {}, action=url_for("habits.new_habit"))
        )

    payload = _request_payload()
    form, errors = HabitForm.parse(payload)
    if form is None:
        if _prefers_json_response():
            return jsonify({"error": "invalid_payload", "details": errors}), 400
        return (
            render_template(
                "habits/form.html",
                **_form_context(payload, errors, action=url_for("habits.new_habit")),
            ),
            400,
        )

    habit = _repository().create(Habit(**form.to_fields()), user_id=_current_user_id())
    if _prefers_json_response():
        return jsonify(_habit_payload(habit)), 201
    flash(f"Habit '{habit.name}' created.", "success")
    return redirect(url_for("habits.list_habits"))


@bp.route("/<int:habit_id>/edit", methods=("GET", "POST"))
def edit_habit(habit_id: int):
    """Render and process the habit edit form; JSON bodies may be partial."""

    repo = _repository()
    user_id = _current_user_id()
    habit = repo.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise HabitNotFoundError(habit_id)
    action = url_for("habits.edit_habit", habit_id=habit_id)

    if request.method == "GET":
        values = _habit_payload(habit)
        return render_template(
            "habits/form.html", **_form_context(values, {}, action=action, habit=habit)
        )

    payload = _request_payload()
    if request.is_json:
        form, errors = HabitUpdateForm.parse(
            payload, current_frequency_type=habit.frequency_type
        )
        changes = form.to_changes(habit.frequency_type) if form is not None else {}
    else:
        full_form, errors = HabitForm.parse(payload)
        changes = full_form.to_fields() if full_form is not None else {}

    if errors:
        if _prefers_json_response():
            return jsonify({"error": "invalid_payload", "details": errors}), 400
        return (
            render_template(
                "habits/form.html",
                **_form_context(payload, errors, action=action, habit=habit),
            ),
            400,
        )

    updated = repo.update(habit_id, changes, user_id=user_id)
    if _prefers_json_response():
        return jsonify(_habit_payload(updated))
    flash(f"Habit '{updated.name}' updated.", "success")
    return redirect(url_for("habits.list_habits"))


@bp.post("/<int:habit_id>/archive")
def archive_habit(habit_id: int):
    """Hide a habit from active listings without deleting its history."""

    habit = _repository().archive(habit_id, user_id=_current_user_id())
    if _prefers_json_response():
        return jsonify(_habit_payload(habit))
    flash(f"Habit '{habit.name}' archived.", "info")
    return redirect(url_for("habits.list_habits"))


@bp.post("/<int:habit_id>/delete")
def delete_habit(habit_id: int):
    """Delete a habit together with its logs."""

    _repository().delete(habit_id, user_id=_current_user_id())
    if _prefers_json_response():
        return jsonify({"deleted": True, "habit_id": habit_id})
    flash("Habit deleted.", "info")
    return redirect(url_for("habits.list_habits"))


@bp.post("/<int:habit_id>/toggle")
def toggle_habit(habit_id: int):
    """Flip completion of a habit for one calendar day (today by default)."""

    payload = _request_payload()
    payload.setdefault("date", _today().isoformat())
    form, errors = ToggleLogForm.parse(payload)
    if form is None:
        if _prefers_json_response():
            return jsonify({"error": "invalid_payload", "details": errors}), 400
        flash("We couldn't read that date. Please try again.", "warning")
        return redirect(url_for("habits.list_habits"))

    try:
        completed = _repository().toggle_log(habit_id, form.day, user_id=_current_user_id())
    except SQLAlchemyError:
        logger.error(
            "Failed to toggle habit log",
            extra={"habit_id": habit_id, "day": form.day.isoformat()},
            exc_info=True,
        )
        if _prefers_json_response():
            return jsonify({"error": "toggle_failed"}), 500
        flash("We couldn't process that habit update. Please try again.", "warning")
        return redirect(url_for("habits.list_habits"))

    if _prefers_json_response():
        return jsonify({"habit_id": habit_id, "date": form.day.isoformat(), "completed": completed})
    verb = "Marked" if completed else "Cleared"
    flash(f"{verb} habit #{habit_id} for {form.day:%Y-%m-%d}.", "success")
    return redirect(url_for("habits.list_habits", period=_resolve_period()))


@bp.get("/<int:habit_id>")
def habit_detail(habit_id: int):
    """Show one habit with its logs between ``start`` and ``end``."""

    repo = _repository()
    user_id = _current_user_id()
    habit = repo.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise HabitNotFoundError(habit_id)

    today = _today()
    try:
        end = parse_day_key(request.args["end"]) if "end" in request.args else today
        start = (
            parse_day_key(request.args["start"])
            if "start" in request.args
            else end - timedelta(days=DETAIL_LOOKBACK_DAYS)
        )
    except ValueError as exc:
        if _prefers_json_response():
            return jsonify({"error": "invalid_range", "message": str(exc)}), 400
        flash(str(exc), "warning")
        return redirect(url_for("habits.habit_detail", habit_id=habit_id))

    logs = repo.get_logs(habit_id, user_id=user_id, start=start, end=end)
    stats = habit_stats(repo, habit_id, user_id=user_id, today=today)

    if _prefers_json_response():
        payload = _habit_payload(habit)
        payload["logs"] = [
            {"id": log.id, "date": log.occurred_on.isoformat(), "logged_at": log.logged_at.isoformat()}
            for log in logs
        ]
        payload["stats"] = stats.to_dict()
        return jsonify(payload)

    return render_template(
        "habits/detail.html",
        habit=habit,
        frequency_label=describe_frequency(frequency_from_habit(habit)),
        labels=_polarity_labels(habit),
        logs=logs,
        stats=stats,
        start=start,
        end=end,
    )


@bp.get("/<int:habit_id>/stats")
def habit_stats_json(habit_id: int):
    """Return the stats of one habit as JSON."""

    stats: HabitStats = habit_stats(
        _repository(), habit_id, user_id=_current_user_id(), today=_today()
    )
    return jsonify(stats.to_dict())


@bp.get("/stats")
def all_stats_json():
    """Return stats for every active habit keyed by habit id."""

    snapshots = load_snapshots(_repository(), user_id=_current_user_id(), today=_today())
    return jsonify({str(snapshot.habit_id): snapshot.stats.to_dict() for snapshot in snapshots})
