"""Home routes."""

from __future__ import annotations

from flask import redirect, url_for

from . import bp


@bp.get("/")
def landing_page():
    """Send visitors straight to their habits."""

    return redirect(url_for("habits.list_habits"))
