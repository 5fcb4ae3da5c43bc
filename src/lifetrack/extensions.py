"""Database and extension wiring for LifeTrack."""

from __future__ import annotations

from flask import Flask, current_app

from .config import BaseConfig
from .infra.database import bootstrap_database

_EXTENSION_KEY = "lifetrack"


def init_db(app: Flask) -> None:
    """Initialize the SQLModel engine using configuration from the app."""

    config: BaseConfig = app.config["LIFETRACK_CONFIG"]
    engine, session_factory = bootstrap_database(config)

    state = app.extensions.setdefault(_EXTENSION_KEY, {})
    state["engine"] = engine
    state["session_factory"] = session_factory


def _state() -> dict:
    state = current_app.extensions.get(_EXTENSION_KEY)
    if not state or "engine" not in state:
        raise RuntimeError("Database engine not initialized")
    return state


def get_engine():
    """Return the engine bound to the current application."""

    return _state()["engine"]


def get_session_factory():
    """Return the session factory bound to the current application."""

    return _state()["session_factory"]
