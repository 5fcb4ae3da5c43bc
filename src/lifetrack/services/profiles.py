"""Profile bootstrap for the single local owner."""

from __future__ import annotations

from typing import Callable, ContextManager

from sqlmodel import Session, select

from ..models.user import UserProfile

SessionFactory = Callable[[], ContextManager[Session]]

LOCAL_USERNAME = "local"


def get_profile(username: str, session_factory: SessionFactory) -> UserProfile | None:
    """Fetch a profile by username."""
    with session_factory() as session:
        profile = session.exec(
            select(UserProfile).where(UserProfile.username == username.strip())
        ).first()
        if profile:
            session.expunge(profile)
        return profile


def ensure_local_profile(
    session_factory: SessionFactory, username: str = LOCAL_USERNAME
) -> UserProfile:
    """Create or return the profile that owns habits in single-user mode."""

    username = username.strip() or LOCAL_USERNAME
    with session_factory() as session:
        profile = session.exec(select(UserProfile).where(UserProfile.username == username)).first()
        if profile:
            session.expunge(profile)
            return profile
        profile = UserProfile(username=username, display_name=username.title())
        session.add(profile)
        session.commit()
        session.refresh(profile)
        session.expunge(profile)
        return profile
