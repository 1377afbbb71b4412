"""Tests for the session helpers in studio_calendar.db.session."""

import pytest
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from studio_calendar.db import session as db_session_module
from studio_calendar.db.models import Studio


@pytest.fixture
def bound_session_factory(db_engine, monkeypatch):
    """Point the lazy session factory at the in-memory engine."""
    factory = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    monkeypatch.setattr(db_session_module, "_engine", db_engine)
    monkeypatch.setattr(db_session_module, "_SessionLocal", factory)
    return factory


def test_get_session_commits_new_rows(bound_session_factory):
    with db_session_module.get_session() as db:
        db.add(Studio(id="studio-x", name="Committed"))

    with bound_session_factory() as check:
        assert check.execute(select(Studio.name).where(Studio.id == "studio-x")).scalar_one() == "Committed"


def test_get_session_rolls_back_on_error(bound_session_factory):
    with pytest.raises(RuntimeError), db_session_module.get_session() as db:
        db.add(Studio(id="studio-y", name="Discarded"))
        db.flush()
        raise RuntimeError("boom")

    with bound_session_factory() as check:
        assert check.execute(select(Studio).where(Studio.id == "studio-y")).first() is None


def test_get_db_yields_and_closes(bound_session_factory):
    generator = db_session_module.get_db()
    db = next(generator)
    assert db.execute(select(Studio)).all() == []
    generator.close()


def test_init_db_is_idempotent(bound_session_factory):
    db_session_module.init_db()
    db_session_module.init_db()
