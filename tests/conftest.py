"""Shared fixtures."""

import pytest

import db


@pytest.fixture
def database(tmp_path, monkeypatch):
    """Point the store at a fresh database file."""
    monkeypatch.setattr(db, "DATABASE_PATH", tmp_path / "weights.db")
    db.init_db()
    return tmp_path / "weights.db"
