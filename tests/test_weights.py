"""Tests for weights module and the store behind it."""

from datetime import date, datetime, timezone

import pytest

import db
from weights import (
    ValidationError,
    existing_user_only,
    has_entry_for_day,
    list_weights,
    parse_weight,
    record_weight,
)


def count_rows(table: str) -> int:
    with db.get_connection() as conn:
        return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


class TestParseWeight:
    """Tests for parse_weight function."""

    @pytest.mark.parametrize(
        "raw,expected",
        [("150.5", 150.5), (" 180 ", 180.0), ("+175", 175.0), ("180.", 180.0), (".5", 0.5),
         (172, 172.0), (199.9, 199.9)],
    )
    def test_valid(self, raw, expected):
        """Numbers and numeric strings are accepted."""
        assert parse_weight(raw) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "raw",
        [None, "", "not-a-number", "nan", "inf", "1e2", "1_000", "\u0661\u0665\u0660",
         "150.5.1", float("nan"), 10**400, True, [150], {"w": 1}],
    )
    def test_not_a_number(self, raw):
        """Non-numeric and non-finite input is rejected."""
        with pytest.raises(ValidationError):
            parse_weight(raw)

    @pytest.mark.parametrize("raw", [0, -10, "-1", 1500.1])
    def test_out_of_range(self, raw):
        """Weights must be positive and plausible."""
        with pytest.raises(ValidationError):
            parse_weight(raw)


class TestRecordWeight:
    """Tests for record_weight function."""

    def test_creates_default_user(self, database):
        """First entry provisions exactly one user."""
        entry = record_weight("150.5")

        assert entry["weight"] == 150.5
        assert entry["id"] > 0
        assert count_rows("users") == 1
        assert count_rows("weights") == 1

        user = db.get_user("default")
        assert user["id"] == entry["userId"]
        assert user["birth_date"] is None
        assert user["height_in"] is None

    def test_listed_after_recording(self, database):
        """A recorded entry shows up in the list."""
        record_weight("150.5")

        entries = list_weights()
        assert len(entries) == 1
        assert entries[0]["weight"] == 150.5
        assert entries[0]["user"] == {"birthDate": None, "height": None}

    def test_reuses_existing_user(self, database):
        """Later entries do not create more users."""
        record_weight(180)
        record_weight(179.4)
        record_weight(178.8)

        assert count_rows("users") == 1
        assert count_rows("weights") == 3

    def test_invalid_weight_persists_nothing(self, database):
        """Rejected input writes neither a user nor an entry."""
        with pytest.raises(ValidationError):
            record_weight("not-a-number")

        assert count_rows("users") == 0
        assert count_rows("weights") == 0

    def test_default_timestamp_is_utc_now(self, database):
        """Entries are stamped with the submission time."""
        before = datetime.now(timezone.utc)
        entry = record_weight(180)
        after = datetime.now(timezone.utc)

        recorded_at = datetime.fromisoformat(entry["date"])
        assert before.replace(microsecond=0) <= recorded_at <= after

    def test_existing_user_only_policy(self, database):
        """The strict policy refuses unknown users."""
        with pytest.raises(ValidationError):
            record_weight(180, user_key="nobody", provision=existing_user_only)
        assert count_rows("weights") == 0

        db.ensure_user("nobody")
        entry = record_weight(180, user_key="nobody", provision=existing_user_only)
        assert entry["weight"] == 180.0

    def test_custom_policy(self, database):
        """Any callable can resolve the user."""
        user_id = db.ensure_user("alice", birth_date=date(1985, 4, 2), height_in=64)
        seen = []

        def policy(user_key):
            seen.append(user_key)
            return user_id

        entry = record_weight(130, user_key="alice", provision=policy)
        assert seen == ["alice"]
        assert entry["userId"] == user_id

    def test_storage_error(self, tmp_path, monkeypatch):
        """Database failures surface as StorageError."""
        monkeypatch.setattr(db, "DATABASE_PATH", tmp_path / "missing" / "weights.db")
        with pytest.raises(db.StorageError):
            record_weight(180)


class TestListWeights:
    """Tests for list_weights function."""

    def test_empty_store(self, database):
        """No entries gives an empty list."""
        assert list_weights() == []

    def test_ascending_by_date(self, database):
        """Entries come back oldest first regardless of insertion order."""
        record_weight(182, now=datetime(2024, 3, 3, 8, tzinfo=timezone.utc))
        record_weight(185, now=datetime(2024, 3, 1, 8, tzinfo=timezone.utc))
        record_weight(183, now=datetime(2024, 3, 2, 8, tzinfo=timezone.utc))

        assert [e["weight"] for e in list_weights()] == [185, 183, 182]

    def test_ties_keep_insertion_order(self, database):
        """Entries with the same timestamp are listed stably."""
        stamp = datetime(2024, 3, 1, 8, tzinfo=timezone.utc)
        record_weight(181, now=stamp)
        record_weight(180, now=stamp)

        assert [e["weight"] for e in list_weights()] == [181, 180]

    def test_includes_user_profile(self, database):
        """Each entry carries the owner's birth date and height."""
        db.ensure_user("default", birth_date=date(1988, 9, 12), height_in=70)
        record_weight(190)

        assert list_weights()[0]["user"] == {"birthDate": "1988-09-12", "height": 70}

    def test_filter_by_user(self, database):
        """A user key limits the list to that user's entries."""
        record_weight(180, user_key="alice")
        record_weight(200, user_key="bob")

        assert [e["weight"] for e in list_weights("alice")] == [180]
        assert [e["weight"] for e in list_weights("bob")] == [200]
        assert len(list_weights()) == 2
        assert list_weights("carol") == []

    def test_storage_error(self, tmp_path, monkeypatch):
        """Database failures surface as StorageError."""
        monkeypatch.setattr(db, "DATABASE_PATH", tmp_path / "missing" / "weights.db")
        with pytest.raises(db.StorageError):
            list_weights()


class TestEnsureUser:
    """Tests for ensure_user function."""

    def test_idempotent(self, database):
        """Repeated calls return the same row."""
        first = db.ensure_user("default")
        second = db.ensure_user("default")

        assert first == second
        assert count_rows("users") == 1

    def test_does_not_update_existing(self, database):
        """Profile values of an existing user are left alone."""
        db.ensure_user("default", birth_date=date(1990, 1, 1), height_in=67)
        db.ensure_user("default", birth_date=date(2000, 1, 1), height_in=80)

        user = db.get_user("default")
        assert user["birth_date"] == "1990-01-01"
        assert user["height_in"] == 67

    def test_first_user(self, database):
        """The oldest user is returned first."""
        assert db.get_first_user() is None
        db.ensure_user("alice")
        db.ensure_user("bob")
        assert db.get_first_user()["user_key"] == "alice"


class TestHasEntryForDay:
    """Tests for has_entry_for_day function."""

    def test_no_entries(self):
        """Nothing logged means nothing logged today."""
        assert has_entry_for_day([]) is False

    def test_matching_day(self):
        """A local timestamp on the day counts."""
        entries = [{"date": "2024-03-01T08:00:00.000", "weight": 180}]
        assert has_entry_for_day(entries, day=date(2024, 3, 1)) is True
        assert has_entry_for_day(entries, day=date(2024, 3, 2)) is False

    def test_today(self, database):
        """An entry recorded now is on today's date."""
        record_weight(180)
        assert has_entry_for_day(list_weights()) is True
