"""Weight entry lifecycle: validate, provision the user, persist, list."""

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Callable

import db
from config import DEFAULT_USER_KEY, MAX_WEIGHT_LBS

log = logging.getLogger(__name__)

# Plain decimal number, optionally signed
WEIGHT_PATTERN = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)")

# Resolves a user key to a user ID, creating the user if the policy allows
ProvisionPolicy = Callable[[str], int]


class ValidationError(ValueError):
    """A weight value could not be accepted."""


def parse_weight(raw) -> float:
    """Parse a weight in pounds from a number or numeric string.

    Raises ValidationError for anything that is not a finite number in
    (0, MAX_WEIGHT_LBS].
    """
    if raw is None or isinstance(raw, bool):
        raise ValidationError("Weight is required")

    if isinstance(raw, (int, float)):
        try:
            weight = float(raw)
        except OverflowError:
            raise ValidationError("Weight is too large to be a number") from None
    elif isinstance(raw, str):
        text = raw.strip()
        if not WEIGHT_PATTERN.fullmatch(text):
            raise ValidationError(f"Weight is not a number: {raw!r}")
        weight = float(text)
    else:
        raise ValidationError(f"Weight is not a number: {raw!r}")

    if not math.isfinite(weight):
        raise ValidationError(f"Weight is not a number: {raw!r}")
    if weight <= 0 or weight > MAX_WEIGHT_LBS:
        raise ValidationError(
            f"Weight must be between 0 and {MAX_WEIGHT_LBS} lbs, got {weight:g}"
        )
    return weight


def provision_default_user(user_key: str) -> int:
    """Create the user with unset birth date and height if missing."""
    return db.ensure_user(user_key)


def existing_user_only(user_key: str) -> int:
    """Refuse to record weights for users that do not exist yet."""
    user = db.get_user(user_key)
    if not user:
        raise ValidationError(f"Unknown user: {user_key!r}")
    return user["id"]


def record_weight(
    raw_weight,
    user_key: str = DEFAULT_USER_KEY,
    provision: ProvisionPolicy = provision_default_user,
    now: datetime | None = None,
) -> dict:
    """Validate and store a new weight entry. Returns the created record.

    Nothing is written when the weight is rejected.
    """
    weight = parse_weight(raw_weight)
    user_id = provision(user_key)

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)

    entry = db.insert_weight(user_id, weight, now)
    log.info("Recorded %.1f lbs for '%s'", weight, user_key)
    return entry


def list_weights(user_key: str | None = None) -> list[dict]:
    """All weight entries, oldest first. Unknown users have no entries."""
    if user_key is None:
        return db.get_weights()

    user = db.get_user(user_key)
    if not user:
        return []
    return db.get_weights(user_id=user["id"])


def has_entry_for_day(entries: list[dict], day: date | None = None) -> bool:
    """Check whether any entry was recorded on the given local calendar day."""
    if day is None:
        day = date.today()

    for entry in entries:
        recorded_at = datetime.fromisoformat(entry["date"])
        if recorded_at.tzinfo is not None:
            recorded_at = recorded_at.astimezone()
        if recorded_at.date() == day:
            return True
    return False
