"""Calorie and macro targets from the most recent weight entry."""

import math
from dataclasses import dataclass
from datetime import date, datetime, timezone

from config import DEFAULT_PROFILE

# Milliseconds in a Julian year (365.25 days)
MS_PER_YEAR = 31_557_600_000

LBS_PER_KG = 2.2
CM_PER_INCH = 2.54

# Sedentary activity multiplier and daily deficit for weight loss
ACTIVITY_MULTIPLIER = 1.2
CALORIE_DEFICIT = 500

# Share of calories per macro, and kcal per gram
MACRO_SPLIT = {"protein": 0.30, "carbs": 0.40, "fats": 0.30}
KCAL_PER_GRAM = {"protein": 4, "carbs": 4, "fats": 9}

FOOD_RECOMMENDATIONS = {
    "protein": [
        {"name": "Chicken Breast", "details": "31g protein per 100g", "tip": "Great lean protein source"},
        {"name": "Eggs", "details": "13g protein per 2 large eggs", "tip": "Complete protein source"},
        {"name": "Greek Yogurt", "details": "10g protein per 100g", "tip": "Good for breakfast or snacks"},
        {"name": "Salmon", "details": "25g protein per 100g", "tip": "Rich in omega-3 fatty acids"},
        {"name": "Tofu", "details": "8g protein per 100g", "tip": "Versatile plant-based option"},
    ],
    "carbs": [
        {"name": "Brown Rice", "details": "23g carbs per 100g", "tip": "High in fiber and nutrients"},
        {"name": "Sweet Potatoes", "details": "20g carbs per 100g", "tip": "Rich in vitamins"},
        {"name": "Oatmeal", "details": "27g carbs per 100g", "tip": "Great for sustained energy"},
        {"name": "Quinoa", "details": "21g carbs per 100g", "tip": "Complete protein source"},
        {"name": "Bananas", "details": "23g carbs per medium banana", "tip": "Quick energy source"},
    ],
    "fats": [
        {"name": "Avocado", "details": "15g healthy fats per 100g", "tip": "Rich in monounsaturated fats"},
        {"name": "Nuts", "details": "49g fats per 100g", "tip": "Great snack option"},
        {"name": "Olive Oil", "details": "14g fats per tablespoon", "tip": "Good for cooking"},
        {"name": "Salmon", "details": "13g fats per 100g", "tip": "Omega-3 rich"},
        {"name": "Chia Seeds", "details": "31g fats per 100g", "tip": "High in omega-3"},
    ],
}


@dataclass(frozen=True)
class Macros:
    """Daily macro targets in grams."""
    protein: int
    carbs: int
    fats: int


@dataclass(frozen=True)
class NutritionTargets:
    """Daily calorie target and its macro breakdown."""
    calories: int
    macros: Macros


def _round(value: float) -> int | float:
    """Round half up. Non-finite values are returned as they are."""
    if not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def _as_utc(value: date | datetime | str) -> datetime:
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        value = datetime.fromisoformat(value)
    elif not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def age_in_years(birth_date: date | datetime | str, now: datetime | None = None) -> int:
    """Whole Julian years elapsed since birth_date."""
    now = _as_utc(now) if now else datetime.now(timezone.utc)
    elapsed_ms = (now - _as_utc(birth_date)).total_seconds() * 1000
    return math.floor(elapsed_ms / MS_PER_YEAR)


def calculate_daily_calories(
    current_weight_lbs: float,
    birth_date: date | datetime | str,
    height_inches: float,
    now: datetime | None = None,
) -> int:
    """Daily calorie target for weight loss.

    Mifflin-St Jeor BMR (male form), times a sedentary activity multiplier,
    minus a fixed deficit.
    """
    age = age_in_years(birth_date, now)
    weight_kg = current_weight_lbs / LBS_PER_KG
    height_cm = height_inches * CM_PER_INCH

    bmr = 10 * weight_kg + 6.25 * height_cm - 5 * age + 5
    tdee = bmr * ACTIVITY_MULTIPLIER
    return _round(tdee - CALORIE_DEFICIT)


def calculate_macros(calories: float) -> Macros:
    """Split calories 30/40/30 into protein, carbs and fats grams."""
    grams = {
        macro: _round(calories * share / KCAL_PER_GRAM[macro])
        for macro, share in MACRO_SPLIT.items()
    }
    return Macros(**grams)


def targets_for(latest_entry: dict | None, now: datetime | None = None) -> NutritionTargets:
    """Targets for the most recent entry, filling gaps from DEFAULT_PROFILE."""
    entry = latest_entry or {}
    user = entry.get("user") or {}

    calories = calculate_daily_calories(
        entry.get("weight") or DEFAULT_PROFILE["weight_lbs"],
        user.get("birthDate") or DEFAULT_PROFILE["birth_date"],
        user.get("height") or DEFAULT_PROFILE["height_in"],
        now=now,
    )
    return NutritionTargets(calories=calories, macros=calculate_macros(calories))


def recommendations_for(macro: str) -> list[dict]:
    """Food suggestions for a macro. Raises KeyError for unknown macros."""
    return FOOD_RECOMMENDATIONS[macro]
