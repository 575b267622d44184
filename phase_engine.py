"""
phase_engine.py — Growth phase estimation for plantings.

Given a planting, its plant type and a reference date, computes progress
through three phases and the projected calendar dates.

Phase lengths (days):
- Germination: average of germination min/max days (not rounded)
- Growth:      maturity days minus germination length, at least 1
- Harvest:     harvest window days, at least 1

Each percentage is computed from elapsed days alone and clamped to [0, 100]
on its own, so neighbouring phases overlap near their boundaries: growth can
be above 0% while germination is still below 100%.
"""

from datetime import date, timedelta

from models import PhaseSnapshot, ExpectedDates


def to_date(value):
    """Coerce an ISO date string (or date) to a ``datetime.date``."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def add_days(iso_date, days):
    """Return iso_date shifted by days, as an ISO date string."""
    return (to_date(iso_date) + timedelta(days=days)).isoformat()


def days_between(from_date, to):
    """Whole days from from_date to to (negative if to is earlier)."""
    return (to_date(to) - to_date(from_date)).days


def clamp(value, low=0.0, high=100.0):
    return min(high, max(low, value))


def estimate_phase(planting, plant_type, today=None):
    """
    Compute the phase snapshot for a planting.

    Args:
        planting: Planting record
        plant_type: Its PlantType, or None if the reference dangles
        today: Reference date (date or ISO string); defaults to date.today()

    Returns:
        PhaseSnapshot, or None when plant_type is missing.
    """
    if plant_type is None:
        return None

    today = today or date.today()
    elapsed = max(0, days_between(planting.planted_at, today))

    germination_len = (plant_type.germination_min_days + plant_type.germination_max_days) / 2
    growth_len = max(1, plant_type.maturity_days - germination_len)
    harvest_len = max(1, plant_type.harvest_window_days)
    total = germination_len + growth_len + harvest_len

    if germination_len > 0:
        germination_pct = clamp(elapsed / germination_len * 100)
    else:
        # Nothing to wait for
        germination_pct = 100.0
    growth_pct = clamp((elapsed - germination_len) / growth_len * 100)
    harvest_pct = clamp((elapsed - germination_len - growth_len) / harvest_len * 100)

    expected = ExpectedDates(
        germination_start=add_days(planting.planted_at, plant_type.germination_min_days),
        germination_end=add_days(planting.planted_at, plant_type.germination_max_days),
        first_harvest=add_days(planting.planted_at, plant_type.maturity_days),
        last_harvest=add_days(
            planting.planted_at,
            plant_type.maturity_days + plant_type.harvest_window_days
        ),
    )

    return PhaseSnapshot(
        germination_pct=germination_pct,
        growth_pct=growth_pct,
        harvest_pct=harvest_pct,
        expected=expected,
        done=elapsed > total,
        elapsed=elapsed,
        total=total,
        germination_len=germination_len,
        growth_len=growth_len,
        harvest_len=harvest_len,
    )
