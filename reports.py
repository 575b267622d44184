"""
reports.py — Harvest report aggregation.

Provides:
- monthly_totals: amount per YYYY-MM, ascending
- totals_by_plant_type: amount per plant type name, descending
- harvests_by_unit: split the ledger into kg and count subsets
- build_report: both groupings for each unit
- harvest_ledger: harvest rows with plant name and location resolved

Totals are never summed across units; callers aggregate each unit subset
separately. Imported records are not schema-checked, so harvests without a
numeric amount and a string date are left out of the totals.
"""

from collections import OrderedDict

from models import UNITS

UNKNOWN_PLANT = "Unknown"
NO_LOCATION = "—"


def is_reportable(harvest):
    """Whether a harvest has a numeric amount and a string date to total."""
    amount = harvest.amount
    return (
        isinstance(amount, (int, float))
        and not isinstance(amount, bool)
        and isinstance(harvest.date, str)
    )


def _by_id(records):
    return {r.id: r for r in records if isinstance(r.id, str)}


def _lookup(index, record_id):
    return index.get(record_id) if isinstance(record_id, str) else None


def plant_name(plant_type):
    """Display name of a plant type, "Unknown" when missing or blank."""
    if plant_type is None or not isinstance(plant_type.name, str) or not plant_type.name:
        return UNKNOWN_PLANT
    return plant_type.name


def month_key(iso_date):
    """YYYY-MM prefix of an ISO date."""
    return iso_date[:7]


def monthly_totals(harvests):
    """Sum harvest amounts per month, ordered by month ascending."""
    totals = {}
    for h in harvests:
        if not is_reportable(h):
            continue
        key = month_key(h.date)
        totals[key] = totals.get(key, 0) + h.amount
    return [
        {'month': month, 'total': total}
        for month, total in sorted(totals.items())
    ]


def totals_by_plant_type(harvests, plantings, plant_types):
    """
    Sum harvest amounts per plant type name, largest first.

    Harvests whose planting no longer exists are skipped. Plantings whose
    plant type no longer exists are grouped under "Unknown". Ties keep
    first-seen order.
    """
    planting_by_id = _by_id(plantings)
    plant_type_by_id = _by_id(plant_types)

    totals = OrderedDict()
    for h in harvests:
        if not is_reportable(h):
            continue
        planting = _lookup(planting_by_id, h.planting_id)
        if planting is None:
            continue
        plant_type = _lookup(plant_type_by_id, planting.plant_type_id)
        name = plant_name(plant_type)
        totals[name] = totals.get(name, 0) + h.amount

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [{'name': name, 'total': total} for name, total in ranked]


def harvests_by_unit(harvests):
    """Partition harvests by unit. Unknown units are left out."""
    return {unit: [h for h in harvests if h.unit == unit] for unit in UNITS}


def build_report(harvests, plantings, plant_types):
    """Monthly and per-plant-type totals for each unit."""
    report = {}
    reportable = [h for h in harvests if is_reportable(h)]
    for unit, subset in harvests_by_unit(reportable).items():
        report[unit] = {
            'monthly': monthly_totals(subset),
            'by_plant_type': totals_by_plant_type(subset, plantings, plant_types),
            'harvest_count': len(subset),
        }
    return report


def harvest_ledger(harvests, plantings, plant_types):
    """One display row per harvest, in ledger order."""
    planting_by_id = _by_id(plantings)
    plant_type_by_id = _by_id(plant_types)

    rows = []
    for h in harvests:
        planting = _lookup(planting_by_id, h.planting_id)
        plant_type = _lookup(plant_type_by_id, planting.plant_type_id) if planting else None
        rows.append({
            'harvest': h.to_dict(),
            'plant_name': plant_name(plant_type),
            'location': (planting.location if planting else '') or NO_LOCATION,
        })
    return rows
