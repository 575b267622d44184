"""
utils/backup.py — JSON backup export and import validation.

Export format: one JSON object with exactly four keys:
    plantTypes, plantings, harvests   — lists of records (camelCase fields)
    exportedAt                        — ISO-8601 UTC timestamp

Import accepts any JSON object holding the three collection keys as lists;
exportedAt and extra keys are ignored. There is no merge: an accepted backup
replaces all three collections together.
Filename format: kai-keeper-backup-YYYYMMDD.json
"""

import json
from datetime import datetime, date, timezone

from models import PlantType, Planting, Harvest

REQUIRED_KEYS = ('plantTypes', 'plantings', 'harvests')


def exported_at(now=None):
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def build_export(plant_types, plantings, harvests, now=None):
    """
    Serialize the three collections into a backup payload.

    Returns:
        Dict ready for json.dumps.
    """
    return {
        'plantTypes': [pt.to_dict() for pt in plant_types],
        'plantings': [p.to_dict() for p in plantings],
        'harvests': [h.to_dict() for h in harvests],
        'exportedAt': exported_at(now),
    }


def backup_filename(today=None):
    today = today or date.today()
    return f"kai-keeper-backup-{today.strftime('%Y%m%d')}.json"


def parse_backup_text(text):
    """
    Decode backup file contents.

    Returns:
        (payload, None) on success, (None, error_message) on invalid JSON.
    """
    try:
        return json.loads(text), None
    except ValueError as e:
        return None, f"Import failed: {e}"


def validate_backup(payload):
    """
    Check a candidate backup before it replaces the live collections.

    Only presence of the three collection keys is checked; entries are not
    validated against each other.

    Returns:
        (True, (plant_types, plantings, harvests), message) if accepted,
        (False, None, message) otherwise.
    """
    if not isinstance(payload, dict):
        return False, None, "Invalid backup file"

    missing = [key for key in REQUIRED_KEYS if key not in payload]
    if missing:
        return False, None, f"Invalid backup file: missing {', '.join(missing)}"

    lists = [payload[key] for key in REQUIRED_KEYS]
    if not all(isinstance(items, list) for items in lists):
        return False, None, "Invalid backup file: collections must be lists"

    raw_types, raw_plantings, raw_harvests = lists
    if not all(isinstance(entry, dict) for items in lists for entry in items):
        return False, None, "Invalid backup file: entries must be objects"

    collections = (
        [PlantType.from_dict(d) for d in raw_types],
        [Planting.from_dict(d) for d in raw_plantings],
        [Harvest.from_dict(d) for d in raw_harvests],
    )
    return True, collections, "Import successful"
