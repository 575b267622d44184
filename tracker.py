"""
tracker.py — Application state and every user-triggered mutation.

The Tracker owns the three collections (catalogue, plantings, harvests).
Mutations update memory first, then hand the affected collection to the
persistence gateway without waiting for the write. Rejected submissions
return None (or False) and leave every collection untouched.

References between records are by id and may dangle: a plant type can be
removed while plantings still point at it, and a planting can be deleted
while harvests still point at it. Lookups therefore return None rather than
raising, and views resolve missing names to "Unknown".
"""

import logging
from datetime import date

from database import STORAGE_KEYS, DEFAULT_PLANT_TYPES
from models import PlantType, Planting, Harvest, TrackerRow, new_id
from phase_engine import estimate_phase
from reports import build_report, harvest_ledger, plant_name
from utils.backup import build_export, validate_backup
from utils.validators import (
    clean_text, clean_date, clean_int, clean_amount, clean_unit
)

logger = logging.getLogger(__name__)

PLANT_TYPE_FIELDS = {
    'name': clean_text,
    'germination_min_days': clean_int,
    'germination_max_days': clean_int,
    'maturity_days': clean_int,
    'harvest_window_days': clean_int,
    'default_unit': clean_unit,
}


def default_plant_types():
    """Fresh copies of the seed catalogue, each with a new id."""
    return [
        PlantType(
            id=new_id(),
            name=name,
            germination_min_days=germ_min,
            germination_max_days=germ_max,
            maturity_days=maturity,
            harvest_window_days=window,
            default_unit=unit,
        )
        for name, germ_min, germ_max, maturity, window, unit in DEFAULT_PLANT_TYPES
    ]


class Tracker:
    """Single controller for the garden tracker state."""

    def __init__(self, gateway):
        self.gateway = gateway
        self.plant_types = default_plant_types()
        self.plantings = []
        self.harvests = []

    # ========================================
    # Persistence
    # ========================================

    def load(self):
        """Replace in-memory state with what the store holds."""
        raw_types = self.gateway.load(STORAGE_KEYS['plant_types'], None)
        raw_plantings = self.gateway.load(STORAGE_KEYS['plantings'], [])
        raw_harvests = self.gateway.load(STORAGE_KEYS['harvests'], [])

        if isinstance(raw_types, list):
            self.plant_types = [PlantType.from_dict(d) for d in raw_types if isinstance(d, dict)]
        else:
            self.plant_types = default_plant_types()
            self._save_plant_types()
        self.plantings = [Planting.from_dict(d) for d in raw_plantings or [] if isinstance(d, dict)]
        self.harvests = [Harvest.from_dict(d) for d in raw_harvests or [] if isinstance(d, dict)]
        return self

    def _save_plant_types(self):
        self.gateway.save(STORAGE_KEYS['plant_types'], [pt.to_dict() for pt in self.plant_types])

    def _save_plantings(self):
        self.gateway.save(STORAGE_KEYS['plantings'], [p.to_dict() for p in self.plantings])

    def _save_harvests(self):
        self.gateway.save(STORAGE_KEYS['harvests'], [h.to_dict() for h in self.harvests])

    # ========================================
    # Lookups
    # ========================================

    def get_plant_type(self, plant_type_id):
        for pt in self.plant_types:
            if pt.id == plant_type_id:
                return pt
        return None

    def get_planting(self, planting_id):
        for p in self.plantings:
            if p.id == planting_id:
                return p
        return None

    def get_harvest(self, harvest_id):
        for h in self.harvests:
            if h.id == harvest_id:
                return h
        return None

    def default_unit_for(self, planting):
        """Unit suggested when logging a harvest for this planting."""
        plant_type = self.get_plant_type(planting.plant_type_id) if planting else None
        if plant_type and plant_type.default_unit:
            return plant_type.default_unit
        return 'kg'

    # ========================================
    # Catalogue
    # ========================================

    def add_plant_type(self, name, germination_min_days=7, germination_max_days=14,
                       maturity_days=60, harvest_window_days=21, default_unit='kg'):
        """Add a plant type at the top of the catalogue. Returns it, or None."""
        values = {
            'name': name,
            'germination_min_days': germination_min_days,
            'germination_max_days': germination_max_days,
            'maturity_days': maturity_days,
            'harvest_window_days': harvest_window_days,
            'default_unit': default_unit,
        }
        cleaned = {key: PLANT_TYPE_FIELDS[key](value) for key, value in values.items()}
        if not cleaned['name'] or any(value is None for value in cleaned.values()):
            return None

        plant_type = PlantType(id=new_id(), **cleaned)
        self.plant_types.insert(0, plant_type)
        self._save_plant_types()
        return plant_type

    def update_plant_type(self, plant_type_id, **patch):
        """
        Edit plant type fields in place.

        Unknown field names are ignored; an unusable value rejects the whole
        patch. Returns the updated plant type, or None.
        """
        plant_type = self.get_plant_type(plant_type_id)
        if plant_type is None:
            return None

        cleaned = {}
        for key, value in patch.items():
            if key not in PLANT_TYPE_FIELDS:
                continue
            cleaned[key] = PLANT_TYPE_FIELDS[key](value)
            if cleaned[key] is None or (key == 'name' and not cleaned[key]):
                return None

        for key, value in cleaned.items():
            setattr(plant_type, key, value)
        self._save_plant_types()
        return plant_type

    def remove_plant_type(self, plant_type_id):
        """Delete a plant type. Plantings referencing it are left as they are."""
        before = len(self.plant_types)
        self.plant_types = [pt for pt in self.plant_types if pt.id != plant_type_id]
        if len(self.plant_types) == before:
            return False
        self._save_plant_types()
        return True

    def reset_catalogue(self):
        """Replace the catalogue with the seed list. Plantings and harvests are kept."""
        self.plant_types = default_plant_types()
        self._save_plant_types()
        logger.info("Plant catalogue reset to %d defaults", len(self.plant_types))
        return self.plant_types

    # ========================================
    # Plantings
    # ========================================

    def add_planting(self, plant_type_id, planted_at, location='', quantity_planted=1, notes=''):
        """Record a new planting at the top of the list. Returns it, or None."""
        plant_type_id = clean_text(plant_type_id)
        planted_at = clean_date(planted_at)
        quantity = clean_int(quantity_planted)
        if not plant_type_id or not planted_at or quantity is None:
            return None

        planting = Planting(
            id=new_id(),
            plant_type_id=plant_type_id,
            planted_at=planted_at,
            location=clean_text(location),
            quantity_planted=quantity,
            notes=clean_text(notes),
            archived=False,
        )
        self.plantings.insert(0, planting)
        self._save_plantings()
        return planting

    def toggle_archive(self, planting_id):
        """Flip the archived flag. Returns the planting, or None."""
        planting = self.get_planting(planting_id)
        if planting is None:
            return None
        planting.archived = not planting.archived
        self._save_plantings()
        return planting

    def delete_planting(self, planting_id):
        """Delete a planting. Its harvests stay in the ledger."""
        before = len(self.plantings)
        self.plantings = [p for p in self.plantings if p.id != planting_id]
        if len(self.plantings) == before:
            return False
        self._save_plantings()
        return True

    # ========================================
    # Harvests
    # ========================================

    def log_harvest(self, planting_id, amount, unit=None, harvest_date=None, notes=''):
        """
        Log a harvest against an existing planting.

        Args:
            planting_id: Target planting
            amount: Quantity, must be > 0
            unit: 'kg' or 'count'; defaults to the plant type's default unit
            harvest_date: Harvest date; defaults to today
            notes: Free text

        Returns:
            The new Harvest, or None if the submission was rejected.
        """
        planting = self.get_planting(planting_id)
        if planting is None:
            return None

        amount = clean_amount(amount)
        unit = clean_unit(unit) if unit else self.default_unit_for(planting)
        harvest_date = clean_date(harvest_date) if harvest_date else date.today().isoformat()
        if amount is None or unit is None or harvest_date is None:
            return None

        harvest = Harvest(
            id=new_id(),
            planting_id=planting.id,
            date=harvest_date,
            amount=amount,
            unit=unit,
            notes=clean_text(notes),
        )
        self.harvests.insert(0, harvest)
        self._save_harvests()
        return harvest

    def delete_harvest(self, harvest_id):
        before = len(self.harvests)
        self.harvests = [h for h in self.harvests if h.id != harvest_id]
        if len(self.harvests) == before:
            return False
        self._save_harvests()
        return True

    # ========================================
    # Views
    # ========================================

    def tracker_rows(self, today=None):
        """Plantings with their plant name and phase estimate, in list order."""
        rows = []
        for planting in self.plantings:
            plant_type = self.get_plant_type(planting.plant_type_id)
            try:
                phase = estimate_phase(planting, plant_type, today)
            except (ValueError, TypeError) as e:
                # Imported records are not schema-checked
                logger.debug("No estimate for planting %s: %s", planting.id, e)
                phase = None
            rows.append(TrackerRow(
                planting=planting,
                plant_name=plant_name(plant_type),
                phase=phase,
            ))
        return rows

    def report(self):
        return build_report(self.harvests, self.plantings, self.plant_types)

    def ledger(self):
        return harvest_ledger(self.harvests, self.plantings, self.plant_types)

    # ========================================
    # Import / export
    # ========================================

    def export_backup(self, now=None):
        return build_export(self.plant_types, self.plantings, self.harvests, now)

    def import_backup(self, payload):
        """
        Replace all three collections with a validated backup.

        Returns:
            (success, message). On failure nothing changes.
        """
        ok, collections, message = validate_backup(payload)
        if not ok:
            logger.info("Backup rejected: %s", message)
            return False, message

        self.plant_types, self.plantings, self.harvests = collections
        self._save_plant_types()
        self._save_plantings()
        self._save_harvests()
        logger.info(
            "Imported backup: %d plant types, %d plantings, %d harvests",
            len(self.plant_types), len(self.plantings), len(self.harvests)
        )
        return True, message
