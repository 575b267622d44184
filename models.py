"""
models.py — Python dataclasses for the Kai Keeper garden tracker.

Field names follow the persisted JSON layout (camelCase keys) through
to_dict()/from_dict(); attributes themselves are snake_case.
"""

import uuid
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


UNITS = ('kg', 'count')


def new_id() -> str:
    """Generate a unique identifier for a new record."""
    return str(uuid.uuid4())


@dataclass
class PlantType:
    """Catalogue entry with timing parameters."""
    id: str = ""
    name: str = ""
    germination_min_days: int = 7
    germination_max_days: int = 14
    maturity_days: int = 60
    harvest_window_days: int = 21
    default_unit: str = "kg"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'germinationMinDays': self.germination_min_days,
            'germinationMaxDays': self.germination_max_days,
            'maturityDays': self.maturity_days,
            'harvestWindowDays': self.harvest_window_days,
            'defaultUnit': self.default_unit,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlantType':
        return cls(
            id=data.get('id', ''),
            name=data.get('name', ''),
            germination_min_days=data.get('germinationMinDays', 0),
            germination_max_days=data.get('germinationMaxDays', 0),
            maturity_days=data.get('maturityDays', 1),
            harvest_window_days=data.get('harvestWindowDays', 1),
            default_unit=data.get('defaultUnit', 'kg'),
        )


@dataclass
class Planting:
    """A sowing/transplanting event. plant_type_id may dangle."""
    id: str = ""
    plant_type_id: str = ""
    planted_at: str = ""
    location: str = ""
    quantity_planted: int = 1
    notes: str = ""
    archived: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'plantTypeId': self.plant_type_id,
            'plantedAt': self.planted_at,
            'location': self.location,
            'quantityPlanted': self.quantity_planted,
            'notes': self.notes,
            'archived': self.archived,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Planting':
        return cls(
            id=data.get('id', ''),
            plant_type_id=data.get('plantTypeId', ''),
            planted_at=data.get('plantedAt', ''),
            location=data.get('location', ''),
            quantity_planted=data.get('quantityPlanted', 0),
            notes=data.get('notes', ''),
            archived=bool(data.get('archived', False)),
        )


@dataclass
class Harvest:
    """A yield-collection event tied to a planting. Never mutated."""
    id: str = ""
    planting_id: str = ""
    date: str = ""
    amount: float = 0.0
    unit: str = "kg"
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'plantingId': self.planting_id,
            'date': self.date,
            'amount': self.amount,
            'unit': self.unit,
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Harvest':
        return cls(
            id=data.get('id', ''),
            planting_id=data.get('plantingId', ''),
            date=data.get('date', ''),
            amount=data.get('amount', 0),
            unit=data.get('unit', 'kg'),
            notes=data.get('notes', ''),
        )


@dataclass
class ExpectedDates:
    """Projected calendar dates for a planting (ISO strings)."""
    germination_start: str = ""
    germination_end: str = ""
    first_harvest: str = ""
    last_harvest: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'germinationStart': self.germination_start,
            'germinationEnd': self.germination_end,
            'firstHarvest': self.first_harvest,
            'lastHarvest': self.last_harvest,
        }


@dataclass
class PhaseSnapshot:
    """Progress snapshot produced by the phase engine."""
    germination_pct: float = 0.0
    growth_pct: float = 0.0
    harvest_pct: float = 0.0
    expected: ExpectedDates = field(default_factory=ExpectedDates)
    done: bool = False
    elapsed: int = 0
    total: float = 0.0
    # Phase lengths in days
    germination_len: float = 0.0
    growth_len: float = 0.0
    harvest_len: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'germinationPct': self.germination_pct,
            'growthPct': self.growth_pct,
            'harvestPct': self.harvest_pct,
            'expected': self.expected.to_dict(),
            'done': self.done,
            'elapsed': self.elapsed,
            'total': self.total,
        }


@dataclass
class TrackerRow:
    """A planting joined with its plant type name and phase estimate."""
    planting: Planting
    plant_name: str = "Unknown"
    phase: Optional[PhaseSnapshot] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'planting': self.planting.to_dict(),
            'plantName': self.plant_name,
            'phase': self.phase.to_dict() if self.phase else None,
        }
