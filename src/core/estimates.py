"""Material, cost and code-compliance estimates.

Pure functions over fixed coefficient tables.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from core.errors import ValidationFailure


@dataclass(frozen=True)
class Material:
    density: float
    unit: str
    cost: float


MATERIALS = {
    "concrete": Material(density=2400, unit="kg/m³", cost=120),
    "steel": Material(density=7850, unit="kg/m³", cost=800),
    "brick": Material(density=1800, unit="kg/m³", cost=0.5),
    "cement": Material(density=1440, unit="kg/m³", cost=180),
}

STRUCTURES = ("foundation", "wall", "slab", "beam")

# Height limits in meters per building type.
HEIGHT_LIMITS = {
    "residential": 15.0,
    "commercial": 25.0,
    "industrial": 30.0,
}


def _dimension(dimensions: dict[str, Any], key: str) -> float:
    value = dimensions.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationFailure(f"dimensions.{key} must be a number")
    if value < 0:
        raise ValidationFailure(f"dimensions.{key} must not be negative")
    return float(value)


def calculate_materials(structure: str, dimensions: dict[str, Any]) -> dict[str, Any]:
    """Return material quantities for one structure."""

    if structure not in STRUCTURES:
        raise ValidationFailure(f"structure must be one of {', '.join(STRUCTURES)}")
    length = _dimension(dimensions, "length")
    width = _dimension(dimensions, "width")
    height = _dimension(dimensions, "height")
    volume = length * width * height

    if structure == "foundation":
        return {
            "concrete": volume * 0.8,
            "steel": volume * 80,
            "description": f"Foundation: {volume:.2f}m³ total volume",
        }
    if structure == "wall":
        bricks = math.ceil(volume * 500)
        return {
            "brick": bricks,
            "cement": volume * 0.3,
            "description": f"Wall: {bricks} bricks needed",
        }
    if structure == "slab":
        return {
            "concrete": volume,
            "steel": volume * 100,
            "description": f"Slab: {volume:.2f}m³ concrete",
        }
    return {
        "concrete": volume,
        "steel": volume * 150,
        "description": "Beam: High steel ratio for structural integrity",
    }


def estimate_cost(material: str, quantity: float, unit: str = "m³") -> str:
    spec = MATERIALS.get(material)
    if spec is None:
        raise ValidationFailure(f"Unknown material: {material}")
    if isinstance(quantity, bool) or not isinstance(quantity, (int, float)) or quantity < 0:
        raise ValidationFailure("quantity must be a non-negative number")
    cost = quantity * spec.cost
    return f"{material}: {quantity} {unit} = ${cost:.2f}"


def check_compliance(structure: str, dimensions: dict[str, Any], building_type: str) -> list[str]:
    """Return the list of code violations, empty when compliant."""

    limit = HEIGHT_LIMITS.get(building_type)
    if limit is None:
        raise ValidationFailure(f"buildingType must be one of {', '.join(HEIGHT_LIMITS)}")
    height = _dimension(dimensions, "height")
    violations = []
    if height > limit:
        violations.append(f"{structure}: height {height:g}m exceeds {limit:g}m limit")
    return violations
