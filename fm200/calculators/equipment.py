"""
FM-200 equipment catalog: cylinder sizes and nozzle types.

Nominal fill capacities are for HFC-227ea storage cylinders. Sizing uses the
Standard nozzle coverage; the other types are reference data for the UI.
"""

import math

from .base import round_half_up

# Storage cylinders: nominal agent capacity (kg)
CYLINDER_SIZES = [
    {"key": "compact_60lb", "name": "60lb Compact", "weight_kg": 27.2},
    {"key": "intermediate_100lb", "name": "100lb Intermediate", "weight_kg": 45.4},
    {"key": "standard_120lb", "name": "120lb Standard", "weight_kg": 54.4},
    {"key": "large_240lb", "name": "240lb Large", "weight_kg": 108.8},
]

DEFAULT_CYLINDER_KEY = "standard_120lb"

# Nozzle types: floor coverage per nozzle (m²)
NOZZLE_TYPES = [
    {"key": "standard", "name": "Standard", "coverage_m2": 50.0},
    {"key": "high_flow", "name": "High-Flow", "coverage_m2": 75.0},
    {"key": "low_pressure", "name": "Low-Pressure", "coverage_m2": 35.0},
]


def get_cylinder(key: str) -> dict:
    """Look up a catalog cylinder by key, or raise ValueError."""
    for cylinder in CYLINDER_SIZES:
        if cylinder["key"] == key:
            return cylinder
    raise ValueError(
        f"Unknown cylinder size: {key}. "
        f"Available: {[c['key'] for c in CYLINDER_SIZES]}"
    )


def cylinder_options(agent_weight: float) -> list:
    """
    For each catalog size, how many cylinders hold the agent and how much
    capacity that installs. Sorted smallest cylinder first.
    """
    options = []
    for cylinder in CYLINDER_SIZES:
        count = max(1, math.ceil(agent_weight / cylinder["weight_kg"]))
        capacity = count * cylinder["weight_kg"]
        options.append({
            "key": cylinder["key"],
            "name": cylinder["name"],
            "weight_kg": cylinder["weight_kg"],
            "cylinder_count": count,
            "installed_capacity_kg": round_half_up(capacity, 2),
            "spare_capacity_kg": round_half_up(capacity - agent_weight, 2),
        })
    return options
