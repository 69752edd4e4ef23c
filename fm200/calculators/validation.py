"""
Input validation for room/environment fields.

Runs before the sizing engine. Raw form values come in as strings or numbers;
violations come back as human-readable strings, one per field, which the UI
joins and shows. The sizing engine re-checks built records with
check_room_input() so misuse fails with a named field instead of a
nonsensical agent weight.
"""

import logging

from ..errors import InvalidInputError
from .base import is_number, parse_number
from .equipment import CYLINDER_SIZES, get_cylinder

logger = logging.getLogger(__name__)


TEMPERATURE_MIN_C = -20.0
TEMPERATURE_MAX_C = 60.0
SAFETY_FACTOR_MIN = 1.0
SAFETY_FACTOR_MAX = 1.5
CONCENTRATION_MIN_PCT = 7.0     # NFPA 2001 Class A minimum
CONCENTRATION_MAX_PCT = 10.5

# field -> (label, default). None default means the field is required.
ROOM_FIELDS = {
    "length": ("Room length", None),
    "width": ("Room width", None),
    "height": ("Room height", None),
    "equipment_volume": ("Equipment volume", 0.0),
    "design_temperature": ("Design temperature", 20.0),
    "altitude": ("Altitude", 0.0),
    "safety_factor": ("Safety factor", 1.0),
    "concentration_percent": ("Design concentration", CONCENTRATION_MIN_PCT),
    "cylinder_unit_size": ("Cylinder size", 54.4),
}

# Optional catalog key (see equipment.CYLINDER_SIZES); fills cylinder_unit_size
# when no explicit size is given.
CYLINDER_KEY_FIELD = "cylinder_size"


def _constraint_for(field: str, value: float):
    """Returns the violated constraint text, or None if value is in range."""
    if field in ("length", "width", "height", "cylinder_unit_size"):
        if value <= 0:
            return "must be greater than 0"
    elif field in ("equipment_volume", "altitude"):
        if value < 0:
            return "must not be negative"
    elif field == "design_temperature":
        if not TEMPERATURE_MIN_C <= value <= TEMPERATURE_MAX_C:
            return f"must be between {TEMPERATURE_MIN_C:g} and {TEMPERATURE_MAX_C:g} °C"
    elif field == "safety_factor":
        if not SAFETY_FACTOR_MIN <= value <= SAFETY_FACTOR_MAX:
            return f"must be between {SAFETY_FACTOR_MIN:g} and {SAFETY_FACTOR_MAX:g}"
    elif field == "concentration_percent":
        if not CONCENTRATION_MIN_PCT <= value <= CONCENTRATION_MAX_PCT:
            return f"must be between {CONCENTRATION_MIN_PCT:g} and {CONCENTRATION_MAX_PCT:g} %"
    return None


def _resolve_cylinder_key(fields: dict, problems: list) -> dict:
    key = fields.get(CYLINDER_KEY_FIELD)
    if key is None or str(key).strip() == "":
        return fields
    if str(fields.get("cylinder_unit_size") or "").strip():
        return fields
    try:
        cylinder = get_cylinder(str(key).strip())
    except ValueError:
        keys = ", ".join(c["key"] for c in CYLINDER_SIZES)
        constraint = f"must be one of {keys}"
        problems.append((CYLINDER_KEY_FIELD, constraint, f"Cylinder size {constraint}"))
        return fields
    return dict(fields, cylinder_unit_size=cylinder["weight_kg"])


def _collect(fields: dict):
    """Parse and check every room field. Returns (values, [(field, constraint, message)])."""
    values = {}
    problems = []
    fields = _resolve_cylinder_key(fields, problems)
    for field, (label, default) in ROOM_FIELDS.items():
        raw = fields.get(field)
        value = parse_number(raw, default)
        if value is None:
            if raw is None or str(raw).strip() == "":
                constraint = "is required"
            else:
                constraint = "must be a number"
            problems.append((field, constraint, f"{label} {constraint}"))
            continue
        if not is_number(value):
            constraint = "must be a finite number"
            problems.append((field, constraint, f"{label} {constraint}"))
            continue
        constraint = _constraint_for(field, value)
        if constraint:
            problems.append((field, constraint, f"{label} {constraint}"))
            continue
        values[field] = value
    return values, problems


def validate_room_fields(fields: dict) -> list:
    """Returns a list of human-readable error strings. Empty list means valid."""
    _, problems = _collect(fields or {})
    return [message for _, _, message in problems]


def parse_room_input(fields: dict):
    """
    Validate raw form fields and build a RoomInput.

    Raises InvalidInputError naming the first offending field; the message
    carries every error, joined, for display.
    """
    from .sizing import RoomInput

    values, problems = _collect(fields or {})
    if problems:
        field, constraint, _ = problems[0]
        message = "; ".join(message for _, _, message in problems)
        logger.debug("Room input rejected: %s", message)
        raise InvalidInputError(field, constraint, message)
    return RoomInput(**values)


def check_room_input(room) -> None:
    """Raise InvalidInputError for the first violated constraint of a built RoomInput."""
    for field, (label, _) in ROOM_FIELDS.items():
        value = getattr(room, field)
        if not is_number(value):
            raise InvalidInputError(field, "must be a finite number", f"{label} must be a finite number")
        constraint = _constraint_for(field, value)
        if constraint:
            raise InvalidInputError(field, constraint, f"{label} {constraint}")
