"""
Sizing engine: NFPA 2001 total-flooding formula for FM-200 (HFC-227ea).

Pure math. Given a RoomInput, produce agent mass, cylinder and nozzle counts,
and a piping estimate. Full precision throughout; SizingResult.rounded()
is the only place display rounding happens.
"""

from pydantic import BaseModel, Field

from ..errors import NumericDegeneracyError
from .base import ceil_at_least, round_half_up
from .validation import check_room_input


# NFPA 2001 linearization of specific vapor volume: s = BASE + FACTOR * t
SPECIFIC_VAPOR_BASE = 0.1269         # m³/kg at 0 °C
SPECIFIC_VAPOR_TEMP_FACTOR = 0.0005  # m³/kg per °C

NET_VOLUME_FLOOR = 0.1               # m³: never size for zero or negative volume

ALTITUDE_THRESHOLD_M = 500.0
ALTITUDE_STEP_M = 300.0
ALTITUDE_STEP_INCREASE = 0.01        # +1% agent per 300 m above threshold

NOZZLE_COVERAGE_M2 = 50.0            # Standard nozzle
MIN_NOZZLES = 2
MIN_CYLINDERS = 1


class RoomInput(BaseModel):
    """Room geometry and environment for one calculation request."""
    length: float
    width: float
    height: float
    equipment_volume: float = 0.0
    design_temperature: float = 20.0
    altitude: float = 0.0
    safety_factor: float = 1.0
    concentration_percent: float = 7.0
    cylinder_unit_size: float = 54.4

    class Config:
        frozen = True


class SizingResult(BaseModel):
    """Physical system requirements derived from a RoomInput."""
    gross_volume: float = Field(gt=0)
    net_volume: float = Field(gt=0)
    specific_vapor_volume: float = Field(gt=0)
    agent_weight: float = Field(gt=0)
    cylinder_count: int = Field(ge=MIN_CYLINDERS)
    nozzle_count: int = Field(ge=MIN_NOZZLES)
    piping_length: float = Field(gt=0)
    floor_area: float = Field(gt=0)

    class Config:
        frozen = True

    def rounded(self) -> dict:
        """Display values: 2 decimals, 4 for the vapor-volume coefficient, half-up."""
        return {
            "gross_volume": round_half_up(self.gross_volume, 2),
            "net_volume": round_half_up(self.net_volume, 2),
            "specific_vapor_volume": round_half_up(self.specific_vapor_volume, 4),
            "agent_weight": round_half_up(self.agent_weight, 2),
            "cylinder_count": self.cylinder_count,
            "nozzle_count": self.nozzle_count,
            "piping_length": round_half_up(self.piping_length, 2),
            "floor_area": round_half_up(self.floor_area, 2),
        }


def specific_vapor_volume(design_temperature: float) -> float:
    """Specific vapor volume of FM-200 (m³/kg) at the design temperature."""
    return SPECIFIC_VAPOR_BASE + SPECIFIC_VAPOR_TEMP_FACTOR * design_temperature


def agent_weight_for(net_volume: float, vapor_volume: float, concentration_percent: float) -> float:
    """
    W = (V / s) × (C / (100 − C))

    Raises NumericDegeneracyError if s is not positive.
    """
    if vapor_volume <= 0:
        raise NumericDegeneracyError(
            f"Specific vapor volume must be positive, got {vapor_volume!r}"
        )
    c = concentration_percent
    return (net_volume / vapor_volume) * (c / (100.0 - c))


def altitude_correction_factor(altitude: float) -> float:
    """1% more agent per 300 m above 500 m. 1.0 at or below the threshold."""
    if altitude <= ALTITUDE_THRESHOLD_M:
        return 1.0
    return 1.0 + ((altitude - ALTITUDE_THRESHOLD_M) / ALTITUDE_STEP_M) * ALTITUDE_STEP_INCREASE


def nozzle_count_for(floor_area: float) -> int:
    """One standard nozzle per 50 m², never fewer than 2."""
    return ceil_at_least(floor_area / NOZZLE_COVERAGE_M2, MIN_NOZZLES)


def piping_length_for(length: float, width: float, height: float) -> float:
    """Perimeter plus vertical drop heuristic: not a routed path."""
    return 2.0 * (length + width) + 2.0 * height


def compute_sizing(room: RoomInput) -> SizingResult:
    """
    Size an FM-200 system for one room.

    The room is expected to be validated already. A record that slipped past
    validation raises InvalidInputError naming the field.
    """
    check_room_input(room)

    gross_volume = room.length * room.width * room.height
    net_volume = max(NET_VOLUME_FLOOR, gross_volume - room.equipment_volume)

    vapor_volume = specific_vapor_volume(room.design_temperature)
    weight = agent_weight_for(net_volume, vapor_volume, room.concentration_percent)
    weight *= altitude_correction_factor(room.altitude)
    weight *= room.safety_factor

    floor_area = room.length * room.width

    return SizingResult(
        gross_volume=gross_volume,
        net_volume=net_volume,
        specific_vapor_volume=vapor_volume,
        agent_weight=weight,
        cylinder_count=ceil_at_least(weight / room.cylinder_unit_size, MIN_CYLINDERS),
        nozzle_count=nozzle_count_for(floor_area),
        piping_length=piping_length_for(room.length, room.width, room.height),
        floor_area=floor_area,
    )
