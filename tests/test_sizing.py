"""
Sizing engine tests: NFPA 2001 total-flooding formula.

Tests:
1-4.   Reference scenario (10 × 8 × 4 m server room)
5-7.   Determinism and volume monotonicity
8-9.   Net volume floor
10-12. Altitude correction threshold
13-15. Nozzle and cylinder rounding
16-18. Defensive checks (InvalidInputError, NumericDegeneracyError)
19-20. Display rounding
21-22. SizingResult field constraints

No I/O: the sizing engine is pure math.
"""

import math

import pytest
from pydantic import ValidationError

from fm200.calculators.base import ceil_at_least, round_half_up
from fm200.calculators.sizing import (
    RoomInput,
    SizingResult,
    agent_weight_for,
    altitude_correction_factor,
    compute_sizing,
    nozzle_count_for,
    piping_length_for,
    specific_vapor_volume,
)
from fm200.errors import InvalidInputError, NumericDegeneracyError


def _room(**overrides):
    fields = {
        "length": 10.0,
        "width": 8.0,
        "height": 4.0,
        "design_temperature": 20.0,
        "concentration_percent": 7.0,
    }
    fields.update(overrides)
    return RoomInput(**fields)


# ============================================================
# 1-4. Reference scenario
# ============================================================

def test_reference_scenario_volumes(server_room):
    result = compute_sizing(server_room)
    assert result.gross_volume == 320.0
    assert result.net_volume == 320.0
    assert result.floor_area == 80.0


def test_reference_scenario_vapor_volume(server_room):
    result = compute_sizing(server_room)
    assert result.specific_vapor_volume == pytest.approx(0.1369, abs=1e-12)


def test_reference_scenario_agent_weight_matches_formula(server_room):
    """W = (V / s) × (C / (100 − C)) × safety factor, bit-for-bit."""
    result = compute_sizing(server_room)
    s = specific_vapor_volume(20.0)
    expected = (320.0 / s) * (7.0 / 93.0) * 1.0 * 1.07
    assert result.agent_weight == expected
    assert result.agent_weight == pytest.approx((320 / 0.1369) * (7 / 93) * 1.07, rel=1e-12)
    assert result.agent_weight == pytest.approx(188.2545, abs=1e-3)


def test_reference_scenario_equipment(server_room):
    result = compute_sizing(server_room)
    assert result.cylinder_count == 4       # ceil(188.25 / 54.4)
    assert result.nozzle_count == 2         # max(2, ceil(80 / 50))
    assert result.piping_length == 44.0     # 2 × 18 + 2 × 4


# ============================================================
# 5-7. Determinism and monotonicity
# ============================================================

def test_sizing_is_deterministic(server_room):
    first = compute_sizing(server_room)
    second = compute_sizing(server_room)
    assert first == second
    assert first.model_dump() == second.model_dump()


@pytest.mark.parametrize("dimension", ["length", "width", "height"])
def test_larger_dimension_needs_more_agent(dimension):
    small = compute_sizing(_room())
    big = compute_sizing(_room(**{dimension: getattr(_room(), dimension) + 0.5}))
    assert big.gross_volume > small.gross_volume
    assert big.net_volume > small.net_volume
    assert big.agent_weight > small.agent_weight


def test_higher_concentration_needs_more_agent():
    low = compute_sizing(_room(concentration_percent=7.0))
    high = compute_sizing(_room(concentration_percent=10.5))
    assert high.agent_weight > low.agent_weight


# ============================================================
# 8-9. Net volume floor
# ============================================================

def test_equipment_volume_is_subtracted():
    result = compute_sizing(_room(equipment_volume=20.0))
    assert result.gross_volume == 320.0
    assert result.net_volume == 300.0


@pytest.mark.parametrize("equipment_volume", [320.0, 500.0])
def test_net_volume_clamped_to_floor(equipment_volume):
    result = compute_sizing(_room(equipment_volume=equipment_volume))
    assert result.net_volume == 0.1
    assert result.agent_weight > 0
    assert result.cylinder_count == 1


# ============================================================
# 10-12. Altitude correction
# ============================================================

def test_no_altitude_correction_at_threshold():
    at_sea_level = compute_sizing(_room(altitude=0.0))
    at_threshold = compute_sizing(_room(altitude=500.0))
    assert at_threshold.agent_weight == at_sea_level.agent_weight


def test_altitude_correction_factor_at_800m():
    assert altitude_correction_factor(800.0) == 1.01
    assert altitude_correction_factor(500.0) == 1.0
    assert altitude_correction_factor(0.0) == 1.0


def test_altitude_increases_agent_weight():
    base = compute_sizing(_room(altitude=0.0))
    high = compute_sizing(_room(altitude=800.0))
    assert high.agent_weight == pytest.approx(base.agent_weight * 1.01, rel=1e-12)


# ============================================================
# 13-15. Nozzle and cylinder rounding
# ============================================================

@pytest.mark.parametrize("floor_area", [0.5, 10.0, 50.0, 99.9])
def test_nozzle_minimum_is_two(floor_area):
    assert nozzle_count_for(floor_area) == 2


def test_nozzles_scale_with_floor_area():
    assert nozzle_count_for(100.0) == 2
    assert nozzle_count_for(101.0) == 3
    assert nozzle_count_for(400.0) == 8
    # 20 × 20 room = 400 m²
    assert compute_sizing(_room(length=20.0, width=20.0)).nozzle_count == 8


def test_cylinder_count_rounds_up():
    assert ceil_at_least(100.0 / 54.4, 1) == 2
    assert ceil_at_least(54.4 / 54.4, 1) == 1
    small = compute_sizing(_room(length=1.0, width=1.0, height=1.0))
    assert small.cylinder_count == 1


def test_piping_length_heuristic():
    assert piping_length_for(10.0, 8.0, 4.0) == 44.0
    assert piping_length_for(5.0, 5.0, 3.0) == 26.0


# ============================================================
# 16-18. Defensive checks
# ============================================================

@pytest.mark.parametrize("field,value", [
    ("length", 0.0),
    ("width", -2.0),
    ("height", math.inf),
    ("design_temperature", 75.0),
    ("altitude", -10.0),
    ("safety_factor", 2.0),
    ("concentration_percent", 5.0),
    ("cylinder_unit_size", 0.0),
    ("equipment_volume", -1.0),
])
def test_invalid_room_names_the_field(field, value):
    with pytest.raises(InvalidInputError) as exc_info:
        compute_sizing(_room(**{field: value}))
    assert exc_info.value.field == field


def test_nan_dimension_rejected():
    with pytest.raises(InvalidInputError) as exc_info:
        compute_sizing(_room(length=float("nan")))
    assert exc_info.value.field == "length"


def test_zero_vapor_volume_raises_degeneracy():
    with pytest.raises(NumericDegeneracyError):
        agent_weight_for(100.0, 0.0, 7.0)
    with pytest.raises(NumericDegeneracyError):
        agent_weight_for(100.0, specific_vapor_volume(-300.0), 7.0)


# ============================================================
# 19-20. Display rounding
# ============================================================

def test_rounded_values(server_room):
    display = compute_sizing(server_room).rounded()
    assert display["agent_weight"] == 188.25
    assert display["specific_vapor_volume"] == 0.1369
    assert display["gross_volume"] == 320.0
    assert display["cylinder_count"] == 4


def test_round_half_up():
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(2.675, 2) == 2.68   # round() gives 2.67
    assert round_half_up(-0.125, 2) == -0.13
    assert round_half_up(0.13685, 4) == 0.1369


def test_sizing_result_round_trips_at_full_precision(server_room):
    result = compute_sizing(server_room)
    restored = SizingResult.model_validate_json(result.model_dump_json())
    assert restored == result
    assert restored.agent_weight == result.agent_weight


# ============================================================
# 21-22. SizingResult field constraints
# ============================================================

@pytest.mark.parametrize("field,value", [
    ("cylinder_count", 0),
    ("cylinder_count", -3),
    ("nozzle_count", 1),
    ("agent_weight", -500.0),
    ("agent_weight", 0.0),
    ("piping_length", -10.0),
    ("net_volume", 0.0),
    ("specific_vapor_volume", -0.1),
    ("floor_area", 0.0),
])
def test_sizing_result_rejects_impossible_values(server_room, field, value):
    data = compute_sizing(server_room).model_dump()
    data[field] = value
    with pytest.raises(ValidationError) as exc_info:
        SizingResult(**data)
    assert exc_info.value.errors()[0]["loc"] == (field,)


def test_sizing_result_accepts_minimum_counts(server_room):
    data = dict(compute_sizing(server_room).model_dump(), cylinder_count=1, nozzle_count=2)
    assert SizingResult(**data).cylinder_count == 1
