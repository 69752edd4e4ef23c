"""
Costing Engine.

Turns a SizingResult into an itemized CostBreakdown.
Pure math: quantity × price, hours × rate, equipment subtotal × markup.

Input: SizingResult + PriceTable + display currency + ExchangeRateTable
Output: CostBreakdown (base currency figures + one display currency)

Markups apply to the equipment subtotal only. Labor and the fixed service
fees are outside the markup base.
"""

import logging
import math
from typing import Dict, Optional, Tuple

from pydantic import BaseModel

from .calculators.base import is_number
from .calculators.sizing import SizingResult
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


BASE_CURRENCY = "USD"

# Config key (as written in prices.json) -> PriceTable field
PRICE_KEYS = {
    "agentCostPerKg": "agent_cost_per_kg",
    "cylinderCost": "cylinder_cost",
    "nozzleCost": "nozzle_cost",
    "pipingCostPerMeter": "piping_cost_per_meter",
    "fittingsCost": "fittings_cost",
    "valveAssembly": "valve_assembly",
    "mountingHardware": "mounting_hardware",
    "detectionPanel": "detection_panel",
    "smokeDetector": "smoke_detector",
    "heatDetector": "heat_detector",
    "manualCallPoint": "manual_call_point",
    "hooterStrobe": "hooter_strobe",
    "warningSigns": "warning_signs",
    "installationLaborPerHour": "installation_labor_per_hour",
    "engineeringDesign": "engineering_design",
    "commissioningTesting": "commissioning_testing",
    "documentation": "documentation",
}

FACTOR_KEYS = {
    "installationFactor": "installation_factor",
    "engineeringFactor": "engineering_factor",
    "contingencyFactor": "contingency_factor",
}

# Fixed device counts: minimums independent of room size
HEAT_DETECTORS = 2
MANUAL_CALL_POINTS = 2
HOOTER_STROBES = 4
WARNING_SIGNS = 4
SMOKE_DETECTOR_COVERAGE_M2 = 100.0
MIN_SMOKE_DETECTORS = 2

# Installation hours model: base + per cylinder + per nozzle + per meter of pipe
LABOR_BASE_HOURS = 40.0
LABOR_HOURS_PER_CYLINDER = 4.0
LABOR_HOURS_PER_NOZZLE = 2.0
LABOR_HOURS_PER_PIPE_METER = 0.5


class PriceTable(BaseModel):
    """Per-unit base-currency prices and the three markup factors."""
    agent_cost_per_kg: float
    cylinder_cost: float
    nozzle_cost: float
    piping_cost_per_meter: float
    fittings_cost: float
    valve_assembly: float
    mounting_hardware: float
    detection_panel: float
    smoke_detector: float
    heat_detector: float
    manual_call_point: float
    hooter_strobe: float
    warning_signs: float
    installation_labor_per_hour: float
    engineering_design: float
    commissioning_testing: float
    documentation: float
    installation_factor: float
    engineering_factor: float
    contingency_factor: float

    class Config:
        frozen = True

    @classmethod
    def from_mapping(cls, mapping: dict) -> "PriceTable":
        """
        Build from a config mapping keyed like prices.json.

        Raises ConfigurationError naming the first missing or malformed key.
        A missing price is never treated as zero: that would under-quote.
        """
        if not isinstance(mapping, dict):
            raise ConfigurationError("prices", "must be a mapping of price keys to numbers")
        values = {}
        for key, attr in list(PRICE_KEYS.items()) + list(FACTOR_KEYS.items()):
            if key not in mapping or mapping[key] is None:
                raise ConfigurationError(key)
            value = mapping[key]
            if not is_number(value):
                raise ConfigurationError(key, f"must be a number, got {value!r}")
            if key in FACTOR_KEYS and value < 1.0:
                raise ConfigurationError(key, f"markup factor must be >= 1.0, got {value!r}")
            if value < 0:
                raise ConfigurationError(key, f"price must not be negative, got {value!r}")
            values[attr] = float(value)
        return cls(**values)

    def to_mapping(self) -> dict:
        """Inverse of from_mapping: config-style keys."""
        keys = list(PRICE_KEYS.items()) + list(FACTOR_KEYS.items())
        return {key: getattr(self, attr) for key, attr in keys}


class ExchangeRateTable(BaseModel):
    """Currency code -> units of that currency per one base-currency unit."""
    base_currency: str = BASE_CURRENCY
    rates: Dict[str, float]

    class Config:
        frozen = True

    @classmethod
    def from_mapping(cls, mapping: dict, base_currency: str = BASE_CURRENCY) -> "ExchangeRateTable":
        """Raises ConfigurationError for non-numeric or non-positive rates."""
        if not isinstance(mapping, dict):
            raise ConfigurationError("exchange_rates", "must be a mapping of currency codes to rates")
        base = base_currency.upper()
        rates = {}
        for code, rate in mapping.items():
            if not isinstance(code, str) or not code.strip():
                raise ConfigurationError(str(code), "currency code must be a non-empty string")
            if not is_number(rate):
                raise ConfigurationError(code, f"exchange rate must be a number, got {rate!r}")
            if rate <= 0:
                raise ConfigurationError(code, f"exchange rate must be positive, got {rate!r}")
            rates[code.strip().upper()] = float(rate)
        if rates.setdefault(base, 1.0) != 1.0:
            raise ConfigurationError(base, f"base currency rate must be 1.0, got {rates[base]!r}")
        return cls(base_currency=base, rates=rates)

    def rate_for(self, currency: str) -> float:
        """Exchange rate for a currency. Unknown codes fall back to 1.0 (base currency)."""
        code = (currency or self.base_currency).upper()
        if code not in self.rates:
            logger.debug("No exchange rate for %s, using 1.0", code)
            return 1.0
        return self.rates[code]

    def currencies(self) -> list:
        """Currency codes this table has a rate for, base currency included."""
        return list(self.rates.keys())


class LineItem(BaseModel):
    """One equipment line: cost is in base currency."""
    key: str
    description: str
    quantity: float
    unit: str
    unit_price: float
    cost: float

    class Config:
        frozen = True


class CostBreakdown(BaseModel):
    """Itemized budget for one sizing result. All money fields are base currency except total_display_currency."""
    line_items: Tuple[LineItem, ...]
    equipment_subtotal: float
    installation_hours: float
    installation_labor: float
    engineering_design: float
    commissioning_testing: float
    documentation: float
    installation_markup: float
    engineering_markup: float
    contingency_markup: float
    total_base_currency: float
    base_currency: str = BASE_CURRENCY
    display_currency: str = BASE_CURRENCY
    exchange_rate: float = 1.0
    total_display_currency: float

    class Config:
        frozen = True

    def line_item(self, key: str) -> LineItem:
        for item in self.line_items:
            if item.key == key:
                return item
        raise KeyError(key)

    @property
    def fixed_fees(self) -> float:
        return self.engineering_design + self.commissioning_testing + self.documentation

    @property
    def markup_total(self) -> float:
        return self.installation_markup + self.engineering_markup + self.contingency_markup

    def converted(self, base_value: float) -> float:
        """A base-currency figure in the display currency."""
        return base_value * self.exchange_rate

    def display_line_items(self) -> list:
        """Per-line costs in the display currency, always derived from the base costs."""
        return [
            {
                "key": item.key,
                "description": item.description,
                "quantity": item.quantity,
                "unit": item.unit,
                "unit_price": self.converted(item.unit_price),
                "cost": self.converted(item.cost),
            }
            for item in self.line_items
        ]


def smoke_detector_count(floor_area: float) -> int:
    """One smoke detector per 100 m², minimum 2."""
    return max(MIN_SMOKE_DETECTORS, math.ceil(floor_area / SMOKE_DETECTOR_COVERAGE_M2))


def installation_hours_for(sizing: SizingResult) -> float:
    """hours = 40 + 4×cylinders + 2×nozzles + 0.5×piping_m"""
    return (
        LABOR_BASE_HOURS
        + LABOR_HOURS_PER_CYLINDER * sizing.cylinder_count
        + LABOR_HOURS_PER_NOZZLE * sizing.nozzle_count
        + LABOR_HOURS_PER_PIPE_METER * sizing.piping_length
    )


def _build_line_items(sizing: SizingResult, prices: PriceTable) -> list:
    """(key, description, quantity, unit, unit_price) for every equipment line."""
    rows = [
        ("agent", "FM-200 (HFC-227ea) clean agent", sizing.agent_weight, "kg", prices.agent_cost_per_kg),
        ("cylinders", "Storage cylinders", sizing.cylinder_count, "ea", prices.cylinder_cost),
        ("valves", "Cylinder valve assemblies", sizing.cylinder_count, "ea", prices.valve_assembly),
        ("mounting", "Cylinder mounting hardware", sizing.cylinder_count, "ea", prices.mounting_hardware),
        ("nozzles", "Discharge nozzles", sizing.nozzle_count, "ea", prices.nozzle_cost),
        ("piping", "Distribution piping", sizing.piping_length, "m", prices.piping_cost_per_meter),
        ("fittings", "Pipe fittings", 1, "lot", prices.fittings_cost),
        ("detection_panel", "Detection and release control panel", 1, "ea", prices.detection_panel),
        ("smoke_detectors", "Smoke detectors", smoke_detector_count(sizing.floor_area), "ea", prices.smoke_detector),
        ("heat_detectors", "Heat detectors", HEAT_DETECTORS, "ea", prices.heat_detector),
        ("call_points", "Manual call points", MANUAL_CALL_POINTS, "ea", prices.manual_call_point),
        ("hooter_strobes", "Hooter / strobes", HOOTER_STROBES, "ea", prices.hooter_strobe),
        ("signage", "Warning signs", WARNING_SIGNS, "ea", prices.warning_signs),
    ]
    return [
        LineItem(
            key=key,
            description=description,
            quantity=quantity,
            unit=unit,
            unit_price=unit_price,
            cost=quantity * unit_price,
        )
        for key, description, quantity, unit, unit_price in rows
    ]


def _default_rates(base_currency: str = BASE_CURRENCY) -> ExchangeRateTable:
    return ExchangeRateTable(base_currency=base_currency, rates={base_currency: 1.0})


def compute_costs(sizing: SizingResult, prices: PriceTable, display_currency: str = BASE_CURRENCY,
                  exchange_rates: Optional[ExchangeRateTable] = None) -> CostBreakdown:
    """
    Build the full CostBreakdown for a sizing result.

    Args:
        sizing: output of compute_sizing() (or a mapping, validated here)
        prices: complete PriceTable (or a config mapping, validated here)
        display_currency: currency code for total_display_currency
        exchange_rates: table of rates; None means base currency only

    Raises ConfigurationError before anything is computed if the price table
    is incomplete.
    """
    if not isinstance(sizing, SizingResult):
        sizing = SizingResult.model_validate(sizing)
    if not isinstance(prices, PriceTable):
        prices = PriceTable.from_mapping(prices)
    if exchange_rates is None:
        exchange_rates = _default_rates()
    elif not isinstance(exchange_rates, ExchangeRateTable):
        exchange_rates = ExchangeRateTable.from_mapping(exchange_rates)

    line_items = _build_line_items(sizing, prices)
    equipment_subtotal = sum(item.cost for item in line_items)

    installation_hours = installation_hours_for(sizing)
    installation_labor = installation_hours * prices.installation_labor_per_hour

    installation_markup = equipment_subtotal * (prices.installation_factor - 1.0)
    engineering_markup = equipment_subtotal * (prices.engineering_factor - 1.0)
    contingency_markup = equipment_subtotal * (prices.contingency_factor - 1.0)

    total_base = (
        equipment_subtotal
        + installation_labor
        + prices.engineering_design
        + prices.commissioning_testing
        + prices.documentation
        + installation_markup
        + engineering_markup
        + contingency_markup
    )

    currency = (display_currency or exchange_rates.base_currency).upper()
    rate = exchange_rates.rate_for(currency)

    return CostBreakdown(
        line_items=tuple(line_items),
        equipment_subtotal=equipment_subtotal,
        installation_hours=installation_hours,
        installation_labor=installation_labor,
        engineering_design=prices.engineering_design,
        commissioning_testing=prices.commissioning_testing,
        documentation=prices.documentation,
        installation_markup=installation_markup,
        engineering_markup=engineering_markup,
        contingency_markup=contingency_markup,
        total_base_currency=total_base,
        base_currency=exchange_rates.base_currency,
        display_currency=currency,
        exchange_rate=rate,
        total_display_currency=total_base * rate,
    )


def convert_breakdown(breakdown: CostBreakdown, display_currency: str,
                      exchange_rates: Optional[ExchangeRateTable] = None) -> CostBreakdown:
    """
    Re-display a breakdown in another currency.

    Returns a new CostBreakdown; the input is untouched. The display total is
    recomputed from total_base_currency, never from a previous converted value.
    Raises ConfigurationError when the rate table has a different base currency.
    """
    if exchange_rates is None:
        exchange_rates = _default_rates(breakdown.base_currency)
    elif not isinstance(exchange_rates, ExchangeRateTable):
        exchange_rates = ExchangeRateTable.from_mapping(exchange_rates, breakdown.base_currency)
    if exchange_rates.base_currency != breakdown.base_currency:
        raise ConfigurationError(
            "base_currency",
            f"exchange rates are quoted against {exchange_rates.base_currency}, "
            f"breakdown is in {breakdown.base_currency}",
        )
    currency = (display_currency or breakdown.base_currency).upper()
    rate = exchange_rates.rate_for(currency)
    return breakdown.model_copy(update={
        "display_currency": currency,
        "exchange_rate": rate,
        "total_display_currency": breakdown.total_base_currency * rate,
    })
