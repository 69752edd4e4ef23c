"""
Calculate API: the sizing → costing pipeline behind the form.

POST /api/calculate         : Validate room fields, size the system, cost it
POST /api/calculate/currency: Re-display costs in another currency from a SizingResult
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from .. import schemas
from ..calculators.equipment import cylinder_options
from ..calculators.sizing import compute_sizing
from ..calculators.validation import parse_room_input
from ..config import settings
from ..errors import ConfigurationError, InvalidInputError, NumericDegeneracyError
from ..price_loader import PriceConfig, get_price_config
from ..pricing_engine import compute_costs

logger = logging.getLogger(__name__)

router = APIRouter(tags=["calculate"])


def to_http_error(exc: Exception) -> HTTPException:
    """Map calculator errors to HTTP responses."""
    if isinstance(exc, (InvalidInputError, NumericDegeneracyError)):
        return HTTPException(status_code=422, detail=str(exc))
    logger.error("Price configuration error: %s", exc)
    return HTTPException(status_code=500, detail=f"Price configuration error: {exc}")


def price_config() -> PriceConfig:
    """FastAPI dependency: the active price table, or 500 if it can't be loaded."""
    try:
        return get_price_config()
    except ConfigurationError as e:
        raise to_http_error(e)


def build_cost_display(costs) -> schemas.CostDisplay:
    """Display-currency figures, each converted from its base-currency value."""
    return schemas.CostDisplay(
        currency=costs.display_currency,
        exchange_rate=costs.exchange_rate,
        line_items=costs.display_line_items(),
        equipment_subtotal=costs.converted(costs.equipment_subtotal),
        installation_labor=costs.converted(costs.installation_labor),
        fixed_fees=costs.converted(costs.fixed_fees),
        markup_total=costs.converted(costs.markup_total),
        total=costs.total_display_currency,
    )


def build_result(room, sizing, costs) -> schemas.CalculationResult:
    """Assemble the response record. Display values are derived, never stored."""
    return schemas.CalculationResult(
        room=room,
        sizing=sizing,
        sizing_display=sizing.rounded(),
        costs=costs,
        costs_display=build_cost_display(costs),
        cylinder_options=cylinder_options(sizing.agent_weight),
    )


def run_calculation(fields: dict, currency: str, config: PriceConfig):
    """
    Validate → size → cost. Returns (room, sizing, costs).
    Raises HTTPException on any calculator error; nothing partial is returned.
    """
    try:
        room = parse_room_input(fields)
        sizing = compute_sizing(room)
        costs = compute_costs(
            sizing, config.prices,
            currency or settings.DEFAULT_CURRENCY,
            config.exchange_rates,
        )
    except (InvalidInputError, NumericDegeneracyError, ConfigurationError) as e:
        raise to_http_error(e)
    logger.info(
        "Calculated %.2f kg agent, %d cylinders, total %.2f %s",
        sizing.agent_weight, sizing.cylinder_count,
        costs.total_base_currency, costs.base_currency,
    )
    return room, sizing, costs


@router.post("/calculate", response_model=schemas.CalculationResult)
def calculate(request: schemas.CalculateRequest, config: PriceConfig = Depends(price_config)):
    """Run the full pipeline on raw form fields."""
    room, sizing, costs = run_calculation(request.room, request.currency, config)
    return build_result(room, sizing, costs)


@router.post("/calculate/currency")
def recalculate_currency(request: schemas.CurrencyRequest, config: PriceConfig = Depends(price_config)):
    """
    New CostBreakdown for another currency, recomputed from the SizingResult.
    The client never sends back converted figures to be re-scaled.
    """
    try:
        costs = compute_costs(request.sizing, config.prices, request.currency, config.exchange_rates)
    except ConfigurationError as e:
        raise to_http_error(e)
    return {
        "costs": costs.model_dump(),
        "costs_display": build_cost_display(costs).model_dump(),
    }
