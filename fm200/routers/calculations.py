"""
Saved calculations: server-side replacement for the browser's saved budget data.

POST   /api/calculations               : Calculate and store
GET    /api/calculations               : List saved calculations
GET    /api/calculations/{id}          : Full stored result
POST   /api/calculations/{id}/currency : Re-display in another currency
DELETE /api/calculations/{id}          : Remove
"""

import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from .. import models, schemas
from ..calculators.sizing import RoomInput, SizingResult
from ..database import get_db
from ..errors import ConfigurationError
from ..price_loader import PriceConfig
from ..pricing_engine import CostBreakdown, convert_breakdown
from .calculate import build_result, price_config, run_calculation, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/calculations", tags=["calculations"])


def _get_or_404(calculation_id: int, db: Session) -> models.SavedCalculation:
    calc = db.query(models.SavedCalculation).filter(
        models.SavedCalculation.id == calculation_id
    ).first()
    if not calc:
        raise HTTPException(status_code=404, detail="Saved calculation not found")
    return calc


def _to_schema(calc: models.SavedCalculation) -> schemas.SavedCalculation:
    """Rebuild the records from stored JSON at full precision."""
    room = RoomInput.model_validate(calc.room_json)
    sizing = SizingResult.model_validate(calc.sizing_json)
    costs = CostBreakdown.model_validate(calc.costs_json)
    return schemas.SavedCalculation(
        id=calc.id,
        name=calc.name,
        client_name=calc.client_name,
        notes=calc.notes,
        price_source=calc.price_source,
        created_at=calc.created_at,
        updated_at=calc.updated_at,
        result=build_result(room, sizing, costs),
    )


@router.post("", response_model=schemas.SavedCalculation)
def save_calculation(
    request: schemas.SavedCalculationCreate,
    db: Session = Depends(get_db),
    config: PriceConfig = Depends(price_config),
):
    room, sizing, costs = run_calculation(request.room, request.currency, config)
    calc = models.SavedCalculation(
        name=request.name,
        client_name=request.client_name,
        notes=request.notes,
        room_json=room.model_dump(mode="json"),
        sizing_json=sizing.model_dump(mode="json"),
        costs_json=costs.model_dump(mode="json"),
        display_currency=costs.display_currency,
        total_base_currency=costs.total_base_currency,
        price_source=config.source,
    )
    db.add(calc)
    db.commit()
    db.refresh(calc)
    logger.info("Saved calculation %d (%s)", calc.id, calc.name)
    return _to_schema(calc)


@router.get("", response_model=List[schemas.SavedCalculationSummary])
def list_calculations(db: Session = Depends(get_db)):
    return db.query(models.SavedCalculation).order_by(models.SavedCalculation.created_at.desc()).all()


@router.get("/{calculation_id}", response_model=schemas.SavedCalculation)
def get_calculation(calculation_id: int, db: Session = Depends(get_db)):
    return _to_schema(_get_or_404(calculation_id, db))


@router.post("/{calculation_id}/currency", response_model=schemas.SavedCalculation)
def change_currency(
    calculation_id: int,
    request: schemas.SavedCalculationCurrency,
    db: Session = Depends(get_db),
    config: PriceConfig = Depends(price_config),
):
    """
    Switch display currency. The stored base-currency figures are untouched;
    only the display currency, rate, and display total are recomputed from them.
    """
    calc = _get_or_404(calculation_id, db)
    costs = CostBreakdown.model_validate(calc.costs_json)
    try:
        costs = convert_breakdown(costs, request.currency, config.exchange_rates)
    except ConfigurationError as e:
        raise to_http_error(e)
    calc.costs_json = costs.model_dump(mode="json")
    calc.display_currency = costs.display_currency
    calc.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(calc)
    return _to_schema(calc)


@router.delete("/{calculation_id}")
def delete_calculation(calculation_id: int, db: Session = Depends(get_db)):
    calc = _get_or_404(calculation_id, db)
    db.delete(calc)
    db.commit()
    return {"ok": True, "deleted": calculation_id}
