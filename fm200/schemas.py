from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from .calculators.sizing import RoomInput, SizingResult
from .pricing_engine import CostBreakdown


class CalculateRequest(BaseModel):
    room: dict  # raw form fields {field: value}; validated by parse_room_input
    currency: Optional[str] = None


class CurrencyRequest(BaseModel):
    sizing: SizingResult
    currency: str


class CostDisplay(BaseModel):
    """Costs in the display currency: derived from base figures, for rendering only."""
    currency: str
    exchange_rate: float
    line_items: List[dict]
    equipment_subtotal: float
    installation_labor: float
    fixed_fees: float
    markup_total: float
    total: float


class CalculationResult(BaseModel):
    room: RoomInput
    sizing: SizingResult
    sizing_display: dict
    costs: CostBreakdown
    costs_display: CostDisplay
    cylinder_options: List[dict] = []


class SavedCalculationCreate(BaseModel):
    name: str
    client_name: Optional[str] = None
    notes: Optional[str] = None
    room: dict
    currency: Optional[str] = None


class SavedCalculationCurrency(BaseModel):
    currency: str


class SavedCalculationSummary(BaseModel):
    id: int
    name: str
    client_name: Optional[str] = None
    display_currency: str
    total_base_currency: float
    created_at: datetime

    class Config:
        from_attributes = True


class SavedCalculation(BaseModel):
    id: int
    name: str
    client_name: Optional[str] = None
    notes: Optional[str] = None
    price_source: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    result: CalculationResult
