from sqlalchemy import Column, Integer, String, Float, DateTime, Text, JSON
from datetime import datetime
from .database import Base


class SavedCalculation(Base):
    """
    A saved calculation: room inputs plus the results derived from them.

    Results are stored as full-precision JSON records, not display-rounded
    values, so a reload reproduces every figure exactly.
    """
    __tablename__ = "saved_calculations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    client_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    room_json = Column(JSON, nullable=False)       # RoomInput
    sizing_json = Column(JSON, nullable=False)     # SizingResult
    costs_json = Column(JSON, nullable=False)      # CostBreakdown
    display_currency = Column(String, default="USD")
    total_base_currency = Column(Float, nullable=False)
    price_source = Column(String, nullable=True)   # file path or 'defaults'
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
