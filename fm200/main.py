from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings
from .database import engine, Base
from .routers import calculate, calculations, reference

logger = logging.getLogger("fm200")

# Create tables on import (saved_calculations is the only table)
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="FM-200 Calculator",
    description="NFPA 2001 clean-agent system sizing and budgetary costing",
    version="4.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(calculate.router, prefix="/api")
app.include_router(calculations.router, prefix="/api")
app.include_router(reference.router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok", "app": "fm200-calculator", "company": settings.COMPANY_NAME}


@app.on_event("startup")
def load_prices():
    """Load the price table once so a broken prices.json shows up in the logs at boot."""
    from .errors import ConfigurationError
    from .price_loader import get_price_config
    try:
        config = get_price_config()
        logger.info("Price table source: %s", config.source)
    except ConfigurationError as e:
        # Requests will return 500 with the same message until the file is fixed
        logger.error("Price table failed to load: %s", e)
