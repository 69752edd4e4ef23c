from fastapi import APIRouter, Depends

from ..calculators.equipment import CYLINDER_SIZES, DEFAULT_CYLINDER_KEY, NOZZLE_TYPES
from ..price_loader import PriceConfig
from .calculate import price_config

router = APIRouter(prefix="/reference", tags=["reference"])


@router.get("/currencies")
def list_currencies(config: PriceConfig = Depends(price_config)):
    """Exchange rates: units of each currency per one base-currency unit."""
    rates = config.exchange_rates
    return {"base_currency": rates.base_currency, "codes": rates.currencies(), "rates": rates.rates}


@router.get("/prices")
def list_prices(config: PriceConfig = Depends(price_config)):
    """Active price table, keyed the way prices.json is."""
    return {
        "source": config.source,
        "base_currency": config.exchange_rates.base_currency,
        "prices": config.prices.to_mapping(),
    }


@router.get("/equipment")
def list_equipment():
    return {
        "cylinders": CYLINDER_SIZES,
        "default_cylinder": DEFAULT_CYLINDER_KEY,
        "nozzles": NOZZLE_TYPES,
    }
