"""
Price table and exchange-rate loading with fallback chain:
1. data/prices.json (or settings.PRICE_TABLE_PATH): supplier price sheet
2. DEFAULT_PRICES / DEFAULT_EXCHANGE_RATES from this file (market averages)

The engines never read this module. Callers load a PriceConfig and pass
its tables into compute_costs() explicitly.

All prices are base currency (USD) per unit unless the key says otherwise.
"""

import json
import logging
import os
from typing import Optional

from pydantic import BaseModel

from .config import settings
from .errors import ConfigurationError
from .pricing_engine import ExchangeRateTable, PriceTable

logger = logging.getLogger(__name__)

_PROJECT_ROOT = os.path.join(os.path.dirname(__file__), "..")

# FALLBACK PRICES: used only when no price file exists at all
# Source: clean-agent supplier list prices, 2024-2025
DEFAULT_PRICES = {
    # Agent
    "agentCostPerKg": 48.50,
    # Equipment
    "cylinderCost": 1250.00,
    "nozzleCost": 175.00,
    "pipingCostPerMeter": 45.00,
    "fittingsCost": 320.00,
    "valveAssembly": 450.00,
    "mountingHardware": 85.00,
    # Detection & control
    "detectionPanel": 2200.00,
    "smokeDetector": 95.00,
    "heatDetector": 85.00,
    "manualCallPoint": 65.00,
    "hooterStrobe": 75.00,
    "warningSigns": 45.00,
    # Installation & engineering
    "installationLaborPerHour": 85.00,
    "engineeringDesign": 2500.00,
    "commissioningTesting": 1800.00,
    "documentation": 450.00,
    # Markup factors
    "installationFactor": 1.28,   # 28% installation
    "engineeringFactor": 1.15,    # 15% engineering
    "contingencyFactor": 1.10,    # 10% contingency
}

# Units of currency per 1 USD
DEFAULT_EXCHANGE_RATES = {
    "USD": 1.00,
    "EUR": 0.92,
    "INR": 83.50,
    "AED": 3.67,
    "GBP": 0.79,
    "CAD": 1.36,
    "AUD": 1.52,
}


class PriceConfig(BaseModel):
    """Loaded, validated price and exchange-rate tables plus where they came from."""
    prices: PriceTable
    exchange_rates: ExchangeRateTable
    source: str

    class Config:
        frozen = True


def default_price_config(base_currency: str = None) -> PriceConfig:
    base = base_currency or settings.BASE_CURRENCY
    return PriceConfig(
        prices=PriceTable.from_mapping(DEFAULT_PRICES),
        exchange_rates=ExchangeRateTable.from_mapping(DEFAULT_EXCHANGE_RATES, base),
        source="defaults",
    )


def _resolve_path(path: Optional[str]) -> str:
    path = path or settings.PRICE_TABLE_PATH
    if not os.path.isabs(path):
        path = os.path.normpath(os.path.join(_PROJECT_ROOT, path))
    return path


def parse_price_config(data: dict, source: str = "inline") -> PriceConfig:
    """
    Validate a price document: {"base_currency", "prices": {...}, "exchange_rates": {...}}.

    Raises ConfigurationError: a partial document is never merged with defaults.
    """
    if not isinstance(data, dict):
        raise ConfigurationError(source, "price document must be a JSON object")
    if "prices" not in data:
        raise ConfigurationError("prices")
    base = data.get("base_currency") or settings.BASE_CURRENCY
    if not isinstance(base, str):
        raise ConfigurationError("base_currency", f"must be a currency code, got {base!r}")
    prices = PriceTable.from_mapping(data["prices"])
    exchange_rates = ExchangeRateTable.from_mapping(data.get("exchange_rates", {}), base)
    return PriceConfig(prices=prices, exchange_rates=exchange_rates, source=source)


def load_price_config(path: str = None) -> PriceConfig:
    """
    Load the price document from disk.

    A missing file falls back to built-in defaults with a warning.
    An unreadable or incomplete file raises ConfigurationError.
    """
    resolved = _resolve_path(path)
    try:
        with open(resolved) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("Price table %s not found: using built-in default prices", resolved)
        return default_price_config()
    except json.JSONDecodeError as e:
        raise ConfigurationError(resolved, f"invalid JSON: {e}") from e

    config = parse_price_config(data, source=resolved)
    logger.info(
        "Loaded price table from %s (%d currencies)",
        resolved, len(config.exchange_rates.rates),
    )
    return config


_price_config = None


def get_price_config() -> PriceConfig:
    """Cached PriceConfig for the API. Used as a FastAPI dependency."""
    global _price_config
    if _price_config is None:
        _price_config = load_price_config()
    return _price_config


def reset_price_config() -> None:
    """Drop the cached PriceConfig so the next request reloads the file."""
    global _price_config
    _price_config = None
