"""
Canonical emission factor table.
The table ships as JSON data next to the package and can be replaced with
EMISSION_FACTORS_FILE. It is validated once on first use and then cached.
"""
from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, NonNegativeFloat

from carbonmeter.core.config import settings

logger = logging.getLogger(__name__)

BUNDLED_FACTORS_PATH = Path(__file__).resolve().parent.parent / "data" / "emission_factors.json"


def _lookup(table: dict[str, float], key: str | None, default: float) -> float:
    """Case-insensitive lookup falling back to ``default`` for unknown keys."""
    if not key:
        return default
    wanted = key.strip().casefold()
    for name, factor in table.items():
        if name.casefold() == wanted:
            return factor
    return default


class FactorTable(BaseModel):
    per: str
    default: NonNegativeFloat
    factors: dict[str, NonNegativeFloat]

    def factor_for(self, key: str | None) -> float:
        return _lookup(self.factors, key, self.default)


class FoodFactorTable(BaseModel):
    per: str = "meal"
    default_meal: NonNegativeFloat
    meals: dict[str, NonNegativeFloat]
    default_multiplier: NonNegativeFloat
    multipliers: dict[str, NonNegativeFloat]

    def meal_base(self, meal_type: str | None) -> float:
        return _lookup(self.meals, meal_type, self.default_meal)

    def multiplier_for(self, food_type: str | None) -> float:
        return _lookup(self.multipliers, food_type, self.default_multiplier)


class EmissionFactors(BaseModel):
    unit: str = Field(default="kg CO₂")
    transport: FactorTable
    energy: FactorTable
    food: FoodFactorTable
    shopping: FactorTable


def load_emission_factors(path: str | Path | None = None) -> EmissionFactors:
    """Read and validate a factor table from disk."""
    source = Path(path) if path else BUNDLED_FACTORS_PATH
    with source.open(encoding="utf-8") as fh:
        data = json.load(fh)
    table = EmissionFactors.model_validate(data)
    logger.info("Loaded emission factors from %s", source)
    return table


@lru_cache(maxsize=1)
def get_emission_factors() -> EmissionFactors:
    return load_emission_factors(settings.EMISSION_FACTORS_FILE)
