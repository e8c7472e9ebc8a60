"""
Impact calculator.
Maps an activity type plus its details to kg CO2e using the canonical
emission factor table. Pure: no I/O, no state. Unknown or missing keys fall
back to the type's default factor so malformed input still yields an
approximate estimate.
"""
from __future__ import annotations

from carbonmeter.core.emission_factors import EmissionFactors, get_emission_factors
from carbonmeter.schemas.activity import (
    DetailsBase,
    EnergyDetails,
    FoodDetails,
    ShoppingDetails,
    TransportDetails,
)

# Display bucket per activity type, also the category of last resort
BUCKET_NAMES: dict[str, str] = {
    "transport": "Transportation",
    "energy": "Energy",
    "food": "Food",
    "shopping": "Shopping",
}


def _number(value: float | int | None, default: float) -> float:
    if value is None:
        return default
    return max(float(value), 0.0)


def _fmt(value: float) -> str:
    return f"{value:.2f}".rstrip("0").rstrip(".")


def calculate_impact(
    activity_type: str,
    details: DetailsBase | None,
    factors: EmissionFactors | None = None,
) -> float:
    """Return the non-negative impact in kg CO2e, rounded to 2 decimals."""
    factors = factors or get_emission_factors()

    if isinstance(details, TransportDetails) or (details is None and activity_type == "transport"):
        d = details or TransportDetails()
        impact = _number(d.distance, 0.0) * factors.transport.factor_for(d.vehicle_type)
    elif isinstance(details, EnergyDetails) or (details is None and activity_type == "energy"):
        d = details or EnergyDetails()
        impact = _number(d.energy_amount, 0.0) * factors.energy.factor_for(d.energy_source)
    elif isinstance(details, FoodDetails) or (details is None and activity_type == "food"):
        d = details or FoodDetails()
        impact = factors.food.meal_base(d.meal_type) * factors.food.multiplier_for(d.food_type)
    elif isinstance(details, ShoppingDetails) or (details is None and activity_type == "shopping"):
        d = details or ShoppingDetails()
        impact = _number(d.quantity, 1.0) * factors.shopping.factor_for(d.item_type)
    else:
        raise ValueError(f"Unknown activity type {activity_type!r}")

    return round(max(impact, 0.0), 2)


def describe(activity_type: str, details: DetailsBase | None) -> str:
    """Build a readable description such as ``15 miles by Car``."""
    if isinstance(details, TransportDetails):
        vehicle = details.vehicle_type or "vehicle"
        if details.distance is not None:
            return f"{_fmt(details.distance)} miles by {vehicle}"
        return f"Trip by {vehicle}"
    if isinstance(details, EnergyDetails):
        source = details.energy_source or "energy"
        if details.energy_amount is not None:
            return f"{_fmt(details.energy_amount)} kWh from {source}"
        return f"Energy use from {source}"
    if isinstance(details, FoodDetails):
        parts = [p for p in (details.food_type, details.meal_type) if p]
        return " ".join(parts) if parts else "Meal"
    if isinstance(details, ShoppingDetails):
        quantity = details.quantity or 1
        item = details.item_type or "shopping"
        noun = "item" if quantity == 1 else "items"
        return f"{quantity} {item} {noun}"
    return f"{BUCKET_NAMES.get(activity_type, 'Activity')} activity"


def default_category(activity_type: str, details: DetailsBase | None) -> str:
    """The category key used for grouping when the caller supplies none."""
    key: str | None = None
    if isinstance(details, TransportDetails):
        key = details.vehicle_type
    elif isinstance(details, EnergyDetails):
        key = details.energy_source
    elif isinstance(details, FoodDetails):
        key = details.food_type or details.meal_type
    elif isinstance(details, ShoppingDetails):
        key = details.item_type
    return key or BUCKET_NAMES.get(activity_type, activity_type)
