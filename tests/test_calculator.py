"""
Impact calculator and emission factor table tests.
"""
from __future__ import annotations

import json

import pytest
from httpx import AsyncClient

from carbonmeter.core.emission_factors import load_emission_factors
from carbonmeter.core.exceptions import ValidationException
from carbonmeter.schemas.activity import (
    EnergyDetails,
    FoodDetails,
    ShoppingDetails,
    TransportDetails,
    parse_details,
)
from carbonmeter.services.calculator import calculate_impact, default_category, describe


class TestCalculateImpact:
    @pytest.mark.parametrize(
        ("vehicle", "distance", "expected"),
        [
            ("Car", 15, 6.0),
            ("Bus", 10, 1.0),
            ("Train", 100, 5.0),
            ("Bike", 12, 0.0),
            ("Plane", 500, 125.0),
            ("Electric Car", 20, 2.0),
            ("Spaceship", 10, 4.0),
        ],
    )
    def test_transport(self, vehicle: str, distance: float, expected: float) -> None:
        details = TransportDetails(distance=distance, vehicle_type=vehicle)
        assert calculate_impact("transport", details) == expected

    def test_lookup_is_case_insensitive(self) -> None:
        upper = TransportDetails(distance=15, vehicle_type="CAR")
        lower = TransportDetails(distance=15, vehicle_type="car")
        assert calculate_impact("transport", upper) == calculate_impact("transport", lower) == 6.0

    def test_energy(self) -> None:
        details = EnergyDetails(energy_amount=25, energy_source="Grid Electricity")
        assert calculate_impact("energy", details) == 12.5
        assert calculate_impact("energy", EnergyDetails(energy_amount=100, energy_source="Solar")) == 0.0

    @pytest.mark.parametrize(
        ("meal", "food", "expected"),
        [
            ("Lunch", "Beef", 6.0),
            ("Dinner", "Vegan", 0.75),
            ("Breakfast", "Vegetarian", 0.5),
            ("Snack", None, 0.5),
            (None, "Chicken", 3.0),
            (None, None, 2.0),
        ],
    )
    def test_food(self, meal: str | None, food: str | None, expected: float) -> None:
        details = FoodDetails(meal_type=meal, food_type=food)
        assert calculate_impact("food", details) == expected

    def test_shopping(self) -> None:
        assert calculate_impact("shopping", ShoppingDetails(item_type="Furniture", quantity=2)) == 30.0
        assert calculate_impact("shopping", ShoppingDetails(item_type="Books")) == 0.5
        assert calculate_impact("shopping", ShoppingDetails()) == 1.0

    def test_missing_details_use_defaults(self) -> None:
        assert calculate_impact("transport", None) == 0.0
        assert calculate_impact("energy", None) == 0.0
        assert calculate_impact("food", None) == 2.0
        assert calculate_impact("shopping", None) == 1.0

    def test_rounds_to_two_decimals(self) -> None:
        details = TransportDetails(distance=1.234, vehicle_type="Train")
        assert calculate_impact("transport", details) == 0.06

    def test_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            calculate_impact("gardening", None)

    @pytest.mark.parametrize("activity_type", ["transport", "energy", "food", "shopping"])
    def test_never_negative(self, activity_type: str) -> None:
        details = parse_details(activity_type, {})
        assert calculate_impact(activity_type, details) >= 0

    def test_custom_table(self, tmp_path) -> None:
        table = json.loads(load_emission_factors().model_dump_json())
        table["transport"]["factors"]["Car"] = 1.0
        path = tmp_path / "factors.json"
        path.write_text(json.dumps(table), encoding="utf-8")

        factors = load_emission_factors(path)
        details = TransportDetails(distance=15, vehicle_type="Car")
        assert calculate_impact("transport", details, factors) == 15.0


class TestDescribe:
    def test_descriptions(self) -> None:
        assert describe("transport", TransportDetails(distance=15, vehicle_type="Car")) == "15 miles by Car"
        assert describe("transport", TransportDetails(distance=2.5, vehicle_type="Bus")) == "2.5 miles by Bus"
        assert (
            describe("energy", EnergyDetails(energy_amount=25, energy_source="Grid Electricity"))
            == "25 kWh from Grid Electricity"
        )
        assert describe("food", FoodDetails(meal_type="Lunch", food_type="Beef")) == "Beef Lunch"
        assert describe("shopping", ShoppingDetails(item_type="Electronics", quantity=2)) == "2 Electronics items"
        assert describe("shopping", ShoppingDetails(item_type="Books", quantity=1)) == "1 Books item"

    def test_categories(self) -> None:
        assert default_category("transport", TransportDetails(vehicle_type="Train")) == "Train"
        assert default_category("energy", EnergyDetails(energy_source="Solar")) == "Solar"
        assert default_category("food", FoodDetails(meal_type="Dinner")) == "Dinner"
        assert default_category("food", FoodDetails(meal_type="Dinner", food_type="Fish")) == "Fish"
        assert default_category("shopping", ShoppingDetails()) == "Shopping"
        assert default_category("transport", TransportDetails()) == "Transportation"


class TestParseDetails:
    def test_accepts_camel_case(self) -> None:
        details = parse_details("transport", {"distance": 3, "vehicleType": "Taxi"})
        assert isinstance(details, TransportDetails)
        assert details.vehicle_type == "Taxi"

    def test_rejects_foreign_fields(self) -> None:
        with pytest.raises(ValidationException) as exc_info:
            parse_details("energy", {"energyAmount": 1, "mealType": "Lunch"})
        assert exc_info.value.errors[0]["field"] == "details.mealType"

    def test_rejects_zero_quantity(self) -> None:
        with pytest.raises(ValidationException):
            parse_details("shopping", {"quantity": 0})

    def test_storage_form_is_snake_case_without_nulls(self) -> None:
        details = parse_details("shopping", {"itemType": "Toys"})
        assert details.model_dump() == {"item_type": "Toys"}


class TestEmissionFactorsEndpoint:
    pytestmark = pytest.mark.asyncio

    async def test_table_is_public(self, client: AsyncClient) -> None:
        response = await client.get("/api/emission-factors")
        assert response.status_code == 200
        data = response.json()
        assert data["transport"]["factors"]["Car"] == 0.4
        assert data["food"]["multipliers"]["Beef"] == 3.0
        assert data["shopping"]["default"] == 1.0
