"""
Activity Pydantic schemas.
``details`` is a tagged union: the variant is selected by the activity
``type`` and rejects fields that belong to another variant.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import (
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_serializer,
)

from carbonmeter.core.exceptions import ValidationException
from carbonmeter.models.activity import DEFAULT_UNIT, MAX_IMPACT
from carbonmeter.schemas.base import CamelModel
from carbonmeter.utils.dates import ensure_utc

ActivityType = Literal["transport", "energy", "food", "shopping"]

# Finite, non-negative amounts. With the bundled factors the caps keep
# every computed impact under MAX_IMPACT.
Distance = Annotated[float, Field(ge=0, le=1_000_000, allow_inf_nan=False)]
EnergyAmount = Annotated[float, Field(ge=0, le=10_000_000, allow_inf_nan=False)]
Quantity = Annotated[int, Field(ge=1, le=100_000)]
Impact = Annotated[float, Field(ge=0, le=MAX_IMPACT, allow_inf_nan=False)]


# ── Details variants ──────────────────────────────────────────────────────────

class DetailsBase(CamelModel):
    model_config = ConfigDict(extra="forbid")

    @model_serializer(mode="wrap")
    def _drop_empty(self, handler: Any) -> dict[str, Any]:
        return {k: v for k, v in handler(self).items() if v is not None}


class TransportDetails(DetailsBase):
    kind: Literal["transport"] = Field(default="transport", exclude=True)
    distance: Distance | None = None
    vehicle_type: str | None = Field(default=None, max_length=100)


class EnergyDetails(DetailsBase):
    kind: Literal["energy"] = Field(default="energy", exclude=True)
    energy_amount: EnergyAmount | None = None
    energy_source: str | None = Field(default=None, max_length=100)


class FoodDetails(DetailsBase):
    kind: Literal["food"] = Field(default="food", exclude=True)
    meal_type: str | None = Field(default=None, max_length=100)
    food_type: str | None = Field(default=None, max_length=100)


class ShoppingDetails(DetailsBase):
    kind: Literal["shopping"] = Field(default="shopping", exclude=True)
    item_type: str | None = Field(default=None, max_length=100)
    quantity: Quantity | None = None


ActivityDetails = Annotated[
    Union[TransportDetails, EnergyDetails, FoodDetails, ShoppingDetails],
    Field(discriminator="kind"),
]

_details_adapter: TypeAdapter[ActivityDetails] = TypeAdapter(ActivityDetails)


def _tag_details(activity_type: str, raw: Any) -> Any:
    if isinstance(raw, dict):
        return {**raw, "kind": activity_type}
    return raw


def parse_details(activity_type: str, raw: Any) -> DetailsBase:
    """
    Validate a raw details bag against the variant for ``activity_type``.
    Raises ValidationException with one entry per offending field.
    """
    if isinstance(raw, DetailsBase):
        raw = raw.model_dump()
    try:
        return _details_adapter.validate_python(_tag_details(activity_type, raw or {}))
    except ValidationError as exc:
        errors = []
        for error in exc.errors():
            # loc starts with the union tag, e.g. ("transport", "foodType")
            loc = [str(part) for part in error["loc"][1:]]
            errors.append({"field": ".".join(["details", *loc]), "message": error["msg"]})
        raise ValidationException(errors) from exc


def _details_validator(value: Any, info: ValidationInfo) -> Any:
    activity_type = info.data.get("type")
    if value is None or activity_type is None:
        return value
    return _tag_details(activity_type, value)


# ── Create ────────────────────────────────────────────────────────────────────

class ActivityCreate(CamelModel):
    type: ActivityType
    description: str | None = Field(default=None, max_length=1000)
    impact: Impact | None = None
    unit: str = Field(default=DEFAULT_UNIT, min_length=1, max_length=50)
    date: datetime
    category: str | None = Field(default=None, max_length=100)
    details: ActivityDetails | None = None

    @field_validator("details", mode="before")
    @classmethod
    def select_details_variant(cls, v: Any, info: ValidationInfo) -> Any:
        return _details_validator(v, info)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return ensure_utc(v)


# ── Update ────────────────────────────────────────────────────────────────────

class ActivityUpdate(CamelModel):
    """Partial update. ``details`` is checked against the stored type by the service."""

    type: ActivityType | None = None
    description: str | None = Field(default=None, min_length=1, max_length=1000)
    impact: Impact | None = None
    unit: str | None = Field(default=None, min_length=1, max_length=50)
    date: datetime | None = None
    category: str | None = Field(default=None, min_length=1, max_length=100)
    details: dict[str, Any] | None = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None


# ── Estimate ──────────────────────────────────────────────────────────────────

class ImpactEstimateRequest(CamelModel):
    type: ActivityType
    details: ActivityDetails | None = None

    @field_validator("details", mode="before")
    @classmethod
    def select_details_variant(cls, v: Any, info: ValidationInfo) -> Any:
        return _details_validator(v, info)


class ImpactEstimate(CamelModel):
    impact: float
    unit: str
    description: str
    category: str


# ── Read ──────────────────────────────────────────────────────────────────────

class ActivityRead(CamelModel):
    id: uuid.UUID
    type: ActivityType
    description: str
    impact: float
    unit: str
    date: datetime
    category: str
    details: ActivityDetails
    created_at: datetime
    updated_at: datetime

    @field_validator("details", mode="before")
    @classmethod
    def select_details_variant(cls, v: Any, info: ValidationInfo) -> Any:
        return _details_validator(v, info)

    @field_validator("date", "created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class ActivityResponse(CamelModel):
    activity: ActivityRead


class ActivityListResponse(CamelModel):
    activities: list[ActivityRead]
    total: int


class RecentActivitiesResponse(CamelModel):
    activities: list[ActivityRead]


# ── Bulk delete ───────────────────────────────────────────────────────────────

class BulkDeleteRequest(CamelModel):
    activity_ids: list[uuid.UUID] = Field(min_length=1, max_length=500)


class BulkDeleteResponse(CamelModel):
    message: str
    deleted_count: int


# ── Filter ────────────────────────────────────────────────────────────────────

class ActivityFilter(CamelModel):
    """Query parameters for the activity list endpoint."""

    type: ActivityType | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    limit: int | None = Field(default=None, ge=1, le=500)
    offset: int = Field(default=0, ge=0)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_bounds(cls, v: datetime | None) -> datetime | None:
        return ensure_utc(v) if v is not None else None
