"""
Emission factor routes.
GET /emission-factors exposes the table the calculator uses.
"""
from __future__ import annotations

from fastapi import APIRouter

from carbonmeter.core.emission_factors import EmissionFactors, get_emission_factors

router = APIRouter(prefix="/emission-factors", tags=["Emission factors"])


@router.get(
    "",
    response_model=EmissionFactors,
    summary="The canonical emission factor table",
)
async def read_emission_factors() -> EmissionFactors:
    return get_emission_factors()
