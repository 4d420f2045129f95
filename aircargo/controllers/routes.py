"""Route search controller."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, HTTPException, Query, status

from aircargo.controllers.dependencies import RouteFinderDep
from aircargo.telemetry import observe_route_search
from aircargo.views import ErrorResponse, RouteSearchResponse

router = APIRouter(prefix="/api/routes", tags=["routes"])


@router.get(
    "",
    response_model=RouteSearchResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
)
async def search_routes(
    finder: RouteFinderDep,
    origin: str = Query(..., min_length=1, max_length=8),
    destination: str = Query(..., min_length=1, max_length=8),
    departure_date: str = Query(
        ...,
        pattern=r"^\d{4}-\d{2}-\d{2}$",
        description="Departure date in YYYY-MM-DD format",
    ),
) -> RouteSearchResponse:
    """Return direct flights and one-stop transit routes for the day."""

    try:
        day = date.fromisoformat(departure_date)
    except ValueError:
        raise HTTPException(
            status_code=422,
            detail="Please provide a valid departure date",
        ) from None

    result = await finder.find_routes(origin, destination, day)
    observe_route_search(len(result.direct) + len(result.transit))

    return RouteSearchResponse.from_domain(origin, destination, day, result)
