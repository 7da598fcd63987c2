"""
Analytics API Router

Provides REST endpoints for filtered grain entry data, trend reports and
filter options.
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..analytics_config import DEFAULT_TOP_N
from .errors import DataUnavailable, InvalidFilterRange
from .fetcher import ReportDataStore
from .models import FilterSpec, ReportType
from .queries import fetch_filter_options
from .service import build_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])

_store = ReportDataStore()


def get_store() -> ReportDataStore:
    return _store


class FilterParams(BaseModel):
    crop_class_code: Optional[str] = None
    region_id: Optional[str] = None
    elevator_id: Optional[str] = None
    town_id: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def to_spec(self) -> FilterSpec:
        return FilterSpec(**self.model_dump())


class AnalyticsQuery(BaseModel):
    type: ReportType = ReportType.MASTER_DATA
    filters: FilterParams = Field(default_factory=FilterParams)


def _error_envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message, "data": [], "count": 0},
    )


def _filter_params(
    crop_class_code: Optional[str] = Query(default=None, description="Filter by crop class code"),
    region_id: Optional[str] = Query(default=None, description="Filter by region ID"),
    elevator_id: Optional[str] = Query(default=None, description="Filter by elevator ID"),
    town_id: Optional[str] = Query(default=None, description="Filter by town ID"),
    date_from: Optional[date] = Query(default=None, description="Inclusive start date (YYYY-MM-DD)"),
    date_to: Optional[date] = Query(default=None, description="Inclusive end date (YYYY-MM-DD)"),
) -> FilterParams:
    return FilterParams(
        crop_class_code=crop_class_code,
        region_id=region_id,
        elevator_id=elevator_id,
        town_id=town_id,
        date_from=date_from,
        date_to=date_to,
    )


@router.post("/data")
def api_analytics_data(body: AnalyticsQuery, store: ReportDataStore = Depends(get_store)):
    """
    Get filtered grain entries for a report type.

    Returns the raw entries ordered by date.
    """
    filters = body.filters.to_spec()
    try:
        result = store.fetch(body.type, filters)
    except InvalidFilterRange as e:
        return _error_envelope(400, str(e))
    except DataUnavailable as e:
        return _error_envelope(503, e.message)

    return {
        "success": True,
        "data": [entry.to_dict() for entry in result.entries],
        "count": len(result.entries),
        "type": body.type.value,
        "filters": filters.to_dict(),
    }


@router.get("/reports/{report_type}")
def api_analytics_report(
    report_type: ReportType,
    params: FilterParams = Depends(_filter_params),
    top_n: int = Query(default=DEFAULT_TOP_N, ge=1, le=50, description="Number of elevators to rank"),
    store: ReportDataStore = Depends(get_store),
):
    """
    Get a trend report.

    Returns the daily series, summary statistics and top elevators.
    """
    try:
        return build_report(report_type, params.to_spec(), store=store, top_n=top_n)
    except InvalidFilterRange as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/filters/options")
def api_filter_options():
    """
    Get filter options.

    Returns active crop classes, regions, elevators and towns ordered by name.
    """
    try:
        return fetch_filter_options()
    except DataUnavailable as e:
        raise HTTPException(status_code=503, detail=e.message)
