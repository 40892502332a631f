"""
Analytics API Endpoints.

Read-only reports computed from the synced YClients data.
"""

from typing import Literal

from fastapi import APIRouter, Query

from beautyslot.backend.core.dependencies import RequestId
from beautyslot.backend.schemas.analytics import (
    EmptySlotsForecast,
    LTVReport,
    LTVSegment,
    NoShowReport,
    NoShowRisk,
    SmartSegmentsReport,
    StaffPerformanceReport,
    TrafficSourcesReport,
)
from beautyslot.backend.schemas.base import ApiResponse
from beautyslot.backend.services.analytics import AnalyticsService

router = APIRouter()


@router.get(
    "/staff-performance",
    response_model=ApiResponse[StaffPerformanceReport],
    summary="Staff performance",
    description="Metrics, scores and rank of every master; last 30 days by default.",
)
async def staff_performance(
    request_id: RequestId,
    date_from: str | None = Query(default=None, description="YYYY-MM-DD"),
    date_to: str | None = Query(default=None, description="YYYY-MM-DD"),
    staff_id: int | None = Query(default=None),
) -> ApiResponse[StaffPerformanceReport]:
    report = AnalyticsService().staff_performance(date_from=date_from, date_to=date_to, staff_id=staff_id)
    return ApiResponse(data=report)


@router.get(
    "/ltv",
    response_model=ApiResponse[LTVReport],
    summary="Client lifetime value",
)
async def ltv(
    request_id: RequestId,
    segment: LTVSegment | None = Query(default=None),
    min_visits: int = Query(default=0, ge=0),
    sort_by: Literal["ltv", "current_value", "churn_risk"] = Query(default="ltv"),
    limit: int = Query(default=100, ge=1, le=1000),
) -> ApiResponse[LTVReport]:
    report = AnalyticsService().ltv(segment=segment, min_visits=min_visits, sort_by=sort_by, limit=limit)
    return ApiResponse(data=report)


@router.get(
    "/noshow-prediction",
    response_model=ApiResponse[NoShowReport],
    summary="No-show prediction",
    description="Risk score of each upcoming record, riskiest first.",
)
async def noshow_prediction(
    request_id: RequestId,
    days_ahead: int = Query(default=7, ge=1, le=90),
    risk_level: NoShowRisk | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
) -> ApiResponse[NoShowReport]:
    report = AnalyticsService().noshow_prediction(days_ahead=days_ahead, risk_level=risk_level, limit=limit)
    return ApiResponse(data=report)


@router.get(
    "/smart-segments",
    response_model=ApiResponse[SmartSegmentsReport],
    summary="Smart client segments",
    description="Broadcast audiences; client lists are included only on request.",
)
async def smart_segments(
    request_id: RequestId,
    include_clients: bool = Query(default=False),
    limit: int = Query(default=50, ge=1, le=1000, description="Clients per segment"),
) -> ApiResponse[SmartSegmentsReport]:
    report = AnalyticsService().smart_segments(include_clients=include_clients, limit=limit)
    return ApiResponse(data=report)


@router.get(
    "/empty-slots-forecast",
    response_model=ApiResponse[EmptySlotsForecast],
    summary="Empty slots forecast",
)
async def empty_slots_forecast(
    request_id: RequestId,
    days_ahead: int = Query(default=14, ge=1, le=90),
    staff_id: int | None = Query(default=None),
) -> ApiResponse[EmptySlotsForecast]:
    report = AnalyticsService().empty_slots_forecast(days_ahead=days_ahead, staff_id=staff_id)
    return ApiResponse(data=report)


@router.get(
    "/traffic-sources",
    response_model=ApiResponse[TrafficSourcesReport],
    summary="Traffic sources",
    description="Records of a period by booking source; start_date with end_date override period.",
)
async def traffic_sources(
    request_id: RequestId,
    period: Literal["week", "month", "3months", "year"] = Query(default="month"),
    start_date: str | None = Query(default=None, description="YYYY-MM-DD"),
    end_date: str | None = Query(default=None, description="YYYY-MM-DD"),
) -> ApiResponse[TrafficSourcesReport]:
    report = AnalyticsService().traffic_sources(period=period, start_date=start_date, end_date=end_date)
    return ApiResponse(data=report)
