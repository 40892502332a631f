"""
Analytics Schemas.

Payloads of the /admin/analytics reports. All of them are computed from
the synced YClients data on request.
"""

from typing import Literal

from pydantic import BaseModel

Priority = Literal["HIGH", "MEDIUM", "LOW"]
LTVSegment = Literal["diamond", "gold", "silver", "bronze"]
NoShowRisk = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
DayRisk = Literal["HIGH", "MEDIUM", "LOW", "OK"]
SourceType = Literal["online_widget", "aggregator", "direct", "admin", "unknown"]


class AnalyticsPeriod(BaseModel):
    start: str
    end: str


# =============================================================================
# Staff performance
# =============================================================================


class StaffMetrics(BaseModel):
    total_records: int
    revenue: int
    avg_check: int
    occupancy_percent: int
    return_rate: int
    no_show_rate: float
    cancel_rate: float
    unique_clients: int
    returning_clients: int


class StaffScores(BaseModel):
    revenue_score: int
    retention_score: int
    reliability_score: int
    overall_score: int


class StaffPerformance(BaseModel):
    id: int
    name: str
    specialization: str
    avatar: str
    metrics: StaffMetrics
    scores: StaffScores
    rank: int
    recommendations: list[str]


class NewClientAllocation(BaseModel):
    staff_id: int
    staff_name: str
    reason: str
    priority: Priority
    score: int


class TeamStats(BaseModel):
    total_staff: int
    total_revenue: int
    total_records: int
    avg_return_rate: int
    avg_no_show_rate: float
    top_performer: str | None
    needs_attention: int


class PerformancePeriod(BaseModel):
    start: str
    end: str
    days: int


class StaffPerformanceReport(BaseModel):
    staff: list[StaffPerformance]
    new_client_allocation: list[NewClientAllocation]
    team_stats: TeamStats
    period: PerformancePeriod
    insights: list[str]


# =============================================================================
# LTV
# =============================================================================


class LTVClient(BaseModel):
    id: int
    name: str
    phone: str
    email: str
    current_value: int
    ltv: int
    avg_check: int
    visit_count: int
    visits_per_month: float
    months_as_client: int
    churn_risk: int
    segment: LTVSegment
    last_visit_date: str | None
    first_visit_date: str | None


class LTVSegmentStats(BaseModel):
    count: int
    total_value: int
    revenue_percent: int
    avg_ltv: int
    avg_check: int


class ParetoStats(BaseModel):
    top_20_percent_count: int
    their_revenue: int
    their_revenue_percent: int
    insight: str


class LTVSummary(BaseModel):
    total_current_value: int
    total_ltv: int
    avg_ltv: int
    avg_churn_risk: int
    high_churn_risk_count: int


class LTVReport(BaseModel):
    clients: list[LTVClient]
    total_clients: int
    segments: dict[LTVSegment, LTVSegmentStats]
    pareto: ParetoStats
    summary: LTVSummary


# =============================================================================
# No-show prediction
# =============================================================================


class RiskyAppointment(BaseModel):
    record_id: int
    client_id: int
    client_name: str
    client_phone: str
    datetime: str
    date: str
    time: str
    service_name: str
    staff_name: str
    risk_score: int
    risk_level: NoShowRisk
    risk_factors: list[str]
    recommendations: list[str]


class NoShowPatterns(BaseModel):
    worst_day: str
    worst_day_rate: int
    worst_time: str
    worst_time_rate: int
    high_risk_clients: int
    overall_no_show_rate: float


class NoShowSummary(BaseModel):
    total_upcoming: int
    critical_risk_count: int
    high_risk_count: int
    medium_count: int
    low_count: int
    potential_loss: int
    days_analyzed: int


class NoShowReport(BaseModel):
    upcoming: list[RiskyAppointment]
    patterns: NoShowPatterns
    summary: NoShowSummary
    insights: list[str]


# =============================================================================
# Smart segments
# =============================================================================


class SegmentClient(BaseModel):
    id: int
    name: str
    phone: str
    email: str
    last_visit_date: str | None
    days_since_visit: int
    visit_count: int
    avg_sum: int | float
    total_spent: int | float


class SmartSegment(BaseModel):
    id: str
    name: str
    description: str
    criteria: str
    count: int
    potential_revenue: float
    priority: Priority
    recommended_action: str
    recommended_channel: Literal["telegram", "sms", "whatsapp", "email"]
    message_template: str
    clients: list[SegmentClient]


class SegmentSummary(BaseModel):
    total_segments: int
    total_clients_in_segments: int
    total_potential_revenue: int
    high_priority_clients: int
    avg_check: int


class BroadcastSuggestion(BaseModel):
    segment_id: str
    segment_name: str
    client_count: int
    template: str
    channel: str
    best_send_time: str
    expected_response_rate: int


class SmartSegmentsReport(BaseModel):
    segments: list[SmartSegment]
    summary: SegmentSummary
    broadcast_suggestions: list[BroadcastSuggestion]


# =============================================================================
# Empty slots forecast
# =============================================================================


class EmptySlot(BaseModel):
    start: str
    end: str
    staff_id: int
    staff_name: str
    duration_hours: int


class DayForecast(BaseModel):
    date: str
    day_name: str
    occupancy_percent: int
    risk_level: DayRisk
    total_slots: int
    booked_slots: int
    empty_slots: list[EmptySlot]
    recommendations: list[str]
    is_today: bool
    is_past: bool


class WorstDay(BaseModel):
    date: str
    day_name: str
    occupancy: int


class ForecastSummary(BaseModel):
    days_analyzed: int
    high_risk_days: int
    medium_risk_days: int
    avg_occupancy: int
    worst_day: WorstDay | None
    total_empty_hours: int
    active_staff_count: int


class CalendarCell(BaseModel):
    date: str
    day_name: str
    occupancy: int
    risk: DayRisk
    color: str


class EmptySlotsForecast(BaseModel):
    forecast: list[DayForecast]
    summary: ForecastSummary
    insights: list[str]
    calendar_view: list[CalendarCell]


# =============================================================================
# Traffic sources
# =============================================================================


class TrafficSource(BaseModel):
    source: SourceType
    source_name: str
    source_detail: str | None
    records_count: int
    percentage: int
    unique_clients: int
    revenue: int | float
    avg_check: int
    conversion_note: str


class SourceBreakdown(BaseModel):
    detail: str
    count: int
    percentage: int
    revenue: int | float


class TrafficTotals(BaseModel):
    total_records: int
    online_percentage: int
    total_revenue: int | float
    avg_check: int = 0
    new_clients: int = 0
    period: AnalyticsPeriod


class ChartSlice(BaseModel):
    name: str
    value: int
    percentage: int
    color: str


class TrafficSourcesReport(BaseModel):
    sources: list[TrafficSource]
    totals: TrafficTotals
    breakdowns: dict[str, list[SourceBreakdown]]
    insights: list[str]
    recommendations: list[str]
    chart_data: list[ChartSlice] = []
