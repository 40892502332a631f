"""
Client Value Index (IVK).

RFM-style score of a client from 0 to 100, built from four components
of 25 points each:

    recency    days since the last visit (lower is better)
    frequency  visits per month as a client
    monetary   total amount spent
    loyalty    months since the first visit

Each raw value is mapped to a percentage with piecewise-linear
interpolation between four thresholds (excellent 100, good 75,
medium 50, poor 25), then scaled to the component weight.

Usage:
    from beautyslot.backend.services.ivk import calculate_ivk, determine_client_status

    result = calculate_ivk(client)
    status = determine_client_status(result)
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from beautyslot.backend.core.utils import local_now, months_between, parse_record_datetime, round_half_up
from beautyslot.backend.models.yclients import YClientsClient

Tier = Literal["PLATINUM", "GOLD", "SILVER", "BRONZE", "NEW"]
RiskLevel = Literal["LOW", "MEDIUM", "HIGH", "CRITICAL"]
ClientStatus = Literal["VIP", "REGULAR", "PROBLEM", "LOST"]

COMPONENT_WEIGHT = 25
ASSUMED_MONTHS_WITHOUT_FIRST_VISIT = 6


@dataclass(frozen=True)
class Thresholds:
    excellent: float
    good: float
    medium: float
    poor: float


RECENCY = Thresholds(excellent=14, good=30, medium=60, poor=90)
FREQUENCY = Thresholds(excellent=2.0, good=1.0, medium=0.5, poor=0.25)
MONETARY = Thresholds(excellent=100000, good=50000, medium=20000, poor=5000)
LOYALTY = Thresholds(excellent=24, good=12, medium=6, poor=3)


@dataclass
class IVKResult:
    """Score, its parts and the metrics they were computed from."""

    score: int
    components: dict[str, int]
    percentages: dict[str, int]
    days_since_last_visit: int | None
    months_as_client: int | None
    visits_per_month: float | None
    total_spent: float
    avg_check: float
    tier: Tier
    recommendations: list[str] = field(default_factory=list)

    @property
    def metrics(self) -> dict:
        return {
            "days_since_last_visit": self.days_since_last_visit,
            "months_as_client": self.months_as_client,
            "visits_per_month": self.visits_per_month,
            "total_spent": self.total_spent,
            "avg_check": self.avg_check,
        }


def calculate_percentage(value: float, thresholds: Thresholds, lower_is_better: bool = False) -> float:
    """
    Map a raw value to 0..100 with linear interpolation between thresholds.

    Negative or non-finite values score 0.
    """
    if not math.isfinite(value) or value < 0:
        return 0.0

    t = thresholds
    if lower_is_better:
        if value <= t.excellent:
            return 100.0
        if value <= t.good:
            return 100 - (value - t.excellent) / (t.good - t.excellent) * 25
        if value <= t.medium:
            return 75 - (value - t.good) / (t.medium - t.good) * 25
        if value <= t.poor:
            return 50 - (value - t.medium) / (t.poor - t.medium) * 25
        return max(0.0, 25 - (value - t.poor) / t.poor * 25)

    if value >= t.excellent:
        return 100.0
    if value >= t.good:
        return 75 + (value - t.good) / (t.excellent - t.good) * 25
    if value >= t.medium:
        return 50 + (value - t.medium) / (t.good - t.medium) * 25
    if value >= t.poor:
        return 25 + (value - t.poor) / (t.medium - t.poor) * 25
    return value / t.poor * 25


def _component(percentage: float) -> int:
    return round_half_up(percentage / 100 * COMPONENT_WEIGHT)


def determine_tier(score: int, months_as_client: int | None) -> Tier:
    if months_as_client is not None and months_as_client < 1:
        return "NEW"
    if score >= 85:
        return "PLATINUM"
    if score >= 70:
        return "GOLD"
    if score >= 50:
        return "SILVER"
    return "BRONZE"


def calculate_ivk(client: YClientsClient, now: datetime | None = None) -> IVKResult:
    """
    Compute the value index of a client.

    Args:
        client: Synced client (uses last/first visit dates, visit_count,
            spent and avg_sum)
        now: Reference time in salon wall-clock; defaults to now

    Returns:
        Full IVKResult including recommendations
    """
    now = now or local_now()

    days_since_last_visit: int | None = None
    recency_pct = 0.0
    last_visit = parse_record_datetime(client.last_visit_date)
    if last_visit is not None:
        days_since_last_visit = abs(now - last_visit).days
        recency_pct = calculate_percentage(days_since_last_visit, RECENCY, lower_is_better=True)

    months_as_client: int | None = None
    visits_per_month: float | None = None
    frequency_pct = 0.0
    visit_count = client.visit_count or 0
    first_visit = parse_record_datetime(client.first_visit_date)
    if first_visit is not None:
        months_as_client = max(1, months_between(first_visit, now))
    elif visit_count > 0:
        months_as_client = ASSUMED_MONTHS_WITHOUT_FIRST_VISIT
    if months_as_client is not None:
        visits_per_month = visit_count / months_as_client
        frequency_pct = calculate_percentage(visits_per_month, FREQUENCY)

    total_spent = client.spent or 0
    monetary_pct = calculate_percentage(total_spent, MONETARY)

    loyalty_pct = 0.0
    if months_as_client is not None:
        loyalty_pct = calculate_percentage(months_as_client, LOYALTY)

    components = {
        "recency": _component(recency_pct),
        "frequency": _component(frequency_pct),
        "monetary": _component(monetary_pct),
        "loyalty": _component(loyalty_pct),
    }
    score = min(100, max(0, sum(components.values())))

    result = IVKResult(
        score=score,
        components=components,
        percentages={
            "recency": round_half_up(recency_pct),
            "frequency": round_half_up(frequency_pct),
            "monetary": round_half_up(monetary_pct),
            "loyalty": round_half_up(loyalty_pct),
        },
        days_since_last_visit=days_since_last_visit,
        months_as_client=months_as_client,
        visits_per_month=round_half_up(visits_per_month * 100) / 100 if visits_per_month is not None else None,
        total_spent=total_spent,
        avg_check=client.avg_sum or 0,
        tier=determine_tier(score, months_as_client),
    )
    result.recommendations = get_recommendations(result)
    return result


def calculate_risk(result: IVKResult) -> RiskLevel:
    days = result.days_since_last_visit
    if days is not None and days > 60:
        return "CRITICAL" if result.score > 50 else "HIGH"
    if days is not None and days > 30:
        return "MEDIUM"
    return "LOW"


def determine_client_status(result: IVKResult) -> ClientStatus:
    days = result.days_since_last_visit
    if days is not None and days > 90:
        return "LOST"
    if result.tier in ("PLATINUM", "GOLD") and (days is None or days <= 45):
        return "VIP"
    if result.score < 25 or (days is not None and days > 60):
        return "PROBLEM"
    return "REGULAR"


def get_recommendations(result: IVKResult) -> list[str]:
    """Advice for the salon admin, in Russian."""
    recommendations: list[str] = []
    days = result.days_since_last_visit

    if result.percentages["recency"] < 50 and days is not None:
        if days > 60:
            recommendations.append(
                "🔴 Срочно: клиент не был более 60 дней. "
                "Позвоните или отправьте персональное предложение."
            )
        elif days > 30:
            recommendations.append("🟡 Напомните о себе: прошло более 30 дней с последнего визита.")

    if (
        result.percentages["frequency"] < 50
        and result.months_as_client is not None
        and result.months_as_client > 3
    ):
        recommendations.append("📅 Предложите программу регулярного обслуживания или абонемент.")

    if result.percentages["monetary"] < 50 and result.total_spent > 0:
        recommendations.append("💰 Расскажите о дополнительных услугах или комплексных процедурах.")

    if result.tier in ("PLATINUM", "GOLD"):
        recommendations.append(
            "⭐ VIP-клиент: обеспечьте персональный подход и приоритетное обслуживание."
        )
    if result.tier == "NEW":
        recommendations.append("👋 Новый клиент: важно произвести отличное первое впечатление!")

    return recommendations
