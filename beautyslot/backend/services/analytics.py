"""
Analytics Service.

Six read-only reports over the synced YClients data:

    staff_performance      revenue, retention and reliability scores per master
    ltv                    lifetime value and diamond/gold/silver/bronze segments
    noshow_prediction      risk score for each upcoming record
    smart_segments         broadcast audiences by visit recency and check size
    empty_slots_forecast   per-day occupancy and free hours ahead
    traffic_sources        where records come from (widget, aggregator, admin)

Record times are salon wall-clock. Percentages are rounded half up.
"""

import calendar
from collections import Counter, defaultdict
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from typing import Any
from urllib.parse import urlparse

from beautyslot.backend.core.exceptions import ValidationError
from beautyslot.backend.core.utils import local_now, parse_record_datetime, record_day, round_half_up
from beautyslot.backend.models.yclients import YClientsClient, YClientsRecord
from beautyslot.backend.schemas.analytics import (
    AnalyticsPeriod,
    BroadcastSuggestion,
    CalendarCell,
    ChartSlice,
    DayForecast,
    EmptySlot,
    EmptySlotsForecast,
    ForecastSummary,
    LTVClient,
    LTVReport,
    LTVSegmentStats,
    LTVSummary,
    NewClientAllocation,
    NoShowPatterns,
    NoShowReport,
    NoShowSummary,
    ParetoStats,
    PerformancePeriod,
    RiskyAppointment,
    SegmentClient,
    SegmentSummary,
    SmartSegment,
    SmartSegmentsReport,
    SourceBreakdown,
    StaffMetrics,
    StaffPerformance,
    StaffPerformanceReport,
    StaffScores,
    TeamStats,
    TrafficSource,
    TrafficSourcesReport,
    TrafficTotals,
    WorstDay,
)
from beautyslot.backend.services.base import BaseService
from beautyslot.backend.services.dashboard import (
    WEEKDAYS_SHORT,
    days_between,
    parse_day,
    record_moment,
    revenue_of,
    working_staff,
)
from beautyslot.backend.services.order import format_rub

WEEKDAYS_FULL = ("Понедельник", "Вторник", "Среда", "Четверг", "Пятница", "Суббота", "Воскресенье")
PRIORITY_ORDER = {"HIGH": 0, "MEDIUM": 1, "LOW": 2}
LTV_SEGMENTS = ("diamond", "gold", "silver", "bronze")
NO_VISIT_DAYS = 999

WORK_START_HOUR = 9
WORK_END_HOUR = 21
FORECAST_SLOTS_PER_STAFF = 10
EMPTY_SLOTS_SHOWN = 10
RISK_COLORS = {"HIGH": "#ff6b6b", "MEDIUM": "#ffa94d", "LOW": "#ffe066", "OK": "#69db7c"}

SOURCE_NAMES = {
    "online_widget": "Онлайн-запись",
    "aggregator": "Агрегаторы",
    "direct": "Прямые",
    "admin": "Через администратора",
    "unknown": "Неизвестно",
}
SOURCE_COLORS = {"online_widget": "#69db7c", "admin": "#74c0fc", "aggregator": "#ffa94d"}
TRAFFIC_PERIOD_MONTHS = {"month": 1, "3months": 3, "year": 12}


def _percent(part: float, whole: float) -> float:
    return part / whole * 100 if whole else 0


def _one_decimal(value: float) -> float:
    return round_half_up(value * 10) / 10


def _days_since(value: str | None, now: datetime, default: int) -> int:
    moment = parse_record_datetime(value)
    return days_between(moment, now) if moment else default


def _shift_months(day: date, months: int) -> date:
    """Move by whole months, clamping the day to the target month's length."""
    year, month = divmod(day.year * 12 + day.month - 1 + months, 12)
    last_day = calendar.monthrange(year, month + 1)[1]
    return date(year, month + 1, min(day.day, last_day))


def time_slot(moment: datetime) -> str:
    """Bucket of the day a record starts in."""
    if moment.hour < 11:
        return "9:00-11:00"
    if moment.hour < 14:
        return "11:00-14:00"
    if moment.hour < 17:
        return "14:00-17:00"
    return "17:00-21:00"


def ltv_segment(percentile: float) -> str:
    if percentile >= 95:
        return "diamond"
    if percentile >= 80:
        return "gold"
    if percentile >= 50:
        return "silver"
    return "bronze"


def churn_risk(days_since_visit: int | None) -> int:
    """Churn risk 0-90 from days since the last visit; 50 when unknown."""
    if days_since_visit is None:
        return 50
    for threshold, risk in ((90, 90), (60, 70), (45, 50), (30, 30), (14, 10)):
        if days_since_visit > threshold:
            return risk
    return 0


def record_source(record: YClientsRecord) -> tuple[str, str | None]:
    """
    Classify where a record came from.

    Returns:
        (source type, detail) where detail is a hostname, API id or None
    """
    from_url = getattr(record, "from_url", None) or None
    api_id = getattr(record, "api_id", None) or None
    if record.online and not api_id:
        return "online_widget", from_url
    if api_id:
        return "aggregator", f"API ID: {api_id}"
    if from_url:
        return "online_widget", urlparse(from_url).hostname or from_url
    return "admin", "Администратор"


class AnalyticsService(BaseService):
    """Computes the analytics reports from the sync store."""

    # ------------------------------------------------------------------
    # Staff performance
    # ------------------------------------------------------------------

    def staff_performance(
        self,
        date_from: str | None = None,
        date_to: str | None = None,
        staff_id: int | None = None,
    ) -> StaffPerformanceReport:
        """
        Score every non-fired master over a period, last 30 days by default.

        overall = 40% revenue + 35% retention + 25% reliability, where
        revenue and retention are relative to the best master and
        reliability is 100 minus twice the no-show and cancel rates.
        """
        today = local_now().date()
        start = datetime.combine(parse_day(date_from, today - timedelta(days=30)), time.min)
        end = datetime.combine(parse_day(date_to, today), time.max)
        if start > end:
            raise ValidationError("date_from must not be after date_to")

        records = self.sync_store.records
        period = [r for r in records if (m := record_moment(r)) is not None and start <= m <= end]
        staff = [s for s in self.sync_store.staff if not s.fired]
        if staff_id is not None:
            staff = [s for s in staff if s.id == staff_id]

        days = -((start - end) // timedelta(days=1))
        work_days = max(1, days * 5 // 7)

        rows = []
        for member in staff:
            own = [r for r in period if r.staff_id == member.id]
            total = len(own)
            revenue = revenue_of(own)
            unique_clients = len({r.client_id for r in own if r.client_id})
            visits = Counter(r.client_id for r in records if r.staff_id == member.id and r.client_id)
            returning = sum(1 for n in visits.values() if n > 1)
            rows.append(
                (
                    member,
                    StaffMetrics(
                        total_records=total,
                        revenue=round_half_up(revenue),
                        avg_check=round_half_up(revenue / total) if total else 0,
                        occupancy_percent=round_half_up(min(100, _percent(total, work_days * 8))),
                        return_rate=round_half_up(_percent(returning, unique_clients)),
                        no_show_rate=_one_decimal(_percent(sum(1 for r in own if r.attendance == -1), total)),
                        cancel_rate=_one_decimal(_percent(sum(1 for r in own if r.deleted), total)),
                        unique_clients=unique_clients,
                        returning_clients=returning,
                    ),
                )
            )

        max_revenue = max((m.revenue for _, m in rows), default=0)
        max_return = max((m.return_rate for _, m in rows), default=0)
        scored = []
        for member, metrics in rows:
            revenue_score = _percent(metrics.revenue, max_revenue)
            retention_score = _percent(metrics.return_rate, max_return)
            reliability_score = max(0, 100 - (metrics.no_show_rate + metrics.cancel_rate) * 2)
            scores = StaffScores(
                revenue_score=round_half_up(revenue_score),
                retention_score=round_half_up(retention_score),
                reliability_score=round_half_up(reliability_score),
                overall_score=round_half_up(
                    revenue_score * 0.4 + retention_score * 0.35 + reliability_score * 0.25
                ),
            )
            scored.append((member, metrics, scores))
        scored.sort(key=lambda item: -item[2].overall_score)

        performance = [
            StaffPerformance(
                id=member.id,
                name=member.name,
                specialization=member.specialization or "",
                avatar=member.avatar or "",
                metrics=metrics,
                scores=scores,
                rank=rank,
                recommendations=self._staff_recommendations(metrics, scores),
            )
            for rank, (member, metrics, scores) in enumerate(scored, start=1)
        ]
        team = self._team_stats(performance)

        insights = []
        if team.top_performer:
            insights.append(f"🏆 Лучший мастер: {team.top_performer}")
        if team.needs_attention > 0:
            insights.append(f"⚠️ {team.needs_attention} мастеров требуют внимания")
        if team.avg_no_show_rate > 10:
            insights.append(f"📉 Высокий средний % неявок: {team.avg_no_show_rate}%")
        if team.avg_return_rate > 60:
            insights.append(f"💚 Отличная возвращаемость клиентов: {team.avg_return_rate}%")

        return StaffPerformanceReport(
            staff=performance,
            new_client_allocation=self._allocation(performance),
            team_stats=team,
            period=PerformancePeriod(start=start.date().isoformat(), end=end.date().isoformat(), days=days),
            insights=insights,
        )

    @staticmethod
    def _staff_recommendations(metrics: StaffMetrics, scores: StaffScores) -> list[str]:
        tips = []
        if scores.revenue_score < 50 and metrics.total_records > 5:
            tips.append("Рассмотрите обучение апсейлу")
        if scores.retention_score < 50:
            tips.append("Улучшите работу с клиентами")
        if metrics.no_show_rate > 15:
            tips.append("Высокий % неявок, проверьте работу с подтверждениями")
        if metrics.occupancy_percent < 40:
            tips.append("Низкая загрузка, увеличьте продвижение")
        if scores.overall_score >= 80:
            tips.append("Отличная работа! Давайте больше новых клиентов")
        return tips

    @staticmethod
    def _allocation(performance: list[StaffPerformance]) -> list[NewClientAllocation]:
        allocation = []
        for s in [s for s in performance if s.scores.overall_score > 0][:5]:
            if s.scores.retention_score >= 80 and s.scores.reliability_score >= 80:
                reason, priority = "Высокая возвращаемость и надёжность", "HIGH"
            elif s.scores.overall_score >= 70:
                reason, priority = "Хороший общий показатель", "HIGH"
            elif s.metrics.occupancy_percent < 50:
                reason, priority = "Есть свободные слоты", "MEDIUM"
            else:
                reason, priority = "Стабильная работа", "LOW"
            allocation.append(
                NewClientAllocation(
                    staff_id=s.id,
                    staff_name=s.name,
                    reason=reason,
                    priority=priority,
                    score=s.scores.overall_score,
                )
            )
        allocation.sort(key=lambda a: PRIORITY_ORDER[a.priority])
        return allocation

    @staticmethod
    def _team_stats(performance: list[StaffPerformance]) -> TeamStats:
        count = len(performance)
        return TeamStats(
            total_staff=count,
            total_revenue=sum(s.metrics.revenue for s in performance),
            total_records=sum(s.metrics.total_records for s in performance),
            avg_return_rate=round_half_up(sum(s.metrics.return_rate for s in performance) / count) if count else 0,
            avg_no_show_rate=_one_decimal(sum(s.metrics.no_show_rate for s in performance) / count) if count else 0,
            top_performer=performance[0].name if performance else None,
            needs_attention=sum(1 for s in performance if s.scores.overall_score < 40),
        )

    # ------------------------------------------------------------------
    # LTV
    # ------------------------------------------------------------------

    def ltv(
        self,
        segment: str | None = None,
        min_visits: int = 0,
        sort_by: str = "ltv",
        limit: int = 100,
    ) -> LTVReport:
        """
        Predict client lifetime value.

        LTV = avg check x visits per month x 12 x predicted years, where
        predicted years shrink with churn risk (at least half a year).
        Segments are LTV percentiles: top 5% diamond, top 20% gold,
        top 50% silver, the rest bronze.
        """
        now = local_now()
        rows: list[dict[str, Any]] = []
        for client in self.sync_store.clients:
            if client.visit_count < min_visits:
                continue
            first_visit = parse_record_datetime(client.first_visit_date)
            months = max(1, (now - first_visit) // timedelta(days=30)) if first_visit else 1
            visits_per_month = client.visit_count / months
            last_visit = parse_record_datetime(client.last_visit_date)
            risk = churn_risk(days_between(last_visit, now) if last_visit else None)
            years = max(0.5, (100 - risk) / 100 * 3)
            rows.append(
                {
                    "client": client,
                    "ltv": round_half_up((client.avg_sum or 0) * visits_per_month * 12 * years),
                    "visits_per_month": round_half_up(visits_per_month * 100) / 100,
                    "months": months,
                    "churn_risk": risk,
                    "current_value": client.spent or client.sold_amount or 0,
                }
            )

        by_ltv = sorted(rows, key=lambda r: -r["ltv"])
        for rank, row in enumerate(by_ltv):
            row["segment"] = ltv_segment(100 - rank / len(by_ltv) * 100)

        selected = [r for r in rows if segment is None or r["segment"] == segment]
        sort_key = {"current_value": "current_value", "churn_risk": "churn_risk"}.get(sort_by, "ltv")
        selected.sort(key=lambda r: -r[sort_key])

        total_value = sum(r["current_value"] for r in rows)
        segments = {}
        for name in LTV_SEGMENTS:
            members = [r for r in rows if r["segment"] == name]
            value = sum(r["current_value"] for r in members)
            segments[name] = LTVSegmentStats(
                count=len(members),
                total_value=round_half_up(value),
                revenue_percent=round_half_up(_percent(value, total_value)),
                avg_ltv=round_half_up(sum(r["ltv"] for r in members) / len(members)) if members else 0,
                avg_check=(
                    round_half_up(sum(r["client"].avg_sum or 0 for r in members) / len(members))
                    if members
                    else 0
                ),
            )

        top_count = -(-len(rows) * 2 // 10)
        top_revenue = sum(r["current_value"] for r in by_ltv[:top_count])
        top_percent = round_half_up(_percent(top_revenue, total_value))
        total_ltv = sum(r["ltv"] for r in rows)

        return LTVReport(
            clients=[self._ltv_client(r) for r in selected[:limit]],
            total_clients=len(rows),
            segments=segments,
            pareto=ParetoStats(
                top_20_percent_count=top_count,
                their_revenue=round_half_up(top_revenue),
                their_revenue_percent=top_percent,
                insight=f"{top_count} клиентов (20%) приносят {top_percent}% выручки",
            ),
            summary=LTVSummary(
                total_current_value=round_half_up(total_value),
                total_ltv=total_ltv,
                avg_ltv=round_half_up(total_ltv / len(rows)) if rows else 0,
                avg_churn_risk=round_half_up(sum(r["churn_risk"] for r in rows) / len(rows)) if rows else 0,
                high_churn_risk_count=sum(1 for r in rows if r["churn_risk"] >= 50),
            ),
        )

    @staticmethod
    def _ltv_client(row: dict[str, Any]) -> LTVClient:
        client: YClientsClient = row["client"]
        return LTVClient(
            id=client.id,
            name=client.name or "",
            phone=client.phone or "",
            email=client.email or "",
            current_value=round_half_up(row["current_value"]),
            ltv=row["ltv"],
            avg_check=round_half_up(client.avg_sum or 0),
            visit_count=client.visit_count,
            visits_per_month=row["visits_per_month"],
            months_as_client=row["months"],
            churn_risk=row["churn_risk"],
            segment=row["segment"],
            last_visit_date=client.last_visit_date,
            first_visit_date=client.first_visit_date,
        )

    # ------------------------------------------------------------------
    # No-show prediction
    # ------------------------------------------------------------------

    def noshow_prediction(
        self,
        days_ahead: int = 7,
        risk_level: str | None = None,
        limit: int = 50,
    ) -> NoShowReport:
        """
        Score upcoming records by no-show risk.

        Points: client history up to 40 (5 for a client without history),
        weekday up to 20, time slot up to 20 and an unconfirmed record 20.
        75+ is CRITICAL, 50+ HIGH, 25+ MEDIUM.
        """
        today = datetime.combine(local_now().date(), time.min)
        horizon = today + timedelta(days=days_ahead)
        records = self.sync_store.records

        by_client: dict[int, list[int]] = defaultdict(lambda: [0, 0])
        by_weekday: dict[int, list[int]] = defaultdict(lambda: [0, 0])
        by_slot: dict[str, list[int]] = defaultdict(lambda: [0, 0])
        past_total = past_no_shows = 0
        for r in records:
            moment = record_moment(r)
            if moment is None or moment >= today or r.deleted:
                continue
            missed = int(r.attendance == -1)
            past_total += 1
            past_no_shows += missed
            buckets = [by_weekday[moment.weekday()], by_slot[time_slot(moment)]]
            if r.client_id:
                buckets.append(by_client[r.client_id])
            for bucket in buckets:
                bucket[0] += 1
                bucket[1] += missed
        average = _percent(past_no_shows, past_total) if past_total else 5

        upcoming = []
        costs = {}
        for r in records:
            moment = record_moment(r)
            if moment is None or not today <= moment <= horizon or r.deleted or r.attendance == -1:
                continue
            costs[r.id] = r.total_cost
            upcoming.append(self._score_record(r, moment, by_client, by_weekday, by_slot, average))

        selected = [a for a in upcoming if risk_level is None or a.risk_level == risk_level]
        selected.sort(key=lambda a: -a.risk_score)

        worst_day, worst_day_rate = self._worst(by_weekday, "Понедельник", lambda d: WEEKDAYS_FULL[d])
        worst_time, worst_time_rate = self._worst(by_slot, "9:00-11:00", str)
        high_risk_clients = sum(1 for total, missed in by_client.values() if total and missed / total > 0.2)

        levels = Counter(a.risk_level for a in upcoming)
        potential_loss = sum(costs[a.record_id] for a in selected if a.risk_level in ("HIGH", "CRITICAL"))

        insights = []
        if levels["CRITICAL"]:
            insights.append(f"⚠️ {levels['CRITICAL']} записей с критическим риском неявки")
        if levels["HIGH"] > 3:
            insights.append(f"⚡ {levels['HIGH']} записей требуют подтверждения звонком")
        if worst_day_rate > average * 1.5:
            insights.append(f"📅 {worst_day}: самый рискованный день ({round_half_up(worst_day_rate)}% неявок)")
        if high_risk_clients > 5:
            insights.append(f"👥 {high_risk_clients} клиентов с историей неявок")

        return NoShowReport(
            upcoming=selected[:limit],
            patterns=NoShowPatterns(
                worst_day=worst_day,
                worst_day_rate=round_half_up(worst_day_rate),
                worst_time=worst_time,
                worst_time_rate=round_half_up(worst_time_rate),
                high_risk_clients=high_risk_clients,
                overall_no_show_rate=_one_decimal(average),
            ),
            summary=NoShowSummary(
                total_upcoming=len(upcoming),
                critical_risk_count=levels["CRITICAL"],
                high_risk_count=levels["HIGH"],
                medium_count=levels["MEDIUM"],
                low_count=levels["LOW"],
                potential_loss=round_half_up(potential_loss),
                days_analyzed=days_ahead,
            ),
            insights=insights,
        )

    @staticmethod
    def _worst(history: dict, default: str, label) -> tuple[str, float]:
        name, worst = default, 0.0
        for key, (total, missed) in history.items():
            rate = _percent(missed, total)
            if rate > worst:
                name, worst = label(key), rate
        return name, worst

    def _score_record(
        self,
        record: YClientsRecord,
        moment: datetime,
        by_client: dict[int, list[int]],
        by_weekday: dict[int, list[int]],
        by_slot: dict[str, list[int]],
        average: float,
    ) -> RiskyAppointment:
        score = 0
        factors = []

        total, missed = by_client.get(record.client_id or 0, (0, 0))
        if total:
            rate = _percent(missed, total)
            if rate > 30:
                score += 40
                factors.append(f"Клиент не приходил {missed} из {total} раз ({round_half_up(rate)}%)")
            elif rate > 15:
                score += 25
                factors.append(f"История неявок клиента: {round_half_up(rate)}%")
            elif rate > 0:
                score += 10
        else:
            score += 5
            factors.append("Новый клиент, нет истории")

        for history, label in (
            (by_weekday.get(moment.weekday()), WEEKDAYS_FULL[moment.weekday()]),
            (by_slot.get(time_slot(moment)), f"Время {time_slot(moment)}"),
        ):
            if not history or not history[0]:
                continue
            rate = _percent(history[1], history[0])
            if rate > average * 1.5:
                score += 20
                factors.append(f"{label}: высокий % неявок ({round_half_up(rate)}%)")
            elif rate > average:
                score += 10

        if record.confirmed != 1:
            score += 20
            factors.append("Запись не подтверждена")

        if score >= 75:
            level = "CRITICAL"
            tips = ["Требуйте предоплату", "Сделайте двойную запись на это время", "Позвоните за день для подтверждения"]
        elif score >= 50:
            level = "HIGH"
            tips = ["Подтвердите звонком за день", "Отправьте SMS-напоминание"]
        elif score >= 25:
            level = "MEDIUM"
            tips = ["Отправьте напоминание за день"]
        else:
            level = "LOW"
            tips = []

        client = record.client
        if client is None and record.client_id:
            client = self.sync_store.find_client(record.client_id)
        staff = self.sync_store.find_staff(record.staff_id)
        return RiskyAppointment(
            record_id=record.id,
            client_id=record.client_id or 0,
            client_name=(client.name if client else None) or "Неизвестный клиент",
            client_phone=(client.phone if client else None) or "",
            datetime=record.datetime,
            date=moment.strftime("%d.%m.%Y"),
            time=moment.strftime("%H:%M"),
            service_name=", ".join(record.service_titles) or "Услуга",
            staff_name=staff.name if staff and staff.name else f"Мастер #{record.staff_id}",
            risk_score=min(100, score),
            risk_level=level,
            risk_factors=factors or ["Низкий риск"],
            recommendations=tips,
        )

    # ------------------------------------------------------------------
    # Smart segments
    # ------------------------------------------------------------------

    def smart_segments(self, include_clients: bool = False, limit: int = 50) -> SmartSegmentsReport:
        """
        Group clients into broadcast audiences.

        Empty segments are left out. HIGH priority segments also become
        broadcast suggestions.
        """
        now = local_now()
        clients = self.sync_store.clients
        avg_check = sum(c.avg_sum or 0 for c in clients) / (len(clients) or 1)

        rows = [
            (c, _days_since(c.last_visit_date, now, NO_VISIT_DAYS), _days_since(c.first_visit_date, now, 0))
            for c in clients
        ]
        definitions = [
            (
                "recoverable_7d",
                lambda c, since, first: 21 <= since <= 35 and c.visit_count >= 3,
                1.0,
                {
                    "name": "Можно вернуть за 7 дней",
                    "description": "Постоянные клиенты, которые давно не были. Легко вернуть мягким напоминанием.",
                    "criteria": "Последний визит: 21-35 дней назад, визитов >= 3",
                    "priority": "HIGH",
                    "recommended_action": "Мягкое напоминание о записи",
                    "recommended_channel": "telegram",
                    "message_template": (
                        "Привет! Давно не видели вас в салоне 💇‍♀️ Может, пора обновить образ? "
                        "Запишитесь на удобное время!"
                    ),
                },
            ),
            (
                "need_discount",
                lambda c, since, first: 36 <= since <= 60,
                0.85,
                {
                    "name": "Не вернутся без скидки",
                    "description": "Клиенты уже забывают о вас. Нужен стимул: скидка или бонус.",
                    "criteria": "Последний визит: 36-60 дней назад",
                    "priority": "HIGH",
                    "recommended_action": "Предложить скидку 10-15%",
                    "recommended_channel": "sms",
                    "message_template": (
                        "Мы скучаем! 🎁 Специально для вас скидка 15% на любую услугу. "
                        "Действует 7 дней. Запишитесь!"
                    ),
                },
            ),
            (
                "urgent_reactivation",
                lambda c, since, first: 60 <= since <= 90,
                0.7,
                {
                    "name": "Срочная реактивация",
                    "description": "Клиенты на грани потери. Нужно агрессивное предложение.",
                    "criteria": "Последний визит: 60-90 дней назад",
                    "priority": "HIGH",
                    "recommended_action": "Агрессивное предложение со скидкой 20%+",
                    "recommended_channel": "sms",
                    "message_template": (
                        "⚡ Только для вас: скидка 20% + бонус! Мы очень хотим вас видеть. "
                        "Предложение на 5 дней!"
                    ),
                },
            ),
            (
                "vip_no_touch",
                lambda c, since, first: (c.avg_sum or 0) >= avg_check * 1.5 and c.visit_count >= 5 and since <= 45,
                1.0,
                {
                    "name": "VIP: не трогать акциями",
                    "description": "Ценные клиенты с высоким чеком. Скидки обесценят ваш сервис для них.",
                    "criteria": f"Средний чек >= {format_rub(round_half_up(avg_check * 1.5))}, визитов >= 5, был <= 45 дней",
                    "priority": "LOW",
                    "recommended_action": "Премиум-обслуживание, персональные бонусы",
                    "recommended_channel": "telegram",
                    "message_template": "✨ Специальное приглашение для вас! Новая процедура/мастер. Забронируйте первыми.",
                },
            ),
            (
                "new_needs_attention",
                lambda c, since, first: 0 < first <= 30 and c.visit_count <= 2,
                12.0,
                {
                    "name": "Новички: нужно внимание",
                    "description": "Новые клиенты. Важно закрепить их и превратить в постоянных.",
                    "criteria": "Первый визит < 30 дней назад, визитов <= 2",
                    "priority": "MEDIUM",
                    "recommended_action": "Follow-up: спросить о впечатлениях",
                    "recommended_channel": "telegram",
                    "message_template": (
                        "Спасибо, что выбрали нас! 🙏 Как вам визит? Будем рады видеть снова. "
                        "Бонус на следующий визит!"
                    ),
                },
            ),
            (
                "potential_vip",
                lambda c, since, first: (
                    avg_check <= (c.avg_sum or 0) < avg_check * 1.5 and c.visit_count >= 3 and since <= 60
                ),
                1.2,
                {
                    "name": "Потенциальные VIP",
                    "description": "Клиенты с хорошим чеком, могут стать VIP. Стимулируйте апсейл.",
                    "criteria": (
                        f"Средний чек {format_rub(round_half_up(avg_check))}-"
                        f"{format_rub(round_half_up(avg_check * 1.5))}, визитов >= 3"
                    ),
                    "priority": "MEDIUM",
                    "recommended_action": "Апсейл: предложить премиум-услуги",
                    "recommended_channel": "telegram",
                    "message_template": "💎 Попробуйте нашу новую премиум-процедуру! Специальная цена для постоянных клиентов.",
                },
            ),
        ]

        segments = []
        for segment_id, matches, revenue_factor, info in definitions:
            members = [(c, since) for c, since, first in rows if matches(c, since, first)]
            if not members:
                continue
            segments.append(
                SmartSegment(
                    id=segment_id,
                    count=len(members),
                    potential_revenue=sum((c.avg_sum or 0) * revenue_factor for c, _ in members),
                    clients=(
                        [self._segment_client(c, since) for c, since in members[:limit]]
                        if include_clients
                        else []
                    ),
                    **info,
                )
            )
        segments.sort(key=lambda s: PRIORITY_ORDER[s.priority])

        response_rates = {"recoverable_7d": 25, "need_discount": 15}
        return SmartSegmentsReport(
            segments=segments,
            summary=SegmentSummary(
                total_segments=len(segments),
                total_clients_in_segments=sum(s.count for s in segments),
                total_potential_revenue=round_half_up(sum(s.potential_revenue for s in segments)),
                high_priority_clients=sum(s.count for s in segments if s.priority == "HIGH"),
                avg_check=round_half_up(avg_check),
            ),
            broadcast_suggestions=[
                BroadcastSuggestion(
                    segment_id=s.id,
                    segment_name=s.name,
                    client_count=s.count,
                    template=s.message_template,
                    channel=s.recommended_channel,
                    best_send_time="Вт-Чт, 11:00-14:00",
                    expected_response_rate=response_rates.get(s.id, 10),
                )
                for s in segments
                if s.priority == "HIGH"
            ],
        )

    @staticmethod
    def _segment_client(client: YClientsClient, days_since_visit: int) -> SegmentClient:
        return SegmentClient(
            id=client.id,
            name=client.name or "",
            phone=client.phone or "",
            email=client.email or "",
            last_visit_date=client.last_visit_date,
            days_since_visit=days_since_visit,
            visit_count=client.visit_count,
            avg_sum=client.avg_sum or 0,
            total_spent=client.spent or client.sold_amount or 0,
        )

    # ------------------------------------------------------------------
    # Empty slots forecast
    # ------------------------------------------------------------------

    def empty_slots_forecast(self, days_ahead: int = 14, staff_id: int | None = None) -> EmptySlotsForecast:
        """
        Forecast occupancy for the coming days and list free hours.

        A day holds 10 slots per working master between 9:00 and 21:00.
        Under 30% occupancy is HIGH risk, under 50% MEDIUM, under 70% LOW.
        Free hours are listed only for days below 70%.
        """
        today = local_now().date()
        staff = working_staff(self.sync_store.staff)
        if staff_id is not None:
            staff = [s for s in staff if s.id == staff_id]
        total_slots = len(staff) * FORECAST_SLOTS_PER_STAFF
        live = [r for r in self.sync_store.records if not r.deleted]

        forecast = []
        for offset in range(days_ahead):
            day = today + timedelta(days=offset)
            day_records = [r for r in live if record_day(r.date) == day.isoformat()]
            occupancy = round_half_up(_percent(len(day_records), total_slots))
            if occupancy < 30:
                risk = "HIGH"
            elif occupancy < 50:
                risk = "MEDIUM"
            elif occupancy < 70:
                risk = "LOW"
            else:
                risk = "OK"

            empty = []
            if occupancy < 70:
                for member in staff:
                    empty.extend(self._free_hours(member.id, member.name, day_records))

            forecast.append(
                DayForecast(
                    date=day.isoformat(),
                    day_name=WEEKDAYS_SHORT[day.weekday()],
                    occupancy_percent=min(100, occupancy),
                    risk_level=risk,
                    total_slots=total_slots,
                    booked_slots=len(day_records),
                    empty_slots=empty[:EMPTY_SLOTS_SHOWN],
                    recommendations=self._day_recommendations(risk, day, empty),
                    is_today=day == today,
                    is_past=day < today,
                )
            )

        ahead = [d for d in forecast if not d.is_past]
        high = sum(1 for d in ahead if d.risk_level == "HIGH")
        medium = sum(1 for d in ahead if d.risk_level == "MEDIUM")
        avg = round_half_up(sum(d.occupancy_percent for d in ahead) / max(1, len(ahead)))
        worst = min(ahead, key=lambda d: d.occupancy_percent, default=None)
        empty_hours = sum(slot.duration_hours for d in ahead for slot in d.empty_slots)

        insights = []
        if high > 3:
            insights.append(f"⚠️ {high} дней с высоким риском пустоты")
        if worst and worst.occupancy_percent < 30:
            insights.append(
                f"📅 {worst.day_name} ({worst.date}): самый пустой день ({worst.occupancy_percent}%)"
            )
        if avg < 50:
            insights.append(f"📉 Средняя загрузка {avg}%, нужны акции")
        if avg >= 70:
            insights.append(f"💚 Отличная загрузка: {avg}%")
        if empty_hours > 50:
            insights.append(f"⏰ {empty_hours} часов потенциально пустуют")

        return EmptySlotsForecast(
            forecast=forecast,
            summary=ForecastSummary(
                days_analyzed=days_ahead,
                high_risk_days=high,
                medium_risk_days=medium,
                avg_occupancy=avg,
                worst_day=(
                    WorstDay(date=worst.date, day_name=worst.day_name, occupancy=worst.occupancy_percent)
                    if worst
                    else None
                ),
                total_empty_hours=empty_hours,
                active_staff_count=len(staff),
            ),
            insights=insights,
            calendar_view=[
                CalendarCell(
                    date=d.date,
                    day_name=d.day_name,
                    occupancy=d.occupancy_percent,
                    risk=d.risk_level,
                    color=RISK_COLORS[d.risk_level],
                )
                for d in forecast
            ],
        )

    @staticmethod
    def _free_hours(staff_id: int, staff_name: str, day_records: list[YClientsRecord]) -> list[EmptySlot]:
        """Whole free hours of one master between the working hours."""
        busy = []
        for r in day_records:
            start = record_moment(r)
            if r.staff_id != staff_id or start is None:
                continue
            busy.append((start, start + timedelta(seconds=r.seance_length or 3600)))
        busy.sort()

        def slot(start: int, end: int) -> EmptySlot:
            return EmptySlot(
                start=f"{start:02d}:00",
                end=f"{end:02d}:00",
                staff_id=staff_id,
                staff_name=staff_name,
                duration_hours=end - start,
            )

        free = []
        hour = WORK_START_HOUR
        for start, end in busy:
            if start.hour > hour:
                free.append(slot(hour, start.hour))
            hour = max(hour, end.hour + (1 if end.minute else 0))
        if hour < WORK_END_HOUR:
            free.append(slot(hour, WORK_END_HOUR))
        return free

    @staticmethod
    def _day_recommendations(risk: str, day: date, empty: list[EmptySlot]) -> list[str]:
        if risk == "HIGH":
            tips = ["🔥 Запустите акцию на этот день", "📧 Отправьте рассылку клиентам"]
            if day.weekday() in (0, 1):
                tips.append("💡 Понедельник/Вторник: предложите скидку на начало недели")
            return tips
        if risk == "MEDIUM":
            tips = ["📱 Напомните клиентам о записи"]
            if any(s.start < "12:00" for s in empty):
                tips.append("🌅 Скидка на утренние часы")
            if any(s.start >= "17:00" for s in empty):
                tips.append("🌙 Скидка на вечернее время")
            return tips
        if risk == "LOW":
            return ["💰 Можно немного поднять цены"]
        return []

    # ------------------------------------------------------------------
    # Traffic sources
    # ------------------------------------------------------------------

    def traffic_sources(
        self,
        period: str = "month",
        start_date: str | None = None,
        end_date: str | None = None,
    ) -> TrafficSourcesReport:
        """
        Break records of a period down by booking source.

        ``period`` is week, month, 3months or year back from today; an
        explicit start_date and end_date pair overrides it.
        """
        today = local_now().date()
        if start_date and end_date:
            first, last = parse_day(start_date, today), parse_day(end_date, today)
        elif period == "week":
            first, last = today - timedelta(days=7), today
        else:
            first, last = _shift_months(today, -TRAFFIC_PERIOD_MONTHS.get(period, 1)), today
        window = AnalyticsPeriod(start=first.isoformat(), end=last.isoformat())

        records = [
            r for r in self.sync_store.records
            if not r.deleted and (m := record_moment(r)) is not None and first <= m.date() <= last
        ]
        if not records:
            return TrafficSourcesReport(
                sources=[],
                totals=TrafficTotals(total_records=0, online_percentage=0, total_revenue=0, period=window),
                breakdowns={},
                insights=["Нет записей за выбранный период"],
                recommendations=[],
            )

        grouped: dict[str, dict[str, list[YClientsRecord]]] = defaultdict(lambda: defaultdict(list))
        for r in records:
            source, detail = record_source(r)
            grouped[source][detail or "Без деталей"].append(r)

        total = len(records)
        sources = []
        breakdowns = {}
        for source, details in grouped.items():
            own = [r for group in details.values() for r in group]
            revenue = revenue_of(own)
            percentage = round_half_up(_percent(len(own), total))
            note = ""
            if source == "online_widget" and percentage < 30:
                note = "Низкая доля онлайн-записей"
            elif source == "admin" and percentage > 70:
                note = "Высокая нагрузка на администратора"
            elif source == "aggregator" and percentage > 40:
                note = "Высокая зависимость от агрегаторов"
            sources.append(
                TrafficSource(
                    source=source,
                    source_name=SOURCE_NAMES[source],
                    source_detail=next(iter(details)) if len(details) == 1 else None,
                    records_count=len(own),
                    percentage=percentage,
                    unique_clients=len({r.client_id for r in own if r.client_id}),
                    revenue=revenue,
                    avg_check=round_half_up(revenue / len(own)),
                    conversion_note=note,
                )
            )
            if len(details) > 1:
                breakdowns[source] = sorted(
                    (
                        SourceBreakdown(
                            detail=detail,
                            count=len(group),
                            percentage=round_half_up(_percent(len(group), len(own))),
                            revenue=revenue_of(group),
                        )
                        for detail, group in details.items()
                    ),
                    key=lambda b: -b.count,
                )
        sources.sort(key=lambda s: -s.records_count)

        total_revenue = revenue_of(records)
        online = round_half_up(_percent(sum(1 for r in records if r.online), total))
        by_type = {s.source: s for s in sources}
        insights, recommendations = self._traffic_advice(online, by_type, breakdowns)

        return TrafficSourcesReport(
            sources=sources,
            totals=TrafficTotals(
                total_records=total,
                online_percentage=online,
                total_revenue=total_revenue,
                avg_check=round_half_up(total_revenue / total),
                new_clients=sum(
                    1 for c in self.sync_store.clients
                    if (m := parse_record_datetime(c.first_visit_date)) is not None and first <= m.date() <= last
                ),
                period=window,
            ),
            breakdowns=breakdowns,
            insights=insights,
            recommendations=recommendations,
            chart_data=[
                ChartSlice(
                    name=s.source_name,
                    value=s.records_count,
                    percentage=s.percentage,
                    color=SOURCE_COLORS.get(s.source, "#adb5bd"),
                )
                for s in sources
            ],
        )

    @staticmethod
    def _traffic_advice(
        online: int,
        by_type: dict[str, TrafficSource],
        breakdowns: dict[str, Iterable[SourceBreakdown]],
    ) -> tuple[list[str], list[str]]:
        insights = []
        if online < 20:
            insights.append(f"📉 Только {online}% записей онлайн, автоматизируйте приём")
        elif online >= 50:
            insights.append(f"✅ {online}% записей онлайн, отлично!")

        admin = by_type.get("admin")
        widget = by_type.get("online_widget")
        aggregator = by_type.get("aggregator")
        if admin and admin.percentage > 60:
            insights.append(f"⚠️ {admin.percentage}% записей через админа, высокая нагрузка")
        if aggregator and aggregator.percentage > 30:
            insights.append(f"💸 {aggregator.percentage}% через агрегаторы, проверьте комиссию")
        admin_check = admin.avg_check if admin else 0
        if widget and widget.avg_check > admin_check * 1.2:
            more = round_half_up((widget.avg_check / (admin_check or 1) - 1) * 100)
            insights.append(f"💎 Онлайн-клиенты тратят на {more}% больше")

        recommendations = []
        if online < 30:
            recommendations.append("Добавьте виджет онлайн-записи на сайт и соцсети")
        if aggregator is None:
            recommendations.append("Рассмотрите подключение к агрегаторам (Яндекс, 2ГИС)")
        if "online_widget" not in breakdowns:
            recommendations.append("Используйте UTM-метки для отслеживания источников")
        return insights, recommendations
