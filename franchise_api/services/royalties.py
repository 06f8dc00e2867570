"""
Royalty commissions for a calendar month.

Tuition revenue of a Learning Center is what its running learning groups bill
their rosters in the month, priced from each group's frozen pricing snapshot:

  - PER_MONTH and SUBSCRIPTION bill ``price_per_month`` per student;
  - PER_SESSION bills ``price_per_session`` for every scheduled slot that falls
    inside both the month and the group's dates;
  - every other model spreads ``course_price`` evenly over the calendar months
    the group spans.

The LC pays its MF a tiered commission on that revenue: the first
ROYALTY_TIER_STUDENTS students at ROYALTY_FIRST_TIER_RATE and the remaining
students at ROYALTY_BEYOND_TIER_RATE, each student counted at the LC's average
revenue per student. The MF forwards ROYALTY_MF_TO_HQ_RATE of that to HQ.
"""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Mapping, Optional, Tuple

from franchise_api.core.errors import BadRequestError
from franchise_api.core.settings import AppSettings
from franchise_api.db.models import LearningGroup
from franchise_api.db.models.enums import PricingModel

_MONTHLY_MODELS = {PricingModel.PER_MONTH.value, PricingModel.SUBSCRIPTION.value}


# PUBLIC_INTERFACE
def month_period(month: Optional[str] = None) -> Tuple[date, date]:
    """First and last day of ``YYYY-MM``; the current UTC month when omitted."""
    if not month:
        today = datetime.now(timezone.utc).date()
        year, mon = today.year, today.month
    else:
        try:
            parsed = datetime.strptime(month, "%Y-%m")
        except ValueError as exc:
            raise BadRequestError("month must be formatted as YYYY-MM") from exc
        year, mon = parsed.year, parsed.month
    return date(year, mon, 1), date(year, mon, calendar.monthrange(year, mon)[1])


def _price(snapshot: Mapping[str, Any], key: str) -> float:
    value = snapshot.get(key)
    try:
        return float(value) if value is not None else 0.0
    except (TypeError, ValueError):
        return 0.0


def _months_spanned(start: date, end: date) -> int:
    return (end.year - start.year) * 12 + end.month - start.month + 1


def _sessions_between(schedule: list, start: date, end: date) -> int:
    # day_of_week 0 is Sunday; date.weekday() 0 is Monday
    days = [slot.get("day_of_week") for slot in schedule or [] if isinstance(slot, Mapping)]
    count = 0
    current = start
    while current <= end:
        count += days.count((current.weekday() + 1) % 7)
        current += timedelta(days=1)
    return count


# PUBLIC_INTERFACE
def fee_per_student(group: LearningGroup, start: date, end: date) -> float:
    """What one student of ``group`` is billed between ``start`` and ``end``."""
    snapshot = group.pricing_snapshot or {}
    model = snapshot.get("pricing_model")
    if model in _MONTHLY_MODELS:
        return _price(snapshot, "price_per_month")
    if model == PricingModel.PER_SESSION.value:
        overlap_start = max(start, group.start_date)
        overlap_end = min(end, group.end_date)
        return _price(snapshot, "price_per_session") * _sessions_between(group.schedule, overlap_start, overlap_end)
    return _price(snapshot, "course_price") / _months_spanned(group.start_date, group.end_date)


@dataclass(frozen=True)
class Commission:
    first_tier_students: int
    first_tier_commission: float
    beyond_tier_students: int
    beyond_tier_commission: float
    lc_to_mf: float
    mf_to_hq: float


# PUBLIC_INTERFACE
def commission(student_count: int, revenue: float, settings: AppSettings) -> Commission:
    average = revenue / student_count if student_count else 0.0
    first = min(student_count, settings.ROYALTY_TIER_STUDENTS)
    beyond = student_count - first
    first_amount = round(first * average * settings.ROYALTY_FIRST_TIER_RATE, 2)
    beyond_amount = round(beyond * average * settings.ROYALTY_BEYOND_TIER_RATE, 2)
    lc_to_mf = round(first_amount + beyond_amount, 2)
    return Commission(
        first_tier_students=first,
        first_tier_commission=first_amount,
        beyond_tier_students=beyond,
        beyond_tier_commission=beyond_amount,
        lc_to_mf=lc_to_mf,
        mf_to_hq=round(lc_to_mf * settings.ROYALTY_MF_TO_HQ_RATE, 2),
    )
