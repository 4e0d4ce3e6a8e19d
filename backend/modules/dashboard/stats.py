"""
Aggregations over the mirrored lists.

All functions are pure: they read the sequences they are given and never
modify them. ``now`` defaults to the current UTC time.
"""

from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from modules.records.models import (
    Client,
    Payment,
    PaymentStatus,
    Project,
    ProjectStatus,
)

from .models import DashboardStats, MonthlyEarnings, PaymentSummary, StatusBreakdown


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now


def is_past(day: date, now: datetime) -> bool:
    """True if midnight UTC at the start of ``day`` is before ``now``."""
    return datetime.combine(day, time.min, tzinfo=timezone.utc) < now


def _sum_payment(projects: Iterable[Project]) -> Decimal:
    return sum((p.payment for p in projects), Decimal(0))


def _with_status(projects: Sequence[Project], status: ProjectStatus) -> list[Project]:
    return [p for p in projects if p.status == status]


def overdue_projects(projects: Sequence[Project], now: Optional[datetime] = None) -> list[Project]:
    """Ongoing projects whose deadline has passed, in list order."""
    now = _now(now)
    return [p for p in projects if p.status == ProjectStatus.ONGOING and is_past(p.deadline, now)]


def overdue_payments(payments: Sequence[Payment], now: Optional[datetime] = None) -> list[Payment]:
    """Pending payments whose due date has passed, in list order."""
    now = _now(now)
    return [p for p in payments if p.status == PaymentStatus.PENDING and is_past(p.due_date, now)]


def compute_stats(
    projects: Sequence[Project],
    clients: Sequence[Client],
    payments: Sequence[Payment],
    now: Optional[datetime] = None,
) -> DashboardStats:
    """
    Derive the dashboard statistics.

    Earnings come from project prices and statuses. Payment records only
    contribute the overdue count.
    """
    now = _now(now)
    ongoing = _with_status(projects, ProjectStatus.ONGOING)
    completed = _with_status(projects, ProjectStatus.COMPLETED)

    return DashboardStats(
        total_projects=len(projects),
        ongoing_projects=len(ongoing),
        completed_projects=len(completed),
        total_earnings=_sum_payment(completed),
        pending_payments=_sum_payment(ongoing),
        total_clients=len(clients),
        overdue_projects=len(overdue_projects(projects, now)),
        overdue_payments=len(overdue_payments(payments, now)),
    )


def summarize_payments(
    projects: Sequence[Project],
    payments: Sequence[Payment],
    now: Optional[datetime] = None,
) -> PaymentSummary:
    """Totals for the payment tracker."""
    now = _now(now)
    return PaymentSummary(
        total_earnings=_sum_payment(_with_status(projects, ProjectStatus.COMPLETED)),
        pending_payments=_sum_payment(_with_status(projects, ProjectStatus.ONGOING)),
        paid_amount=sum(
            (p.amount for p in payments if p.status == PaymentStatus.PAID),
            Decimal(0),
        ),
        overdue_amount=sum(
            (p.amount for p in overdue_payments(payments, now)),
            Decimal(0),
        ),
    )


def monthly_earnings(
    projects: Sequence[Project],
    months: int = 6,
    now: Optional[datetime] = None,
) -> list[MonthlyEarnings]:
    """
    Completed-project earnings per month, oldest first.

    Covers the last ``months`` calendar months including the current one.
    A project counts toward the month it was created in.
    """
    current = _now(now).astimezone(timezone.utc).date().replace(day=1)
    result = []
    for offset in range(months - 1, -1, -1):
        month = current - relativedelta(months=offset)
        earned = _sum_payment(
            p for p in projects
            if p.status == ProjectStatus.COMPLETED
            and p.created_at.astimezone(timezone.utc).year == month.year
            and p.created_at.astimezone(timezone.utc).month == month.month
        )
        result.append(MonthlyEarnings(month=month, earnings=earned))
    return result


def status_breakdown(projects: Sequence[Project]) -> StatusBreakdown:
    return StatusBreakdown(
        completed=len(_with_status(projects, ProjectStatus.COMPLETED)),
        ongoing=len(_with_status(projects, ProjectStatus.ONGOING)),
    )
