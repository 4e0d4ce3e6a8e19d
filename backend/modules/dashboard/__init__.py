"""
Dashboard module.

Aggregations and filters over the mirrored records.

Public API:
- compute_stats / DashboardStatsFeed: Headline statistics
- summarize_payments, monthly_earnings, status_breakdown: Tracker and analytics views
- overdue_projects / overdue_payments: Records past their deadline or due date
- filter_projects / filter_clients / FilterCriteria: List filtering
- format_currency / format_date: Display helpers
"""

from .models import (
    DashboardStats,
    PaymentSummary,
    MonthlyEarnings,
    StatusBreakdown,
    DateRange,
    AmountRange,
    FilterCriteria,
    DEFAULT_AMOUNT_MAX,
)
from .stats import (
    compute_stats,
    summarize_payments,
    monthly_earnings,
    status_breakdown,
    overdue_projects,
    overdue_payments,
    is_past,
)
from .filters import filter_projects, filter_clients
from .feed import DashboardStatsFeed
from .formatting import format_currency, format_date

__all__ = [
    # Models
    "DashboardStats",
    "PaymentSummary",
    "MonthlyEarnings",
    "StatusBreakdown",
    "DateRange",
    "AmountRange",
    "FilterCriteria",
    "DEFAULT_AMOUNT_MAX",
    # Aggregations
    "compute_stats",
    "summarize_payments",
    "monthly_earnings",
    "status_breakdown",
    "overdue_projects",
    "overdue_payments",
    "is_past",
    "DashboardStatsFeed",
    # Filters
    "filter_projects",
    "filter_clients",
    # Formatting
    "format_currency",
    "format_date",
]
