"""
Dashboard module data models.

Everything here is derived from the mirrored lists and never persisted.
"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

DEFAULT_AMOUNT_MAX = Decimal("100000")


class DashboardStats(BaseModel):
    """Headline numbers of the dashboard."""

    model_config = ConfigDict(frozen=True)

    total_projects: int = 0
    ongoing_projects: int = 0
    completed_projects: int = 0
    total_earnings: Decimal = Decimal(0)
    # Sum of ongoing project prices, not of Payment records
    pending_payments: Decimal = Decimal(0)
    total_clients: int = 0
    overdue_projects: int = 0
    overdue_payments: int = 0


class PaymentSummary(BaseModel):
    """Totals shown by the payment tracker."""

    model_config = ConfigDict(frozen=True)

    total_earnings: Decimal = Decimal(0)
    pending_payments: Decimal = Decimal(0)
    paid_amount: Decimal = Decimal(0)
    overdue_amount: Decimal = Decimal(0)

    @property
    def potential_earnings(self) -> Decimal:
        return self.total_earnings + self.pending_payments


class MonthlyEarnings(BaseModel):
    """Completed-project earnings for one calendar month."""

    model_config = ConfigDict(frozen=True)

    month: date = Field(..., description="First day of the month")
    earnings: Decimal = Decimal(0)

    @property
    def label(self) -> str:
        return self.month.strftime("%b")


class StatusBreakdown(BaseModel):
    """Project counts by status."""

    model_config = ConfigDict(frozen=True)

    completed: int = 0
    ongoing: int = 0


def _blank_to_none(v: Any) -> Any:
    return None if v == "" else v


# Date inputs arrive as "" when the user clears them
OptionalDate = Annotated[Optional[date], BeforeValidator(_blank_to_none)]


class DateRange(BaseModel):
    """Inclusive deadline range; a missing bound does not constrain."""

    model_config = ConfigDict(frozen=True)

    start: OptionalDate = None
    end: OptionalDate = None


class AmountRange(BaseModel):
    """Inclusive price range."""

    model_config = ConfigDict(frozen=True)

    min: Decimal = Decimal(0)
    max: Decimal = DEFAULT_AMOUNT_MAX


class FilterCriteria(BaseModel):
    """
    User-chosen predicates for narrowing a list.

    Empty ``search`` and ``status`` match everything. The default amount
    range caps prices at 100000, so pricier projects stay hidden until the
    user widens the range.
    """

    model_config = ConfigDict(frozen=True)

    search: str = ""
    status: str = ""
    date_range: DateRange = Field(default_factory=DateRange)
    amount_range: AmountRange = Field(default_factory=AmountRange)

    @classmethod
    def with_amount_max(cls, amount_max: Decimal, **fields: Any) -> "FilterCriteria":
        """Criteria whose default amount cap is ``amount_max``."""
        fields.setdefault("amount_range", AmountRange(max=amount_max))
        return cls(**fields)
