"""
Records module data models.

Projects, clients and payments as stored in the remote collections, plus
the draft (create) and patch (partial update) shapes the mutator accepts.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from dateutil.parser import isoparse
from pydantic import BaseModel, ConfigDict, Field, field_validator


class RecordKind(str, Enum):
    """The three mirrored collections."""

    PROJECTS = "projects"
    CLIENTS = "clients"
    PAYMENTS = "payments"


class ProjectStatus(str, Enum):
    """Project progress."""

    ONGOING = "ongoing"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Payment settlement status."""

    PENDING = "pending"
    PAID = "paid"
    PARTIAL = "partial"
    REFUNDED = "refunded"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """
    Fields every stored record carries.

    ``user_id`` is stamped on creation and never changes afterwards.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., description="Identifier issued by the store")
    user_id: str = Field(..., description="Owning identity")
    created_at: datetime = Field(default_factory=utcnow, description="Creation instant")
    updated_at: datetime = Field(default_factory=utcnow, description="Last update instant")

    @field_validator("id", "user_id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Any:
        # Postgres UUID columns may come back as uuid.UUID
        return str(v) if v is not None else v

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def default_missing_timestamp(cls, v: Any) -> Any:
        # Rows written without a usable timestamp load as "now"
        if v is None or v == "":
            return utcnow()
        if isinstance(v, str):
            try:
                return isoparse(v)
            except ValueError:
                return utcnow()
        return v

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class Project(Record):
    """A piece of freelance work for a client."""

    title: str
    client: str = Field(..., description="Client name, denormalized")
    client_id: Optional[str] = None
    deadline: date
    payment: Decimal = Field(default=Decimal(0), description="Agreed price")
    status: ProjectStatus = ProjectStatus.ONGOING
    description: Optional[str] = None


class Client(Record):
    """Someone the freelancer works for."""

    name: str
    email: str = ""
    phone: str = ""
    country_code: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None


class Payment(Record):
    """An expected or received payment for a project."""

    project_id: str = Field(..., description="Project this payment belongs to (not enforced)")
    amount: Decimal
    status: PaymentStatus = PaymentStatus.PENDING
    due_date: date
    paid_date: Optional[date] = None
    description: Optional[str] = None


# -----------------------------------------------------------------------------
# Drafts: user-supplied fields for add()
# -----------------------------------------------------------------------------


class ProjectDraft(BaseModel):
    """Fields supplied when creating a project."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1)
    client: str = Field(..., min_length=1)
    client_id: Optional[str] = None
    deadline: date
    payment: Decimal = Field(default=Decimal(0), ge=0)
    status: ProjectStatus = ProjectStatus.ONGOING
    description: Optional[str] = None


class ClientDraft(BaseModel):
    """Fields supplied when creating a client."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""
    country_code: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None


class PaymentDraft(BaseModel):
    """Fields supplied when recording a payment."""

    model_config = ConfigDict(extra="forbid")

    project_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)
    status: PaymentStatus = PaymentStatus.PENDING
    due_date: date
    paid_date: Optional[date] = None
    description: Optional[str] = None


# -----------------------------------------------------------------------------
# Patches: partial updates. Ownership and creation fields are not patchable.
# -----------------------------------------------------------------------------


class ProjectPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(None, min_length=1)
    client: Optional[str] = Field(None, min_length=1)
    client_id: Optional[str] = None
    deadline: Optional[date] = None
    payment: Optional[Decimal] = Field(None, ge=0)
    status: Optional[ProjectStatus] = None
    description: Optional[str] = None


class ClientPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    country_code: Optional[str] = None
    country: Optional[str] = None
    description: Optional[str] = None


class PaymentPatch(BaseModel):
    model_config = ConfigDict(extra="forbid")

    project_id: Optional[str] = Field(None, min_length=1)
    amount: Optional[Decimal] = Field(None, ge=0)
    status: Optional[PaymentStatus] = None
    due_date: Optional[date] = None
    paid_date: Optional[date] = None
    description: Optional[str] = None


RECORD_MODELS: dict[RecordKind, type[Record]] = {
    RecordKind.PROJECTS: Project,
    RecordKind.CLIENTS: Client,
    RecordKind.PAYMENTS: Payment,
}

DRAFT_MODELS: dict[RecordKind, type[BaseModel]] = {
    RecordKind.PROJECTS: ProjectDraft,
    RecordKind.CLIENTS: ClientDraft,
    RecordKind.PAYMENTS: PaymentDraft,
}

PATCH_MODELS: dict[RecordKind, type[BaseModel]] = {
    RecordKind.PROJECTS: ProjectPatch,
    RecordKind.CLIENTS: ClientPatch,
    RecordKind.PAYMENTS: PaymentPatch,
}
