"""
Core Data Models for the Finance Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce the closed enumerations (status, method, type, category) at the boundary
2. Provide clear validation error messages
3. Serialize to the camelCase JSON layout used on the wire and on disk

DESIGN DECISION: Python attributes are snake_case, the serialized form is
camelCase (createdAt, updatedAt, completedAt). Both spellings are accepted
on input so stored collections and API bodies load the same way.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)


MAX_AMOUNT = 999_999_999


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Currency(str, Enum):
    """Only Colombian pesos are supported."""
    COP = "COP"


class PaymentStatus(str, Enum):
    """Settled vs outstanding."""
    COMPLETED = "completed"
    PENDING = "pending"


class PaymentMethod(str, Enum):
    """Payment channels."""
    CASH = "efectivo"
    DEBIT_CARD = "tarjeta_debito"
    CREDIT_CARD = "tarjeta_credito"
    TRANSFER = "transferencia"
    NEQUI = "nequi"            # mobile wallet
    DAVIPLATA = "daviplata"    # mobile wallet
    OTHER = "otro"


class PaymentType(str, Enum):
    """Income vs expense."""
    INCOME = "ingreso"
    EXPENSE = "gasto"


class PaymentCategory(str, Enum):
    """
    Spend/income categories.

    DESIGN DECISION: Using explicit categories rather than free text ensures
    consistent categorization and enables reliable filtering.
    """
    FOOD = "alimentacion"
    TRANSPORT = "transporte"
    UTILITIES = "servicios"
    HEALTH = "salud"
    ENTERTAINMENT = "entretenimiento"
    EDUCATION = "educacion"
    HOUSING = "vivienda"
    CLOTHING = "ropa"
    TECH = "tecnologia"
    SPORTS = "deporte"
    PETS = "mascotas"
    SAVINGS = "ahorro"
    LOAN = "prestamo"
    OTHER = "otro"


# =============================================================================
# PAYMENT MODELS
# =============================================================================

class PaymentFields(BaseModel):
    """Fields a caller is allowed to supply for a payment."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    amount: float = Field(
        ...,
        ge=0,
        le=MAX_AMOUNT,
        description="Magnitude in whole pesos"
    )
    currency: Currency = Field(
        default=Currency.COP,
        description="Always COP"
    )
    status: PaymentStatus
    method: PaymentMethod
    type: PaymentType
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="What the payment was for"
    )
    category: PaymentCategory
    notes: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Free-form user notes"
    )
    metadata: Optional[dict[str, Any]] = Field(
        default=None,
        description="Arbitrary client data stored alongside the payment"
    )


class PaymentCreate(PaymentFields):
    """
    Body of a create request.

    id and timestamps are generated by the store; if a client sends them
    they are ignored.
    """


class Payment(PaymentFields):
    """A stored payment record."""

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique identifier"
    )
    created_at: datetime = Field(
        ...,
        alias="createdAt",
        description="Set once at creation"
    )
    updated_at: datetime = Field(
        ...,
        alias="updatedAt",
        description="Refreshed on every mutation"
    )
    completed_at: Optional[datetime] = Field(
        default=None,
        alias="completedAt",
        description="When the payment was marked completed"
    )

    @field_validator("created_at", "updated_at", "completed_at", mode="after")
    @classmethod
    def assume_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive timestamps in older files are UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode='after')
    def validate_timestamps(self) -> 'Payment':
        """updatedAt can never precede createdAt."""
        if self.updated_at < self.created_at:
            raise ValueError("updatedAt cannot be before createdAt")
        return self

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED

    def to_record(self) -> dict[str, Any]:
        """Serialize to the camelCase layout used on disk and on the wire."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# Fields that may be omitted from an update but never explicitly nulled
_REQUIRED_FIELDS = ("amount", "currency", "status", "method", "type", "description", "category")


class PaymentUpdate(BaseModel):
    """
    Body of an update request: the target id plus any subset of mutable fields.

    Only fields the caller actually sent are merged into the stored record.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(..., min_length=1)
    amount: Optional[float] = Field(default=None, ge=0, le=MAX_AMOUNT)
    currency: Optional[Currency] = None
    status: Optional[PaymentStatus] = None
    method: Optional[PaymentMethod] = None
    type: Optional[PaymentType] = None
    description: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[PaymentCategory] = None
    notes: Optional[str] = Field(default=None, max_length=500)
    metadata: Optional[dict[str, Any]] = None

    @model_validator(mode='after')
    def reject_null_required_fields(self) -> 'PaymentUpdate':
        for name in _REQUIRED_FIELDS:
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """The fields supplied by the caller, excluding the id."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


# =============================================================================
# QUERY MODELS
# =============================================================================

_ENUM_FILTERS: dict[str, type[Enum]] = {
    "status": PaymentStatus,
    "type": PaymentType,
    "method": PaymentMethod,
    "category": PaymentCategory,
}


class PaymentFilters(BaseModel):
    """
    Optional, AND-combined criteria for listing payments.

    Empty or unknown enum values count as "not supplied" rather than
    matching nothing.
    """

    model_config = ConfigDict(populate_by_name=True)

    status: Optional[PaymentStatus] = None
    type: Optional[PaymentType] = None
    method: Optional[PaymentMethod] = None
    category: Optional[PaymentCategory] = None
    search: Optional[str] = None
    id: Optional[str] = None

    date_from: Optional[datetime] = Field(default=None, alias="dateFrom")
    date_to: Optional[datetime] = Field(default=None, alias="dateTo")
    min_amount: Optional[float] = Field(default=None, ge=0, alias="minAmount")
    max_amount: Optional[float] = Field(default=None, ge=0, alias="maxAmount")

    limit: Optional[int] = Field(default=None, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)

    @field_validator("status", "type", "method", "category", mode="before")
    @classmethod
    def drop_unknown_values(cls, v: Any, info: ValidationInfo) -> Any:
        if v is None or isinstance(v, Enum):
            return v
        value = str(v).strip()
        if not value:
            return None
        try:
            return _ENUM_FILTERS[info.field_name](value)
        except ValueError:
            return None

    @field_validator("search", "id", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if v is None:
            return None
        value = str(v).strip()
        return value or None

    @model_validator(mode='after')
    def align_timezones(self) -> 'PaymentFilters':
        """Naive date bounds are taken as UTC so they compare with stored timestamps."""
        if self.date_from and self.date_from.tzinfo is None:
            self.date_from = self.date_from.replace(tzinfo=timezone.utc)
        if self.date_to and self.date_to.tzinfo is None:
            self.date_to = self.date_to.replace(tzinfo=timezone.utc)
        return self

    @property
    def is_empty(self) -> bool:
        """True when no criterion (and no pagination) is set."""
        return not self.model_dump(exclude_defaults=True)


class PaymentStats(BaseModel):
    """Summary numbers computed over a user's full collection."""

    model_config = ConfigDict(populate_by_name=True)

    total_income: int = Field(..., alias="totalIncome")
    total_expense: int = Field(..., alias="totalExpense")
    balance: int
    pending_expense_amount: int = Field(..., alias="pendingExpenseAmount")
    completed_count: int = Field(..., ge=0, alias="completedCount")
