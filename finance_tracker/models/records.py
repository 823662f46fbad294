"""
Core Data Models for Finance Tracker

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Map one-to-one onto the store-facing column names
3. Keep money in Decimal end to end (no float drift)

DESIGN DECISION: Records are immutable once created. The only mutation the
system knows about is settling a debt, and that happens in the store via a
patch, never by editing a model in place.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


MAX_DESCRIPTION_LENGTH = 500
MAX_PERSON_NAME_LENGTH = 100

TRANSACTIONS = "transactions"
DEBTS = "debts"
PROFILES = "profiles"


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class DebtType(str, Enum):
    """
    Direction of a debt.

    BORROWED: I owe the counterparty.
    LENT: the counterparty owes me.
    """
    BORROWED = "borrowed"
    LENT = "lent"


class DebtStatus(str, Enum):
    """
    Debt lifecycle.

    CRITICAL: The only transition is PENDING -> SETTLED.
    """
    PENDING = "pending"
    SETTLED = "settled"


# =============================================================================
# IDENTITY
# =============================================================================

class User(BaseModel):
    """The authenticated principal as reported by the auth provider."""

    id: UUID
    email: Optional[str] = None


# =============================================================================
# PERSISTED RECORDS
# =============================================================================

class Transaction(BaseModel):
    """
    An income or expense entry as stored in the `transactions` collection.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID
    user_id: UUID
    type: TransactionType
    category: str = Field(
        ...,
        min_length=1,
        description="Free-text category (e.g., Salary, Food)"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        description="Amount, always positive; direction comes from type"
    )
    description: Optional[str] = Field(
        default=None,
        max_length=MAX_DESCRIPTION_LENGTH,
    )
    transaction_date: date
    created_at: Optional[datetime] = None

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its effect on the balance."""
        return self.amount if self.type == TransactionType.INCOME else -self.amount


class Debt(BaseModel):
    """
    A borrowed or lent amount as stored in the `debts` collection.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID
    user_id: UUID
    type: DebtType
    person_name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_PERSON_NAME_LENGTH,
        description="Counterparty name"
    )
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = Field(
        default=None,
        max_length=MAX_DESCRIPTION_LENGTH,
    )
    status: DebtStatus = DebtStatus.PENDING
    debt_date: date
    settled_date: Optional[date] = None
    created_at: Optional[datetime] = None

    @property
    def is_pending(self) -> bool:
        return self.status == DebtStatus.PENDING

    @model_validator(mode='after')
    def validate_settlement(self) -> 'Debt':
        """A pending debt cannot carry a settlement date."""
        if self.status == DebtStatus.PENDING and self.settled_date is not None:
            raise ValueError("Pending debt cannot have a settled date")
        return self


# =============================================================================
# CREATION PAYLOADS (output of validation, input of the data access facade)
# =============================================================================

class TransactionCreate(BaseModel):
    """
    A validated request to create a transaction.

    Built by RecordValidator from raw form input; never by hand in UI code.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    category: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = Field(
        default=None,
        max_length=MAX_DESCRIPTION_LENGTH,
    )
    date: date

    def to_record(self, user_id: UUID) -> dict[str, Any]:
        """Store-facing row for insertion."""
        return {
            "user_id": str(user_id),
            "type": self.type.value,
            "category": self.category,
            "amount": str(self.amount),
            "description": self.description,
            "transaction_date": self.date.isoformat(),
        }


class DebtCreate(BaseModel):
    """A validated request to create a debt. New debts always start pending."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: DebtType
    person_name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_PERSON_NAME_LENGTH,
    )
    amount: Decimal = Field(..., gt=0)
    description: Optional[str] = Field(
        default=None,
        max_length=MAX_DESCRIPTION_LENGTH,
    )
    date: date

    def to_record(self, user_id: UUID) -> dict[str, Any]:
        return {
            "user_id": str(user_id),
            "type": self.type.value,
            "person_name": self.person_name,
            "amount": str(self.amount),
            "description": self.description,
            "debt_date": self.date.isoformat(),
            "status": DebtStatus.PENDING.value,
        }


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class DashboardStats(BaseModel):
    """
    Point-in-time aggregate of one user's records. Never persisted.

    All values are non-negative except balance.
    """

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")
    pending_borrowed: Decimal = Decimal("0")
    pending_lent: Decimal = Decimal("0")


class ValidationIssue(BaseModel):
    """A single validation issue found in form input."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'too_long')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
