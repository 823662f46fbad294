"""
Record Validation

DESIGN DECISION: Form input is validated before anything reaches the store.
Raw input (strings from text boxes, dates from pickers) is checked field by
field, in the order the form shows them, and every problem is collected as
a ValidationIssue. The first issue's message is what the user sees.

Only when every check passes is a TransactionCreate / DebtCreate built.
Those payload models re-check the same constraints, so a payload that
exists is always valid.

IMPORTANT: Validation NEVER silently fixes input beyond trimming whitespace.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from finance_tracker.models.records import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PERSON_NAME_LENGTH,
    DebtCreate,
    DebtType,
    TransactionCreate,
    TransactionType,
    ValidationIssue,
)


E = TypeVar("E", bound=Enum)


class ValidationError(Exception):
    """
    Form input violated a record schema rule.

    `message` is the first violated rule's text; `issues` holds every
    problem found, in field order.
    """

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        self.field = issues[0].field
        self.message = issues[0].message
        super().__init__(self.message)


class RecordValidator:
    """Validates raw form input for transactions and debts."""

    # ------------------------------------------------------------------
    # Field checks. Each returns the parsed value, or None after
    # appending an issue.
    # ------------------------------------------------------------------

    @staticmethod
    def _check_type(value: Any, enum: Type[E], issues: list[ValidationIssue]) -> Optional[E]:
        raw = value.value if isinstance(value, Enum) else str(value or "").strip().lower()
        try:
            return enum(raw)
        except ValueError:
            allowed = ", ".join(member.value for member in enum)
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message=f"Type must be one of: {allowed}",
            ))
            return None

    @staticmethod
    def _check_required_text(
        value: Any,
        field: str,
        label: str,
        issues: list[ValidationIssue],
        max_length: Optional[int] = None,
    ) -> Optional[str]:
        text = str(value or "").strip()
        if not text:
            issues.append(ValidationIssue(
                field=field,
                issue_type="missing",
                message=f"{label} is required",
            ))
            return None
        if max_length is not None and len(text) > max_length:
            issues.append(ValidationIssue(
                field=field,
                issue_type="too_long",
                message=f"{label} must be less than {max_length} characters",
            ))
            return None
        return text

    @staticmethod
    def _check_amount(value: Any, issues: list[ValidationIssue]) -> Optional[Decimal]:
        amount: Optional[Decimal]
        if isinstance(value, bool):
            amount = None
        elif isinstance(value, Decimal):
            amount = value
        elif isinstance(value, float):
            amount = Decimal(str(value))
        else:
            try:
                amount = Decimal(str(value).strip()) if value is not None else None
            except InvalidOperation:
                amount = None

        if amount is None or not amount.is_finite():
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_format",
                message="Amount must be a valid number",
            ))
            return None
        if amount <= 0:
            issues.append(ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be positive",
            ))
            return None
        return amount

    @staticmethod
    def _check_description(value: Any, issues: list[ValidationIssue]) -> Optional[str]:
        raw = str(value) if value is not None else ""
        # Length is checked on the input as typed
        if len(raw) > MAX_DESCRIPTION_LENGTH:
            issues.append(ValidationIssue(
                field="description",
                issue_type="too_long",
                message=f"Description must be less than {MAX_DESCRIPTION_LENGTH} characters",
            ))
            return None
        return raw.strip() or None

    @staticmethod
    def _check_date(value: Any, issues: list[ValidationIssue]) -> Optional[date]:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value

        text = str(value or "").strip()
        if not text:
            issues.append(ValidationIssue(
                field="date",
                issue_type="missing",
                message="Date is required",
            ))
            return None
        try:
            return date.fromisoformat(text)
        except ValueError:
            issues.append(ValidationIssue(
                field="date",
                issue_type="invalid_format",
                message="Date must be a valid date (YYYY-MM-DD)",
            ))
            return None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def validate_transaction(
        self,
        type: Any,
        category: Any,
        amount: Any,
        description: Any = None,
        date: Any = None,
    ) -> TransactionCreate:
        """
        Validate transaction form input.

        Raises:
            ValidationError: carrying the first violated rule's message
        """
        issues: list[ValidationIssue] = []
        kind = self._check_type(type, TransactionType, issues)
        category_text = self._check_required_text(category, "category", "Category", issues)
        parsed_amount = self._check_amount(amount, issues)
        description_text = self._check_description(description, issues)
        parsed_date = self._check_date(date, issues)

        if issues:
            raise ValidationError(issues)

        return TransactionCreate(
            type=kind,
            category=category_text,
            amount=parsed_amount,
            description=description_text,
            date=parsed_date,
        )

    def validate_debt(
        self,
        type: Any,
        person_name: Any,
        amount: Any,
        description: Any = None,
        date: Any = None,
    ) -> DebtCreate:
        """
        Validate debt form input.

        Raises:
            ValidationError: carrying the first violated rule's message
        """
        issues: list[ValidationIssue] = []
        kind = self._check_type(type, DebtType, issues)
        name = self._check_required_text(
            person_name, "person_name", "Person name", issues,
            max_length=MAX_PERSON_NAME_LENGTH,
        )
        parsed_amount = self._check_amount(amount, issues)
        description_text = self._check_description(description, issues)
        parsed_date = self._check_date(date, issues)

        if issues:
            raise ValidationError(issues)

        return DebtCreate(
            type=kind,
            person_name=name,
            amount=parsed_amount,
            description=description_text,
            date=parsed_date,
        )
