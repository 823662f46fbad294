"""
Form view-models for creating transactions and debts.

A form keeps the user's uncommitted input. Submitting validates it, hands the
payload to the record service, and on success clears the inputs (keeping
the selected type) so the next entry can be typed straight away. On any
failure the input is left exactly as it was.
"""

import inspect
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Callable, Optional

import structlog
from pydantic import BaseModel

from finance_tracker.audit import AuditLogger, create_correlation_id
from finance_tracker.models.records import DebtType, TransactionType
from finance_tracker.services.auth import AuthError
from finance_tracker.services.records import RecordService
from finance_tracker.services.storage import StoreError
from finance_tracker.validation import RecordValidator, ValidationError
from finance_tracker.views.base import NotificationLevel, NotifyingView, error_message


logger = structlog.get_logger(__name__)

SuccessCallback = Callable[[], Any]


class FormView(NotifyingView, ABC):
    """Shared submit flow: validate, create, reset, notify."""

    entity = "record"
    success_message = "Saved"
    failure_message = "Failed to save"

    def __init__(
        self,
        records: RecordService,
        validator: Optional[RecordValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
        on_success: Optional[SuccessCallback] = None,
        today: Callable[[], date] = date.today,
    ):
        super().__init__()
        self._records = records
        self._validator = validator or RecordValidator()
        self._audit_logger = audit_logger
        self._on_success = on_success
        self._today = today
        self.submitting = False
        self.reset()

    @abstractmethod
    def reset(self) -> None:
        """Put the inputs back to their defaults (the type is kept)."""

    @abstractmethod
    def _validate(self) -> BaseModel:
        """Build the creation payload from the current input."""

    @abstractmethod
    async def _create(self, payload: BaseModel, correlation_id) -> None:
        """Send the payload to the record service."""

    async def submit(self) -> bool:
        """
        Validate and create the record.

        Returns True on success. Returns False without touching the store
        while a previous submission of this form is still in flight.
        """
        if self.submitting:
            return False

        correlation_id = create_correlation_id()
        self.submitting = True
        try:
            payload = self._validate()
            await self._create(payload, correlation_id)
        except ValidationError as e:
            if self._audit_logger:
                await self._audit_logger.log_validation_failed(
                    self.entity, e.field, e.message, correlation_id
                )
            self.notify(NotificationLevel.ERROR, e.message)
            return False
        except (AuthError, StoreError) as e:
            logger.warning("form_submit_failed", entity=self.entity, error=str(e))
            self.notify(NotificationLevel.ERROR, error_message(e, self.failure_message))
            return False
        finally:
            self.submitting = False

        self.notify(NotificationLevel.SUCCESS, self.success_message)
        self.reset()
        if self._on_success is not None:
            result = self._on_success()
            if inspect.isawaitable(result):
                await result
        return True


class TransactionFormView(FormView):
    """Add Transaction form. Type defaults to expense."""

    entity = "transaction"
    success_message = "Transaction added successfully!"
    failure_message = "Failed to add transaction"

    def __init__(self, *args, **kwargs):
        self.type = TransactionType.EXPENSE
        super().__init__(*args, **kwargs)

    def reset(self) -> None:
        self.category = ""
        self.amount = ""
        self.description = ""
        self.date = self._today()

    def _validate(self):
        return self._validator.validate_transaction(
            type=self.type,
            category=self.category,
            amount=self.amount,
            description=self.description,
            date=self.date,
        )

    async def _create(self, payload, correlation_id) -> None:
        await self._records.create_transaction(payload, correlation_id)


class DebtFormView(FormView):
    """Add Debt Record form. Type defaults to borrowed."""

    entity = "debt"
    success_message = "Debt record added successfully!"
    failure_message = "Failed to add debt record"

    def __init__(self, *args, **kwargs):
        self.type = DebtType.BORROWED
        super().__init__(*args, **kwargs)

    def reset(self) -> None:
        self.person_name = ""
        self.amount = ""
        self.description = ""
        self.date = self._today()

    def _validate(self):
        return self._validator.validate_debt(
            type=self.type,
            person_name=self.person_name,
            amount=self.amount,
            description=self.description,
            date=self.date,
        )

    async def _create(self, payload, correlation_id) -> None:
        await self._records.create_debt(payload, correlation_id)
