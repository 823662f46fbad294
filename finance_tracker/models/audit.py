"""
Audit Models for Finance Tracker

Every user action on a record (create, settle, delete) and every failure
surfaced to the user is described by an AuditEvent. Events are written to
the structured log; they give a traceable history of what happened to
each record and why a submission was refused.

DESIGN DECISION: Audit events are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Transactions
    TRANSACTION_CREATED = "transaction_created"
    TRANSACTION_DELETED = "transaction_deleted"

    # Debts
    DEBT_CREATED = "debt_created"
    DEBT_SETTLED = "debt_settled"
    DEBT_DELETED = "debt_deleted"

    # Session
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"

    # Failures surfaced to the user
    VALIDATION_FAILED = "validation_failed"
    AUTH_REQUIRED = "auth_required"
    STORE_ERROR = "store_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity ('transaction', 'debt', 'session')"
    )
    entity_id: Optional[UUID] = None
    user_id: Optional[UUID] = None

    # Correlation - all events of one user action share this
    correlation_id: Optional[UUID] = None

    description: str = Field(..., max_length=500)
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "user_id": str(self.user_id) if self.user_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created("debt", debt_id, user_id, amount, correlation_id)
        event = AuditEventBuilder.store_error("insert", "duplicate key", correlation_id)
    """

    _CREATED = {
        "transaction": AuditEventType.TRANSACTION_CREATED,
        "debt": AuditEventType.DEBT_CREATED,
    }
    _DELETED = {
        "transaction": AuditEventType.TRANSACTION_DELETED,
        "debt": AuditEventType.DEBT_DELETED,
    }

    @staticmethod
    def record_created(
        entity_type: str,
        entity_id: Optional[UUID],
        user_id: UUID,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._CREATED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} created: {amount}",
            details={"amount": amount},
        )

    @staticmethod
    def record_deleted(
        entity_type: str,
        entity_id: UUID,
        user_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._DELETED[entity_type],
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def debt_settled(
        debt_id: UUID,
        user_id: UUID,
        settled_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DEBT_SETTLED,
            entity_type="debt",
            entity_id=debt_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Debt settled on {settled_date}",
            details={"settled_date": settled_date},
        )

    @staticmethod
    def session_changed(
        event_type: AuditEventType,
        user_id: Optional[UUID],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=event_type,
            entity_type="session",
            user_id=user_id,
            correlation_id=correlation_id,
            description=event_type.value.replace("_", " ").capitalize(),
        )

    @staticmethod
    def validation_failed(
        entity_type: str,
        field: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type=entity_type,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} rejected by validation",
            details={"field": field},
            error_message=message,
        )

    @staticmethod
    def auth_required(
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AUTH_REQUIRED,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"No authenticated user for {operation}",
            details={"operation": operation},
        )

    @staticmethod
    def store_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_ERROR,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Store rejected {operation}",
            details={"operation": operation},
            error_message=error_message,
        )
