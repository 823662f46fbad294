"""
Audit Logger

DESIGN DECISION: Every user action on a record is logged.
This provides:
1. Complete traceability of creates, settlements and deletions
2. Debugging capability when the store rejects a write
3. A record of why a submission was refused

The audit logger:
- Is async so it slots into the async record service
- Never raises into the caller (a logging failure must not undo a write)
- Supports correlation IDs to trace the events of one user action
"""

import logging
from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


def configure_logging(level: str = "INFO") -> None:
    """Configure stdlib logging and structlog for JSON output."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes every AuditEvent to the structured log at a level matching
    its severity. Keeps the last events in memory so the UI and tests
    can inspect recent history.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("finance_tracker.audit")
        self._history: deque[AuditEvent] = deque(maxlen=max(history_size, 0))

    @property
    def recent_events(self) -> list[AuditEvent]:
        """Recent events, oldest first."""
        return list(self._history)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns True if the event was written.
        """
        try:
            self._history.append(event)
            log_dict = event.to_log_dict()
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger(__name__).error(
                "audit log write failed for %s: %s", event.event_id, e
            )
            return False

        return True

    async def log_record_created(
        self,
        entity_type: str,
        entity_id: Optional[UUID],
        user_id: UUID,
        amount: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a transaction or debt creation."""
        await self.log(AuditEventBuilder.record_created(
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_record_deleted(
        self,
        entity_type: str,
        entity_id: UUID,
        user_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.record_deleted(
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            correlation_id=correlation_id,
        ))

    async def log_debt_settled(
        self,
        debt_id: UUID,
        user_id: UUID,
        settled_date: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.debt_settled(
            debt_id=debt_id,
            user_id=user_id,
            settled_date=settled_date,
            correlation_id=correlation_id,
        ))

    async def log_session(
        self,
        event_type: AuditEventType,
        user_id: Optional[UUID],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log sign in / sign out."""
        await self.log(AuditEventBuilder.session_changed(event_type, user_id, correlation_id))

    async def log_validation_failed(
        self,
        entity_type: str,
        field: str,
        message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.validation_failed(
            entity_type=entity_type,
            field=field,
            message=message,
            correlation_id=correlation_id,
        ))

    async def log_auth_required(
        self,
        operation: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.auth_required(operation, correlation_id))

    async def log_store_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(AuditEventBuilder.store_error(
            operation=operation,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a form submission).
    Pass it through all subsequent operations.
    """
    return uuid4()
