"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.records import (
    DEBTS,
    MAX_DESCRIPTION_LENGTH,
    MAX_PERSON_NAME_LENGTH,
    PROFILES,
    TRANSACTIONS,
    DashboardStats,
    Debt,
    DebtCreate,
    DebtStatus,
    DebtType,
    Transaction,
    TransactionCreate,
    TransactionType,
    User,
    ValidationIssue,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Collections
    "DEBTS",
    "PROFILES",
    "TRANSACTIONS",
    # Limits
    "MAX_DESCRIPTION_LENGTH",
    "MAX_PERSON_NAME_LENGTH",
    # Record models
    "DashboardStats",
    "Debt",
    "DebtCreate",
    "DebtStatus",
    "DebtType",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "User",
    "ValidationIssue",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
