"""Validation package."""

from finance_tracker.validation.validator import RecordValidator, ValidationError

__all__ = ["RecordValidator", "ValidationError"]
