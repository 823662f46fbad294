"""Record change events package."""

from finance_tracker.events.bus import (
    ALL_COLLECTIONS,
    ChangeAction,
    RecordChanged,
    RecordEventBus,
)

__all__ = ["ALL_COLLECTIONS", "ChangeAction", "RecordChanged", "RecordEventBus"]
