"""Queries package."""

from finance_tracker.queries.dashboard import (
    DashboardQuery,
    DashboardSnapshot,
    compute_dashboard_stats,
)

__all__ = ["DashboardQuery", "DashboardSnapshot", "compute_dashboard_stats"]
