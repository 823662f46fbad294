"""View-models package. UI-agnostic; rendered by app/main.py."""

from finance_tracker.views.base import (
    FetchGeneration,
    Notification,
    NotificationLevel,
    RefreshingView,
)
from finance_tracker.views.dashboard import DashboardView, SessionView
from finance_tracker.views.forms import DebtFormView, FormView, TransactionFormView
from finance_tracker.views.lists import DebtListView, TransactionListView

__all__ = [
    "DashboardView",
    "DebtFormView",
    "DebtListView",
    "FetchGeneration",
    "FormView",
    "Notification",
    "NotificationLevel",
    "RefreshingView",
    "SessionView",
    "TransactionFormView",
    "TransactionListView",
]
