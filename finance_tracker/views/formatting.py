"""Display formatting for amounts, dates and debt badges."""

from datetime import date
from decimal import Decimal
from typing import Optional

from finance_tracker.models.records import Debt, DebtType, Transaction


DEFAULT_CURRENCY = "৳"
DATE_FORMAT = "%b %d, %Y"


def format_money(amount: Decimal, symbol: str = DEFAULT_CURRENCY) -> str:
    """`৳1234.50`; negative values keep their sign after the symbol."""
    return f"{symbol}{amount:.2f}"


def transaction_amount_label(transaction: Transaction, symbol: str = DEFAULT_CURRENCY) -> str:
    """`+৳1000.00` for income, `-৳250.00` for expense."""
    signed = transaction.signed_amount
    sign = "-" if signed < 0 else "+"
    return f"{sign}{format_money(abs(signed), symbol)}"


def debt_badge(debt: Debt) -> str:
    return "I owe" if debt.type == DebtType.BORROWED else "They owe me"


def format_display_date(value: Optional[date]) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def debt_date_line(debt: Debt) -> str:
    """`Feb 01, 2024` or `Feb 01, 2024 • Settled: Mar 03, 2024`."""
    line = format_display_date(debt.debt_date)
    if debt.settled_date:
        line += f" • Settled: {format_display_date(debt.settled_date)}"
    return line
