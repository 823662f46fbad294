"""
Finance Tracker - Source Package

A personal finance tracker: record income and expenses, keep track of
money borrowed and lent, and see the balance at a glance.

DESIGN PRINCIPLES:
1. The backend owns persistence, ownership and authentication
2. Validate before anything reaches the store
3. Every user action ends in exactly one visible notification
4. Every write is auditable
5. Storage and auth backends are swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
