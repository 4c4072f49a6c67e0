"""
Budget Ledger - Source Package

An in-memory personal budget ledger: categories, income/expense
transactions, savings goals and recurring transactions, with the
aggregation and export logic that dashboards and reports are built on.

DESIGN PRINCIPLES:
1. Money is Decimal, never float
2. Direction is carried by the entry type, never by a negative amount
3. Every transaction points at a live category of the same type
4. Reads work on copies; only the store mutates state
5. Nothing happens in the background - scheduling is an explicit call
"""

__version__ = "1.0.0"
__author__ = "Budget Ledger Team"
