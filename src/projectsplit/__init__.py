"""Expense splitting and debt settlement for project expense management."""

__version__ = "0.1.0"
