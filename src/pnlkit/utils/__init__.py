"""Utility functions for pnlkit."""

from pnlkit.utils.amount_parser import parse_amount, to_decimal
from pnlkit.utils.period_parser import parse_month, parse_year, resolve_period

__all__ = ["parse_amount", "to_decimal", "parse_month", "parse_year", "resolve_period"]
