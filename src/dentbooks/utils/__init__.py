"""Utility functions for dentbooks."""

from dentbooks.utils.date_parser import parse_date
from dentbooks.utils.amount_parser import parse_amount
from dentbooks.utils.practice_resolver import resolve_practice

__all__ = ["parse_date", "parse_amount", "resolve_practice"]
