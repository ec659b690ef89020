"""Utility functions for pocketledger."""

from pocketledger.utils.date_parser import get_date_range, parse_date, parse_datetime
from pocketledger.utils.amount_parser import evaluate_expression, parse_amount

__all__ = ["parse_date", "parse_datetime", "get_date_range", "parse_amount", "evaluate_expression"]
