"""Utility functions for finwise."""

from finwise.utils.date_parser import DateFormat, parse_date
from finwise.utils.amount_parser import parse_amount, parse_signed_amount
from finwise.utils.field_parser import parse_delimited_line

__all__ = [
    "DateFormat",
    "parse_date",
    "parse_amount",
    "parse_signed_amount",
    "parse_delimited_line",
]
