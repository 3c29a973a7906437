"""Utility functions for moneymind."""

from moneymind.utils.date_parser import parse_date, parse_iso_date, format_iso_date
from moneymind.utils.amount_parser import parse_amount
from moneymind.utils.logger import get_logger, setup_logging

__all__ = [
    "parse_date",
    "parse_iso_date",
    "format_iso_date",
    "parse_amount",
    "get_logger",
    "setup_logging",
]
