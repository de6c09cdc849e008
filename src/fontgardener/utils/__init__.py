"""Utility functions for fontgardener.

This module provides utility functions including:

- Logging setup and configuration
- Tab-separated table encoding for on-disk files
"""

from fontgardener.utils.logging import (
    OperationStats,
    configure_logging,
    get_logger,
)
from fontgardener.utils.tables import decode_rows, encode_rows

__all__ = [
    "OperationStats",
    "configure_logging",
    "decode_rows",
    "encode_rows",
    "get_logger",
]
