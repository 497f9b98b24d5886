"""Utility modules for bulkfs.

This module exports commonly used utility functions.
"""

from bulkfs.utils.formatting import (
    console,
    create_failures_table,
    echo,
    err_console,
    format_duration,
    print_error,
    print_info,
    print_warning,
)

__all__ = [
    "console",
    "create_failures_table",
    "echo",
    "err_console",
    "format_duration",
    "print_error",
    "print_info",
    "print_warning",
]
