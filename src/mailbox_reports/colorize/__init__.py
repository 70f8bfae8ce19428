"""
Table colouring for rendered mailbox reports.

Kept free of directory, SMTP and pandas concerns so it can be applied to any
table markup in the one-row-per-line shape the report renderer emits.
"""

from mailbox_reports.colorize.errors import ColumnNotFoundError, ConfigurationError
from mailbox_reports.colorize.table_colorizer import (
    ColorRule,
    apply_rules,
    colorize,
    colorize_html,
)

__all__ = [
    "ColorRule",
    "ColumnNotFoundError",
    "ConfigurationError",
    "apply_rules",
    "colorize",
    "colorize_html",
]
