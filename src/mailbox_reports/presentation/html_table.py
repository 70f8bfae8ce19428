# src/mailbox_reports/presentation/html_table.py
"""
Render report records as an HTML table, one table row per line:

    <table>
    <colgroup><col/><col/></colgroup>
    <tr><th>DisplayName</th><th>TotalSizeMB</th></tr>
    <tr><td>Alice</td><td>1,234.50</td></tr>
    </table>

This is the shape the colour rules in ``mailbox_reports.colorize`` expect.
"""

from __future__ import annotations

import html
import numbers
from datetime import date
from typing import List

import pandas as pd

from mailbox_reports.utils.formatting import fmt_datetime, fmt_number


def format_cell(value, na_rep: str = "") -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return na_rep
    if isinstance(value, date):  # datetime and pd.Timestamp included
        return fmt_datetime(value)
    if isinstance(value, numbers.Number) and not isinstance(value, bool):
        return fmt_number(value)
    return str(value)


def to_html_table(records: pd.DataFrame, na_rep: str = "") -> List[str]:
    columns = [str(c) for c in records.columns]

    lines = ["<table>"]
    lines.append("<colgroup>" + "<col/>" * len(columns) + "</colgroup>")
    lines.append("<tr>" + "".join(f"<th>{html.escape(c)}</th>" for c in columns) + "</tr>")

    for row in records.itertuples(index=False, name=None):
        cells = "".join(f"<td>{html.escape(format_cell(v, na_rep))}</td>" for v in row)
        lines.append(f"<tr>{cells}</tr>")

    lines.append("</table>")
    return lines
