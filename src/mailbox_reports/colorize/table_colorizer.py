# src/mailbox_reports/colorize/table_colorizer.py
"""
Colour the rows or cells of a rendered report table.

    lines = colorize(lines, "Status", "red", "Status -eq 3", row_scope=True)

One forward pass over the lines. The header row resolves the target column,
each data row is tested against the filter, and matching rows (or the single
target cell) get an inline ``background-color``. Nothing is returned unless
the whole pass succeeds.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from mailbox_reports.colorize.errors import ColumnNotFoundError, ConfigurationError
from mailbox_reports.colorize.filter_expression import CellValue, FilterExpression
from mailbox_reports.colorize.markup import LineKind, classify, restyle_tag
from mailbox_reports.utils.logger import get_logger

log = get_logger(__name__)

_COLOR_RE = re.compile(
    r"^(?:[A-Za-z]+"
    r"|#(?:[0-9A-Fa-f]{3,4}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})"
    r"|(?:rgb|rgba|hsl|hsla)\(\s*[0-9.%,\s/+-]+\))$"
)


def validate_color(color: str) -> str:
    color = (color or "").strip()
    if not _COLOR_RE.match(color):
        raise ConfigurationError(f"not a usable colour: {color!r}")
    return color


def resolve_column(headers: Sequence[str], property_name: str) -> int:
    """Index of the first header equal to ``property_name``, ignoring case."""
    wanted = property_name.casefold()
    for index, header in enumerate(headers):
        if header.casefold() == wanted:
            return index
    raise ColumnNotFoundError(
        f"target property {property_name!r} not found in header {list(headers)}"
    )


def colorize(
    lines: Iterable[str],
    property_name: str,
    color: str,
    filter_expr: str,
    row_scope: bool = False,
) -> List[str]:
    """
    Colour table rows (``row_scope=True``) or the ``property_name`` cell of
    every data row whose value satisfies ``filter_expr``.

    :raises ConfigurationError: bad colour, filter not referencing the column,
        filter that does not parse, or a number/text comparison.
    :raises ColumnNotFoundError: column missing from the header, or a data row
        seen before any header.
    """
    color = validate_color(color)
    predicate = FilterExpression.compile(filter_expr, property_name)

    output: List[str] = []
    column: Optional[int] = None
    matched = 0

    for number, line in enumerate(lines, start=1):
        row = classify(line)

        if row.kind is LineKind.HEADER:
            column = resolve_column(row.texts, property_name)
            output.append(line)
            continue

        if row.kind is not LineKind.DATA:
            output.append(line)
            continue

        if column is None:
            raise ColumnNotFoundError(
                f"line {number}: data row before any header; cannot resolve {property_name!r}"
            )
        if column >= len(row.cells):
            raise ColumnNotFoundError(
                f"line {number}: row has {len(row.cells)} cells, "
                f"no cell for {property_name!r} at position {column}"
            )

        cell = row.cells[column]
        if not predicate.evaluate(CellValue.parse(cell.text)):
            output.append(line)
            continue

        matched += 1
        target = row.row if row_scope else cell.tag
        output.append(restyle_tag(line, target, color))

    log.debug(
        f"colorize {property_name!r} [{filter_expr}] -> {color} "
        f"({'row' if row_scope else 'cell'}): {matched} match(es)"
    )
    return output


def colorize_html(
    html: str,
    property_name: str,
    color: str,
    filter_expr: str,
    row_scope: bool = False,
) -> str:
    return "\n".join(colorize(html.split("\n"), property_name, color, filter_expr, row_scope))


@dataclass(frozen=True)
class ColorRule:
    target_column: str
    color: str
    filter_expr: str
    row_scope: bool = False

    def apply(self, lines: Iterable[str]) -> List[str]:
        return colorize(lines, self.target_column, self.color, self.filter_expr, self.row_scope)


def apply_rules(html: str, rules: Iterable[ColorRule]) -> str:
    """Apply rules in order; later rules win where they colour the same row or cell."""
    lines = html.split("\n")
    for rule in rules:
        lines = rule.apply(lines)
    return "\n".join(lines)
