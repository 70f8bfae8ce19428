# src/mailbox_reports/colorize/markup.py
"""
Minimal tag scanner for report table markup.

Only understands the shape our own renderer produces: one table row per
line, cells as ``<th ...>text</th>`` / ``<td ...>text</td>``. Anything that
is not a header row or a data row is classified as OTHER and left alone.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

_TAG_RE = re.compile(
    r"<(?P<closing>/?)(?P<name>[A-Za-z][A-Za-z0-9]*)"
    r"(?P<attrs>(?:\s+[^\s=>/\"']+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>\"']+))?)*)"
    r"\s*/?>"
)
_ATTR_RE = re.compile(
    r"(?P<name>[^\s=>/\"']+)(?:\s*=\s*(?P<value>\"[^\"]*\"|'[^']*'|[^\s>\"']+))?"
)
_BACKGROUND_RE = re.compile(r"(background-color\s*:\s*)([^;]*)", re.IGNORECASE)

CELL_TAGS = ("th", "td")


@dataclass(frozen=True)
class Attribute:
    name: str
    value: Optional[str]
    # spans within the line; the value span includes any quotes
    name_span: Tuple[int, int]
    value_span: Optional[Tuple[int, int]]


@dataclass(frozen=True)
class Tag:
    name: str
    closing: bool
    start: int
    end: int
    attributes: Tuple[Attribute, ...] = ()

    def attribute(self, name: str) -> Optional[Attribute]:
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    def is_open(self, *names: str) -> bool:
        return not self.closing and self.name in names

    def is_close(self, *names: str) -> bool:
        return self.closing and self.name in names


def scan_tags(line: str) -> List[Tag]:
    tags = []
    for match in _TAG_RE.finditer(line):
        attrs = []
        offset = match.start("attrs")
        for attr in _ATTR_RE.finditer(match.group("attrs")):
            name = attr.group("name").lower()
            name_span = (offset + attr.start("name"), offset + attr.end("name"))
            raw = attr.group("value")
            if raw is None:
                attrs.append(Attribute(name, None, name_span, None))
                continue
            value = raw[1:-1] if raw[:1] in ("'", '"') else raw
            span = (offset + attr.start("value"), offset + attr.end("value"))
            attrs.append(Attribute(name, html.unescape(value), name_span, span))
        tags.append(
            Tag(
                name=match.group("name").lower(),
                closing=bool(match.group("closing")),
                start=match.start(),
                end=match.end(),
                attributes=tuple(attrs),
            )
        )
    return tags


# ------------------------------------------------------------
# Line classification
# ------------------------------------------------------------
class LineKind(Enum):
    HEADER = "HEADER"
    DATA = "DATA"
    OTHER = "OTHER"


@dataclass(frozen=True)
class Cell:
    tag: Tag
    inner: str
    text: str


@dataclass(frozen=True)
class RowLine:
    kind: LineKind
    row: Optional[Tag] = None
    cells: Tuple[Cell, ...] = ()

    @property
    def texts(self) -> List[str]:
        return [cell.text for cell in self.cells]


_OTHER = RowLine(LineKind.OTHER)


def _text_between(line: str, tags: List[Tag], start: int, end: int) -> str:
    """Text content of line[start:end] with any nested tags dropped."""
    parts = []
    position = start
    for tag in tags:
        if tag.start < start or tag.end > end:
            continue
        parts.append(line[position:tag.start])
        position = tag.end
    parts.append(line[position:end])
    return html.unescape("".join(parts)).strip()


def classify(line: str) -> RowLine:
    tags = scan_tags(line)

    row_index = None
    for i in range(len(tags) - 1):
        tag, following = tags[i], tags[i + 1]
        if (
            tag.is_open("tr")
            and following.is_open(*CELL_TAGS)
            and not line[tag.end:following.start].strip()
        ):
            row_index = i
            break
    if row_index is None:
        return _OTHER

    row = tags[row_index]
    cell_name = tags[row_index + 1].name
    cells = []
    i = row_index + 1
    while i < len(tags):
        tag = tags[i]
        if tag.is_close("tr"):
            break
        if not tag.is_open(cell_name):
            i += 1
            continue

        # cell runs to its close tag, the next cell, or the end of the row
        j = i + 1
        while j < len(tags) and not (
            tags[j].is_close(cell_name, "tr") or tags[j].is_open(*CELL_TAGS)
        ):
            j += 1
        end = tags[j].start if j < len(tags) else len(line)
        cells.append(
            Cell(
                tag=tag,
                inner=line[tag.end:end],
                text=_text_between(line, tags[i + 1:j], tag.end, end),
            )
        )
        i = j

    kind = LineKind.HEADER if cell_name == "th" else LineKind.DATA
    return RowLine(kind, row, tuple(cells))


# ------------------------------------------------------------
# Rewriting
# ------------------------------------------------------------
def set_background(style: str, color: str) -> str:
    """Set background-color inside an inline style, replacing any existing value."""
    if _BACKGROUND_RE.search(style):
        return _BACKGROUND_RE.sub(lambda m: m.group(1) + color, style, count=1)
    style = style.strip().rstrip(";").strip()
    if not style:
        return f"background-color:{color}"
    return f"{style};background-color:{color}"


def restyle_tag(line: str, tag: Tag, color: str) -> str:
    """Return ``line`` with ``tag`` carrying ``background-color:<color>``."""
    style = tag.attribute("style")
    if style is None or style.value_span is None:
        if style is not None:
            # bare ``style`` attribute with no value: give it one
            bare_end = style.name_span[1]
            return f'{line[:bare_end]}="background-color:{color}"{line[bare_end:]}'
        insert_at = tag.start + 1 + len(tag.name)
        return f'{line[:insert_at]} style="background-color:{color}"{line[insert_at:]}'

    start, end = style.value_span
    quote = line[start] if line[start] in ("'", '"') else '"'
    value = set_background(style.value, color)
    value = value.replace("&", "&amp;").replace(quote, "&quot;" if quote == '"' else "&#x27;")
    return f"{line[:start]}{quote}{value}{quote}{line[end:]}"
