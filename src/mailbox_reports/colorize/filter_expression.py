# src/mailbox_reports/colorize/filter_expression.py
"""
Filter expressions for colour rules.

A filter is a small boolean expression over one free variable, the value of
the target column on the current row:

    Size -gt 100
    Status -eq 2 -or Status -eq 3
    -not (DisplayName -like 'svc*') -and LastLogon -eq ''

The column name is replaced by the placeholder ``$_`` and the text is parsed
once into a tree of frozen nodes. Evaluating the tree never executes code.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from fnmatch import translate
from typing import List, Optional, Union

from mailbox_reports.colorize.errors import ConfigurationError

PLACEHOLDER = "$_"

Number = Union[int, float]

_MULTIPLIERS = {
    "kb": 1024,
    "mb": 1024 ** 2,
    "gb": 1024 ** 3,
    "tb": 1024 ** 4,
    "pb": 1024 ** 5,
}

_COMPARISONS = {"eq", "ne", "lt", "le", "gt", "ge"}
_PATTERNS = {"like", "notlike", "match", "notmatch"}

_STRING_RE = re.compile(r"'(?:[^']|'')*'|\"(?:[^\"]|\"\")*\"")
_GROUPED_RE = re.compile(r"^[+-]?\d{1,3}(?:,\d{3})+(?:\.\d+)?$")

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<var>\$_)
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<bang>!)
  | (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
  | (?P<number>[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?(?:kb|mb|gb|tb|pb)?(?![\w.]))
  | (?P<op>-[A-Za-z]+)
  | (?P<word>[^\s()!'"]+)
    """,
    re.VERBOSE | re.IGNORECASE,
)


# ------------------------------------------------------------
# Cell values
# ------------------------------------------------------------
def parse_number(text: str) -> Optional[Number]:
    """Return the numeric value of a cell's text, or None if it is not a number."""
    candidate = text.strip()
    if not candidate or "_" in candidate:
        return None
    if _GROUPED_RE.match(candidate):
        candidate = candidate.replace(",", "")
    try:
        return int(candidate)
    except ValueError:
        pass
    try:
        value = float(candidate)
    except ValueError:
        return None
    # float() accepts "nan" and "inf"; a report cell reading "Infinity" is text
    if not math.isfinite(value):
        return None
    return value


@dataclass(frozen=True)
class CellValue:
    text: str
    value: Union[Number, str]

    @classmethod
    def parse(cls, text: str) -> "CellValue":
        number = parse_number(text)
        return cls(text=text, value=text if number is None else number)

    @property
    def is_number(self) -> bool:
        return _is_number(self.value)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ------------------------------------------------------------
# Expression tree
# ------------------------------------------------------------
@dataclass(frozen=True)
class Variable:
    def value(self, cell: CellValue) -> Union[Number, str]:
        return cell.value

    def text(self, cell: CellValue) -> str:
        return cell.text

    def __str__(self) -> str:
        return PLACEHOLDER


@dataclass(frozen=True)
class Literal:
    literal: Union[Number, str]
    source: str

    def value(self, cell: CellValue) -> Union[Number, str]:
        return self.literal

    def text(self, cell: CellValue) -> str:
        return self.literal if isinstance(self.literal, str) else self.source

    def __str__(self) -> str:
        return self.source


Operand = Union[Variable, Literal]


@dataclass(frozen=True)
class Comparison:
    operator: str            # bare name: "eq", "like", ...
    case_sensitive: bool
    left: Operand
    right: Operand
    pattern: Optional["re.Pattern[str]"] = None

    def evaluate(self, cell: CellValue) -> bool:
        if self.operator in _PATTERNS:
            subject = self.left.text(cell)
            if self.operator.endswith("like"):
                found = self.pattern.match(subject) is not None
            else:
                found = self.pattern.search(subject) is not None
            return not found if self.operator.startswith("not") else found

        left = self.left.value(cell)
        right = self.right.value(cell)

        if _is_number(left) and _is_number(right):
            pass
        elif isinstance(left, str) and isinstance(right, str):
            if not self.case_sensitive:
                left, right = left.casefold(), right.casefold()
        else:
            raise ConfigurationError(
                f"cannot compare {left!r} with {right!r} using -{self.operator}: "
                "one side is a number and the other is text"
            )

        if self.operator == "eq":
            return left == right
        if self.operator == "ne":
            return left != right
        if self.operator == "lt":
            return left < right
        if self.operator == "le":
            return left <= right
        if self.operator == "gt":
            return left > right
        return left >= right

    def references_variable(self) -> bool:
        return isinstance(self.left, Variable) or isinstance(self.right, Variable)


@dataclass(frozen=True)
class Not:
    operand: "Node"

    def evaluate(self, cell: CellValue) -> bool:
        return not self.operand.evaluate(cell)

    def references_variable(self) -> bool:
        return self.operand.references_variable()


@dataclass(frozen=True)
class And:
    left: "Node"
    right: "Node"

    def evaluate(self, cell: CellValue) -> bool:
        return self.left.evaluate(cell) and self.right.evaluate(cell)

    def references_variable(self) -> bool:
        return self.left.references_variable() or self.right.references_variable()


@dataclass(frozen=True)
class Or:
    left: "Node"
    right: "Node"

    def evaluate(self, cell: CellValue) -> bool:
        return self.left.evaluate(cell) or self.right.evaluate(cell)

    def references_variable(self) -> bool:
        return self.left.references_variable() or self.right.references_variable()


Node = Union[Comparison, Not, And, Or]


# ------------------------------------------------------------
# Tokenizer / parser
# ------------------------------------------------------------
@dataclass(frozen=True)
class _Token:
    kind: str
    text: str
    position: int


def _tokenize(source: str) -> List[_Token]:
    tokens: List[_Token] = []
    position = 0
    while position < len(source):
        match = _TOKEN_RE.match(source, position)
        if match is None:
            raise ConfigurationError(
                f"unterminated string at position {position} in filter {source!r}"
            )
        kind = match.lastgroup
        text = match.group()
        if kind == "word":
            raise ConfigurationError(
                f"unexpected {text!r} at position {position} in filter {source!r}"
            )
        if kind != "ws":
            tokens.append(_Token(kind, text, position))
        position = match.end()
    return tokens


def _split_operator(text: str) -> tuple[str, bool]:
    """'-cGT' -> ('gt', True); '-ieq' / '-eq' -> ('eq', False)."""
    name = text[1:].lower()
    if name in _COMPARISONS or name in _PATTERNS:
        return name, False
    if name[:1] in ("i", "c") and (name[1:] in _COMPARISONS or name[1:] in _PATTERNS):
        return name[1:], name[0] == "c"
    raise ConfigurationError(f"unknown operator {text!r}")


class _Parser:
    def __init__(self, source: str, tokens: List[_Token]):
        self.source = source
        self.tokens = tokens
        self.index = 0

    def _peek(self) -> Optional[_Token]:
        return self.tokens[self.index] if self.index < len(self.tokens) else None

    def _next(self) -> _Token:
        token = self._peek()
        if token is None:
            raise ConfigurationError(f"filter {self.source!r} ends unexpectedly")
        self.index += 1
        return token

    def _at_keyword(self, keyword: str) -> bool:
        token = self._peek()
        return token is not None and token.kind == "op" and token.text.lower() == keyword

    def _error(self, token: _Token, expected: str) -> ConfigurationError:
        return ConfigurationError(
            f"expected {expected} at position {token.position} in filter "
            f"{self.source!r}, found {token.text!r}"
        )

    def parse(self) -> Node:
        if not self.tokens:
            raise ConfigurationError("filter is empty")
        node = self._or()
        token = self._peek()
        if token is not None:
            raise self._error(token, "-and, -or or end of filter")
        return node

    def _or(self) -> Node:
        node = self._and()
        while self._at_keyword("-or"):
            self.index += 1
            node = Or(node, self._and())
        return node

    def _and(self) -> Node:
        node = self._not()
        while self._at_keyword("-and"):
            self.index += 1
            node = And(node, self._not())
        return node

    def _not(self) -> Node:
        token = self._peek()
        if token is not None and (token.kind == "bang" or self._at_keyword("-not")):
            self.index += 1
            return Not(self._not())
        return self._primary()

    def _primary(self) -> Node:
        token = self._peek()
        if token is not None and token.kind == "lparen":
            self.index += 1
            node = self._or()
            closing = self._next()
            if closing.kind != "rparen":
                raise self._error(closing, "')'")
            return node
        return self._comparison()

    def _operand(self) -> Operand:
        token = self._next()
        if token.kind == "var":
            return Variable()
        if token.kind == "string":
            quote = token.text[0]
            return Literal(token.text[1:-1].replace(quote * 2, quote), token.text)
        if token.kind == "number":
            return Literal(_number_literal(token.text), token.text)
        raise self._error(token, "a value")

    def _comparison(self) -> Comparison:
        left = self._operand()
        token = self._next()
        if token.kind != "op" or token.text.lower() in ("-and", "-or", "-not"):
            raise self._error(token, "a comparison operator")
        operator, case_sensitive = _split_operator(token.text)
        right = self._operand()

        pattern = None
        if operator in _PATTERNS:
            if not isinstance(right, Literal):
                raise ConfigurationError(
                    f"-{operator} needs a literal pattern on its right-hand side"
                )
            pattern = _compile_pattern(operator, right.text(None), case_sensitive)
        return Comparison(operator, case_sensitive, left, right, pattern)


def _number_literal(text: str) -> Number:
    lowered = text.lower()
    multiplier = 1
    if lowered[-2:] in _MULTIPLIERS:
        multiplier = _MULTIPLIERS[lowered[-2:]]
        lowered = lowered[:-2]
    try:
        value: Number = int(lowered)
    except ValueError:
        value = float(lowered)
    return value * multiplier


def _compile_pattern(operator: str, pattern: str, case_sensitive: bool) -> "re.Pattern[str]":
    flags = 0 if case_sensitive else re.IGNORECASE
    if operator in ("like", "notlike"):
        return re.compile(translate(pattern), flags)
    try:
        return re.compile(pattern, flags)
    except re.error as e:
        raise ConfigurationError(f"invalid -{operator} pattern {pattern!r}: {e}") from e


# ------------------------------------------------------------
# Public API
# ------------------------------------------------------------
def substitute_property(filter_expr: str, property_name: str) -> str:
    """
    Replace every standalone, unquoted occurrence of the column name with
    the placeholder. Text inside quoted literals is left alone.
    """
    target = re.compile(
        r"(?<![\w$-])" + re.escape(property_name) + r"(?!\w)", re.IGNORECASE
    )
    pieces = []
    last = 0
    for literal in _STRING_RE.finditer(filter_expr):
        pieces.append(target.sub(PLACEHOLDER, filter_expr[last:literal.start()]))
        pieces.append(literal.group())
        last = literal.end()
    pieces.append(target.sub(PLACEHOLDER, filter_expr[last:]))
    return "".join(pieces)


@dataclass(frozen=True)
class FilterExpression:
    source: str
    template: str
    root: Node

    @classmethod
    def compile(cls, filter_expr: str, property_name: str) -> "FilterExpression":
        if not property_name or property_name.lower() not in filter_expr.lower():
            raise ConfigurationError(
                f"filter does not reference target property {property_name!r}: {filter_expr!r}"
            )
        template = substitute_property(filter_expr, property_name)
        root = _Parser(template, _tokenize(template)).parse()
        if not root.references_variable():
            raise ConfigurationError(
                f"filter does not reference target property {property_name!r}: {filter_expr!r}"
            )
        return cls(source=filter_expr, template=template, root=root)

    def evaluate(self, cell: CellValue) -> bool:
        return self.root.evaluate(cell)

    def matches(self, text: str) -> bool:
        return self.evaluate(CellValue.parse(text))
