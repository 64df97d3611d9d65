"""
Query Result Model

Column-described row sets returned by the query client, and the typed
accessors used to pull canonical values out of individual cells.

Every cell carries a type tag. The tag is authoritative: accessors never
coerce a value across tags, with the single exception of the numeric
accessor, which collapses the four numeric tags into one `int`.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from ..exceptions import ColumnNotFound, UnexpectedType

CellValue = Union[str, Tuple[str, ...], Dict[str, str], int, float]


class ColumnType(str, Enum):
    STRING = "string"
    STRING_LIST = "[]string"
    STRING_MAP = "map[string]string"
    INT64 = "int64"
    # A float that was already normalized to an integral value upstream.
    INTEGER = "integer"
    FLOAT64 = "float64"
    INT = "int"


NUMERIC_TYPES = (ColumnType.INT64, ColumnType.INTEGER, ColumnType.FLOAT64, ColumnType.INT)
TEXT_TYPES = (ColumnType.STRING, ColumnType.STRING_LIST)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

# Declared OVSDB schema type whose values stay floating point even when integral.
REAL = "real"

# OVSDB JSON tags that wrap a single string atom.
_STRING_ATOM_TAGS = ("uuid", "named-uuid")


def _is_str_seq(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and all(isinstance(v, str) for v in value)


def _is_str_map(value: Any) -> bool:
    return isinstance(value, Mapping) and all(
        isinstance(k, str) and isinstance(v, str) for k, v in value.items()
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


_VALIDATORS = {
    ColumnType.STRING: lambda v: isinstance(v, str),
    ColumnType.STRING_LIST: _is_str_seq,
    ColumnType.STRING_MAP: _is_str_map,
    ColumnType.INT64: _is_int,
    ColumnType.INTEGER: _is_int,
    ColumnType.FLOAT64: lambda v: isinstance(v, float),
    ColumnType.INT: _is_int,
}


@dataclass(frozen=True)
class Cell:
    """A single tagged result value."""

    value: CellValue
    type: ColumnType

    def __post_init__(self) -> None:
        tag = ColumnType(self.type)
        if not _VALIDATORS[tag](self.value):
            raise TypeError(f"value {self.value!r} does not match cell type '{tag.value}'")
        object.__setattr__(self, "type", tag)
        if tag is ColumnType.STRING_LIST:
            object.__setattr__(self, "value", tuple(self.value))
        elif tag is ColumnType.STRING_MAP:
            object.__setattr__(self, "value", dict(self.value))

    @classmethod
    def from_datum(cls, datum: Any, column: str = "", declared: str = "") -> "Cell":
        """
        Decode an OVSDB JSON datum into a tagged cell.

        Supported shapes:
          - atoms: str, int, float (integral floats become `integer`
            unless the column is declared `real`, which always yields `float64`)
          - ["uuid", "<id>"] / ["named-uuid", "<id>"]
          - ["set", [atoms...]] with string or uuid atoms
          - ["map", [[key, value], ...]] with string or uuid values
        """
        if isinstance(datum, bool):
            raise UnexpectedType(column, "bool", [t.value for t in ColumnType])
        if isinstance(datum, str):
            return cls(datum, ColumnType.STRING)
        if isinstance(datum, (int, float)) and declared == REAL:
            return cls(float(datum), ColumnType.FLOAT64)
        if isinstance(datum, int):
            return cls(datum, ColumnType.INT64)
        if isinstance(datum, float):
            if datum.is_integer():
                return cls(int(datum), ColumnType.INTEGER)
            return cls(datum, ColumnType.FLOAT64)
        if isinstance(datum, (list, tuple)) and len(datum) == 2 and isinstance(datum[0], str):
            tag, payload = datum
            if tag in _STRING_ATOM_TAGS and isinstance(payload, str):
                return cls(payload, ColumnType.STRING)
            if tag == "set" and isinstance(payload, (list, tuple)):
                return cls(tuple(_string_atom(a, column, "set") for a in payload), ColumnType.STRING_LIST)
            if tag == "map" and isinstance(payload, (list, tuple)):
                pairs: Dict[str, str] = {}
                for pair in payload:
                    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                        raise UnexpectedType(column, "map", [ColumnType.STRING_MAP.value])
                    pairs[_string_atom(pair[0], column, "map")] = _string_atom(pair[1], column, "map")
                return cls(pairs, ColumnType.STRING_MAP)
        raise UnexpectedType(column, type(datum).__name__, [t.value for t in ColumnType])


def _string_atom(atom: Any, column: str, container: str) -> str:
    if isinstance(atom, str):
        return atom
    if (
        isinstance(atom, (list, tuple))
        and len(atom) == 2
        and atom[0] in _STRING_ATOM_TAGS
        and isinstance(atom[1], str)
    ):
        return atom[1]
    raise UnexpectedType(column, f"{container} of {type(atom).__name__}", [ColumnType.STRING.value])


@dataclass(frozen=True)
class Column:
    name: str
    # Declared schema type, e.g. "uuid", "string", "integer", "map".
    type: str = ""


@dataclass(frozen=True)
class Row:
    """Positional cells matching the result's columns."""

    cells: Tuple[Cell, ...]

    def get_column_value(self, column: str, columns: Sequence[Column]) -> Tuple[CellValue, ColumnType]:
        """Return `(value, type)` of the named column, or raise `ColumnNotFound`."""
        for index, col in enumerate(columns):
            if col.name != column:
                continue
            if index >= len(self.cells):
                break
            cell = self.cells[index]
            return cell.value, cell.type
        raise ColumnNotFound(column)

    def get(self, column: str, columns: Sequence[Column], *expect: ColumnType) -> CellValue:
        """Return the named value if its tag is one of `expect`."""
        value, tag = self.get_column_value(column, columns)
        if tag not in expect:
            raise UnexpectedType(column, tag.value, [e.value for e in expect])
        return value

    def get_string(self, column: str, columns: Sequence[Column]) -> str:
        return self.get(column, columns, ColumnType.STRING)

    def get_string_map(self, column: str, columns: Sequence[Column]) -> Dict[str, str]:
        return dict(self.get(column, columns, ColumnType.STRING_MAP))

    def get_text(self, column: str, columns: Sequence[Column]) -> str:
        """
        Return a string column, accepting the optional-value encoding too.

        OVSDB models optional strings as a set of zero or one element, so a
        `[]string` cell yields its first element or "".
        """
        value = self.get(column, columns, *TEXT_TYPES)
        if isinstance(value, tuple):
            return value[0] if value else ""
        return value

    def get_int(self, column: str, columns: Sequence[Column]) -> int:
        """Return a numeric column as a 64-bit integer, whatever numeric tag it carries."""
        value, tag = self.get_column_value(column, columns)
        if tag not in NUMERIC_TYPES:
            raise UnexpectedType(column, tag.value, [t.value for t in NUMERIC_TYPES])
        if tag is ColumnType.FLOAT64 and not math.isfinite(value):
            raise UnexpectedType(column, f"{tag.value} ({value})", [ColumnType.INT64.value])
        # Truncates floats toward zero.
        number = int(value)
        if not INT64_MIN <= number <= INT64_MAX:
            raise UnexpectedType(column, f"{tag.value} out of range ({number})", [ColumnType.INT64.value])
        return number


@dataclass
class Result:
    columns: List[Column] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    @classmethod
    def from_json(cls, columns: Iterable[Union[str, Column]], rows: Iterable[Sequence[Any]]) -> "Result":
        """Build a result from column names (or typed columns) and rows of raw OVSDB JSON datums."""
        cols = [c if isinstance(c, Column) else Column(c) for c in columns]
        decoded: List[Row] = []
        for raw in rows:
            cells = tuple(
                Cell.from_datum(datum, cols[i].name, cols[i].type) if i < len(cols) else Cell.from_datum(datum)
                for i, datum in enumerate(raw)
            )
            decoded.append(Row(cells))
        return cls(columns=cols, rows=decoded)
