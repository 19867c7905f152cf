"""Result tuples, their schema and sets of them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TextIO, Union

from .querydefs import AttrType
from .value import FloatValue, IntValue, StringValue, TupleValue

_log = logging.getLogger(__name__)

_SEPARATOR = " | "


class Tuple:
    """One row of a result."""

    def __init__(self, values: Iterable[Union[TupleValue, int, float, str]] = ()) -> None:
        self._values: list[TupleValue] = []
        for value in values:
            self.add(value)

    def add(self, value: Union[TupleValue, int, float, str]) -> None:
        """Append a value; plain ints, floats and strings are wrapped."""
        if isinstance(value, TupleValue):
            self._values.append(value)
        elif isinstance(value, bool):
            raise TypeError("booleans are not tuple values")
        elif isinstance(value, int):
            self._values.append(IntValue(value))
        elif isinstance(value, float):
            self._values.append(FloatValue(value))
        elif isinstance(value, str):
            self._values.append(StringValue(value))
        else:
            raise TypeError(f"unsupported tuple value: {type(value).__name__}")

    @property
    def values(self) -> list[TupleValue]:
        """The values in order."""
        return list(self._values)

    def get(self, index: int) -> TupleValue:
        """The value at *index*."""
        return self._values[index]

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[TupleValue]:
        return iter(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tuple):
            return NotImplemented
        return self._values == other._values

    def __repr__(self) -> str:
        return f"Tuple({self._values!r})"


@dataclass(frozen=True)
class TupleField:
    """A column of a result: its type, table and name."""

    type: AttrType
    table_name: str
    field_name: str

    def to_string(self) -> str:
        """``table.field`` followed by the numeric type code."""
        return f"{self.table_name}.{self.field_name}{int(self.type)}"


class TupleSchema:
    """The ordered columns of a result."""

    def __init__(self, fields: Iterable[TupleField] = ()) -> None:
        self._fields: list[TupleField] = list(fields)

    @property
    def fields(self) -> list[TupleField]:
        """The columns in order."""
        return list(self._fields)

    def add(self, type: AttrType, table_name: str, field_name: str) -> None:
        """Append a column."""
        self._fields.append(TupleField(type, table_name, field_name))

    def add_if_not_exists(self, type: AttrType, table_name: str, field_name: str) -> None:
        """Append a column unless one with the same table and name is present."""
        if self.index_of_field(table_name, field_name) < 0:
            self.add(type, table_name, field_name)

    def append(self, other: TupleSchema) -> None:
        """Append every column of *other*."""
        self._fields.extend(other._fields)

    def field(self, index: int) -> TupleField:
        """The column at *index*."""
        return self._fields[index]

    def index_of_field(self, table_name: str, field_name: str) -> int:
        """Position of the named column, or -1 when it is absent."""
        for i, f in enumerate(self._fields):
            if f.table_name == table_name and f.field_name == field_name:
                return i
        return -1

    def clear(self) -> None:
        """Remove every column."""
        self._fields.clear()

    def print(self, out: TextIO) -> None:
        """Write the header line; names are table-qualified when several tables appear."""
        if not self._fields:
            out.write("No schema")
            return
        qualify = len({f.table_name for f in self._fields}) > 1
        names = (
            f"{f.table_name}.{f.field_name}" if qualify else f.field_name
            for f in self._fields
        )
        out.write(_SEPARATOR.join(names) + "\n")

    def copy(self) -> TupleSchema:
        """An independent schema with the same columns."""
        return TupleSchema(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[TupleField]:
        return iter(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TupleSchema):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"TupleSchema({self._fields!r})"


class TupleSet:
    """A schema with the rows that follow it."""

    def __init__(self, schema: Optional[TupleSchema] = None) -> None:
        self._tuples: list[Tuple] = []
        self._schema = schema.copy() if schema is not None else TupleSchema()

    @property
    def schema(self) -> TupleSchema:
        """The columns of the rows."""
        return self._schema

    @property
    def tuples(self) -> list[Tuple]:
        """The rows in order."""
        return list(self._tuples)

    def set_schema(self, schema: TupleSchema) -> None:
        """Replace the schema with a copy of *schema*."""
        self._schema = schema.copy()

    def add(self, tuple: Tuple) -> None:
        """Append a row."""
        self._tuples.append(tuple)

    def clear(self) -> None:
        """Remove every row and every column."""
        self._tuples.clear()
        self._schema.clear()

    def is_empty(self) -> bool:
        """Whether there are no rows."""
        return not self._tuples

    def get(self, index: int) -> Tuple:
        """The row at *index*."""
        return self._tuples[index]

    def print(self, out: TextIO) -> None:
        """Write the header and every row; nothing at all without a schema."""
        if not len(self._schema):
            _log.warning("Got empty schema")
            return
        self._schema.print(out)
        for row in self._tuples:
            out.write(_SEPARATOR.join(v.to_string() for v in row) + "\n")

    def __len__(self) -> int:
        return len(self._tuples)

    def __iter__(self) -> Iterator[Tuple]:
        return iter(self._tuples)