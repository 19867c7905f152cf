"""Statement structures produced by the SQL parser and consumed by the executor."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Sequence, Union

MAX_NUM = 20
"""Most attributes, relations, conditions or values one statement may hold."""


class AttrType(IntEnum):
    """Type of an attribute or a literal value."""

    UNDEFINED = 0
    CHARS = 1
    INTS = 2
    FLOATS = 3


class CompOp(IntEnum):
    """Comparison operator of a condition."""

    EQUAL_TO = 0  # "="
    LESS_EQUAL = 1  # "<="
    NOT_EQUAL = 2  # "<>"
    LESS_THAN = 3  # "<"
    GREAT_EQUAL = 4  # ">="
    GREAT_THAN = 5  # ">"
    NO_OP = 6


class SqlCommandFlag(IntEnum):
    """Kind of statement a query holds."""

    SCF_ERROR = 0
    SCF_SELECT = 1
    SCF_INSERT = 2
    SCF_UPDATE = 3
    SCF_DELETE = 4
    SCF_CREATE_TABLE = 5
    SCF_DROP_TABLE = 6
    SCF_CREATE_INDEX = 7
    SCF_DROP_INDEX = 8
    SCF_SYNC = 9
    SCF_SHOW_TABLES = 10
    SCF_DESC_TABLE = 11
    SCF_BEGIN = 12
    SCF_COMMIT = 13
    SCF_ROLLBACK = 14
    SCF_LOAD_DATA = 15
    SCF_HELP = 16
    SCF_EXIT = 17


def _check_count(what: str, count: int) -> None:
    if count > MAX_NUM:
        raise ValueError(f"too many {what}: {count} (at most {MAX_NUM})")


def _to_float32(v: float) -> float:
    return struct.unpack("<f", struct.pack("<f", float(v)))[0]


@dataclass
class RelAttr:
    """A column reference, optionally qualified by its table name."""

    attribute_name: str
    relation_name: Optional[str] = None


@dataclass
class Value:
    """A literal value with its type."""

    type: AttrType = AttrType.UNDEFINED
    data: Union[int, float, str, None] = None

    @classmethod
    def of_int(cls, v: int) -> Value:
        """An integer literal."""
        return cls(AttrType.INTS, int(v))

    @classmethod
    def of_float(cls, v: float) -> Value:
        """A float literal, held at single precision."""
        return cls(AttrType.FLOATS, _to_float32(v))

    @classmethod
    def of_string(cls, v: str) -> Value:
        """A character-string literal."""
        return cls(AttrType.CHARS, str(v))


@dataclass
class Condition:
    """A comparison whose sides are each a column or a literal."""

    comp: CompOp
    left_is_attr: bool
    right_is_attr: bool
    left_attr: Optional[RelAttr] = None
    left_value: Optional[Value] = None
    right_attr: Optional[RelAttr] = None
    right_value: Optional[Value] = None

    def __post_init__(self) -> None:
        for side, is_attr, attr, value in (
            ("left", self.left_is_attr, self.left_attr, self.left_value),
            ("right", self.right_is_attr, self.right_attr, self.right_value),
        ):
            if is_attr and attr is None:
                raise ValueError(f"{side} side is an attribute but none was given")
            if not is_attr and value is None:
                raise ValueError(f"{side} side is a value but none was given")


@dataclass
class Selects:
    """A SELECT statement."""

    attributes: list[RelAttr] = field(default_factory=list)
    relations: list[str] = field(default_factory=list)
    conditions: list[Condition] = field(default_factory=list)

    def append_attribute(self, rel_attr: RelAttr) -> None:
        """Add a selected column."""
        _check_count("attributes", len(self.attributes) + 1)
        self.attributes.append(rel_attr)

    def append_relation(self, relation_name: str) -> None:
        """Add a table to the FROM clause."""
        _check_count("relations", len(self.relations) + 1)
        self.relations.append(relation_name)

    def append_conditions(self, conditions: Sequence[Condition]) -> None:
        """Set the WHERE conditions, replacing any held before."""
        _check_count("conditions", len(conditions))
        self.conditions = list(conditions)


@dataclass
class Inserts:
    """An INSERT statement."""

    relation_name: str
    values: list[Value] = field(default_factory=list)

    @classmethod
    def create(cls, relation_name: str, values: Sequence[Value]) -> Inserts:
        """An insert of the given values into a table."""
        _check_count("values", len(values))
        return cls(relation_name, list(values))


@dataclass
class Deletes:
    """A DELETE statement."""

    relation_name: str
    conditions: list[Condition] = field(default_factory=list)

    def set_conditions(self, conditions: Sequence[Condition]) -> None:
        """Set the WHERE conditions, replacing any held before."""
        _check_count("conditions", len(conditions))
        self.conditions = list(conditions)


@dataclass
class Updates:
    """An UPDATE statement setting one column."""

    relation_name: str
    attribute_name: str
    value: Value
    conditions: list[Condition] = field(default_factory=list)

    @classmethod
    def create(
        cls,
        relation_name: str,
        attribute_name: str,
        value: Value,
        conditions: Sequence[Condition],
    ) -> Updates:
        """An update of one column under the given conditions."""
        _check_count("conditions", len(conditions))
        return cls(relation_name, attribute_name, value, list(conditions))


@dataclass
class AttrInfo:
    """A column definition in CREATE TABLE."""

    name: str
    type: AttrType
    length: int


@dataclass
class CreateTable:
    """A CREATE TABLE statement."""

    relation_name: str
    attributes: list[AttrInfo] = field(default_factory=list)

    def append_attribute(self, attr_info: AttrInfo) -> None:
        """Add a column definition."""
        _check_count("attributes", len(self.attributes) + 1)
        self.attributes.append(attr_info)


@dataclass
class DropTable:
    """A DROP TABLE statement."""

    relation_name: str


@dataclass
class CreateIndex:
    """A CREATE INDEX statement."""

    index_name: str
    relation_name: str
    attribute_name: str


@dataclass
class DropIndex:
    """A DROP INDEX statement."""

    index_name: str


@dataclass
class DescTable:
    """A DESC statement."""

    relation_name: str


@dataclass
class LoadData:
    """A LOAD DATA statement."""

    relation_name: str
    file_name: str

    @classmethod
    def create(cls, relation_name: str, file_name: str) -> LoadData:
        """A load whose file name has one surrounding quote on each side removed."""
        if file_name[:1] in ("'", '"'):
            file_name = file_name[1:]
        if file_name[-1:] in ("'", '"'):
            file_name = file_name[:-1]
        return cls(relation_name, file_name)


Payload = Union[
    Selects, Inserts, Deletes, Updates, CreateTable, DropTable,
    CreateIndex, DropIndex, DescTable, LoadData, str, None,
]

_PAYLOAD_TYPES: dict[SqlCommandFlag, type] = {
    SqlCommandFlag.SCF_SELECT: Selects,
    SqlCommandFlag.SCF_INSERT: Inserts,
    SqlCommandFlag.SCF_DELETE: Deletes,
    SqlCommandFlag.SCF_UPDATE: Updates,
    SqlCommandFlag.SCF_CREATE_TABLE: CreateTable,
    SqlCommandFlag.SCF_DROP_TABLE: DropTable,
    SqlCommandFlag.SCF_CREATE_INDEX: CreateIndex,
    SqlCommandFlag.SCF_DROP_INDEX: DropIndex,
    SqlCommandFlag.SCF_DESC_TABLE: DescTable,
    SqlCommandFlag.SCF_LOAD_DATA: LoadData,
}


@dataclass
class Query:
    """A parsed statement: its kind and its contents.

    Statements without contents hold ``None``; an erroneous one may
    hold an error message.
    """

    flag: SqlCommandFlag = SqlCommandFlag.SCF_ERROR
    sstr: Payload = None

    def __post_init__(self) -> None:
        expected = _PAYLOAD_TYPES.get(self.flag)
        if expected is not None:
            if not isinstance(self.sstr, expected):
                raise TypeError(
                    f"{self.flag.name} needs a {expected.__name__}, "
                    f"got {type(self.sstr).__name__}"
                )
        elif self.flag == SqlCommandFlag.SCF_ERROR:
            if self.sstr is not None and not isinstance(self.sstr, str):
                raise TypeError("an erroneous query may only hold a message")
        elif self.sstr is not None:
            raise TypeError(f"{self.flag.name} holds no contents")

    @property
    def errors(self) -> Optional[str]:
        """The error message of an erroneous query, if any."""
        if self.flag == SqlCommandFlag.SCF_ERROR and isinstance(self.sstr, str):
            return self.sstr
        return None

    def reset(self) -> None:
        """Drop the contents and return to the initial, erroneous state."""
        self.sstr = None
        self.flag = SqlCommandFlag.SCF_ERROR