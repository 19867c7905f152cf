"""Typed cell values carried in result tuples."""

from __future__ import annotations

import struct
from abc import ABC, abstractmethod
from dataclasses import InitVar, dataclass
from typing import Optional


def _to_float32(v: float) -> float:
    return struct.unpack("<f", struct.pack("<f", float(v)))[0]


def _sign(a, b) -> int:
    return (a > b) - (a < b)


class TupleValue(ABC):
    """A single value in a result tuple."""

    @abstractmethod
    def to_string(self) -> str:
        """The value as it appears in query output."""

    @abstractmethod
    def compare(self, other: TupleValue) -> int:
        """Negative, zero or positive as this value is below, equal to or above *other*."""

    def __str__(self) -> str:
        return self.to_string()

    def _require_same_kind(self, other: TupleValue) -> None:
        if not isinstance(other, type(self)):
            raise TypeError(
                f"cannot compare {type(self).__name__} with {type(other).__name__}"
            )


@dataclass(frozen=True)
class IntValue(TupleValue):
    """An integer value."""

    value: int

    def to_string(self) -> str:
        return str(self.value)

    def compare(self, other: TupleValue) -> int:
        self._require_same_kind(other)
        return self.value - other.value  # type: ignore[attr-defined]


@dataclass(frozen=True)
class FloatValue(TupleValue):
    """A single-precision floating point value."""

    value: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", _to_float32(self.value))

    def to_string(self) -> str:
        return format(self.value, "g")

    def compare(self, other: TupleValue) -> int:
        self._require_same_kind(other)
        return _sign(self.value, other.value)  # type: ignore[attr-defined]


@dataclass(frozen=True)
class StringValue(TupleValue):
    """A character-string value, optionally cut to its first *length* characters."""

    value: str
    length: InitVar[Optional[int]] = None

    def __post_init__(self, length: Optional[int]) -> None:
        if length is not None:
            if length < 0:
                raise ValueError(f"negative length: {length}")
            object.__setattr__(self, "value", self.value[:length])

    def to_string(self) -> str:
        return self.value

    def compare(self, other: TupleValue) -> int:
        self._require_same_kind(other)
        return _sign(self.value, other.value)  # type: ignore[attr-defined]