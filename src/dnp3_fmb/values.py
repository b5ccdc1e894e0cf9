"""MeasValue: immutable tagged point value (boolean, integer, float or string) with coercion."""

import math
import operator
import struct
from dataclasses import dataclass
from enum import Enum

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class MeasKind(str, Enum):
    """The four value kinds a measurement can carry."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"


def _float_to_int64(value: float) -> int:
    """Truncate toward zero; NaN gives 0 and out-of-range values saturate."""
    if math.isnan(value):
        return 0
    if value >= 2.0**63:
        return INT64_MAX
    if value <= -(2.0**63):
        return INT64_MIN
    return int(value)


def _float_key(value: float) -> bytes:
    # all NaNs compare equal; 0.0 and -0.0 do not
    if math.isnan(value):
        return b"nan"
    return struct.pack("<d", value)


@dataclass(frozen=True, eq=False, repr=False)
class MeasValue:
    """
    A single point value. Exactly one kind per instance, fixed at construction.

    The as_* accessors never raise: they return None when the value cannot be
    expressed in the requested kind. A STRING value never coerces to a number
    or boolean. Other kinds render as text through as_string for diagnostics,
    but only a STRING value can match a STRING value.
    """

    kind: MeasKind
    value: bool | int | float | str

    def __post_init__(self) -> None:
        v = self.value
        if self.kind == MeasKind.BOOLEAN:
            if not isinstance(v, bool):
                raise TypeError(f"boolean value expected, got {type(v).__name__}")
        elif self.kind == MeasKind.INTEGER:
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"integer value expected, got {type(v).__name__}")
            if not INT64_MIN <= v <= INT64_MAX:
                raise ValueError(f"integer value out of 64-bit range: {v}")
        elif self.kind == MeasKind.FLOAT:
            if not isinstance(v, float):
                raise TypeError(f"float value expected, got {type(v).__name__}")
        elif self.kind == MeasKind.STRING:
            if not isinstance(v, str):
                raise TypeError(f"string value expected, got {type(v).__name__}")
        else:
            raise ValueError(f"Unknown kind: {self.kind!r}")

    @classmethod
    def from_bool(cls, value: bool) -> "MeasValue":
        if isinstance(value, (str, bytes)):
            raise TypeError("boolean value expected, got text")
        return cls(MeasKind.BOOLEAN, bool(value))

    @classmethod
    def from_integer(cls, value: int) -> "MeasValue":
        return cls(MeasKind.INTEGER, int(operator.index(value)))

    @classmethod
    def from_float(cls, value: float) -> "MeasValue":
        if isinstance(value, (str, bytes)):
            raise TypeError("float value expected, got text")
        return cls(MeasKind.FLOAT, float(value))

    @classmethod
    def from_string(cls, value: str) -> "MeasValue":
        return cls(MeasKind.STRING, value)

    def as_boolean(self) -> bool | None:
        if self.kind == MeasKind.STRING:
            return None
        if self.kind == MeasKind.BOOLEAN:
            return self.value  # type: ignore[return-value]
        return self.value != 0

    def as_integer(self) -> int | None:
        if self.kind == MeasKind.BOOLEAN:
            return 1 if self.value else 0
        if self.kind == MeasKind.INTEGER:
            return self.value  # type: ignore[return-value]
        if self.kind == MeasKind.FLOAT:
            return _float_to_int64(self.value)  # type: ignore[arg-type]
        return None

    def as_float(self) -> float | None:
        if self.kind == MeasKind.BOOLEAN:
            return 1.0 if self.value else 0.0
        if self.kind in (MeasKind.INTEGER, MeasKind.FLOAT):
            return float(self.value)
        return None

    def as_string(self) -> str:
        """Text rendering; for STRING values this is the value itself."""
        if self.kind == MeasKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind == MeasKind.FLOAT:
            return repr(self.value)
        return str(self.value)

    def coerce(self, kind: MeasKind) -> bool | int | float | str | None:
        """Return this value converted to `kind`, or None if it has no such form."""
        if kind == MeasKind.BOOLEAN:
            return self.as_boolean()
        if kind == MeasKind.INTEGER:
            return self.as_integer()
        if kind == MeasKind.FLOAT:
            return self.as_float()
        if kind == MeasKind.STRING:
            return self.value if self.kind == MeasKind.STRING else None
        return None

    def matches(self, other: "MeasValue") -> bool:
        """
        True if `other`, coerced to this value's kind, equals this value.

        Evaluated from the receiver's kind: Boolean(True).matches(Integer(2)) is
        true while Integer(2).matches(Boolean(True)) is false. Floats compare
        exactly, so NaN never matches.
        """
        coerced = other.coerce(self.kind)
        return coerced is not None and coerced == self.value

    def _key(self) -> object:
        if self.kind == MeasKind.FLOAT:
            return _float_key(self.value)  # type: ignore[arg-type]
        return self.value

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MeasValue):
            return NotImplemented
        return self.kind == other.kind and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((self.kind, self._key()))

    def __repr__(self) -> str:
        return f"{self.kind.name.capitalize()}({self.value!r})"
