"""Core data model: point categories, mapping entries and the two update shapes."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from .values import MeasKind, MeasValue

Transform = Callable[[MeasValue], Optional[MeasValue]]


class PointCategory(str, Enum):
    """DNP3 point types delivered by the protocol stack."""

    STATUS = "status"
    ANALOG = "analog"
    COUNTER = "counter"
    CONTROL_STATUS = "control_status"
    SETPOINT_STATUS = "setpoint_status"

    @property
    def native_kind(self) -> MeasKind:
        """Kind of MeasValue built from this category's native point value."""
        return _NATIVE_KIND[self]

    def wrap(self, native: bool | int | float) -> MeasValue:
        """Wrap a native point value in a MeasValue of this category's kind."""
        kind = _NATIVE_KIND[self]
        if kind == MeasKind.BOOLEAN:
            return MeasValue.from_bool(native)  # type: ignore[arg-type]
        if kind == MeasKind.INTEGER:
            return MeasValue.from_integer(native)  # type: ignore[arg-type]
        return MeasValue.from_float(native)


_NATIVE_KIND: dict[PointCategory, MeasKind] = {
    PointCategory.STATUS: MeasKind.BOOLEAN,
    PointCategory.ANALOG: MeasKind.FLOAT,
    PointCategory.COUNTER: MeasKind.INTEGER,
    PointCategory.CONTROL_STATUS: MeasKind.BOOLEAN,
    PointCategory.SETPOINT_STATUS: MeasKind.FLOAT,
}


@dataclass(frozen=True)
class KeyEntry:
    """Mapping target addressed by a stable device key."""

    device_key_id: str
    transform: Transform | None = None

    def __post_init__(self) -> None:
        if not self.device_key_id:
            raise ValueError("device_key_id must be non-empty")


@dataclass(frozen=True)
class ReadingEntry:
    """Mapping target addressed by a device reading identifier."""

    device_reading_id: str
    transform: Transform | None = None

    def __post_init__(self) -> None:
        if not self.device_reading_id:
            raise ValueError("device_reading_id must be non-empty")


@dataclass(frozen=True)
class KeyMeasUpdate:
    device_key_id: str
    value: MeasValue


@dataclass(frozen=True)
class ReadingMeasUpdate:
    device_reading_id: str
    value: MeasValue
