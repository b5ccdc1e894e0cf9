"""Normalize point category names from config files and protocol logs to PointCategory."""

import re

from .errors import InvalidCategoryError
from .types import PointCategory

# CamelCase boundary: SetpointStatus -> Setpoint_Status
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

_ALIASES: dict[str, PointCategory] = {
    "binary": PointCategory.STATUS,
    "binary_input": PointCategory.STATUS,
    "analog_input": PointCategory.ANALOG,
    "binary_output_status": PointCategory.CONTROL_STATUS,
    "analog_output_status": PointCategory.SETPOINT_STATUS,
}


def normalize_category(raw: str | PointCategory) -> PointCategory:
    """
    Normalize a category name to PointCategory.

    - Case-insensitive; CamelCase, dashes and spaces fold to snake_case
      (SetpointStatus, setpoint-status -> setpoint_status).
    - Accepts the DNP3 object names binary/binary_input (status),
      analog_input, binary_output_status (control_status) and
      analog_output_status (setpoint_status).

    Raises InvalidCategoryError for anything else.
    """
    if isinstance(raw, PointCategory):
        return raw
    s = raw.strip()
    if not s:
        raise InvalidCategoryError(raw, "Category cannot be empty")

    key = _CAMEL_BOUNDARY.sub("_", s).lower()
    key = re.sub(r"[\s\-]+", "_", key)

    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return PointCategory(key)
    except ValueError:
        raise InvalidCategoryError(raw) from None
