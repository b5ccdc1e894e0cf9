"""Per-point value transforms and the builder that creates them from mapping config."""

from typing import Any, Iterable

from .errors import MappingConfigError, TransformError
from .types import Transform
from .values import MeasKind, MeasValue


def scale(factor: float = 1.0, offset: float = 0.0) -> Transform:
    """Linear rescale to a float: value * factor + offset."""

    def _scale(value: MeasValue) -> MeasValue | None:
        v = value.as_float()
        if v is None:
            raise TransformError(f"Cannot scale non-numeric value {value!r}", value=value)
        return MeasValue.from_float(v * factor + offset)

    return _scale


def invert() -> Transform:
    """Boolean negation."""

    def _invert(value: MeasValue) -> MeasValue | None:
        v = value.as_boolean()
        if v is None:
            raise TransformError(f"Cannot invert non-boolean value {value!r}", value=value)
        return MeasValue.from_bool(not v)

    return _invert


def _retype(kind: MeasKind) -> Transform:
    def _convert(value: MeasValue) -> MeasValue | None:
        v = value.coerce(kind)
        if v is None:
            raise TransformError(f"Cannot convert {value!r} to {kind.value}", value=value)
        return MeasValue(kind, v)

    return _convert


def to_boolean() -> Transform:
    return _retype(MeasKind.BOOLEAN)


def to_integer() -> Transform:
    return _retype(MeasKind.INTEGER)


def to_float() -> Transform:
    return _retype(MeasKind.FLOAT)


def drop_if(expected: MeasValue) -> Transform:
    """Suppress values that `expected` matches; pass everything else through."""

    def _drop_if(value: MeasValue) -> MeasValue | None:
        if expected.matches(value):
            return None
        return value

    return _drop_if


def enum_map(
    cases: Iterable[tuple[MeasValue, MeasValue]],
    default: MeasValue | None = None,
) -> Transform:
    """
    Map raw values onto fixed results. The first case whose expected value
    matches the raw value wins; otherwise `default` (None suppresses).
    """
    table = list(cases)

    def _enum_map(value: MeasValue) -> MeasValue | None:
        for expected, result in table:
            if expected.matches(value):
                return result
        return default

    return _enum_map


def chain(*transforms: Transform) -> Transform:
    """Apply transforms left to right; stop at the first one that returns None."""

    def _chain(value: MeasValue) -> MeasValue | None:
        current: MeasValue | None = value
        for t in transforms:
            current = t(current)
            if current is None:
                return None
        return current

    return _chain


def literal(raw: Any) -> MeasValue:
    """Build a MeasValue from a JSON scalar (bool, int, float or str)."""
    if isinstance(raw, bool):
        return MeasValue.from_bool(raw)
    if isinstance(raw, int):
        return MeasValue.from_integer(raw)
    if isinstance(raw, float):
        return MeasValue.from_float(raw)
    if isinstance(raw, str):
        return MeasValue.from_string(raw)
    raise MappingConfigError(f"Unsupported literal value: {raw!r}")


def _build_one(config: dict[str, Any]) -> Transform:
    kind = config.get("type")
    if kind == "scale":
        try:
            factor = float(config.get("factor", 1.0))
            offset = float(config.get("offset", 0.0))
        except (TypeError, ValueError) as e:
            raise MappingConfigError(f"Bad scale parameters: {config!r}", cause=e) from e
        return scale(factor, offset)
    if kind == "invert":
        return invert()
    if kind == "to_boolean":
        return to_boolean()
    if kind == "to_integer":
        return to_integer()
    if kind == "to_float":
        return to_float()
    if kind == "drop_if":
        if "value" not in config:
            raise MappingConfigError("drop_if transform requires 'value'")
        return drop_if(literal(config["value"]))
    if kind == "enum_map":
        raw_cases = config.get("cases")
        if not isinstance(raw_cases, list) or not raw_cases:
            raise MappingConfigError("enum_map transform requires a non-empty 'cases' list")
        cases = []
        for case in raw_cases:
            if not isinstance(case, dict) or "match" not in case or "result" not in case:
                raise MappingConfigError(f"enum_map case needs 'match' and 'result': {case!r}")
            cases.append((literal(case["match"]), literal(case["result"])))
        default = config.get("default")
        return enum_map(cases, literal(default) if default is not None else None)
    raise MappingConfigError(f"Unknown transform type: {kind!r}")


def build_transform(config: dict[str, Any] | list[dict[str, Any]] | None) -> Transform | None:
    """
    Build a transform from mapping config.

    Accepts a single dict ({"type": "scale", "factor": 0.1}), a list of dicts
    (applied as a chain) or None (no transform).
    """
    if config is None:
        return None
    if isinstance(config, list):
        if not config:
            return None
        parts = [_build_one(_require_dict(s)) for s in config]
        return parts[0] if len(parts) == 1 else chain(*parts)
    return _build_one(_require_dict(config))


def _require_dict(config: Any) -> dict[str, Any]:
    if not isinstance(config, dict):
        raise MappingConfigError(f"Transform must be an object, got {type(config).__name__}")
    return config
