"""Dnp3DataMapping: per-category index -> key/reading entry tables, loaded from JSON, O(1) lookup."""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from .errors import InvalidCategoryError, MappingConfigError
from .normalize import normalize_category
from .transforms import build_transform
from .types import KeyEntry, PointCategory, ReadingEntry

logger = logging.getLogger(__name__)


def _parse_index(raw: Any, category: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise MappingConfigError(f"{category}: index must be an integer, got {raw!r}", category=category)
    if raw < 0:
        raise MappingConfigError("Index must be >= 0", category=category, index=raw)
    return raw


def _parse_entry(raw: dict[str, Any]) -> tuple[PointCategory, int, KeyEntry | ReadingEntry]:
    """Build (category, index, entry) from a JSON entry (category, index, key|reading, transform)."""
    if "category" not in raw:
        raise MappingConfigError(f"Entry has no category: {raw!r}")
    try:
        category = normalize_category(str(raw["category"]))
    except InvalidCategoryError as e:
        raise MappingConfigError(str(e), cause=e) from e
    index = _parse_index(raw.get("index"), category.value)

    key_id = raw.get("key")
    reading_id = raw.get("reading")
    if (key_id is None) == (reading_id is None):
        raise MappingConfigError(
            "Entry needs exactly one of 'key' or 'reading'",
            category=category.value,
            index=index,
        )
    target_id = key_id if key_id is not None else reading_id
    if not isinstance(target_id, str):
        raise MappingConfigError(
            f"Identifier must be a string, got {target_id!r}",
            category=category.value,
            index=index,
        )

    try:
        transform = build_transform(raw.get("transform"))
        if key_id is not None:
            return category, index, KeyEntry(key_id, transform)
        return category, index, ReadingEntry(reading_id, transform)
    except MappingConfigError as e:
        raise MappingConfigError(str(e), category=category.value, index=index, cause=e) from e
    except (TypeError, ValueError) as e:
        raise MappingConfigError(str(e), category=category.value, index=index, cause=e) from e


class Dnp3DataMapping:
    """
    Read-only lookup tables from DNP3 point index to mapping entry, one key
    table and one reading table per point category.

    Instances are never mutated after construction and may be shared between
    adapters. To reload, build a new instance and swap the reference.
    """

    def __init__(
        self,
        key_tables: Mapping[PointCategory, Mapping[int, KeyEntry]] | None = None,
        reading_tables: Mapping[PointCategory, Mapping[int, ReadingEntry]] | None = None,
    ) -> None:
        key_tables = key_tables or {}
        reading_tables = reading_tables or {}
        self._keys: dict[PointCategory, Mapping[int, KeyEntry]] = {
            c: MappingProxyType(dict(key_tables.get(c, {}))) for c in PointCategory
        }
        self._readings: dict[PointCategory, Mapping[int, ReadingEntry]] = {
            c: MappingProxyType(dict(reading_tables.get(c, {}))) for c in PointCategory
        }

    @classmethod
    def from_entries(cls, entries: list[dict[str, Any]]) -> "Dnp3DataMapping":
        """
        Build a mapping from a flat list of entry dicts, e.g.
        {"category": "analog", "index": 3, "key": "battery.soc", "transform": {...}}.
        """
        keys: dict[PointCategory, dict[int, KeyEntry]] = {c: {} for c in PointCategory}
        readings: dict[PointCategory, dict[int, ReadingEntry]] = {c: {} for c in PointCategory}

        for raw in entries:
            if not isinstance(raw, dict):
                raise MappingConfigError(f"Entry must be an object, got {type(raw).__name__}")
            category, index, entry = _parse_entry(raw)
            table: dict[int, Any] = keys[category] if isinstance(entry, KeyEntry) else readings[category]
            if index in table:
                kind = "key" if isinstance(entry, KeyEntry) else "reading"
                raise MappingConfigError(f"Duplicate {kind} index", category=category.value, index=index)
            table[index] = entry

        for category in PointCategory:
            shadowed = keys[category].keys() & readings[category].keys()
            for index in sorted(shadowed):
                logger.debug("%s[%d] has key and reading entries; key entry wins", category.value, index)

        mapping = cls(keys, readings)
        logger.debug("Dnp3DataMapping loaded: %d entries", len(mapping))
        return mapping

    def key_entry(self, category: PointCategory, index: int) -> KeyEntry | None:
        return self._keys[category].get(index)

    def reading_entry(self, category: PointCategory, index: int) -> ReadingEntry | None:
        return self._readings[category].get(index)

    def index_to_entry(self, category: PointCategory, index: int) -> KeyEntry | ReadingEntry | None:
        """Resolve an index to its key entry, else its reading entry, else None (unmapped)."""
        entry = self._keys[category].get(index)
        if entry is not None:
            return entry
        return self._readings[category].get(index)

    def key_table(self, category: PointCategory) -> Mapping[int, KeyEntry]:
        return self._keys[category]

    def reading_table(self, category: PointCategory) -> Mapping[int, ReadingEntry]:
        return self._readings[category]

    def counts(self) -> dict[PointCategory, tuple[int, int]]:
        """Per category: (number of key entries, number of reading entries)."""
        return {c: (len(self._keys[c]), len(self._readings[c])) for c in PointCategory}

    def __len__(self) -> int:
        return sum(len(t) for t in self._keys.values()) + sum(len(t) for t in self._readings.values())


def load_mapping(path: str | Path) -> Dnp3DataMapping:
    """Load a mapping from a JSON file holding a list of entries or {"entries": [...]}."""
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise MappingConfigError(f"Mapping file not found: {p}") from None
    except json.JSONDecodeError as e:
        raise MappingConfigError(f"Mapping file is not valid JSON: {p}: {e}", cause=e) from e
    except UnicodeDecodeError as e:
        raise MappingConfigError(f"Mapping file is not UTF-8 text: {p}: {e}", cause=e) from e
    except OSError as e:
        raise MappingConfigError(f"Cannot read mapping file: {p}: {e}", cause=e) from e

    if isinstance(data, list):
        entries = data
    elif isinstance(data, dict) and isinstance(data.get("entries"), list):
        entries = data["entries"]
    else:
        raise MappingConfigError(f"Mapping file must hold a list of entries or an 'entries' list: {p}")

    logger.debug("Loading mapping from %s", p)
    return Dnp3DataMapping.from_entries(entries)
