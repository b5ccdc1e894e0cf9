"""dnp3-fmb: translate DNP3 point updates into batched key/reading domain updates."""

__version__ = "0.1.0"

from .adapter import DeviceObserver, UpdateAdapter
from .errors import Dnp3FmbError, InvalidCategoryError, MappingConfigError, TransformError
from .mapping import Dnp3DataMapping, load_mapping
from .normalize import normalize_category
from .types import KeyEntry, KeyMeasUpdate, PointCategory, ReadingEntry, ReadingMeasUpdate, Transform
from .values import MeasKind, MeasValue

__all__ = [
    "__version__",
    "DeviceObserver",
    "UpdateAdapter",
    "Dnp3FmbError",
    "InvalidCategoryError",
    "MappingConfigError",
    "TransformError",
    "Dnp3DataMapping",
    "load_mapping",
    "normalize_category",
    "KeyEntry",
    "KeyMeasUpdate",
    "PointCategory",
    "ReadingEntry",
    "ReadingMeasUpdate",
    "Transform",
    "MeasKind",
    "MeasValue",
]
