"""Exceptions for dnp3-fmb: bad categories, mapping configuration and transform faults."""


class Dnp3FmbError(Exception):
    """Base exception for dnp3-fmb."""

    pass


class InvalidCategoryError(Dnp3FmbError):
    """Raised when a point category name is not one of the five DNP3 point types."""

    def __init__(self, category: str, message: str | None = None) -> None:
        self.category = category
        self._msg = message or f"Invalid point category: {category!r}"
        super().__init__(self._msg)


class MappingConfigError(Dnp3FmbError):
    """Raised when a mapping entry or mapping file cannot be loaded."""

    def __init__(
        self,
        message: str,
        *,
        category: str | None = None,
        index: int | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.category = category
        self.index = index
        self.cause = cause
        if category is not None and index is not None:
            message = f"{category}[{index}]: {message}"
        super().__init__(message)


class TransformError(Dnp3FmbError):
    """Raised by a transform that cannot handle the value it was given."""

    def __init__(self, message: str, *, value: object = None) -> None:
        self.value = value
        super().__init__(message)
