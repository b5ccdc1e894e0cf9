"""UpdateAdapter: DNP3 session observer that batches mapped point updates and publishes once per scan."""

import logging
from contextlib import contextmanager
from typing import Iterator, Protocol, Sequence

from .mapping import Dnp3DataMapping
from .normalize import normalize_category
from .types import KeyEntry, KeyMeasUpdate, PointCategory, ReadingEntry, ReadingMeasUpdate
from .values import MeasValue

logger = logging.getLogger(__name__)


class DeviceObserver(Protocol):
    """Downstream consumer of one batch of updates per protocol scan."""

    def publish(
        self,
        reading_updates: Sequence[ReadingMeasUpdate],
        key_updates: Sequence[KeyMeasUpdate],
    ) -> None: ...


class UpdateAdapter:
    """
    Translates DNP3 point updates into key and reading updates for a DeviceObserver.

    The protocol stack drives one session per scan: session_start(), any number
    of update calls, then session_end(). Updates are resolved through the
    mapping (key table first, then reading table), optionally transformed, and
    buffered in call order. session_end() publishes the batch once if anything
    was buffered and always clears the buffers.

    None of the entry points raise: unmapped points, suppressed values,
    per-update faults and publish faults are logged and absorbed, since an
    exception here would surface inside the protocol stack's callback thread.

    One instance per protocol connection; the buffers are not thread-safe.
    """

    def __init__(self, adapter_log_id: str, mapping: Dnp3DataMapping, observer: DeviceObserver) -> None:
        self._adapter_log_id = adapter_log_id
        self._mapping = mapping
        self._observer = observer
        self._key_updates: list[KeyMeasUpdate] = []
        self._reading_updates: list[ReadingMeasUpdate] = []
        self._in_session = False
        self._session_seq = 0

    @property
    def adapter_log_id(self) -> str:
        return self._adapter_log_id

    @property
    def mapping(self) -> Dnp3DataMapping:
        return self._mapping

    @property
    def in_session(self) -> bool:
        return self._in_session

    @property
    def session_seq(self) -> int:
        """Number of sessions started so far; used to tag log lines."""
        return self._session_seq

    @property
    def pending(self) -> tuple[int, int]:
        """(buffered reading updates, buffered key updates)."""
        return len(self._reading_updates), len(self._key_updates)

    def swap_mapping(self, mapping: Dnp3DataMapping) -> None:
        """Replace the mapping used for subsequent updates (reload)."""
        self._mapping = mapping
        logger.debug("%s: mapping replaced (%d entries)", self._adapter_log_id, len(mapping))

    def session_start(self) -> None:
        if self._in_session:
            logger.warning(
                "%s: session %d started again without end; keeping %d buffered updates",
                self._adapter_log_id,
                self._session_seq,
                len(self._reading_updates) + len(self._key_updates),
            )
        self._session_seq += 1
        self._in_session = True

    def session_end(self) -> None:
        reading_updates = self._reading_updates
        key_updates = self._key_updates
        try:
            if reading_updates or key_updates:
                logger.debug("Saw reading updates: %s", reading_updates)
                logger.debug("Saw key updates: %s", key_updates)
                self._observer.publish(reading_updates, key_updates)
        except Exception as e:
            logger.error(
                "Adapter for %s had exception thrown on publish (session %d): %s",
                self._adapter_log_id,
                self._session_seq,
                e,
                exc_info=True,
            )
        finally:
            self._reading_updates = []
            self._key_updates = []
            self._in_session = False

    @contextmanager
    def session(self) -> Iterator["UpdateAdapter"]:
        """Run one scan: session_start() on enter, session_end() on every exit path."""
        self.session_start()
        try:
            yield self
        finally:
            self.session_end()

    def update(self, category: PointCategory | str, index: int, value: bool | int | float) -> None:
        """Handle one native point value; never raises."""
        try:
            category = normalize_category(category)
            if not self._in_session:
                logger.debug("%s: %s update %d outside a session", self._adapter_log_id, category.value, index)
            self._handle_update(category, index, category.wrap(value))
        except Exception:
            logger.warning(
                "%s had fault handling update: %s %s",
                self._adapter_log_id,
                getattr(category, "value", category),
                index,
                exc_info=True,
            )

    def update_status(self, index: int, value: bool) -> None:
        self.update(PointCategory.STATUS, index, value)

    def update_analog(self, index: int, value: float) -> None:
        self.update(PointCategory.ANALOG, index, value)

    def update_counter(self, index: int, value: int) -> None:
        self.update(PointCategory.COUNTER, index, value)

    def update_control_status(self, index: int, value: bool) -> None:
        self.update(PointCategory.CONTROL_STATUS, index, value)

    def update_setpoint_status(self, index: int, value: float) -> None:
        self.update(PointCategory.SETPOINT_STATUS, index, value)

    def _handle_update(self, category: PointCategory, index: int, value: MeasValue) -> None:
        logger.debug("Update: %s %d, value: %r", category.value, index, value)
        mapping = self._mapping

        key_entry = mapping.key_entry(category, index)
        if key_entry is not None:
            result = self._apply(key_entry, category, index, value)
            if result is not None:
                self._key_updates.append(KeyMeasUpdate(key_entry.device_key_id, result))
            return

        reading_entry = mapping.reading_entry(category, index)
        if reading_entry is not None:
            result = self._apply(reading_entry, category, index, value)
            if result is not None:
                self._reading_updates.append(ReadingMeasUpdate(reading_entry.device_reading_id, result))
            return

        logger.debug("%s had unknown update: %s %d", self._adapter_log_id, category.value, index)

    @staticmethod
    def _apply(
        entry: KeyEntry | ReadingEntry,
        category: PointCategory,
        index: int,
        value: MeasValue,
    ) -> MeasValue | None:
        if entry.transform is None:
            return value
        result = entry.transform(value)
        if result is not None and not isinstance(result, MeasValue):
            raise TypeError(f"Transform returned {type(result).__name__}, expected MeasValue")
        if result is None:
            logger.debug("Transform returned no value: update %s %d, value: %r", category.value, index, value)
        return result
