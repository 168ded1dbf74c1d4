"""Coleccion de mediciones de una cuenta: alta, edicion, baja y orden."""

from __future__ import annotations

import random
import string
import time
from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace
from datetime import datetime

import structlog

from glicosmart.forms import local_tz, parse_period, parse_timestamp, parse_value
from glicosmart.model import Period, Reading

logger = structlog.get_logger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase
_EDITABLE_FIELDS = frozenset({"value", "period", "timestamp", "notes"})

IdFactory = Callable[[], str]


def new_reading_id() -> str:
    """Millisecond clock plus a 9-char base-36 random suffix."""
    millis = time.time_ns() // 1_000_000
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))
    return f"{millis}{suffix}"


def sort_readings(readings: Iterable[Reading]) -> list[Reading]:
    """Most recent first; equal timestamps keep their current order."""
    return sorted(readings, key=lambda r: r.timestamp, reverse=True)


class ReadingStore:
    """Readings of one account, always sorted descending by timestamp."""

    def __init__(
        self,
        readings: Iterable[Reading] = (),
        id_factory: IdFactory = new_reading_id,
    ) -> None:
        self._id_factory = id_factory
        self._readings = sort_readings(readings)

    def __iter__(self) -> Iterator[Reading]:
        return iter(self._readings)

    def __len__(self) -> int:
        return len(self._readings)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReadingStore):
            return NotImplemented
        return self._readings == other._readings

    def __repr__(self) -> str:
        return f"ReadingStore({self._readings!r})"

    @property
    def readings(self) -> tuple[Reading, ...]:
        return tuple(self._readings)

    @property
    def latest(self) -> Reading | None:
        return self._readings[0] if self._readings else None

    def get(self, reading_id: str) -> Reading | None:
        for reading in self._readings:
            if reading.id == reading_id:
                return reading
        return None

    def add(
        self,
        value: object,
        period: Period | str = Period.RANDOM,
        notes: str = "",
        timestamp: datetime | str | None = None,
    ) -> Reading:
        """Crea una medicion con id nuevo y reordena la coleccion.

        Raises:
            InvalidReading: If value, period or timestamp cannot be parsed.
        """
        reading = Reading(
            id=self._unique_id(),
            value=parse_value(value),
            period=parse_period(period),
            timestamp=(
                datetime.now(tz=local_tz())
                if timestamp is None
                else parse_timestamp(timestamp)
            ),
            notes=notes or "",
        )
        # New reading goes first so it wins ties against older entries.
        self._readings = sort_readings([reading, *self._readings])
        logger.debug("reading_added", reading_id=reading.id, value=reading.value)
        return reading

    def update(self, reading_id: str, **changes: object) -> Reading | None:
        """Merge the given fields into a reading; None if id is unknown.

        Raises:
            TypeError: On fields other than value/period/timestamp/notes.
            InvalidReading: On unparseable values. Nothing is modified.
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise TypeError(f"Campos no editables: {sorted(unknown)}")
        current = self.get(reading_id)
        if current is None:
            return None

        parsed: dict[str, object] = {}
        if "value" in changes:
            parsed["value"] = parse_value(changes["value"])
        if "period" in changes:
            parsed["period"] = parse_period(changes["period"])
        if "timestamp" in changes:
            parsed["timestamp"] = parse_timestamp(changes["timestamp"])
        if "notes" in changes:
            parsed["notes"] = str(changes["notes"] or "")

        updated = replace(current, **parsed)
        self._readings = sort_readings(
            updated if r.id == reading_id else r for r in self._readings
        )
        return updated

    def delete(self, reading_id: str) -> bool:
        before = len(self._readings)
        self._readings = [r for r in self._readings if r.id != reading_id]
        return len(self._readings) != before

    def clear(self) -> None:
        self._readings = []

    def repair_ids(self) -> bool:
        """Give fresh ids to readings with an empty or repeated id.

        Returns:
            True if any id was replaced.
        """
        seen: set[str] = set()
        repaired: list[Reading] = []
        changed = False
        taken = {r.id for r in self._readings if r.id}
        for reading in self._readings:
            if reading.id and reading.id not in seen:
                seen.add(reading.id)
                repaired.append(reading)
                continue
            new_id = self._unique_id(taken)
            taken.add(new_id)
            seen.add(new_id)
            logger.info("reading_id_repaired", old_id=reading.id, new_id=new_id)
            repaired.append(replace(reading, id=new_id))
            changed = True
        self._readings = repaired
        return changed

    def _unique_id(self, taken: set[str] | None = None) -> str:
        existing = taken if taken is not None else {r.id for r in self._readings}
        new_id = self._id_factory()
        while new_id in existing:
            new_id = self._id_factory()
        return new_id
