from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone

import pytest

from glicosmart.errors import InvalidReading
from glicosmart.model import Period, Reading
from glicosmart.readings import ReadingStore, new_reading_id, sort_readings

T0 = datetime(2025, 5, 1, 8, 0, tzinfo=timezone.utc)


def _reading(reading_id: str, value: int, minutes: int = 0) -> Reading:
    return Reading(
        id=reading_id,
        value=value,
        period=Period.RANDOM,
        timestamp=T0 + timedelta(minutes=minutes),
    )


def _assert_invariants(store: ReadingStore) -> None:
    ids = [r.id for r in store]
    assert len(ids) == len(set(ids))
    stamps = [r.timestamp for r in store]
    assert stamps == sorted(stamps, reverse=True)


def test_new_reading_id_shape() -> None:
    reading_id = new_reading_id()
    assert reading_id[:13].isdigit()
    assert len(reading_id) >= 13 + 9


def test_add_defaults_and_order() -> None:
    store = ReadingStore()
    older = store.add(100, timestamp=T0)
    newer = store.add("150", "jejum", "antes do café", T0 + timedelta(hours=1))
    assert [r.id for r in store] == [newer.id, older.id]
    assert newer.period is Period.FASTING
    assert newer.notes == "antes do café"
    assert store.latest == newer


def test_add_without_timestamp_uses_now() -> None:
    before = datetime.now(tz=timezone.utc)
    reading = ReadingStore().add(110)
    assert reading.timestamp >= before - timedelta(seconds=1)
    assert reading.timestamp.tzinfo is not None


def test_same_millisecond_ids_are_distinct(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "glicosmart.readings.time.time_ns", lambda: 1_700_000_000_000_000_000
    )
    store = ReadingStore()
    first = store.add(100, timestamp=T0)
    second = store.add(101, timestamp=T0)
    assert first.id != second.id
    assert first.id[:13] == second.id[:13]


def test_colliding_id_factory_is_retried() -> None:
    ids = iter(["a", "a", "b"])
    store = ReadingStore(id_factory=lambda: next(ids))
    store.add(100, timestamp=T0)
    store.add(100, timestamp=T0)
    assert sorted(r.id for r in store) == ["a", "b"]


def test_add_invalid_value_leaves_store_untouched() -> None:
    store = ReadingStore([_reading("1", 100)])
    with pytest.raises(InvalidReading):
        store.add("doce")
    with pytest.raises(InvalidReading):
        store.add(120, period="brunch")
    assert len(store) == 1


def test_equal_timestamps_keep_insertion_order() -> None:
    store = ReadingStore()
    a = store.add(100, timestamp=T0)
    b = store.add(110, timestamp=T0)
    # Later insertion is shown first among equal timestamps.
    assert [r.id for r in store] == [b.id, a.id]


def test_update_merges_and_resorts() -> None:
    store = ReadingStore([_reading("1", 100, 0), _reading("2", 120, 10)])
    updated = store.update("1", timestamp=T0 + timedelta(minutes=20), value="130")
    assert updated is not None
    assert updated.value == 130
    assert updated.period is Period.RANDOM
    assert [r.id for r in store] == ["1", "2"]


def test_update_partial_fields() -> None:
    store = ReadingStore([_reading("1", 100)])
    store.update("1", notes="pós treino")
    reading = store.get("1")
    assert reading is not None
    assert reading.notes == "pós treino"
    assert reading.value == 100


def test_update_missing_id_is_noop() -> None:
    store = ReadingStore([_reading("1", 100)])
    assert store.update("zzz", value=200) is None
    assert store.get("1") == _reading("1", 100)


def test_update_rejects_unknown_fields_and_bad_values() -> None:
    store = ReadingStore([_reading("1", 100)])
    with pytest.raises(TypeError):
        store.update("1", id="2")
    with pytest.raises(InvalidReading):
        store.update("1", value="", notes="x")
    assert store.get("1") == _reading("1", 100)


def test_delete() -> None:
    store = ReadingStore([_reading("1", 100), _reading("2", 110, 5)])
    assert store.delete("1") is True
    assert store.delete("1") is False
    assert [r.id for r in store] == ["2"]


def test_repair_ids_fixes_missing_and_duplicates() -> None:
    store = ReadingStore(
        [_reading("1", 100, 0), _reading("1", 110, 5), _reading("", 120, 10)]
    )
    assert store.repair_ids() is True
    _assert_invariants(store)
    assert "1" in {r.id for r in store}
    assert "" not in {r.id for r in store}


def test_repair_ids_is_idempotent() -> None:
    store = ReadingStore([_reading("1", 100, 0), _reading("1", 110, 5)])
    store.repair_ids()
    once = store.readings
    assert store.repair_ids() is False
    assert store.readings == once


def test_repair_ids_clean_input_unchanged() -> None:
    readings = [_reading("1", 100, 0), _reading("2", 110, 5)]
    store = ReadingStore(readings)
    assert store.repair_ids() is False
    assert store.readings == tuple(sort_readings(readings))


def test_random_operation_sequences_keep_invariants() -> None:
    rng = random.Random(7)
    store = ReadingStore()
    for _ in range(200):
        op = rng.choice(["add", "add", "update", "delete"])
        if op == "add" or not len(store):
            when = T0 + timedelta(minutes=rng.randint(0, 50))
            store.add(rng.randint(40, 400), timestamp=when)
        elif op == "update":
            target = rng.choice(store.readings).id
            when = T0 + timedelta(minutes=rng.randint(0, 50))
            store.update(target, timestamp=when)
        else:
            store.delete(rng.choice(store.readings).id)
        _assert_invariants(store)
