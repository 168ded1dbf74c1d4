"""Persistencia SQLite: un slot clave/valor con el Store Root en JSON."""

from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import tzinfo
from pathlib import Path
from typing import Any

import structlog

from glicosmart.errors import InvalidReading, StorageReadCorrupt, StorageWriteFailed
from glicosmart.forms import (
    DEFAULT_TIMEZONE,
    local_tz,
    parse_period,
    parse_timestamp,
    parse_value,
)
from glicosmart.model import Account, Period, Profile, Reading, StoreRoot
from glicosmart.readings import IdFactory, ReadingStore, new_reading_id

logger = structlog.get_logger(__name__)

STORAGE_SLOT = "glicosmart_users"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS app_config (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS storage_slots (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


@dataclass(frozen=True)
class AppConfig:
    """Configuracion persistida de la app."""

    export_dir: str = ""
    timezone: str = DEFAULT_TIMEZONE


class SQLiteStore:
    """Durable key/value storage for the Store Root and app config."""

    def __init__(
        self,
        db_path: Path,
        *,
        slot: str = STORAGE_SLOT,
        id_factory: IdFactory = new_reading_id,
    ) -> None:
        """Create store and ensure schema exists."""
        self._db_path = db_path
        self._slot = slot
        self._id_factory = id_factory
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_schema(self) -> None:
        try:
            with self._connect() as conn:
                conn.executescript(SCHEMA_SQL)
                conn.commit()
        except sqlite3.DatabaseError as exc:
            # Unreadable file: reads come back empty and writes report failure.
            logger.error(
                "storage_read_corrupt", path=str(self._db_path), error=str(exc)
            )

    def load(self) -> StoreRoot:
        """Load, validate and repair the Store Root.

        A missing slot or undecodable JSON yields an empty root. If any
        reading id had to be repaired the fixed root is saved right away.
        """
        try:
            raw = self._read_slot()
        except StorageReadCorrupt as exc:
            logger.error("storage_read_corrupt", slot=self._slot, error=str(exc))
            return {}
        if raw is None:
            return {}

        zone = local_tz(self.load_config().timezone)
        root = decode_root(raw, self._id_factory, zone)
        repaired = [
            account.id for account in root.values() if account.readings.repair_ids()
        ]
        if repaired:
            logger.info("storage_ids_repaired", accounts=repaired)
            self.save(root)
        return root

    def save(self, root: StoreRoot) -> bool:
        """Overwrite the slot with the whole root. False if the write failed."""
        try:
            self._write_slot(encode_root(root))
        except StorageWriteFailed as exc:
            logger.warning("storage_write_failed", slot=self._slot, error=str(exc))
            return False
        return True

    def clear(self) -> bool:
        """Borra el slot completo (irreversible). False si no se pudo borrar."""
        try:
            with self._connect() as conn:
                conn.execute("DELETE FROM storage_slots WHERE key = ?", (self._slot,))
                conn.commit()
        except sqlite3.Error as exc:
            logger.warning("storage_clear_failed", slot=self._slot, error=str(exc))
            return False
        logger.info("storage_cleared", slot=self._slot)
        return True

    def _read_slot(self) -> dict[str, Any] | None:
        try:
            with self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM storage_slots WHERE key = ?", (self._slot,)
                ).fetchone()
        except sqlite3.DatabaseError as exc:
            raise StorageReadCorrupt(str(exc)) from exc
        if row is None:
            return None
        try:
            parsed: Any = json.loads(row["value"])
        except json.JSONDecodeError as exc:
            raise StorageReadCorrupt(str(exc)) from exc
        if not isinstance(parsed, dict):
            raise StorageReadCorrupt(
                f"expected JSON object, got {type(parsed).__name__}"
            )
        return parsed

    def _write_slot(self, payload: dict[str, Any]) -> None:
        try:
            text = json.dumps(payload, ensure_ascii=False)
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO storage_slots(key, value) VALUES(?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value
                    """,
                    (self._slot, text),
                )
                conn.commit()
        except (TypeError, ValueError, sqlite3.Error) as exc:
            raise StorageWriteFailed(str(exc)) from exc

    def load_config(self) -> AppConfig:
        """Devuelve configuracion guardada o defaults."""
        defaults = AppConfig()
        try:
            with self._connect() as conn:
                rows = conn.execute("SELECT key, value FROM app_config").fetchall()
        except sqlite3.DatabaseError as exc:
            logger.error(
                "config_read_corrupt", path=str(self._db_path), error=str(exc)
            )
            return defaults
        values = {row["key"]: row["value"] for row in rows}
        return AppConfig(
            export_dir=values.get("export_dir", defaults.export_dir),
            timezone=values.get("timezone") or defaults.timezone,
        )

    def save_config(self, config: AppConfig) -> bool:
        """Guarda la configuracion en tabla key/value."""
        payload = {"export_dir": config.export_dir, "timezone": config.timezone}
        try:
            with self._connect() as conn:
                conn.executemany(
                    """
                    INSERT INTO app_config(key, value) VALUES(?, ?)
                    ON CONFLICT(key) DO UPDATE SET value=excluded.value
                    """,
                    payload.items(),
                )
                conn.commit()
        except sqlite3.Error as exc:
            logger.warning("config_write_failed", error=str(exc))
            return False
        return True


def encode_root(root: StoreRoot) -> dict[str, Any]:
    """Serialize the Store Root into the persisted JSON shape."""
    return {
        account_id: {
            "profile": _profile_to_dict(account.profile),
            "readings": [_reading_to_dict(r) for r in account.readings],
        }
        for account_id, account in root.items()
    }


def decode_root(
    raw: dict[str, Any],
    id_factory: IdFactory = new_reading_id,
    zone: tzinfo | None = None,
) -> StoreRoot:
    """Build the strict model from untrusted persisted data.

    Accounts that are not objects are skipped; readings with an unusable
    value or timestamp are dropped. Ids are left as found so that
    ``ReadingStore.repair_ids`` can report whether anything changed. Naive
    timestamps are read in ``zone`` (the default timezone if None).
    """
    root: StoreRoot = {}
    for account_id, item in raw.items():
        if not isinstance(item, dict):
            logger.warning("storage_account_skipped", account_id=account_id)
            continue
        profile = _profile_from_raw(str(account_id), item.get("profile"))
        raw_readings = item.get("readings")
        if not isinstance(raw_readings, list):
            raw_readings = []
        decoded = (_reading_from_raw(account_id, r, zone) for r in raw_readings)
        readings = [reading for reading in decoded if reading is not None]
        root[str(account_id)] = Account(
            id=str(account_id),
            profile=profile,
            readings=ReadingStore(readings, id_factory=id_factory),
        )
    return root


def _profile_to_dict(profile: Profile) -> dict[str, Any]:
    return {
        "name": profile.name,
        "age": profile.age,
        "weight": profile.weight,
        "photo": profile.photo,
        "account_id": profile.account_id,
    }


def _reading_to_dict(reading: Reading) -> dict[str, Any]:
    return {
        "id": reading.id,
        "value": reading.value,
        "period": reading.period.value,
        "timestamp": reading.timestamp.isoformat(),
        "notes": reading.notes,
    }


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_str(value: Any) -> str:
    # Reading text is kept exactly as saved.
    return "" if value is None else str(value)


def _profile_from_raw(account_id: str, raw: Any) -> Profile:
    data = raw if isinstance(raw, dict) else {}
    photo = data.get("photo")
    return Profile(
        name=_text(data.get("name")),
        # Older payloads stored the account id under "email".
        account_id=_text(data.get("account_id") or data.get("email")) or account_id,
        age=_text(data.get("age")),
        weight=_text(data.get("weight")),
        photo=photo if isinstance(photo, str) and photo else None,
    )


def _reading_from_raw(
    account_id: str, raw: Any, zone: tzinfo | None = None
) -> Reading | None:
    if not isinstance(raw, dict):
        logger.warning("storage_reading_dropped", account_id=account_id, reason="shape")
        return None
    try:
        value = parse_value(raw.get("value"))
        timestamp = parse_timestamp(raw.get("timestamp"), zone)
    except InvalidReading as exc:
        logger.warning(
            "storage_reading_dropped",
            account_id=account_id,
            reading_id=raw.get("id"),
            reason=str(exc),
        )
        return None
    try:
        period = parse_period(raw.get("period"))
    except InvalidReading:
        period = Period.RANDOM
    return Reading(
        id=_as_str(raw.get("id")),
        value=value,
        period=period,
        timestamp=timestamp,
        notes=_as_str(raw.get("notes")),
    )
