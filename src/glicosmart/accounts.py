"""Cuentas locales, sesion activa y comandos sobre el perfil y mediciones."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Protocol

import structlog

from glicosmart.errors import InvalidProfile, NoActiveAccount, StorageWriteFailed
from glicosmart.forms import parse_optional_number
from glicosmart.model import (
    DEFAULT_ACCOUNT_ID,
    Account,
    Period,
    Profile,
    Reading,
    Snapshot,
    StoreRoot,
)
from glicosmart.readings import IdFactory, ReadingStore, new_reading_id

logger = structlog.get_logger(__name__)

_PROFILE_FIELDS = frozenset({"name", "age", "weight", "photo"})


class RootStorage(Protocol):
    """Persistence boundary used by the account store."""

    def load(self) -> StoreRoot: ...

    def save(self, root: StoreRoot) -> bool: ...

    def clear(self) -> bool: ...


class AccountStore:
    """In-memory model of every local account plus the active session.

    Built once at startup and handed to the presentation layer. Every
    mutating command persists the full Store Root; a failed save leaves the
    in-memory state authoritative and is retried on the next mutation.
    """

    def __init__(
        self, storage: RootStorage, *, id_factory: IdFactory = new_reading_id
    ) -> None:
        self._storage = storage
        self._id_factory = id_factory
        self._accounts: StoreRoot = storage.load()
        self._active_id: str | None = next(iter(self._accounts), None)
        self.last_save_error: StorageWriteFailed | None = None

    @property
    def active_account_id(self) -> str | None:
        return self._active_id

    @property
    def is_logged_in(self) -> bool:
        return self._active_id is not None

    @property
    def account_ids(self) -> tuple[str, ...]:
        return tuple(self._accounts)

    @property
    def profile(self) -> Profile | None:
        account = self._active_account()
        return account.profile if account else None

    @property
    def readings(self) -> tuple[Reading, ...]:
        account = self._active_account()
        return account.readings.readings if account else ()

    @property
    def latest_reading(self) -> Reading | None:
        account = self._active_account()
        return account.readings.latest if account else None

    def snapshot(self) -> Snapshot:
        """Read-only view of the active account."""
        return Snapshot(
            profile=self.profile,
            readings=self.readings,
            active_account_id=self._active_id,
        )

    # Session

    def create_account(
        self,
        name: str,
        age: object = "",
        weight: object = "",
        photo: str | None = None,
    ) -> Profile:
        """Crea (o reemplaza) la cuenta local por defecto y la activa.

        Raises:
            InvalidProfile: If name is empty or age/weight are not numeric.
        """
        account_id = DEFAULT_ACCOUNT_ID
        profile = Profile(
            name=_require_name(name),
            account_id=account_id,
            age=parse_optional_number(age, "idade"),
            weight=parse_optional_number(weight, "peso"),
            photo=photo or None,
        )
        self._accounts[account_id] = Account(
            id=account_id,
            profile=profile,
            readings=ReadingStore(id_factory=self._id_factory),
        )
        self._active_id = account_id
        logger.info("account_created", account_id=account_id)
        self._persist()
        return profile

    def set_active(self, account_id: str) -> bool:
        """Switch the session pointer; False if the account does not exist."""
        if account_id not in self._accounts:
            logger.warning("account_not_found", account_id=account_id)
            return False
        self._active_id = account_id
        return True

    def logout(self) -> None:
        self._active_id = None

    # Profile

    def update_profile(self, **fields: object) -> Profile | None:
        """Merge fields into the active profile.

        Raises:
            InvalidProfile: On unknown fields, empty name or non-numeric
                age/weight.
        """
        unknown = set(fields) - _PROFILE_FIELDS
        if unknown:
            raise InvalidProfile(f"Campos de perfil desconhecidos: {sorted(unknown)}")
        account = self._require_active("update_profile")
        if account is None:
            return None

        changes: dict[str, object] = {}
        if "name" in fields:
            changes["name"] = _require_name(fields["name"])
        if "age" in fields:
            changes["age"] = parse_optional_number(fields["age"], "idade")
        if "weight" in fields:
            changes["weight"] = parse_optional_number(fields["weight"], "peso")
        if "photo" in fields:
            photo = fields["photo"]
            changes["photo"] = str(photo) if photo else None

        account.profile = replace(account.profile, **changes)
        self._persist()
        return account.profile

    def reset_readings(self) -> None:
        """Borra mediciones y foto; conserva nombre, edad y peso."""
        account = self._require_active("reset_readings")
        if account is None:
            return
        account.readings.clear()
        account.profile = replace(account.profile, photo=None)
        logger.info("account_reset", account_id=account.id)
        self._persist()

    def wipe_all(self) -> None:
        """Delete every account, durable slot included, and log out.

        If the durable slot cannot be cleared the in-memory wipe still
        happens and the failure is kept on ``last_save_error``.
        """
        self._accounts = {}
        self._active_id = None
        if self._storage.clear():
            self.last_save_error = None
        else:
            self.last_save_error = StorageWriteFailed("Store Root not cleared")
        logger.warning("store_wiped", durable=self.last_save_error is None)

    # Readings

    def add_reading(
        self,
        value: object,
        period: Period | str = Period.RANDOM,
        notes: str = "",
        timestamp: datetime | str | None = None,
    ) -> Reading | None:
        """Add a reading to the active account.

        Raises:
            InvalidReading: If the value, period or timestamp is invalid.
        """
        account = self._require_active("add_reading")
        if account is None:
            return None
        reading = account.readings.add(value, period, notes, timestamp)
        self._persist()
        return reading

    def update_reading(self, reading_id: str, **changes: object) -> Reading | None:
        account = self._require_active("update_reading")
        if account is None:
            return None
        updated = account.readings.update(reading_id, **changes)
        if updated is not None:
            self._persist()
        return updated

    def delete_reading(self, reading_id: str) -> bool:
        account = self._require_active("delete_reading")
        if account is None:
            return False
        deleted = account.readings.delete(reading_id)
        if deleted:
            self._persist()
        return deleted

    # Internals

    def _active_account(self) -> Account | None:
        if self._active_id is None:
            return None
        return self._accounts.get(self._active_id)

    def _require_active(self, operation: str) -> Account | None:
        account = self._active_account()
        if account is None:
            # Stray calls while logged out are ignored, not surfaced.
            logger.debug(
                "no_active_account",
                operation=operation,
                error=NoActiveAccount.__name__,
            )
        return account

    def _persist(self) -> bool:
        if self._storage.save(self._accounts):
            self.last_save_error = None
            return True
        self.last_save_error = StorageWriteFailed("Store Root not persisted")
        return False


def _require_name(raw: object) -> str:
    name = str(raw or "").strip()
    if not name:
        raise InvalidProfile("O nome nao pode ficar vazio.")
    return name
