"""Modelos tipados para perfil, mediciones y cuentas."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from glicosmart.readings import ReadingStore

DEFAULT_ACCOUNT_ID = "default_user"


class Period(str, Enum):
    """Momento del dia en que se tomo la medicion."""

    FASTING = "jejum"
    POST_LUNCH = "pos-almoco"
    EVENING = "noite"
    RANDOM = "random"

    @property
    def label(self) -> str:
        return _PERIOD_LABELS[self]


_PERIOD_LABELS: dict[Period, str] = {
    Period.FASTING: "Jejum",
    Period.POST_LUNCH: "Pós-Almoço",
    Period.EVENING: "Noite",
    Period.RANDOM: "Aleatório",
}


@dataclass(frozen=True)
class Profile:
    """Local user profile."""

    name: str
    account_id: str = DEFAULT_ACCOUNT_ID
    age: str = ""
    weight: str = ""
    photo: str | None = None

    @property
    def weight_kg(self) -> float | None:
        """Peso como numero, None si no esta cargado."""
        try:
            return float(self.weight.replace(",", "."))
        except ValueError:
            return None


@dataclass(frozen=True)
class Reading:
    """One glucose measurement."""

    id: str
    value: int
    period: Period
    timestamp: datetime
    notes: str = ""


@dataclass
class Account:
    """Perfil mas historial de mediciones; unidad de persistencia."""

    id: str
    profile: Profile
    readings: ReadingStore


# Mapping account id -> Account, persisted as a whole.
StoreRoot = dict[str, Account]


@dataclass(frozen=True)
class Snapshot:
    """Read-only view handed to the presentation layer."""

    profile: Profile | None
    readings: tuple[Reading, ...] = field(default_factory=tuple)
    active_account_id: str | None = None
