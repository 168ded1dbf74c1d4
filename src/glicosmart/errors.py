"""Jerarquia de errores del nucleo."""

from __future__ import annotations


class GlicoSmartError(Exception):
    """Base error for the application core."""


class InvalidReading(GlicoSmartError, ValueError):
    """Valor de glucosa ausente o no numerico."""


class InvalidProfile(GlicoSmartError, ValueError):
    """Nombre vacio, edad/peso no numericos o campo desconocido."""


class NoActiveAccount(GlicoSmartError):
    """Mutating call without a logged-in account."""


class StorageReadCorrupt(GlicoSmartError):
    """Persisted JSON could not be decoded."""


class StorageWriteFailed(GlicoSmartError):
    """Store Root could not be serialized or written."""
