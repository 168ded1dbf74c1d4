"""Coercion de entradas de formulario (texto) a valores tipados."""

from __future__ import annotations

import math
from datetime import date, datetime, time, tzinfo

from dateutil import parser as date_parser
from dateutil import tz

from glicosmart.errors import InvalidProfile, InvalidReading
from glicosmart.model import Period

DEFAULT_TIMEZONE = "America/Sao_Paulo"
_LOCAL_TZ = tz.gettz(DEFAULT_TIMEZONE)


def local_tz(name: str | None = None) -> tzinfo:
    """Return the configured timezone, falling back to the default one."""
    zone = tz.gettz(name) if name else None
    return zone or _LOCAL_TZ or tz.UTC


def parse_value(raw: object) -> int:
    """Parse a glucose value typed by the user.

    Accepts ints, floats and numeric strings (comma or dot decimals).
    The result is rounded to whole mg/dL.

    Raises:
        InvalidReading: If the value is missing, non-numeric or not finite.
    """
    if isinstance(raw, bool) or raw is None:
        raise InvalidReading("Informe um valor de glicemia.")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        number = raw
    else:
        text = str(raw).strip().replace(",", ".")
        if not text:
            raise InvalidReading("Informe um valor de glicemia.")
        try:
            number = float(text)
        except ValueError as exc:
            raise InvalidReading(f"Valor de glicemia invalido: {raw!r}") from exc
    if not math.isfinite(number):
        raise InvalidReading(f"Valor de glicemia invalido: {raw!r}")
    return int(math.floor(number + 0.5))


def parse_optional_number(raw: object, field_name: str) -> str:
    """Valida edad/peso: vacio o numerico; se guarda como texto."""
    if raw is None:
        return ""
    text = str(raw).strip()
    if not text:
        return ""
    try:
        number = float(text.replace(",", "."))
    except ValueError as exc:
        raise InvalidProfile(f"{field_name} deve ser numerico: {raw!r}") from exc
    if not math.isfinite(number) or number < 0:
        raise InvalidProfile(f"{field_name} invalido: {raw!r}")
    return text


def parse_period(raw: object) -> Period:
    """Map enum values (``jejum``) or names (``fasting``) to a Period."""
    if isinstance(raw, Period):
        return raw
    text = str(raw or "").strip().lower()
    if not text:
        return Period.RANDOM
    for period in Period:
        name = period.name.lower()
        if text in (period.value, name, name.replace("_", "-")):
            return period
    raise InvalidReading(f"Periodo desconhecido: {raw!r}")


def parse_timestamp(raw: object, zone: tzinfo | None = None) -> datetime:
    """Parse an ISO-8601 instant; naive values get the local timezone."""
    if isinstance(raw, datetime):
        dt = raw
    else:
        text = str(raw or "").strip()
        if not text:
            raise InvalidReading("Data/hora vazia.")
        try:
            dt = date_parser.isoparse(text)
        except ValueError as exc:
            raise InvalidReading(f"Data/hora invalida: {raw!r}") from exc
    if dt.tzinfo is None:
        return dt.replace(tzinfo=zone or local_tz())
    return dt


def combine_date_time(
    date_text: str, time_text: str, zone: tzinfo | None = None
) -> datetime:
    """Combina fecha ``YYYY-MM-DD`` y hora ``HH:MM`` en un instante local."""
    try:
        day = date.fromisoformat(date_text.strip())
        hour = time.fromisoformat(time_text.strip())
    except ValueError as exc:
        raise InvalidReading(
            f"Data/hora invalida: {date_text!r} {time_text!r}"
        ) from exc
    return datetime.combine(day, hour).replace(tzinfo=zone or local_tz())
