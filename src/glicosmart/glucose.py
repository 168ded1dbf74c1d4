"""Clasificacion de valores de glucosa en bandas de severidad."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntEnum

from glicosmart.errors import InvalidReading

HYPO_LIMIT = 70
ALERT_FROM = 145
HYPER_ABOVE = 200


class GlucoseStatus(str, Enum):
    """Status label shown to the user."""

    HYPOGLYCEMIA = "Hipoglicemia"
    NORMAL = "Normal"
    ALERT = "Alerta"
    HYPERGLYCEMIA = "Hiperglicemia"


class Severity(IntEnum):
    """Orden de gravedad; mayor es mas urgente."""

    OK = 0
    CAUTION = 1
    URGENT = 2


@dataclass(frozen=True)
class GlucoseAnalysis:
    """Result of classifying one glucose value."""

    status: GlucoseStatus
    severity: Severity
    color: str
    message: str


_ANALYSES: dict[GlucoseStatus, GlucoseAnalysis] = {
    GlucoseStatus.HYPOGLYCEMIA: GlucoseAnalysis(
        status=GlucoseStatus.HYPOGLYCEMIA,
        severity=Severity.URGENT,
        color="red",
        message=(
            "Atenção: Seu nível de açúcar está muito baixo! "
            "Coma algo doce imediatamente."
        ),
    ),
    GlucoseStatus.NORMAL: GlucoseAnalysis(
        status=GlucoseStatus.NORMAL,
        severity=Severity.OK,
        color="emerald",
        message="Ótimo! Sua glicemia está dentro do esperado.",
    ),
    GlucoseStatus.ALERT: GlucoseAnalysis(
        status=GlucoseStatus.ALERT,
        severity=Severity.CAUTION,
        color="orange",
        message="Cuidado: Nível um pouco alto. Beba água e evite doces.",
    ),
    GlucoseStatus.HYPERGLYCEMIA: GlucoseAnalysis(
        status=GlucoseStatus.HYPERGLYCEMIA,
        severity=Severity.URGENT,
        color="red",
        message="Perigo: Glicemia muito alta. Recomendado consultar um médico.",
    ),
}

# Categoria usada en el grafico de torta (baja / normal / alta).
_CHART_CATEGORY: dict[GlucoseStatus, str] = {
    GlucoseStatus.HYPOGLYCEMIA: "low",
    GlucoseStatus.NORMAL: "normal",
    GlucoseStatus.ALERT: "high",
    GlucoseStatus.HYPERGLYCEMIA: "high",
}


def glucose_status(value: object) -> GlucoseStatus:
    """Return the band for a numeric value.

    Bands partition the real line: ``< 70``, ``[70, 145)``, ``[145, 200]``
    and ``> 200``.

    Raises:
        InvalidReading: If value is not a finite real number.
    """
    number = _as_number(value)
    if number < HYPO_LIMIT:
        return GlucoseStatus.HYPOGLYCEMIA
    if number < ALERT_FROM:
        return GlucoseStatus.NORMAL
    if number <= HYPER_ABOVE:
        return GlucoseStatus.ALERT
    return GlucoseStatus.HYPERGLYCEMIA


def classify(value: object) -> GlucoseAnalysis:
    """Classify a glucose value (mg/dL) into status, severity and advice."""
    return _ANALYSES[glucose_status(value)]


def chart_category(status: GlucoseStatus) -> str:
    """Devuelve low/normal/high para el resumen grafico."""
    return _CHART_CATEGORY[status]


def _as_number(value: object) -> int | float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise InvalidReading(f"Valor de glucosa no numerico: {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidReading(f"Valor de glucosa no finito: {value!r}")
    return value
