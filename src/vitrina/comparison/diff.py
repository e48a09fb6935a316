"""
Diff campo a campo entre dos propiedades.

Cada fila compara los valores tal como se muestran (string normalizado), sin
tolerancia numérica: 3 y 3.0 se ven igual y no se marcan, 120 y 121 sí.
"""

from dataclasses import dataclass
from typing import Any, Callable, Sequence

from vitrina.config import PROPERTY_STATUSES
from vitrina.models import PropertyRecord

PLACEHOLDER = "—"

STATUS_LABELS = {status: status.replace("_", " ").title() for status in PROPERTY_STATUSES}


def format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_price(value: Any) -> str:
    return f"{float(value):,.0f}"


def format_percent(value: Any) -> str:
    return f"{format_number(value)}%"


def format_status(value: Any) -> str:
    value = str(value)
    return STATUS_LABELS.get(value, value.replace("_", " ").title())


@dataclass(frozen=True)
class CompareField:
    """Atributo que se muestra como una fila de la tabla comparativa."""

    key: str
    label: str
    formatter: Callable[[Any], str] = format_number


COMPARED_FIELDS: tuple[CompareField, ...] = (
    CompareField("beds", "Bedrooms"),
    CompareField("baths", "Bathrooms"),
    CompareField("area", "Area (sqm)"),
    CompareField("status", "Status", format_status),
    CompareField("progress_percent", "Construction", format_percent),
    CompareField("price", "Price", format_price),
)


@dataclass(frozen=True)
class DiffRow:
    """Una fila de la tabla: etiqueta, valor de cada lado y si difieren."""

    key: str
    label: str
    values: tuple[str, str]
    is_different: bool


def display_value(record: PropertyRecord, field: CompareField) -> str:
    """Valor listo para mostrar; los faltantes se ven como PLACEHOLDER."""
    value = getattr(record, field.key, None)
    if value is None or (isinstance(value, str) and not value.strip()):
        return PLACEHOLDER
    return field.formatter(value)


def _normalize(text: str) -> str:
    return " ".join(text.split())


def compute_diff(
    left: PropertyRecord,
    right: PropertyRecord,
    fields: Sequence[CompareField] = COMPARED_FIELDS,
) -> list[DiffRow]:
    """
    Calcula una DiffRow por campo comparado.

    Es simétrica: intercambiar left y right sólo invierte los valores de
    cada fila, nunca cambia qué filas quedan marcadas.
    """
    rows = []
    for field in fields:
        a = display_value(left, field)
        b = display_value(right, field)
        rows.append(
            DiffRow(
                key=field.key,
                label=field.label,
                values=(a, b),
                is_different=_normalize(a) != _normalize(b),
            )
        )
    return rows
