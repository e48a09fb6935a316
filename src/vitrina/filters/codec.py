"""
Codec entre FilterState y los parámetros de la URL del listado.

La URL usa claves camelCase (minPrice, sortBy, ...). Los valores por defecto
se omiten para que cada combinación de filtros tenga una única URL canónica:
decode(encode(f)) == f para todo FilterState canónico.
"""

import math
from typing import Any, Mapping, Optional, Union
from urllib.parse import parse_qs, urlencode

import structlog

from vitrina.config import DEFAULT_SORT, FINISHING_TYPES, SORT_OPTIONS
from vitrina.models import FilterState

logger = structlog.get_logger()

# campo del modelo -> clave en la URL
URL_KEYS = {
    "search": "search",
    "city": "city",
    "area": "area",
    "min_price": "minPrice",
    "max_price": "maxPrice",
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "min_area": "minArea",
    "max_area": "maxArea",
    "finishing": "finishing",
    "tags": "tags",
    "sort_by": "sortBy",
}

TEXT_FIELDS = ("search", "city", "area")
FLOAT_FIELDS = ("min_price", "max_price", "min_area", "max_area")
INT_FIELDS = ("bedrooms", "bathrooms")

QueryInput = Union[str, Mapping[str, Any]]


def _first(value: Any) -> Optional[str]:
    if isinstance(value, (list, tuple)):
        value = value[0] if value else None
    if value is None:
        return None
    return str(value)


def _normalize_query(query: QueryInput) -> dict[str, str]:
    if isinstance(query, str):
        parsed = parse_qs(query.lstrip("?"), keep_blank_values=False)
        return {k: v[0] for k, v in parsed.items() if v}
    normalized = {}
    for key, value in query.items():
        first = _first(value)
        if first is not None:
            normalized[key] = first
    return normalized


def _parse_float(raw: str) -> Optional[float]:
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


def _parse_int(raw: str) -> Optional[int]:
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 0 else None


def format_decimal(value: float) -> str:
    """Número como string decimal; los enteros van sin '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def decode(query: QueryInput) -> FilterState:
    """
    Construye un FilterState desde los parámetros de la URL.

    Las claves desconocidas se ignoran; los valores que no parsean se
    descartan (se tratan como "sin restricción").
    """
    params = _normalize_query(query)
    data: dict[str, Any] = {}

    for field, key in URL_KEYS.items():
        raw = params.get(key)
        if raw is None:
            continue

        if field in TEXT_FIELDS:
            data[field] = raw
        elif field in FLOAT_FIELDS:
            value = _parse_float(raw)
            if value is not None:
                data[field] = value
        elif field in INT_FIELDS:
            value = _parse_int(raw)
            if value is not None:
                data[field] = value
        elif field == "tags":
            data[field] = [t for t in raw.split(",") if t.strip()]
        elif field == "finishing":
            if raw in FINISHING_TYPES:
                data[field] = raw
        elif field == "sort_by":
            data[field] = raw if raw in SORT_OPTIONS else DEFAULT_SORT

        if field in data:
            continue
        logger.debug("Parámetro de filtro inválido, se ignora", key=key, value=raw)

    return FilterState.model_validate(data)


def encode(filters: FilterState) -> dict[str, str]:
    """Serializa un FilterState a parámetros de URL (forma canónica)."""
    params: dict[str, str] = {}
    for field, key in URL_KEYS.items():
        value = getattr(filters, field)
        if value is None or value == ():
            continue
        if field == "sort_by":
            if value != DEFAULT_SORT:
                params[key] = value
        elif field == "tags":
            params[key] = ",".join(value)
        elif field in FLOAT_FIELDS:
            params[key] = format_decimal(value)
        else:
            params[key] = str(value)
    return params


def to_query_string(filters: FilterState) -> str:
    return urlencode(encode(filters), safe=",")


def apply_to_query(query: QueryInput, filters: FilterState) -> dict[str, str]:
    """
    Reescribe los filtros en una query existente conservando el resto.

    Es la operación de "replace" sobre la URL: parámetros ajenos al listado
    (campañas, tracking) se mantienen; los de filtros se reemplazan.
    """
    params = {
        k: v
        for k, v in _normalize_query(query).items()
        if k not in URL_KEYS.values()
    }
    params.update(encode(filters))
    return params
