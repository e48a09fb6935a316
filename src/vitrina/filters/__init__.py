"""
Filtros del listado sincronizados con la URL.
"""

from vitrina.filters.codec import (
    URL_KEYS,
    apply_to_query,
    decode,
    encode,
    to_query_string,
)

__all__ = [
    "URL_KEYS",
    "apply_to_query",
    "decode",
    "encode",
    "to_query_string",
]
