"""
Módulo de base de datos.

Provee acceso de lectura a Supabase y adaptadores async para las vistas.
"""

from vitrina.database.supabase_client import get_supabase_client, SupabaseClient
from vitrina.database.repositories import PropertyRepository, SORT_COLUMNS
from vitrina.database.fetchers import page_fetcher, record_fetcher, preview_fetcher

__all__ = [
    "get_supabase_client",
    "SupabaseClient",
    "PropertyRepository",
    "SORT_COLUMNS",
    "page_fetcher",
    "record_fetcher",
    "preview_fetcher",
]
