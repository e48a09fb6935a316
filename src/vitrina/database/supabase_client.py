"""
Cliente de Supabase.

Una sola conexión por proceso; los repositorios la reciben inyectada o la
toman de get_supabase_client().
"""

from functools import lru_cache
from typing import Optional

import structlog
from supabase import create_client, Client

from vitrina.config import get_settings, Settings

logger = structlog.get_logger()


class SupabaseClient:
    """Envoltorio mínimo: los repositorios sólo necesitan tablas."""

    def __init__(self, client: Client):
        self._client = client

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "SupabaseClient":
        """
        Crea la conexión con las credenciales configuradas.

        Raises:
            ValueError: Si falta la URL o la key del proyecto
        """
        settings = settings or get_settings()
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError(
                "Faltan SUPABASE_URL / SUPABASE_KEY en el entorno o en el .env"
            )

        # Con service key se saltea RLS; sin ella el listado ve sólo lo público
        key = settings.supabase_service_key or settings.supabase_key
        logger.info(
            "Conectando a Supabase",
            url=settings.supabase_url,
            service_key=bool(settings.supabase_service_key),
        )
        return cls(create_client(settings.supabase_url, key))

    @property
    def client(self) -> Client:
        return self._client

    def table(self, name: str):
        """Query builder de PostgREST para la tabla."""
        return self._client.table(name)


@lru_cache
def get_supabase_client() -> SupabaseClient:
    """Cliente compartido del proceso."""
    return SupabaseClient.from_settings()
