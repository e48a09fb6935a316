"""
Repositorios de lectura sobre Supabase.

El núcleo sólo consume dos formas de lectura: "listar propiedades con filtros
y paginación" y "obtener propiedad por id". Las escrituras viven en otros
servicios.
"""

from typing import Iterable, Optional

import structlog
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from vitrina.config import get_settings
from vitrina.database.supabase_client import get_supabase_client, SupabaseClient
from vitrina.errors import FetchError, PropertyNotFoundError
from vitrina.models import (
    FilterState,
    ListingPage,
    PropertyPreview,
    PropertyRecord,
    PropertySummary,
)

logger = structlog.get_logger()

# sort_by -> (columna, descendente)
SORT_COLUMNS = {
    "newest": ("created_at", True),
    "price_asc": ("price", False),
    "price_desc": ("price", True),
    "area_asc": ("area", False),
    "area_desc": ("area", True),
}

# Caracteres con significado en la sintaxis de filtros de PostgREST
_RESERVED_CHARS = str.maketrans("", "", ",()%*\\")


def _escape_pattern(term: str) -> str:
    return term.translate(_RESERVED_CHARS).strip()


class BaseRepository:
    """Clase base para repositorios."""

    def __init__(self, client: Optional[SupabaseClient] = None):
        self._client = client or get_supabase_client()

    @property
    def client(self) -> SupabaseClient:
        return self._client

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        reraise=True,
    )
    def _execute(self, query):
        return query.execute()

    def _run(self, query, action: str, **context):
        """Ejecuta la query con reintentos y traduce fallas a FetchError."""
        try:
            return self._execute(query)
        except Exception as e:
            logger.error(
                "Error consultando Supabase",
                action=action,
                error=str(e),
                **context,
            )
            raise FetchError(f"{action} failed: {e}") from e


class PropertyRepository(BaseRepository):
    """Repositorio de propiedades (tabla properties)."""

    TABLE = "properties"
    PREVIEW_COLUMNS = "id, title, image_url"

    def __init__(
        self,
        client: Optional[SupabaseClient] = None,
        listing_status: Optional[str] = None,
    ):
        super().__init__(client)
        self.listing_status = listing_status or get_settings().listing_status

    def list_properties(
        self,
        filters: FilterState,
        page: int = 1,
        limit: int = 12,
    ) -> ListingPage:
        """
        Lista propiedades publicadas que cumplen los filtros.

        Args:
            filters: Criterios de búsqueda y orden
            page: Página pedida (desde 1)
            limit: Tamaño de página

        Returns:
            ListingPage con los items y el total exacto
        """
        if page < 1 or limit < 1:
            raise ValueError("page y limit deben ser >= 1")

        query = (
            self.client.table(self.TABLE)
            .select("*", count="exact")
            .eq("status", self.listing_status)
        )
        query = self._apply_filters(query, filters)

        column, desc = SORT_COLUMNS[filters.sort_by]
        start = (page - 1) * limit
        # id como desempate para que las páginas no se solapen entre requests
        query = (
            query.order(column, desc=desc)
            .order("id")
            .range(start, start + limit - 1)
        )

        response = self._run(query, "list_properties", page=page, limit=limit)
        items = self._parse_rows(response.data, PropertySummary)

        total = response.count
        if total is None:
            total = start + len(items)

        logger.debug(
            "Página de propiedades obtenida",
            page=page,
            items=len(items),
            total=total,
            filters=filters.active_filter_count,
        )
        return ListingPage(items=items, page=page, limit=limit, total=total)

    def _apply_filters(self, query, filters: FilterState):
        """Traduce un FilterState a filtros de PostgREST."""
        if filters.search:
            term = _escape_pattern(filters.search)
            if term:
                query = query.or_(
                    f"title.ilike.%{term}%,"
                    f"description.ilike.%{term}%,"
                    f"location.ilike.%{term}%"
                )
        for place in (filters.city, filters.area):
            if place:
                term = _escape_pattern(place)
                if term:
                    query = query.ilike("location", f"%{term}%")

        if filters.min_price is not None:
            query = query.gte("price", filters.min_price)
        if filters.max_price is not None:
            query = query.lte("price", filters.max_price)
        if filters.bedrooms is not None:
            query = query.gte("beds", filters.bedrooms)
        if filters.bathrooms is not None:
            query = query.gte("baths", filters.bathrooms)
        if filters.min_area is not None:
            query = query.gte("area", filters.min_area)
        if filters.max_area is not None:
            query = query.lte("area", filters.max_area)

        if filters.finishing:
            query = query.eq("finishing", filters.finishing)
        if filters.tags:
            query = query.contains("tags", list(filters.tags))

        return query

    def get_by_id(self, property_id: str) -> Optional[PropertyRecord]:
        """Obtiene una propiedad por su UUID."""
        if not property_id:
            return None
        query = (
            self.client.table(self.TABLE)
            .select("*")
            .eq("id", property_id)
            .limit(1)
        )
        response = self._run(query, "get_by_id", property_id=property_id)
        records = self._parse_rows(response.data, PropertyRecord)
        return records[0] if records else None

    def require(self, property_id: str) -> PropertyRecord:
        """
        Como get_by_id pero falla si la propiedad no existe.

        Raises:
            PropertyNotFoundError: Si el id no corresponde a ninguna propiedad
        """
        record = self.get_by_id(property_id)
        if record is None:
            raise PropertyNotFoundError(property_id)
        return record

    def get_by_ids(self, property_ids: Iterable[str]) -> list[PropertyRecord]:
        """
        Obtiene varias propiedades por id.

        Returns:
            Las encontradas, en el orden pedido (las inexistentes se omiten)
        """
        ids = [i for i in dict.fromkeys(property_ids) if i]
        if not ids:
            return []
        query = self.client.table(self.TABLE).select("*").in_("id", ids)
        response = self._run(query, "get_by_ids", count=len(ids))
        by_id = {r.id: r for r in self._parse_rows(response.data, PropertyRecord)}
        return [by_id[i] for i in ids if i in by_id]

    def get_previews(self, property_ids: Iterable[str]) -> list[PropertyPreview]:
        """Obtiene id, título e imagen para la barra de comparación."""
        ids = [i for i in dict.fromkeys(property_ids) if i]
        if not ids:
            return []
        query = (
            self.client.table(self.TABLE)
            .select(self.PREVIEW_COLUMNS)
            .in_("id", ids)
        )
        response = self._run(query, "get_previews", count=len(ids))
        by_id = {p.id: p for p in self._parse_rows(response.data, PropertyPreview)}
        return [by_id[i] for i in ids if i in by_id]

    def _parse_rows(self, rows: Optional[list], model):
        """Valida filas crudas; las que no se pueden tipar se descartan."""
        parsed = []
        for row in rows or []:
            try:
                parsed.append(model.model_validate(row))
            except ValidationError as e:
                logger.warning(
                    "Fila de propiedad inválida, se descarta",
                    row_id=(row or {}).get("id") if isinstance(row, dict) else None,
                    error=str(e),
                )
        return parsed
