"""
Adaptadores async sobre el repositorio.

El cliente de Supabase es sincrónico; estos wrappers corren cada lectura en
un thread para no bloquear el event loop mientras el request está en vuelo.
"""

import asyncio

from vitrina.database.repositories import PropertyRepository
from vitrina.models import FilterState, ListingPage, PropertyPreview, PropertyRecord


def page_fetcher(repository: PropertyRepository):
    """Fetcher de páginas para el ListingFetchLoop."""

    async def fetch(filters: FilterState, page: int, limit: int) -> ListingPage:
        return await asyncio.to_thread(repository.list_properties, filters, page, limit)

    return fetch


def record_fetcher(repository: PropertyRepository):
    """Fetcher de registros completos para la ComparisonView."""

    async def fetch(ids: list[str]) -> list[PropertyRecord]:
        return await asyncio.to_thread(repository.get_by_ids, ids)

    return fetch


def preview_fetcher(repository: PropertyRepository):
    """Fetcher de miniaturas para la CompareBar."""

    async def fetch(ids: list[str]) -> list[PropertyPreview]:
        return await asyncio.to_thread(repository.get_previews, ids)

    return fetch
