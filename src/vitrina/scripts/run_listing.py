"""
Script para recorrer el listado de propiedades desde la terminal.

Uso:
    python -m vitrina.scripts.run_listing --query "city=Cairo&sortBy=price_asc"
    python -m vitrina.scripts.run_listing --query "?bedrooms=3&tags=pool,garden" --pages 3
    python -m vitrina.scripts.run_listing --similar-to <property-id>
"""

import argparse
import asyncio
import logging
import sys

import structlog

from vitrina.comparison.diff import format_number
from vitrina.config import get_settings, KNOWN_CITIES
from vitrina.database import PropertyRepository, page_fetcher
from vitrina.errors import PropertyNotFoundError
from vitrina.filters import decode, to_query_string
from vitrina.listing import FetchState, ListingFetchLoop, PageStatus
from vitrina.matching import SimilarListingsFinder

# Configurar logging
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(message)s",
    force=True,
)

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def _shown(value) -> str:
    return "—" if value is None else format_number(value)


def format_card(index: int, item) -> str:
    """Línea de una tarjeta del listado; 0 es un valor real, sólo None es faltante."""
    price = f"{item.price:,.0f} {item.currency}" if item.price is not None else "—"
    return (
        f"{index:>3}. {item.title} | {item.location or '—'} | {price} | "
        f"{_shown(item.beds)} bd / {_shown(item.baths)} ba | {_shown(item.area)} m²"
    )


async def run_listing(query: str, pages: int, page_size: int) -> int:
    """
    Recorre hasta `pages` páginas del listado para los filtros de la query.

    Returns:
        Código de salida (0 ok, 1 si el listado terminó en error)
    """
    filters = decode(query)
    if filters.city and filters.city not in KNOWN_CITIES:
        logger.warning(f"Ciudad no reconocida: {filters.city}")

    logger.info(
        "Iniciando listado",
        query=to_query_string(filters) or "(sin filtros)",
        pages=pages,
        page_size=page_size,
    )

    loop = ListingFetchLoop(page_fetcher(PropertyRepository()), page_size=page_size)
    result = await loop.apply_filters(filters)

    while result.status is PageStatus.APPLIED and loop.page < pages:
        result = await loop.on_sentinel_visible()
        if result.status is PageStatus.SKIPPED:
            break

    if loop.state is FetchState.ERROR:
        # Un reintento manual, igual que el botón "reintentar" de la vista
        logger.info("Reintentando página", page=result.page)
        await loop.retry()

    for index, item in enumerate(loop.items, start=1):
        print(format_card(index, item))

    logger.info(
        "Listado completado",
        state=loop.state.value,
        shown=len(loop.items),
        total=loop.total,
        pages_loaded=loop.page,
    )
    return 1 if loop.state is FetchState.ERROR else 0


def run_similar(property_id: str, limit: int) -> int:
    repo = PropertyRepository()
    try:
        reference = repo.require(property_id)
    except PropertyNotFoundError as e:
        logger.error("Propiedad no encontrada", property_id=e.property_id)
        return 1

    matches = SimilarListingsFinder(repo).find(reference, limit=limit)
    print(f"Similares a: {reference.title}")
    for index, match in enumerate(matches, start=1):
        print(f"{index:>3}. [{match.score:5.1f}] {match.listing.title} ({match.listing.id})")
    return 0


def main():
    """Entry point del script."""
    parser = argparse.ArgumentParser(description="Listado de propiedades con filtros")
    parser.add_argument(
        "--query",
        type=str,
        default="",
        help="Query string de filtros (ej: city=Cairo&minPrice=1000000&sortBy=price_asc)",
    )
    parser.add_argument(
        "--pages",
        type=int,
        default=1,
        help="Máximo de páginas a cargar",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=settings.listing_page_size,
        help="Propiedades por página",
    )
    parser.add_argument(
        "--similar-to",
        type=str,
        default=None,
        help="Muestra propiedades similares al id indicado en vez del listado",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=4,
        help="Cantidad de similares a mostrar",
    )

    args = parser.parse_args()

    try:
        if args.similar_to:
            sys.exit(run_similar(args.similar_to, args.limit))
        sys.exit(asyncio.run(run_listing(args.query, args.pages, args.page_size)))
    except KeyboardInterrupt:
        logger.info("Listado interrumpido por usuario")
        sys.exit(130)
    except Exception as e:
        logger.error("Error fatal en listado", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
