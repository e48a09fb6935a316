"""
Listing Fetch Loop.

Carga incremental del listado (scroll infinito) dirigida por el FilterState.

Estados:
    idle -> loading -> loaded            (cambio de filtros, página 1)
    loaded -> loading_more -> loaded     (sentinel visible y quedan páginas)
    loaded (sin más páginas) = exhausted
    cualquier falla -> error             (retry vuelve a pedir la misma página)

Concurrencia: a lo sumo un request en vuelo por generación. Cada cambio de
filtros abre una generación nueva; los resultados de una generación vieja se
descartan al llegar en vez de cancelar el request.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

import structlog

from vitrina.models import FilterState, ListingPage, PropertySummary

logger = structlog.get_logger()

PageFetcher = Callable[[FilterState, int, int], Awaitable[ListingPage]]


class FetchState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADING_MORE = "loading_more"
    LOADED = "loaded"
    EXHAUSTED = "exhausted"
    ERROR = "error"


class PageStatus(str, Enum):
    APPLIED = "applied"  # la página se mergeó
    STALE = "stale"  # llegó para filtros que ya no están activos
    SKIPPED = "skipped"  # no correspondía pedir nada
    FAILED = "failed"  # el fetch falló; el loop quedó en error


@dataclass(frozen=True)
class PageResult:
    """Resultado de una operación del loop."""

    status: PageStatus
    page: int = 0
    added: int = 0
    error: Optional[str] = None


class ListingFetchLoop:
    """Acumula páginas del listado sin duplicados para un FilterState."""

    def __init__(self, fetch_page: PageFetcher, page_size: int = 12):
        if page_size < 1:
            raise ValueError("page_size debe ser >= 1")
        self._fetch_page = fetch_page
        self.page_size = page_size

        self.filters: Optional[FilterState] = None
        self.state = FetchState.IDLE
        self.page = 0
        self.total = 0
        self.has_next_page = False
        self.error: Optional[str] = None

        self._items: list[PropertySummary] = []
        self._seen_ids: set[str] = set()
        self._failed_page: Optional[int] = None
        self._generation = 0
        # Generación dueña del request en vuelo (None = nada en vuelo)
        self._in_flight: Optional[int] = None

    @property
    def items(self) -> tuple[PropertySummary, ...]:
        return tuple(self._items)

    @property
    def in_flight(self) -> bool:
        return self._in_flight == self._generation

    @property
    def is_loading(self) -> bool:
        return self.state is FetchState.LOADING

    @property
    def is_fetching_next_page(self) -> bool:
        return self.state is FetchState.LOADING_MORE

    async def apply_filters(self, filters: FilterState) -> PageResult:
        """
        Activa nuevos filtros: vacía lo acumulado y carga la página 1.

        Con los mismos filtros ya activos no hace nada.
        """
        if self.state is not FetchState.IDLE and filters == self.filters:
            return PageResult(PageStatus.SKIPPED)

        self._generation += 1
        self.filters = filters
        self._items = []
        self._seen_ids = set()
        self.page = 0
        self.total = 0
        self.has_next_page = False
        self.error = None
        self._failed_page = None

        logger.debug(
            "Filtros del listado cambiaron",
            generation=self._generation,
            active_filters=filters.active_filter_count,
            sort_by=filters.sort_by,
        )
        return await self._fetch(1)

    async def load_more(self) -> PageResult:
        """Pide la página siguiente si hay y no hay otra en vuelo."""
        if self.state is not FetchState.LOADED or self.in_flight or not self.has_next_page:
            return PageResult(PageStatus.SKIPPED)
        return await self._fetch(self.page + 1)

    async def on_sentinel_visible(self) -> PageResult:
        """El sentinel del final de la lista entró en pantalla."""
        return await self.load_more()

    async def retry(self) -> PageResult:
        """Reintenta la página que falló."""
        if self.state is not FetchState.ERROR or self._failed_page is None or self.in_flight:
            return PageResult(PageStatus.SKIPPED)
        return await self._fetch(self._failed_page)

    async def _fetch(self, page: int) -> PageResult:
        token = self._generation
        filters = self.filters
        self._in_flight = token
        self.state = FetchState.LOADING if page == 1 else FetchState.LOADING_MORE
        self.error = None

        try:
            result = await self._fetch_page(filters, page, self.page_size)
        except Exception as e:
            if token != self._generation:
                logger.debug("Error de generación vieja descartado", page=page)
                return PageResult(PageStatus.STALE, page=page)
            self.state = FetchState.ERROR
            self.error = str(e) or e.__class__.__name__
            self._failed_page = page
            logger.warning("Error cargando página del listado", page=page, error=self.error)
            return PageResult(PageStatus.FAILED, page=page, error=self.error)
        else:
            if token != self._generation:
                logger.debug("Página de filtros viejos descartada", page=page)
                return PageResult(PageStatus.STALE, page=page)
            added = self._merge(result.items)
            self.page = page
            self.total = result.total
            self.has_next_page = result.has_next_page and bool(result.items)
            self._failed_page = None
            self.state = FetchState.LOADED if self.has_next_page else FetchState.EXHAUSTED
            logger.debug(
                "Página del listado aplicada",
                page=page,
                added=added,
                accumulated=len(self._items),
                total=self.total,
            )
            return PageResult(PageStatus.APPLIED, page=page, added=added)
        finally:
            if self._in_flight == token:
                self._in_flight = None

    def _merge(self, items: list[PropertySummary]) -> int:
        """Agrega los items nuevos; los ids ya acumulados se descartan."""
        added = 0
        for item in items:
            if item.id in self._seen_ids:
                continue
            self._seen_ids.add(item.id)
            self._items.append(item)
            added += 1
        return added
