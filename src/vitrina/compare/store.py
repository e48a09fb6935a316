"""
Compare Store.

Mantiene el ComparisonSet: conjunto ordenado y acotado de ids de propiedades
elegidas para comparar. Es la única pieza de estado mutable compartida entre
vistas; todas leen la misma instancia y mutan sólo a través de sus métodos.
"""

from typing import Callable, Literal, Optional

import structlog

from vitrina.compare.storage import CompareStorage, JsonFileStorage
from vitrina.config import Settings, get_settings

logger = structlog.get_logger()

MAX_COMPARE_ITEMS = 2
STORAGE_KEY = "compare_properties"

AddResult = Literal["added", "limit_reached"]
Listener = Callable[[tuple[str, ...]], None]


def _clean_id(property_id) -> Optional[str]:
    if property_id is None:
        return None
    cleaned = str(property_id).strip()
    return cleaned or None


class CompareStore:
    """
    Conjunto ordenado de ids con tope configurable.

    Invariantes:
    - sin duplicados
    - orden de inserción preservado (es el orden de las columnas al comparar)
    - nunca supera max_items

    Todas las operaciones son totales: ids inválidos son no-ops y las fallas
    de persistencia o de listeners se loguean sin propagarse.
    """

    def __init__(
        self,
        max_items: int = MAX_COMPARE_ITEMS,
        storage: Optional[CompareStorage] = None,
        storage_key: str = STORAGE_KEY,
    ):
        if max_items < 1:
            raise ValueError("max_items debe ser >= 1")
        self.max_items = max_items
        self._storage = storage
        self._storage_key = storage_key
        self._listeners: list[Listener] = []
        self._ids: tuple[str, ...] = self._load()

    # --- Consultas ---

    @property
    def ids(self) -> tuple[str, ...]:
        return self._ids

    @property
    def is_full(self) -> bool:
        return len(self._ids) >= self.max_items

    def is_selected(self, property_id: str) -> bool:
        return _clean_id(property_id) in self._ids

    def __contains__(self, property_id) -> bool:
        return self.is_selected(property_id)

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(self._ids)

    # --- Mutaciones ---

    def add(self, property_id: str) -> AddResult:
        """
        Agrega un id al final.

        Returns:
            'added' si quedó seleccionado (incluye el caso ya presente),
            'limit_reached' si el set está lleno; en ese caso no se modifica
            y el llamador debe ofrecer reemplazar una selección.
        """
        pid = _clean_id(property_id)
        if pid is None or pid in self._ids:
            return "added"
        if self.is_full:
            logger.debug("Límite de comparación alcanzado", property_id=pid)
            return "limit_reached"
        self._commit(self._ids + (pid,))
        return "added"

    def remove(self, property_id: str) -> None:
        pid = _clean_id(property_id)
        if pid not in self._ids:
            return
        self._commit(tuple(i for i in self._ids if i != pid))

    def clear(self) -> None:
        self._commit(())

    def replace(self, old_id: str, new_id: str) -> None:
        """Sustituye old_id por new_id en la misma posición."""
        old = _clean_id(old_id)
        new = _clean_id(new_id)
        if old is None or new is None or old not in self._ids or new in self._ids:
            return
        self._commit(tuple(new if i == old else i for i in self._ids))

    def replace_oldest(self, new_id: str) -> None:
        """Descarta la selección más vieja y agrega new_id al final."""
        new = _clean_id(new_id)
        if new is None or new in self._ids:
            return
        if not self.is_full:
            self._commit(self._ids + (new,))
            return
        self._commit(self._ids[1:] + (new,))

    # --- Observadores ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Registra un listener que recibe los ids tras cada mutación efectiva.

        Returns:
            Función para desuscribirse
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # --- Internos ---

    def _commit(self, new_ids: tuple[str, ...]) -> None:
        if new_ids == self._ids:
            return
        self._ids = new_ids
        self._persist()
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self._ids)
            except Exception as e:
                logger.error("Error en listener de comparación", error=str(e))

    def _persist(self) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save(self._storage_key, list(self._ids))
        except Exception as e:
            logger.warning("No se pudo persistir la selección", error=str(e))

    def _load(self) -> tuple[str, ...]:
        if self._storage is None:
            return ()
        try:
            stored = self._storage.load(self._storage_key)
        except Exception as e:
            logger.warning("Selección persistida ilegible, se ignora", error=str(e))
            return ()
        if not stored:
            return ()

        ids: list[str] = []
        for raw in stored:
            pid = _clean_id(raw)
            if pid and pid not in ids:
                ids.append(pid)
        if len(ids) > self.max_items:
            logger.info(
                "Selección persistida excede el tope, se recorta",
                stored=len(ids),
                max_items=self.max_items,
            )
            ids = ids[: self.max_items]
        return tuple(ids)


def build_compare_store(settings: Optional[Settings] = None) -> CompareStore:
    """Crea el store de la app con persistencia en el archivo configurado."""
    settings = settings or get_settings()
    return CompareStore(
        max_items=settings.compare_max_items,
        storage=JsonFileStorage(settings.compare_storage_path),
        storage_key=settings.compare_storage_key,
    )
