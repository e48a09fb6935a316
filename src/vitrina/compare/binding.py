"""
Enlace entre el CompareStore y los controles de la interfaz.

- CompareToggle: botón "agregar a comparar" de cada tarjeta, con el flujo de
  reemplazo cuando se llega al tope.
- CompareBar: barra inferior con miniaturas, contador y acceso a comparar.
"""

from dataclasses import dataclass
from typing import Awaitable, Callable, Literal, Optional

import structlog

from vitrina.compare.store import CompareStore
from vitrina.comparison import COMPARE_SLOTS, compare_url
from vitrina.models import PropertyPreview

logger = structlog.get_logger()

ToggleResult = Literal["added", "removed", "replace_prompt", "ignored"]
PreviewFetcher = Callable[[list[str]], Awaitable[list[PropertyPreview]]]


@dataclass(frozen=True)
class ReplacePrompt:
    """Diálogo abierto cuando se quiere agregar con el set lleno."""

    new_id: str
    candidates: tuple[str, ...]

    @property
    def message(self) -> str:
        return (
            f"Compare is limited to {len(self.candidates)} properties. "
            "Would you like to replace a selection with this property?"
        )


class CompareToggle:
    """Alterna la selección de una propiedad y maneja el reemplazo."""

    def __init__(self, store: CompareStore):
        self.store = store
        self.prompt: Optional[ReplacePrompt] = None

    def toggle(self, property_id: str) -> ToggleResult:
        if self.store.is_selected(property_id):
            self.store.remove(property_id)
            return "removed"

        if self.store.add(property_id) == "limit_reached":
            self.prompt = ReplacePrompt(
                new_id=property_id,
                candidates=self.store.ids,
            )
            return "replace_prompt"
        if not self.store.is_selected(property_id):
            return "ignored"
        return "added"

    def confirm_replace(self, old_id: Optional[str] = None) -> bool:
        """
        Confirma el reemplazo pendiente.

        Args:
            old_id: Selección a reemplazar (None = la más vieja)

        Returns:
            True si la propiedad nueva quedó seleccionada
        """
        prompt = self.prompt
        if prompt is None:
            return False
        self.prompt = None

        if old_id is None:
            self.store.replace_oldest(prompt.new_id)
        else:
            self.store.replace(old_id, prompt.new_id)
        return self.store.is_selected(prompt.new_id)

    def cancel_replace(self) -> None:
        self.prompt = None


class CompareBar:
    """
    Barra de comparación.

    Se suscribe al store: cuando se quita un id, su miniatura desaparece sin
    volver a pedir nada al backend.
    """

    def __init__(self, store: CompareStore, fetch_previews: PreviewFetcher):
        self.store = store
        self._fetch_previews = fetch_previews
        self.previews: list[PropertyPreview] = []
        self.loading = False
        self.error: Optional[str] = None
        self._unsubscribe = store.subscribe(self._on_change)

    @property
    def visible(self) -> bool:
        return len(self.store) > 0

    @property
    def counter_label(self) -> str:
        return f"{len(self.store)}/{self.store.max_items} selected"

    @property
    def can_compare(self) -> bool:
        # La vista compara exactamente COMPARE_SLOTS, aunque el tope sea mayor
        return len(self.store) == COMPARE_SLOTS

    def compare_url(self) -> Optional[str]:
        if not self.can_compare:
            return None
        return compare_url(self.store.ids)

    def close(self) -> None:
        self._unsubscribe()

    def _on_change(self, ids: tuple[str, ...]) -> None:
        self.previews = [p for p in self.previews if p.id in ids]

    async def refresh(self) -> None:
        """
        Trae las miniaturas de la selección actual.

        Los ids que el backend ya no conoce se quitan del store en silencio.
        """
        ids = list(self.store.ids)
        if not ids:
            self.previews = []
            return

        self.loading = True
        self.error = None
        try:
            previews = await self._fetch_previews(ids)
        except Exception as e:
            logger.error("Error cargando miniaturas de comparación", error=str(e))
            self.error = "Failed to load compare selection"
            return
        finally:
            self.loading = False

        found = {p.id for p in previews}
        for missing in [i for i in ids if i not in found]:
            logger.info("Propiedad comparada ya no existe, se quita", property_id=missing)
            self.store.remove(missing)

        self.previews = [p for p in previews if self.store.is_selected(p.id)]
