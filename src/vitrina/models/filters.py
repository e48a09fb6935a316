"""
Modelo de FilterState.

Representa todos los criterios activos de búsqueda, filtrado y orden del
listado. Cada campo es opcional por separado: ausencia = sin restricción.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vitrina.config import DEFAULT_SORT

SortOption = Literal["newest", "price_asc", "price_desc", "area_asc", "area_desc"]
FinishingType = Literal["core_shell", "semi_finished", "fully_finished", "furnished"]


class FilterState(BaseModel):
    """
    Filtros del listado de propiedades.

    Es inmutable: cada cambio produce una instancia nueva. Se canonicaliza al
    construirse (textos sin espacios, vacíos -> None, tags sin duplicados) para
    que la ida y vuelta contra la URL sea exacta.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Texto
    search: Optional[str] = Field(None, description="Texto libre (título, descripción, ubicación)")
    city: Optional[str] = Field(None, description="Ciudad")
    area: Optional[str] = Field(None, description="Zona dentro de la ciudad")

    # Rangos
    min_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    max_price: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    bedrooms: Optional[int] = Field(None, ge=0, description="Mínimo de dormitorios")
    bathrooms: Optional[int] = Field(None, ge=0, description="Mínimo de baños")
    min_area: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="m² mínimos")
    max_area: Optional[float] = Field(None, ge=0, allow_inf_nan=False, description="m² máximos")

    # Categóricos
    finishing: Optional[FinishingType] = None
    tags: tuple[str, ...] = Field(default_factory=tuple)

    # Orden
    sort_by: SortOption = DEFAULT_SORT

    @field_validator("search", "city", "area", mode="before")
    @classmethod
    def _strip_text(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @field_validator("tags", mode="before")
    @classmethod
    def _canonical_tags(cls, value: Any) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        tags: list[str] = []
        for raw in value:
            # Una coma dentro de un tag rompería la serialización en la URL
            for part in str(raw).split(","):
                tag = part.strip()
                if tag and tag not in tags:
                    tags.append(tag)
        return tuple(tags)

    @property
    def signature(self) -> str:
        """Identidad estable de estos filtros (token de guarda del listado)."""
        return self.model_dump_json()

    @property
    def active_filter_count(self) -> int:
        """Cantidad de filtros activos, sin contar el orden."""
        count = 0
        for name, value in self:
            if name == "sort_by":
                continue
            if value is None or value == ():
                continue
            count += 1
        return count

    @property
    def has_active_filters(self) -> bool:
        return self.active_filter_count > 0

    def with_changes(self, **changes: Any) -> "FilterState":
        """Devuelve una copia validada con los campos indicados cambiados."""
        data = self.model_dump()
        data.update(changes)
        return FilterState.model_validate(data)

    def without(self, field: str) -> "FilterState":
        """Devuelve una copia sin el filtro indicado."""
        if field not in FilterState.model_fields:
            raise KeyError(field)
        if field == "sort_by":
            return self.with_changes(sort_by=DEFAULT_SORT)
        if field == "tags":
            return self.with_changes(tags=())
        return self.with_changes(**{field: None})

    def cleared(self) -> "FilterState":
        return FilterState()
