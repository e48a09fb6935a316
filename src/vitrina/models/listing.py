"""
Página de resultados del listado.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field

from vitrina.models.property import PropertySummary


class ListingPage(BaseModel):
    """Una página del listado tal como la devuelve el backend."""

    model_config = ConfigDict(frozen=True)

    items: list[PropertySummary] = Field(default_factory=list)
    page: int = Field(1, ge=1, description="Número de página (desde 1)")
    limit: int = Field(..., ge=1, description="Tamaño de página pedido")
    total: int = Field(0, ge=0, description="Total de resultados para los filtros")

    @computed_field
    @property
    def has_next_page(self) -> bool:
        return self.page * self.limit < self.total
