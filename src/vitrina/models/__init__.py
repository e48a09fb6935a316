"""
Modelos de datos del sistema.

- PropertySummary / PropertyRecord: filas del backend ya tipadas
- FilterState: criterios del listado
- ListingPage: una página de resultados
"""

from vitrina.models.property import PropertySummary, PropertyRecord, PropertyPreview
from vitrina.models.filters import FilterState, SortOption, FinishingType
from vitrina.models.listing import ListingPage

__all__ = [
    # Propiedades
    "PropertySummary",
    "PropertyRecord",
    "PropertyPreview",
    # Listado
    "FilterState",
    "SortOption",
    "FinishingType",
    "ListingPage",
]
