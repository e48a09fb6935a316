"""
Excepciones del sistema.
"""


class VitrinaError(Exception):
    """Excepción base de vitrina."""


class FetchError(VitrinaError):
    """Falló una lectura contra el backend (red, PostgREST, timeout)."""


class PropertyNotFoundError(VitrinaError):
    """El identificador no corresponde a ninguna propiedad."""

    def __init__(self, property_id: str):
        super().__init__(f"Property not found: {property_id}")
        self.property_id = property_id


class InvalidSelectionError(VitrinaError):
    """La selección de comparación no tiene la cantidad de ids requerida."""
