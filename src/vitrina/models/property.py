"""
Modelos de propiedad en el borde con el backend.

Las filas de Supabase llegan sin tipar (números como strings, columnas nulas,
columnas nuevas). Acá se validan y coercionan una sola vez, para que el resto
del sistema trabaje con registros tipados.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from vitrina.config import FINISHING_TYPES

_TEXT_DEFAULTS = {"status": "draft", "currency": "EGP"}


def to_number(value: Any) -> Optional[float]:
    """Parsea un valor numérico suelto. Devuelve None si no es parseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", ""))
    except (ValueError, TypeError):
        return None


def to_int(value: Any) -> Optional[int]:
    number = to_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


class PropertySummary(BaseModel):
    """Resumen de una propiedad tal como aparece en una tarjeta del listado."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(..., description="UUID generado por Supabase")
    title: str = Field(default="", description="Título de la publicación")
    location: Optional[str] = Field(None, description="Ubicación como texto libre")
    city: Optional[str] = Field(None, description="Ciudad")
    district: Optional[str] = Field(None, description="Zona / barrio dentro de la ciudad")

    price: Optional[float] = Field(None, description="Precio de lista")
    currency: str = Field(default="EGP", description="EGP o USD")
    beds: Optional[int] = Field(None, description="Dormitorios")
    baths: Optional[int] = Field(None, description="Baños")
    area: Optional[float] = Field(None, description="Superficie en m²")

    image_url: Optional[str] = Field(None, description="Imagen principal")
    status: str = Field(default="draft", description="Estado de publicación")
    tags: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            raise ValueError("la fila no tiene id")
        return str(value).strip()

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("status", "currency", mode="before")
    @classmethod
    def _coerce_default_text(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or str(value).strip() == "":
            return _TEXT_DEFAULTS[info.field_name]
        return str(value).strip()

    @field_validator("price", "area", mode="before")
    @classmethod
    def _coerce_float(cls, value: Any) -> Optional[float]:
        return to_number(value)

    @field_validator("beds", "baths", mode="before")
    @classmethod
    def _coerce_int(cls, value: Any) -> Optional[int]:
        return to_int(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        return [str(t).strip() for t in value if str(t).strip()]

    @classmethod
    def from_row(cls, row: dict):
        """Construye el modelo desde una fila cruda de Supabase."""
        return cls.model_validate(row)


class PropertyRecord(PropertySummary):
    """
    Detalle completo de una propiedad.

    Snapshot inmutable de una lectura: si el backend cambia, hay que
    volver a pedirlo.
    """

    description: Optional[str] = None
    finishing: Optional[str] = Field(
        None, description="core_shell, semi_finished, fully_finished, furnished"
    )
    amenities: list[str] = Field(default_factory=list)
    media: list[str] = Field(default_factory=list, description="URLs de imágenes/videos")

    progress_percent: Optional[int] = Field(None, description="Avance de obra (0-100)")
    progress_status: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("finishing", mode="before")
    @classmethod
    def _coerce_finishing(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value if value in FINISHING_TYPES else None

    @field_validator("amenities", mode="before")
    @classmethod
    def _coerce_amenities(cls, value: Any) -> list[str]:
        if value is None:
            return []
        return [str(a).strip() for a in value if str(a).strip()]

    @field_validator("media", mode="before")
    @classmethod
    def _coerce_media(cls, value: Any) -> list[str]:
        # Algunas filas traen [{"url": ..., "type": ...}] en vez de strings
        if value is None:
            return []
        urls = []
        for item in value:
            url = item.get("url") if isinstance(item, dict) else item
            if url:
                urls.append(str(url))
        return urls

    @field_validator("progress_percent", mode="before")
    @classmethod
    def _coerce_progress(cls, value: Any) -> Optional[int]:
        number = to_number(value)
        if number is None:
            return None
        return max(0, min(100, int(round(number))))


class PropertyPreview(BaseModel):
    """Mini-tarjeta usada por la barra de comparación."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    title: str = ""
    image_url: Optional[str] = None

    @field_validator("id", "title", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return "" if value is None else str(value)
