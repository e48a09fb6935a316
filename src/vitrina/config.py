"""
Configuración centralizada del sistema.
Carga variables de entorno y define settings globales.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py -> vitrina/ -> src/ -> raíz del proyecto (donde está el .env)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Configuración principal de la aplicación."""

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Supabase
    supabase_url: str = Field(..., description="URL del proyecto Supabase")
    supabase_key: str = Field(..., description="Anon key de Supabase")
    supabase_service_key: Optional[str] = Field(
        None, description="Service role key para operaciones admin"
    )

    # Listado
    listing_status: str = Field(
        "published", description="Estado que debe tener una propiedad para listarse"
    )
    listing_page_size: int = Field(
        12, ge=1, le=100, description="Propiedades por página del listado"
    )

    # Comparador
    compare_max_items: int = Field(
        2, ge=1, description="Máximo de propiedades seleccionables para comparar"
    )
    compare_mode: Literal["exactly_two", "up_to_two"] = Field(
        "exactly_two",
        description="'exactly_two' (error si no hay 2) o 'up_to_two' (selección parcial)",
    )
    compare_storage_path: Path = Field(
        _PROJECT_ROOT / ".vitrina" / "storage.json",
        description="Archivo JSON donde se persiste la selección de comparación",
    )
    compare_storage_key: str = Field(
        "compare_properties", description="Clave de namespace de la selección"
    )

    # Logging
    log_level: str = Field("INFO", description="Nivel de logging")


@lru_cache
def get_settings() -> Settings:
    """Obtiene la configuración cacheada."""
    return Settings()


# Constantes del sistema
DEFAULT_SORT = "newest"

SORT_OPTIONS = ["newest", "price_asc", "price_desc", "area_asc", "area_desc"]

FINISHING_TYPES = ["core_shell", "semi_finished", "fully_finished", "furnished"]

PROPERTY_STATUSES = ["draft", "pending_approval", "published", "archived"]

KNOWN_CITIES = [
    "Cairo",
    "New Cairo",
    "October",
    "New Capital",
    "North Coast",
    "Ain Sokhna",
    "Sheikh Zayed",
    "Alexandria",
]
