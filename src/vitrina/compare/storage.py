"""
Persistencia local de la selección de comparación.

Equivalente al almacenamiento del dispositivo: un documento JSON con claves
namespaced, cada una con una lista ordenada de ids.
"""

import json
from pathlib import Path
from typing import Optional, Protocol

import structlog

logger = structlog.get_logger()


class CompareStorage(Protocol):
    """Interfaz mínima que necesita el CompareStore."""

    def load(self, key: str) -> Optional[list[str]]:
        ...

    def save(self, key: str, ids: list[str]) -> None:
        ...


class MemoryStorage:
    """Storage en memoria (tests y procesos sin disco)."""

    def __init__(self, initial: Optional[dict[str, list[str]]] = None):
        self._data: dict[str, list[str]] = dict(initial or {})

    def load(self, key: str) -> Optional[list[str]]:
        value = self._data.get(key)
        return list(value) if value is not None else None

    def save(self, key: str, ids: list[str]) -> None:
        self._data[key] = list(ids)


class JsonFileStorage:
    """Storage respaldado por un archivo JSON."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read_all(self) -> dict:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Formato inválido en {self.path}")
        return data

    def load(self, key: str) -> Optional[list[str]]:
        value = self._read_all().get(key)
        if value is None:
            return None
        if not isinstance(value, list):
            raise ValueError(f"La clave {key} no contiene una lista")
        return [str(v) for v in value]

    def save(self, key: str, ids: list[str]) -> None:
        try:
            data = self._read_all()
        except (ValueError, json.JSONDecodeError):
            logger.warning("Storage corrupto, se reescribe", path=str(self.path))
            data = {}
        data[key] = list(ids)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
