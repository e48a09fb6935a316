"""
Selección de propiedades para comparar.

Provee el CompareStore (estado compartido), su persistencia local y los
controles que lo manipulan.
"""

from vitrina.compare.storage import CompareStorage, MemoryStorage, JsonFileStorage
from vitrina.compare.store import (
    CompareStore,
    MAX_COMPARE_ITEMS,
    STORAGE_KEY,
    build_compare_store,
)
from vitrina.compare.binding import CompareBar, CompareToggle, ReplacePrompt

__all__ = [
    "CompareStorage",
    "MemoryStorage",
    "JsonFileStorage",
    "CompareStore",
    "MAX_COMPARE_ITEMS",
    "STORAGE_KEY",
    "build_compare_store",
    "CompareBar",
    "CompareToggle",
    "ReplacePrompt",
]
