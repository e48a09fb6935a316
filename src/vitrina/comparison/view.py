"""
Vista de comparación.

Recibe ids (del ComparisonSet o del parámetro ?ids= de la URL), trae los
registros completos y arma la tabla comparativa.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Iterable, Optional, Union
from urllib.parse import urlencode

import structlog

from vitrina.comparison.diff import DiffRow, compute_diff
from vitrina.config import get_settings
from vitrina.errors import InvalidSelectionError
from vitrina.models import PropertyRecord

logger = structlog.get_logger()

COMPARE_SLOTS = 2
COMPARE_PATH = "/compare"

RecordFetcher = Callable[[list[str]], Awaitable[list[PropertyRecord]]]


class CompareMode(str, Enum):
    """
    Cuánta selección exige la vista.

    EXACTLY_TWO: cualquier cantidad distinta de 2 es un error guiado.
    UP_TO_TWO: 0 o 1 ids es un estado parcial válido (slots vacíos).
    """

    EXACTLY_TWO = "exactly_two"
    UP_TO_TWO = "up_to_two"


class ComparisonStatus(str, Enum):
    READY = "ready"
    PARTIAL = "partial"
    INVALID_SELECTION = "invalid_selection"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class ComparisonResult:
    """Estado completo de la vista luego de una carga."""

    status: ComparisonStatus
    records: tuple[PropertyRecord, ...] = ()
    rows: tuple[DiffRow, ...] = ()
    message: Optional[str] = None
    missing_ids: tuple[str, ...] = ()
    empty_slots: int = 0

    @property
    def ok(self) -> bool:
        return self.status in (ComparisonStatus.READY, ComparisonStatus.PARTIAL)

    @property
    def different_labels(self) -> list[str]:
        return [row.label for row in self.rows if row.is_different]


def parse_ids(param: Optional[str]) -> list[str]:
    """Parsea el parámetro ids=a,b. No deduplica: los repetidos se validan después."""
    if not param:
        return []
    return [part.strip() for part in param.split(",") if part.strip()]


def compare_url(ids: Iterable[str]) -> str:
    """Arma la URL de la página de comparación para los ids dados."""
    return f"{COMPARE_PATH}?{urlencode({'ids': ','.join(ids)}, safe=',')}"


def require_pair(ids: Iterable[str]) -> tuple[str, str]:
    """
    Valida una selección de exactamente dos ids distintos.

    Raises:
        InvalidSelectionError: Si la selección no es un par válido
    """
    ids = list(ids)
    if len(ids) != COMPARE_SLOTS:
        raise InvalidSelectionError(
            f"Please select exactly {COMPARE_SLOTS} properties to compare"
        )
    if ids[0] == ids[1]:
        raise InvalidSelectionError("Please select two different properties to compare")
    return ids[0], ids[1]


class ComparisonView:
    """
    Carga y diff de dos propiedades.

    Las fallas del backend no se propagan: quedan en el ComparisonResult
    como estado de error con un mensaje para el usuario.
    """

    def __init__(
        self,
        fetch_records: RecordFetcher,
        mode: Optional[Union[CompareMode, str]] = None,
    ):
        self._fetch_records = fetch_records
        if mode is None:
            mode = get_settings().compare_mode
        self.mode = CompareMode(mode)

    def _validate(self, ids: list[str]) -> Optional[ComparisonResult]:
        if len(set(ids)) != len(ids):
            message = "Please select two different properties to compare"
        elif self.mode is CompareMode.EXACTLY_TWO and len(ids) != COMPARE_SLOTS:
            message = f"Please select exactly {COMPARE_SLOTS} properties to compare"
        elif len(ids) > COMPARE_SLOTS:
            message = f"You can compare up to {COMPARE_SLOTS} properties"
        else:
            return None
        return ComparisonResult(
            status=ComparisonStatus.INVALID_SELECTION,
            message=message,
            empty_slots=max(0, COMPARE_SLOTS - len(set(ids))),
        )

    async def load(self, ids: Union[str, Iterable[str], None]) -> ComparisonResult:
        """
        Trae los registros y calcula las filas de diferencias.

        Args:
            ids: Lista de ids o el valor crudo del parámetro ?ids=

        Returns:
            ComparisonResult con el estado resultante
        """
        if ids is None or isinstance(ids, str):
            ids = parse_ids(ids)
        else:
            ids = [str(i).strip() for i in ids if str(i).strip()]

        invalid = self._validate(ids)
        if invalid is not None:
            logger.info(
                "Selección de comparación inválida",
                ids=ids,
                mode=self.mode.value,
            )
            return invalid

        if not ids:
            return ComparisonResult(
                status=ComparisonStatus.PARTIAL, empty_slots=COMPARE_SLOTS
            )

        try:
            fetched = await self._fetch_records(ids)
        except Exception as e:
            logger.error("Error cargando propiedades a comparar", ids=ids, error=str(e))
            return ComparisonResult(
                status=ComparisonStatus.ERROR,
                message="Failed to load properties for comparison",
            )

        by_id = {record.id: record for record in fetched}
        missing = tuple(i for i in ids if i not in by_id)
        if missing:
            logger.info("Propiedades a comparar no encontradas", missing=list(missing))
            return ComparisonResult(
                status=ComparisonStatus.NOT_FOUND,
                message=f"Properties not found: {', '.join(missing)}",
                missing_ids=missing,
            )

        records = tuple(by_id[i] for i in ids)
        if len(records) < COMPARE_SLOTS:
            return ComparisonResult(
                status=ComparisonStatus.PARTIAL,
                records=records,
                empty_slots=COMPARE_SLOTS - len(records),
            )

        rows = tuple(compute_diff(records[0], records[1]))
        logger.debug(
            "Comparación lista",
            ids=ids,
            different=sum(1 for r in rows if r.is_different),
        )
        return ComparisonResult(status=ComparisonStatus.READY, records=records, rows=rows)
