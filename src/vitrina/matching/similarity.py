"""
Propiedades similares.

Puntúa candidatos contra la propiedad que se está viendo:
- Misma zona: +40
- Misma ciudad: +20
- Tags compartidos: +10 c/u
- Precio dentro del 20%: hasta +15
- Mismos dormitorios: +10
- Superficie dentro del 30%: hasta +5
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from vitrina.database import PropertyRepository
from vitrina.models import FilterState, PropertyRecord, PropertySummary

logger = structlog.get_logger()

PRICE_TOLERANCE = 0.2
AREA_TOLERANCE = 0.3


@dataclass
class SimilarMatch:
    """Candidato con su puntaje de similitud."""

    listing: PropertySummary
    score: float


def _mentions(candidate: PropertySummary, place: Optional[str]) -> bool:
    if not place:
        return False
    place = place.casefold()
    if candidate.location and place in candidate.location.casefold():
        return True
    return place in {
        (candidate.district or "").casefold(),
        (candidate.city or "").casefold(),
    }


def _relative_diff(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None or b is None or not b:
        return None
    return abs(a - b) / b


def score_similarity(candidate: PropertySummary, reference: PropertyRecord) -> float:
    score = 0.0

    if _mentions(candidate, reference.district):
        score += 40
    if _mentions(candidate, reference.city):
        score += 20

    shared_tags = set(candidate.tags) & set(reference.tags)
    score += len(shared_tags) * 10

    price_diff = _relative_diff(candidate.price, reference.price)
    if price_diff is not None and price_diff <= PRICE_TOLERANCE:
        score += 15 * (1 - price_diff)

    if reference.beds is not None and candidate.beds == reference.beds:
        score += 10

    area_diff = _relative_diff(candidate.area, reference.area)
    if area_diff is not None and area_diff <= AREA_TOLERANCE:
        score += 5 * (1 - area_diff)

    return score


def rank_similar(
    reference: PropertyRecord,
    candidates: Iterable[PropertySummary],
    limit: int = 4,
) -> list[SimilarMatch]:
    """Ordena candidatos por similitud, excluyendo la propia referencia."""
    matches = [
        SimilarMatch(listing=c, score=score_similarity(c, reference))
        for c in candidates
        if c.id != reference.id
    ]
    # sort es estable: a igual score se respeta el orden del backend
    matches.sort(key=lambda m: m.score, reverse=True)
    return matches[:limit]


class SimilarListingsFinder:
    """Busca similares sobre las publicaciones más recientes."""

    CANDIDATE_POOL = 20

    def __init__(self, repository: Optional[PropertyRepository] = None):
        self.repository = repository or PropertyRepository()

    def find(self, reference: PropertyRecord, limit: int = 4) -> list[SimilarMatch]:
        page = self.repository.list_properties(
            FilterState(), page=1, limit=self.CANDIDATE_POOL
        )
        matches = rank_similar(reference, page.items, limit=limit)
        logger.info(
            "Similares calculados",
            property_id=reference.id,
            candidates=len(page.items),
            returned=len(matches),
        )
        return matches
