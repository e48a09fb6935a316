"""
Propiedades similares a una de referencia.
"""

from vitrina.matching.similarity import (
    SimilarListingsFinder,
    SimilarMatch,
    rank_similar,
    score_similarity,
)

__all__ = [
    "SimilarListingsFinder",
    "SimilarMatch",
    "rank_similar",
    "score_similarity",
]
