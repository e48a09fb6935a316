"""
Listado incremental de propiedades.
"""

from vitrina.listing.fetch_loop import (
    FetchState,
    ListingFetchLoop,
    PageFetcher,
    PageResult,
    PageStatus,
)

__all__ = [
    "FetchState",
    "ListingFetchLoop",
    "PageFetcher",
    "PageResult",
    "PageStatus",
]
