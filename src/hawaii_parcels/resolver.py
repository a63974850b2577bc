from __future__ import annotations

import logging
from typing import Optional, Sequence

from hawaii_parcels.client import ParcelQueryClient
from hawaii_parcels.geometry import (
    compute_centroid,
    distance_to_parcel,
    envelope_around,
    outer_ring,
)
from hawaii_parcels.models import EnrichmentRecord, Parcel, QueryResult
from hawaii_parcels.settings import MATCH_POLICIES


logger = logging.getLogger("hawaii_parcels.resolver")

DEFAULT_RADIUS = 0.001


def to_enrichment(parcel: Parcel) -> EnrichmentRecord:
    return EnrichmentRecord(
        tmk=parcel.tmk,
        parcel=parcel,
        coordinates=compute_centroid(parcel.geometry),
        boundaries=outer_ring(parcel.geometry),
        land_use=parcel.land_use,
        zoning=parcel.zoning,
        area=parcel.area,
        assessed_value=parcel.total_value or 0.0,
        county=parcel.county,
        district=parcel.district,
    )


def pick_nearest(candidates: Sequence[Parcel], lat: float, lng: float) -> Optional[Parcel]:
    """Parcel containing the point, else the closest one.

    Ties go to the earlier candidate. Parcels without a boundary rank last.
    """

    best = None
    best_key = None
    for idx, parcel in enumerate(candidates):
        key = (distance_to_parcel(parcel.geometry, lat, lng), idx)
        if best_key is None or key < best_key:
            best = parcel
            best_key = key
    return best


class EnrichmentResolver:
    """Resolve a coordinate to the parcel under it."""

    def __init__(self, client: ParcelQueryClient, match_policy: str = "nearest") -> None:
        if match_policy not in MATCH_POLICIES:
            raise ValueError(f"unknown match policy: {match_policy}")
        self.client = client
        self.match_policy = match_policy

    def _select(self, candidates: Sequence[Parcel], lat: float, lng: float) -> Optional[Parcel]:
        if not candidates:
            return None
        if self.match_policy == "first":
            return candidates[0]
        return pick_nearest(candidates, lat, lng)

    def resolve(
        self, lat: float, lng: float, radius: float = DEFAULT_RADIUS
    ) -> QueryResult[EnrichmentRecord]:
        envelope = envelope_around(lat, lng, radius)
        result = self.client.query_envelope(envelope)
        if not result.is_ok:
            return QueryResult(status=result.status, error=result.error)
        match = self._select(result.items, lat, lng)
        if match is None:
            return QueryResult.empty()
        logger.debug(
            "matched tmk=%s among %d candidates (%s)",
            match.tmk,
            len(result.items),
            self.match_policy,
        )
        return QueryResult.ok([to_enrichment(match)])

    def enrich(
        self, lat: float, lng: float, radius: float = DEFAULT_RADIUS
    ) -> Optional[EnrichmentRecord]:
        return self.resolve(lat, lng, radius).first()
