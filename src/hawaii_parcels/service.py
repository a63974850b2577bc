from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from hawaii_parcels.aggregator import DEFAULT_MIN_VALUE, AggregateReport, RegionalAggregator
from hawaii_parcels.client import ParcelQueryClient
from hawaii_parcels.models import EnrichmentRecord, Parcel
from hawaii_parcels.resolver import DEFAULT_RADIUS, EnrichmentResolver
from hawaii_parcels.settings import Settings, get_settings


class HawaiiParcelService:
    """Entry point used by the listing flow, the API and the CLI.

    Parcel data is advisory: every method answers with an empty list or None
    when the feature service is unavailable.
    """

    def __init__(
        self,
        client: Optional[ParcelQueryClient] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.client = client or ParcelQueryClient(
            layer_url=self.settings.parcels_layer_url,
            timeout_s=self.settings.timeout_s,
            user_agent=self.settings.user_agent,
        )
        self.resolver = EnrichmentResolver(self.client, match_policy=self.settings.match_policy)
        self.aggregator = RegionalAggregator(
            self.client,
            jurisdictions=self.settings.jurisdictions,
            max_workers=self.settings.max_workers,
        )

    def enrich(self, lat: float, lng: float, radius: float = DEFAULT_RADIUS) -> Optional[EnrichmentRecord]:
        return self.resolver.enrich(lat, lng, radius)

    def get_high_value_parcels(self, min_value: float = DEFAULT_MIN_VALUE) -> List[EnrichmentRecord]:
        return self.aggregator.get_high_value_parcels(min_value)

    def high_value_report(self, min_value: float = DEFAULT_MIN_VALUE) -> AggregateReport:
        return self.aggregator.collect(min_value)

    def query_by_tmk(self, tmk: str) -> Optional[Parcel]:
        return self.client.parcel_by_tmk(tmk)

    def query_by_bounds(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        county: Optional[str] = None,
    ) -> List[Parcel]:
        return self.client.parcels_by_bounds(min_lat, max_lat, min_lng, max_lng, county=county)


@lru_cache(maxsize=1)
def get_service() -> HawaiiParcelService:
    return HawaiiParcelService()
