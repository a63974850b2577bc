from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from hawaii_parcels.arcgis import min_value_clause
from hawaii_parcels.client import ParcelQueryClient
from hawaii_parcels.models import STATUS_FAILED, EnrichmentRecord, QueryResult
from hawaii_parcels.resolver import to_enrichment
from hawaii_parcels.settings import DEFAULT_JURISDICTIONS


logger = logging.getLogger("hawaii_parcels.aggregator")

DEFAULT_MIN_VALUE = 2_000_000
PER_JURISDICTION_LIMIT = 50


@dataclass(frozen=True)
class JurisdictionOutcome:
    jurisdiction: str
    status: str
    items_found: int
    error: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "county": self.jurisdiction,
            "status": self.status,
            "items_found": self.items_found,
        }
        if self.error:
            out["error"] = self.error
        return out


@dataclass
class AggregateReport:
    records: List[EnrichmentRecord] = field(default_factory=list)
    outcomes: List[JurisdictionOutcome] = field(default_factory=list)

    @property
    def failed(self) -> List[str]:
        return [o.jurisdiction for o in self.outcomes if o.status == STATUS_FAILED]


class RegionalAggregator:
    """Fan a value-threshold query out over every jurisdiction and merge.

    Each jurisdiction is queried on its own worker thread. One jurisdiction
    failing only removes its own parcels from the merged list.
    """

    def __init__(
        self,
        client: ParcelQueryClient,
        jurisdictions: Sequence[str] = DEFAULT_JURISDICTIONS,
        per_jurisdiction_limit: int = PER_JURISDICTION_LIMIT,
        max_workers: Optional[int] = None,
    ) -> None:
        self.client = client
        self.jurisdictions = tuple(j.strip().upper() for j in jurisdictions if j.strip())
        self.per_jurisdiction_limit = int(per_jurisdiction_limit)
        self.max_workers = max_workers

    def _query_jurisdiction(self, jurisdiction: str, min_value: float) -> QueryResult:
        return self.client.query_where(
            min_value_clause(jurisdiction, min_value),
            limit=self.per_jurisdiction_limit,
            order_by="TOTAL_VALUE DESC",
            county=jurisdiction,
        )

    def collect(self, min_value: float = DEFAULT_MIN_VALUE) -> AggregateReport:
        report = AggregateReport()
        if not self.jurisdictions:
            return report
        workers = self.max_workers or len(self.jurisdictions)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                (j, pool.submit(self._query_jurisdiction, j, min_value))
                for j in self.jurisdictions
            ]
            # Joined in jurisdiction order so the merge is deterministic.
            for jurisdiction, future in futures:
                try:
                    result = future.result()
                except Exception as exc:
                    logger.warning(
                        json.dumps(
                            {
                                "event": "jurisdiction_failed",
                                "county": jurisdiction,
                                "error": f"{exc.__class__.__name__}: {exc}",
                            }
                        )
                    )
                    result = QueryResult.failed(f"{exc.__class__.__name__}: {exc}")
                records = [
                    to_enrichment(p)
                    for p in result.items
                    if (p.total_value or 0.0) >= min_value
                ]
                report.records.extend(records)
                report.outcomes.append(
                    JurisdictionOutcome(
                        jurisdiction=jurisdiction,
                        status=result.status,
                        items_found=len(records),
                        error=result.error,
                    )
                )
        report.records.sort(key=lambda r: r.assessed_value, reverse=True)
        return report

    def get_high_value_parcels(self, min_value: float = DEFAULT_MIN_VALUE) -> List[EnrichmentRecord]:
        return self.collect(min_value).records
