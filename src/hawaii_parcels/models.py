from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Optional, Tuple, TypeVar


T = TypeVar("T")

Vertex = Tuple[float, float]


@dataclass(frozen=True)
class Centroid:
    lat: float
    lng: float

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Parcel:
    """A Hawaii Statewide Parcels record.

    `tmk` is the stable key. `object_id` only means something within the
    response it came from.
    """

    object_id: Optional[int]
    tmk: str
    county: str
    island: str
    district: str
    zone: str
    section: str
    plat: str
    parcel: str
    land_use: str
    zoning: str
    area: float
    # Raw ESRI geometry. Excluded from hashing; copied on the way in and out.
    geometry: Optional[Dict[str, Any]] = field(default=None, hash=False)
    address: Optional[str] = None
    owner_name: Optional[str] = None
    land_value: Optional[float] = None
    building_value: Optional[float] = None
    total_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "objectId": self.object_id,
            "tmk": self.tmk,
            "county": self.county,
            "island": self.island,
            "district": self.district,
            "zone": self.zone,
            "section": self.section,
            "plat": self.plat,
            "parcel": self.parcel,
            "landUse": self.land_use,
            "zoning": self.zoning,
            "area": self.area,
            "geometry": copy.deepcopy(self.geometry),
            "address": self.address,
            "ownerName": self.owner_name,
            "landValue": self.land_value,
            "buildingValue": self.building_value,
            "totalValue": self.total_value,
        }


@dataclass(frozen=True)
class EnrichmentRecord:
    tmk: str
    parcel: Parcel
    coordinates: Centroid
    boundaries: Tuple[Vertex, ...]
    land_use: str
    zoning: str
    area: float
    assessed_value: float
    county: str
    district: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tmk": self.tmk,
            "parcelData": self.parcel.to_dict(),
            "coordinates": self.coordinates.to_dict(),
            "boundaries": [[lng, lat] for lng, lat in self.boundaries],
            "landUse": self.land_use,
            "zoning": self.zoning,
            "area": self.area,
            "assessedValue": self.assessed_value,
            "county": self.county,
            "district": self.district,
        }


STATUS_OK = "ok"
STATUS_EMPTY = "empty"
STATUS_FAILED = "failed"


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """Outcome of one upstream query.

    `empty` is a valid answer (nothing matched). `failed` means the upstream
    could not be reached or decoded; the failure has already been logged.
    """

    status: str
    items: Tuple[T, ...] = field(default_factory=tuple)
    error: Optional[str] = None

    @classmethod
    def ok(cls, items) -> "QueryResult[T]":
        items = tuple(items)
        if not items:
            return cls(status=STATUS_EMPTY)
        return cls(status=STATUS_OK, items=items)

    @classmethod
    def empty(cls) -> "QueryResult[T]":
        return cls(status=STATUS_EMPTY)

    @classmethod
    def failed(cls, error: str) -> "QueryResult[T]":
        return cls(status=STATUS_FAILED, error=str(error))

    @property
    def is_ok(self) -> bool:
        return self.status == STATUS_OK

    @property
    def is_empty(self) -> bool:
        return self.status == STATUS_EMPTY

    @property
    def is_failed(self) -> bool:
        return self.status == STATUS_FAILED

    def first(self) -> Optional[T]:
        return self.items[0] if self.items else None
