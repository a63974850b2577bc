from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class EnrichPropertyRequest(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)
    radius: float = Field(default=0.001, gt=0, le=1)


class CentroidOut(BaseModel):
    lat: float
    lng: float


class ParcelOut(BaseModel):
    """Wire shape of a parcel; camelCase keys match what the listing UI reads."""

    objectId: Optional[int] = None
    tmk: str
    county: str
    island: str
    district: str
    zone: str
    section: str
    plat: str
    parcel: str
    landUse: str
    zoning: str
    area: float
    geometry: Optional[Dict] = None
    address: Optional[str] = None
    ownerName: Optional[str] = None
    landValue: Optional[float] = None
    buildingValue: Optional[float] = None
    totalValue: Optional[float] = None


class EnrichmentOut(BaseModel):
    tmk: str
    parcelData: ParcelOut
    coordinates: CentroidOut
    boundaries: List[List[float]] = Field(default_factory=list)
    landUse: str
    zoning: str
    area: float
    assessedValue: float
    county: str
    district: str
