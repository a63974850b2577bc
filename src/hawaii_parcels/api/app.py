from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Query

from hawaii_parcels.aggregator import DEFAULT_MIN_VALUE
from hawaii_parcels.api.schemas import EnrichmentOut, EnrichPropertyRequest, ParcelOut
from hawaii_parcels.service import HawaiiParcelService, get_service


logger = logging.getLogger("hawaii_parcels.api")

app = FastAPI(title="hawaii-parcels")


def health():
    return {"status": "ok"}


@app.get("/api/health")
def health_route():
    return health()


@app.get("/api/hawaii-parcels/luxury", response_model=List[EnrichmentOut])
def luxury_parcels(
    min_value: float = Query(DEFAULT_MIN_VALUE, alias="minValue", ge=0),
    service: HawaiiParcelService = Depends(get_service),
):
    report = service.high_value_report(min_value)
    if report.failed:
        logger.info("luxury parcels served without: %s", ",".join(report.failed))
    return [r.to_dict() for r in report.records]


@app.get("/api/hawaii-parcels/by-bounds", response_model=List[ParcelOut])
def parcels_by_bounds(
    min_lat: Optional[float] = Query(None, alias="minLat"),
    max_lat: Optional[float] = Query(None, alias="maxLat"),
    min_lng: Optional[float] = Query(None, alias="minLng"),
    max_lng: Optional[float] = Query(None, alias="maxLng"),
    county: Optional[str] = Query(None),
    service: HawaiiParcelService = Depends(get_service),
):
    if min_lat is None or max_lat is None or min_lng is None or max_lng is None:
        raise HTTPException(status_code=400, detail="Missing required boundary parameters")
    try:
        parcels = service.query_by_bounds(min_lat, max_lat, min_lng, max_lng, county=county)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return [p.to_dict() for p in parcels]


@app.get("/api/hawaii-parcels/tmk/{tmk}", response_model=ParcelOut)
def parcel_by_tmk(tmk: str, service: HawaiiParcelService = Depends(get_service)):
    parcel = service.query_by_tmk(tmk)
    if parcel is None:
        raise HTTPException(status_code=404, detail="Parcel not found")
    return parcel.to_dict()


@app.post("/api/hawaii-parcels/enrich-property", response_model=Optional[EnrichmentOut])
def enrich_property(
    payload: EnrichPropertyRequest = Body(...),
    service: HawaiiParcelService = Depends(get_service),
):
    record = service.enrich(payload.lat, payload.lng, payload.radius)
    if record is None:
        return None
    return record.to_dict()
