from __future__ import annotations

import copy
import json
import logging
import math
import threading
from typing import Any, List, Mapping, Optional

import requests

from hawaii_parcels.arcgis import (
    MAX_RECORD_COUNT,
    build_attribute_params,
    build_envelope_params,
    build_query_url,
    county_clause,
    equals_clause,
)
from hawaii_parcels.errors import DecodeError, ParcelServiceError, TransportError
from hawaii_parcels.geometry import Envelope
from hawaii_parcels.models import Parcel, QueryResult
from hawaii_parcels.settings import get_settings


logger = logging.getLogger("hawaii_parcels.client")


def _as_str(v: object) -> str:
    if v is None:
        return ""
    return str(v).strip()


def _as_opt_str(v: object) -> Optional[str]:
    s = _as_str(v)
    return s or None


def _as_opt_float(v: object) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        raw: object = v
    else:
        raw = str(v).strip().replace(",", "")
        if not raw:
            return None
    try:
        f = float(raw)
    except (ValueError, OverflowError):
        return None
    # NaN and Infinity are not values.
    if not math.isfinite(f):
        return None
    return f


def _as_opt_int(v: object) -> Optional[int]:
    f = _as_opt_float(v)
    if f is None:
        return None
    return int(f)


def _as_area(v: object) -> float:
    f = _as_opt_float(v)
    if f is None or f < 0:
        return 0.0
    return f


def decode_feature(feature: Any) -> Optional[Parcel]:
    """Map one ArcGIS feature to a Parcel.

    Optional attributes may be missing or null on the service; they decode to
    None. Features without an attributes object are skipped.
    """

    if not isinstance(feature, dict):
        return None
    attrs = feature.get("attributes")
    if not isinstance(attrs, dict):
        return None
    geom = feature.get("geometry")
    return Parcel(
        object_id=_as_opt_int(attrs.get("OBJECTID")),
        tmk=_as_str(attrs.get("TMK")),
        county=_as_str(attrs.get("COUNTY")),
        island=_as_str(attrs.get("ISLAND")),
        district=_as_str(attrs.get("DISTRICT")),
        zone=_as_str(attrs.get("ZONE")),
        section=_as_str(attrs.get("SECTION")),
        plat=_as_str(attrs.get("PLAT")),
        parcel=_as_str(attrs.get("PARCEL")),
        land_use=_as_str(attrs.get("LAND_USE")),
        zoning=_as_str(attrs.get("ZONING")),
        area=_as_area(attrs.get("AREA_SQFT")),
        geometry=copy.deepcopy(geom) if isinstance(geom, dict) else None,
        address=_as_opt_str(attrs.get("ADDRESS")),
        owner_name=_as_opt_str(attrs.get("OWNER_NAME")),
        land_value=_as_opt_float(attrs.get("LAND_VALUE")),
        building_value=_as_opt_float(attrs.get("BUILDING_VALUE")),
        total_value=_as_opt_float(attrs.get("TOTAL_VALUE")),
    )


def decode_features(payload: Any) -> List[Parcel]:
    if not isinstance(payload, dict):
        raise DecodeError("response is not a JSON object")
    if "error" in payload:
        err = payload.get("error") or {}
        msg = err.get("message") if isinstance(err, dict) else err
        raise DecodeError(f"service error: {msg}")
    feats = payload.get("features")
    if not isinstance(feats, list):
        raise DecodeError("response has no features array")
    out: List[Parcel] = []
    for i, feat in enumerate(feats):
        try:
            parcel = decode_feature(feat)
        except (TypeError, ValueError, OverflowError) as exc:
            raise DecodeError(f"malformed feature at index {i}: {exc}") from exc
        if parcel is not None:
            out.append(parcel)
    return out


class ParcelQueryClient:
    """Query client for the Hawaii Statewide Parcels FeatureServer layer.

    Every public query returns a QueryResult; transport and decode problems
    are logged and reported as `failed`, never raised.
    """

    def __init__(
        self,
        layer_url: Optional[str] = None,
        timeout_s: Optional[float] = None,
        session: Optional[requests.Session] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.layer_url = (layer_url or settings.parcels_layer_url).rstrip("/")
        self.timeout_s = float(timeout_s if timeout_s is not None else settings.timeout_s)
        self.user_agent = user_agent or settings.user_agent
        self._shared_session = session
        self._local = threading.local()
        self._owned: List[requests.Session] = []
        self._owned_lock = threading.Lock()

    @property
    def session(self) -> requests.Session:
        """The injected session, or one session per calling thread."""
        if self._shared_session is not None:
            return self._shared_session
        sess = getattr(self._local, "session", None)
        if sess is None:
            sess = requests.Session()
            self._local.session = sess
            with self._owned_lock:
                self._owned.append(sess)
        return sess

    def _request_json(self, params: Mapping[str, str]) -> Any:
        url = f"{self.layer_url}/query"
        try:
            resp = self.session.get(
                url,
                params=dict(params),
                timeout=self.timeout_s,
                headers={"User-Agent": self.user_agent},
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc
        try:
            return resp.json()
        except ValueError as exc:
            raise DecodeError(f"invalid JSON: {exc}") from exc

    def _run(self, operation: str, params: Mapping[str, str], **context: Any) -> QueryResult[Parcel]:
        try:
            parcels = decode_features(self._request_json(params))
        except ParcelServiceError as exc:
            event = {
                "event": "parcel_query_failed",
                "operation": operation,
                "error_type": exc.__class__.__name__,
                "error": str(exc),
                "url": build_query_url(self.layer_url, params),
            }
            event.update(context)
            logger.warning(json.dumps(event, ensure_ascii=False, default=str))
            return QueryResult.failed(f"{exc.__class__.__name__}: {exc}")
        logger.debug("%s returned %d parcels", operation, len(parcels))
        return QueryResult.ok(parcels)

    def query_by_bounds(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        county: Optional[str] = None,
    ) -> QueryResult[Parcel]:
        envelope = Envelope(min_lat=min_lat, max_lat=max_lat, min_lng=min_lng, max_lng=max_lng)
        return self.query_envelope(envelope, county=county)

    def query_envelope(self, envelope: Envelope, county: Optional[str] = None) -> QueryResult[Parcel]:
        params = build_envelope_params(
            envelope, where=county_clause(county), limit=MAX_RECORD_COUNT
        )
        return self._run("query_by_bounds", params, county=county)

    def query_by_tmk(self, tmk: str) -> QueryResult[Parcel]:
        cleaned = _as_str(tmk)
        if not cleaned:
            return QueryResult.empty()
        params = build_attribute_params(equals_clause("TMK", cleaned))
        result = self._run("query_by_tmk", params, tmk=cleaned)
        if result.is_ok:
            return QueryResult.ok(result.items[:1])
        return result

    def query_where(
        self,
        where: str,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        **context: Any,
    ) -> QueryResult[Parcel]:
        params = build_attribute_params(where, limit=limit, order_by=order_by)
        return self._run("query_where", params, where=where, **context)

    def parcels_by_bounds(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        county: Optional[str] = None,
    ) -> List[Parcel]:
        return list(self.query_by_bounds(min_lat, max_lat, min_lng, max_lng, county=county).items)

    def parcel_by_tmk(self, tmk: str) -> Optional[Parcel]:
        return self.query_by_tmk(tmk).first()

    def close(self) -> None:
        if self._shared_session is not None:
            self._shared_session.close()
        with self._owned_lock:
            owned, self._owned = self._owned, []
        for sess in owned:
            sess.close()
        self._local = threading.local()
