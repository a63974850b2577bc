from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from hawaii_parcels.geometry import Envelope


MAX_RECORD_COUNT = 1000


def escape_sql_string(value: str) -> str:
    return (value or "").replace("'", "''")


def equals_clause(field: str, value: str) -> str:
    return f"{field}='{escape_sql_string(value)}'"


def county_clause(county: Optional[str]) -> str:
    cleaned = (county or "").strip()
    if not cleaned:
        return "1=1"
    return equals_clause("COUNTY", cleaned.upper())


def min_value_clause(county: str, min_value: float) -> str:
    threshold = float(min_value)
    if threshold.is_integer():
        number = str(int(threshold))
    else:
        number = repr(threshold)
    return f"{county_clause(county)} AND TOTAL_VALUE >= {number}"


def build_envelope_params(
    envelope: Envelope,
    where: str = "1=1",
    limit: int = MAX_RECORD_COUNT,
) -> Dict[str, str]:
    return {
        "where": where,
        "geometry": envelope.to_esri(),
        "geometryType": "esriGeometryEnvelope",
        "spatialRel": "esriSpatialRelIntersects",
        "inSR": "4326",
        "outFields": "*",
        "returnGeometry": "true",
        "f": "json",
        "resultRecordCount": str(min(int(limit), MAX_RECORD_COUNT)),
    }


def build_attribute_params(
    where: str,
    limit: Optional[int] = None,
    order_by: Optional[str] = None,
    out_fields: Optional[List[str]] = None,
) -> Dict[str, str]:
    params = {
        "where": where,
        "outFields": ",".join(out_fields or ["*"]),
        "returnGeometry": "true",
        "f": "json",
    }
    if limit is not None:
        params["resultRecordCount"] = str(min(int(limit), MAX_RECORD_COUNT))
    if order_by:
        params["orderByFields"] = order_by
    return params


def build_query_url(layer_url: str, params: Dict[str, Any]) -> str:
    return f"{layer_url.rstrip('/')}/query?{urlencode(params)}"
