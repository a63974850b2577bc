import json
import os
import re
import socket
import sys
import threading
from pathlib import Path

import pytest
import requests


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC = REPO_ROOT / "src"
FIXTURES = REPO_ROOT / "tests" / "fixtures" / "parcels"

# Prefer repo sources over any installed package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    if os.getenv("LIVE") == "1":
        return

    real_connect = socket.socket.connect

    def guarded_connect(sock, address):
        host = address[0]
        if host not in ("127.0.0.1", "localhost"):
            raise RuntimeError("Network access blocked in tests")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", guarded_connect)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    from hawaii_parcels.service import get_service
    from hawaii_parcels.settings import reset_settings_cache

    for name in list(os.environ):
        if name.startswith("HIP_"):
            monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    get_service.cache_clear()
    yield
    reset_settings_cache()
    get_service.cache_clear()


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self._text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error", response=self)

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload


_EQ = re.compile(r"^(\w+)='((?:[^']|'')*)'$")
_GTE = re.compile(r"^(\w+) >= ([0-9.]+)$")


def _clause_matches(clause, attrs):
    clause = clause.strip()
    if clause == "1=1":
        return True
    m = _EQ.match(clause)
    if m:
        return str(attrs.get(m.group(1))) == m.group(2).replace("''", "'")
    m = _GTE.match(clause)
    if m:
        value = attrs.get(m.group(1))
        return value is not None and float(value) >= float(m.group(2))
    raise AssertionError(f"unsupported where clause: {clause}")


def _ring_bbox(feature):
    rings = (feature.get("geometry") or {}).get("rings") or []
    if not rings or not rings[0]:
        return None
    xs = [pt[0] for pt in rings[0]]
    ys = [pt[1] for pt in rings[0]]
    return min(xs), min(ys), max(xs), max(ys)


def _intersects(feature, envelope):
    bb = _ring_bbox(feature)
    if bb is None:
        return False
    xmin, ymin, xmax, ymax = envelope
    return not (bb[2] < xmin or bb[0] > xmax or bb[3] < ymin or bb[1] > ymax)


class FakeFeatureService:
    """Stands in for requests.Session against the parcels FeatureServer.

    Applies where / envelope / orderByFields / resultRecordCount to a fixture
    feature list. Counties in `fail_counties` raise a connection error.
    """

    def __init__(self, features):
        self.features = list(features)
        self.calls = []
        self.fail_counties = set()
        self.response = None
        self._lock = threading.Lock()

    def get(self, url, params=None, timeout=None, headers=None):
        params = dict(params or {})
        with self._lock:
            self.calls.append({"url": url, "params": params, "timeout": timeout, "headers": headers})
        if self.response is not None:
            if isinstance(self.response, Exception):
                raise self.response
            return self.response
        where = params.get("where", "1=1")
        for county in self.fail_counties:
            if f"COUNTY='{county}'" in where:
                raise requests.ConnectionError(f"{county} unreachable")
        clauses = where.split(" AND ")
        feats = [
            f
            for f in self.features
            if all(_clause_matches(c, f.get("attributes") or {}) for c in clauses)
        ]
        if "geometry" in params:
            envelope = tuple(float(p) for p in params["geometry"].split(","))
            feats = [f for f in feats if _intersects(f, envelope)]
        if params.get("orderByFields") == "TOTAL_VALUE DESC":
            feats.sort(key=lambda f: f["attributes"].get("TOTAL_VALUE") or 0, reverse=True)
        if "resultRecordCount" in params:
            feats = feats[: int(params["resultRecordCount"])]
        return FakeResponse({"features": feats})

    def close(self):
        pass


@pytest.fixture
def fixture_features():
    raw = json.loads((FIXTURES / "hawaii_statewide.json").read_text(encoding="utf-8"))
    return raw["features"]


@pytest.fixture
def feature_service(fixture_features):
    return FakeFeatureService(fixture_features)


@pytest.fixture
def parcel_client(feature_service):
    from hawaii_parcels.client import ParcelQueryClient

    return ParcelQueryClient(
        layer_url="https://parcels.test/arcgis/rest/services/Parcels/FeatureServer/0",
        timeout_s=3,
        session=feature_service,
    )


@pytest.fixture
def fake_response():
    return FakeResponse
