import pytest
import requests
from fastapi.testclient import TestClient

from hawaii_parcels.api.app import app
from hawaii_parcels.service import HawaiiParcelService, get_service


@pytest.fixture
def client(parcel_client):
    service = HawaiiParcelService(client=parcel_client)
    app.dependency_overrides[get_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_luxury_defaults_to_two_million(client, feature_service):
    r = client.get("/api/hawaii-parcels/luxury")
    assert r.status_code == 200
    data = r.json()
    assert [row["tmk"] for row in data] == [
        "1-5-5-001-001",
        "1-2-3-004-005",
        "2-4-1-007-012",
        "3-7-5-010-020",
    ]
    assert all("TOTAL_VALUE >= 2000000" in c["params"]["where"] for c in feature_service.calls)
    first = data[0]
    assert set(first.keys()) == {
        "tmk",
        "parcelData",
        "coordinates",
        "boundaries",
        "landUse",
        "zoning",
        "area",
        "assessedValue",
        "county",
        "district",
    }
    assert first["assessedValue"] == 5000000.0


def test_luxury_min_value(client):
    r = client.get("/api/hawaii-parcels/luxury", params={"minValue": 3000000})
    assert r.status_code == 200
    assert [row["tmk"] for row in r.json()] == ["1-5-5-001-001", "1-2-3-004-005"]


def test_luxury_survives_upstream_outage(client, feature_service):
    feature_service.response = requests.ConnectionError("down")
    r = client.get("/api/hawaii-parcels/luxury")
    assert r.status_code == 200
    assert r.json() == []


def test_by_bounds_filters_county(client):
    r = client.get(
        "/api/hawaii-parcels/by-bounds",
        params={"minLat": 21.0, "maxLat": 21.1, "minLng": -157.5, "maxLng": -157.4, "county": "HONOLULU"},
    )
    assert r.status_code == 200
    data = r.json()
    assert [p["tmk"] for p in data] == ["1-2-3-004-005"]
    assert data[0]["ownerName"] == "DEMO OWNER"


def test_by_bounds_missing_parameter(client):
    r = client.get("/api/hawaii-parcels/by-bounds", params={"minLat": 21.0, "maxLat": 21.1})
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing required boundary parameters"


def test_by_bounds_inverted_envelope(client):
    r = client.get(
        "/api/hawaii-parcels/by-bounds",
        params={"minLat": 21.1, "maxLat": 21.0, "minLng": -157.5, "maxLng": -157.4},
    )
    assert r.status_code == 400


def test_tmk_found_and_not_found(client):
    r = client.get("/api/hawaii-parcels/tmk/3-7-5-010-020")
    assert r.status_code == 200
    assert r.json()["district"] == "NORTH KONA"

    r = client.get("/api/hawaii-parcels/tmk/0-0-0-000-000")
    assert r.status_code == 404
    assert r.json()["detail"] == "Parcel not found"


def test_enrich_property(client):
    r = client.post("/api/hawaii-parcels/enrich-property", json={"lat": 21.05, "lng": -157.45})
    assert r.status_code == 200
    data = r.json()
    assert data["tmk"] == "1-2-3-004-005"
    assert data["assessedValue"] == 3500000.0
    assert data["boundaries"][0] == [-157.46, 21.04]


def test_enrich_property_nothing_found(client):
    r = client.post("/api/hawaii-parcels/enrich-property", json={"lat": 0.0, "lng": 0.0, "radius": 0.01})
    assert r.status_code == 200
    assert r.json() is None


def test_enrich_property_validates_body(client):
    r = client.post("/api/hawaii-parcels/enrich-property", json={"lat": 21.05})
    assert r.status_code == 422
    r = client.post("/api/hawaii-parcels/enrich-property", json={"lat": 21.05, "lng": -157.45, "radius": 0})
    assert r.status_code == 422
