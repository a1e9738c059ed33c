"""
Tests for the FastAPI backend.

Run with: pytest tests/test_api.py -v
"""

import pytest
from fastapi.testclient import TestClient

from backend.app import app
from dxfbuilder.constants import LAYERS

from conftest import dxf_pairs


@pytest.fixture
def client():
    return TestClient(app)


BODY = {
    "elements": [
        {"type": "way", "id": 1, "nodes": [1, 2, 3, 1],
         "geometry": [{"lat": 0.0, "lon": 0.0}, {"lat": 0.0, "lon": 0.0001},
                      {"lat": 0.0001, "lon": 0.0001}, {"lat": 0.0, "lon": 0.0}],
         "tags": {"building": "yes", "building:levels": "3"}},
    ],
    "center": {"lat": 0.0, "lng": 0.0, "label": "Null Island"},
    "terrain": [[{"lat": 0.0, "lng": 0.0, "elevation": 3},
                 {"lat": 0.0, "lng": 0.001, "elevation": 3}],
                [{"lat": 0.001, "lng": 0.0, "elevation": 3},
                 {"lat": 0.001, "lng": 0.001, "elevation": 3}]],
    "options": {"simplify": True},
}


class TestDxfRoute:
    """Tests for POST /api/dxf."""

    def test_generates_attachment(self, client):
        resp = client.post("/api/dxf", json=BODY)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/dxf")
        assert resp.headers["content-disposition"] == "attachment; filename=export.dxf"

        pairs = dxf_pairs(resp.text)
        assert pairs.count((0, 'LAYER')) == len(LAYERS)
        assert pairs.count((0, '3DFACE')) == 2
        assert pairs.count((0, 'LWPOLYLINE')) == 1
        assert (39, '9.60') in pairs
        assert pairs[-1] == (0, 'EOF')

    def test_minimal_body(self, client):
        resp = client.post("/api/dxf", json={"center": {"lat": 1, "lng": 2}})
        assert resp.status_code == 200
        assert resp.text.endswith("0\nENDSEC\n0\nEOF\n")

    def test_missing_center(self, client):
        resp = client.post("/api/dxf", json={"elements": []})
        assert resp.status_code == 422

    def test_malformed_element(self, client):
        body = {"center": {"lat": 0, "lng": 0},
                "elements": [{"type": "node", "id": 1, "lon": 0}]}
        resp = client.post("/api/dxf", json=body)
        assert resp.status_code == 422
        assert "lat" in resp.json()["detail"]

    @pytest.mark.parametrize("element", [
        {"type": "way", "id": 1, "nodes": [1, None]},
        {"type": "relation", "id": 2,
         "members": [{"type": "way", "ref": None, "role": "outer"}]},
        {"type": "relation", "id": 3, "members": ["way"]},
    ])
    def test_malformed_refs(self, client, element):
        body = {"center": {"lat": 0, "lng": 0}, "elements": [element]}
        resp = client.post("/api/dxf", json=body)
        assert resp.status_code == 422
        assert resp.json()["detail"].startswith(f"{element['type']} {element['id']}")

    def test_stats_malformed_refs(self, client):
        body = {"elements": [{"type": "way", "id": 1, "nodes": [None]}]}
        resp = client.post("/api/stats", json=body)
        assert resp.status_code == 422


class TestOtherRoutes:
    """Tests for /api/stats and the health check."""

    def test_stats(self, client):
        resp = client.post("/api/stats", json={"elements": BODY["elements"]})
        assert resp.status_code == 200
        data = resp.json()
        assert data["total_buildings"] == 1
        assert data["max_height"] == pytest.approx(9.6)

    def test_root(self, client):
        assert client.get("/").json()["status"] == "ok"
