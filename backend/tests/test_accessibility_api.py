"""API endpoint tests for parcel accessibility analysis.

The isochrone client is replaced by an in-process fake; the analyzer and
store are injected through ``app.dependency_overrides``.

See Also:
    - backend/landmap/api/accessibility.py for API implementation.
    - backend/landmap/services/accessibility.py for scoring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from fastapi import testclient

from landmap import main
from landmap.api import accessibility as api_accessibility
from landmap.api import parcels as api_parcels
from landmap.services import accessibility, isochrone

if TYPE_CHECKING:
    from collections.abc import Iterator

    from landmap.store import feature_store

SQUARE = [[0.0, 0.0], [0.0, 0.01], [0.01, 0.01], [0.01, 0.0], [0.0, 0.0]]
ISOCHRONE = {
    "type": "FeatureCollection",
    "features": [
        {
            "type": "Feature",
            "geometry": {"type": "Polygon", "coordinates": [SQUARE]},
            "properties": {"contour": 8},
        }
    ],
}


class _FakeIsochroneClient:
    minutes = 8

    def __init__(self) -> None:
        self.response: dict[str, Any] | Exception = ISOCHRONE

    async def fetch(self, _center: tuple[float, float]) -> dict[str, Any]:
        if isinstance(self.response, Exception):
            raise self.response
        return self.response

    async def close(self) -> None:
        return None


@pytest.fixture
def fake_client() -> _FakeIsochroneClient:
    return _FakeIsochroneClient()


@pytest.fixture
def client(
    store: feature_store.FeatureStore,
    fake_client: _FakeIsochroneClient,
) -> Iterator[testclient.TestClient]:
    analyzer = accessibility.AccessibilityAnalyzer(
        fake_client,  # type: ignore[arg-type]
    )
    store.subscribe(analyzer.on_selection_change)

    app = main.create_app()
    app.dependency_overrides[api_accessibility._get_store] = lambda: store
    app.dependency_overrides[api_accessibility._get_analyzer] = lambda: analyzer
    app.dependency_overrides[api_parcels._get_store] = lambda: store
    try:
        yield testclient.TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_analyze_parcel(client: testclient.TestClient) -> None:
    """Test analysing a parcel returns its score and isochrone."""
    client.post("/api/parcels/1/select")
    response = client.post("/api/parcels/1/accessibility")
    assert response.status_code == 200
    body = response.json()
    assert body["parcel_id"] == "1"
    assert body["minutes"] == 8
    assert body["score"] == 11
    assert body["color"] == "#f44336"
    assert body["isochrone"] == ISOCHRONE

    current = client.get("/api/accessibility")
    assert current.json()["parcel_id"] == "1"


def test_analyze_unknown_parcel(client: testclient.TestClient) -> None:
    """Test analysing an unknown parcel returns 404."""
    response = client.post("/api/parcels/nope/accessibility")
    assert response.status_code == 404


def test_analyze_empty_isochrone(
    client: testclient.TestClient,
    fake_client: _FakeIsochroneClient,
) -> None:
    """Test an empty isochrone answers with a null score."""
    client.post("/api/parcels/1/select")
    fake_client.response = {"type": "FeatureCollection", "features": []}
    body = client.post("/api/parcels/1/accessibility").json()
    assert body["score"] is None
    assert body["color"] is None


def test_analyze_isochrone_failure(
    client: testclient.TestClient,
    fake_client: _FakeIsochroneClient,
    store: feature_store.FeatureStore,
) -> None:
    """Test an isochrone failure is a 502 and leaves the store untouched."""
    client.post("/api/parcels/2/select")
    fake_client.response = isochrone.IsochroneError("Isochrone request failed")

    response = client.post("/api/parcels/2/accessibility")

    assert response.status_code == 502
    assert "failed" in response.json()["detail"]
    assert store.selected_id == "2"
    assert len(store.all_parcels()) == 3


def test_current_analysis_none(client: testclient.TestClient) -> None:
    """Test there is no analysis before the first request."""
    response = client.get("/api/accessibility")
    assert response.status_code == 200
    assert response.json() is None


def test_clear_analysis(client: testclient.TestClient) -> None:
    """Test clearing hides the current analysis."""
    client.post("/api/parcels/1/select")
    client.post("/api/parcels/1/accessibility")
    assert client.delete("/api/accessibility").status_code == 204
    assert client.get("/api/accessibility").json() is None


def test_selection_change_clears_analysis(client: testclient.TestClient) -> None:
    """Test selecting another parcel drops the previous analysis."""
    client.post("/api/parcels/1/select")
    client.post("/api/parcels/1/accessibility")
    assert client.get("/api/accessibility").json() is not None

    client.post("/api/parcels/2/toggle")
    assert client.get("/api/accessibility").json() is None


def test_analyze_unselected_parcel(client: testclient.TestClient) -> None:
    """Test only the selected parcel can be analysed."""
    response = client.post("/api/parcels/1/accessibility")
    assert response.status_code == 409
    assert "not selected" in response.json()["detail"]

    client.post("/api/parcels/2/select")
    assert client.post("/api/parcels/1/accessibility").status_code == 409
    assert client.get("/api/accessibility").json() is None


def test_failed_analysis_of_new_selection_hides_old_one(
    client: testclient.TestClient,
    fake_client: _FakeIsochroneClient,
) -> None:
    """Test a failed analysis never leaves another parcel's result current."""
    client.post("/api/parcels/1/select")
    client.post("/api/parcels/1/accessibility")

    client.post("/api/parcels/2/select")
    fake_client.response = isochrone.IsochroneError("Isochrone request failed")
    assert client.post("/api/parcels/2/accessibility").status_code == 502

    client.post("/api/parcels/2/select")
    assert client.get("/api/accessibility").json() is None
