"""End-to-end tests for the scoring API."""

from fastapi.testclient import TestClient

from ecoscore.core.storage.memory import InMemoryKeyValueStore
from ecoscore.entrypoints.api.setup import create_app
from ecoscore.setup.container import build_container

from fakes import FakeModel, InMemoryModelStore, make_settings

ECO_LAPTOP_PAYLOAD = {
    "title": "Eco laptop",
    "description": "Energy Star certified, made from recycled materials, 45W, 1.5kg",
    "price": 899.0,
    "url": "https://shop.example/eco-laptop",
    "seller": {"name": "Green Goods", "rating": 4.7},
}


def build_client(model: FakeModel, tmp_path) -> TestClient:
    config = make_settings(
        storage_directory=str(tmp_path / "storage"),
        model_directory=str(tmp_path / "models"),
        retry_backoff_seconds=0.001,
    )
    container = build_container(
        config,
        store=InMemoryKeyValueStore(),
        model_store=InMemoryModelStore(model),
    )
    return TestClient(create_app(config, container))


def test_health_endpoint_reports_model_state(tmp_path) -> None:
    with build_client(FakeModel(), tmp_path) as client:
        response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["model_state"] == "ready"


def test_analyze_endpoint_returns_model_score(tmp_path) -> None:
    with build_client(FakeModel(score=0.83), tmp_path) as client:
        response = client.post("/analyze", json=ECO_LAPTOP_PAYLOAD)
        metrics = client.get("/metrics").json()

    assert response.status_code == 200
    body = response.json()
    assert body["overall_score"] == 0.83
    assert body["source"] == "model"
    assert body["confidence"] == 0.9
    assert len(body["alternatives"]) == 2
    assert metrics["cache"]["cache_size"] == 1
    assert metrics["tracker"]["total_predictions"] == 1
    assert metrics["model"]["data_points"] == 1


def test_analyze_endpoint_falls_back_to_heuristic(tmp_path) -> None:
    with build_client(FakeModel(failures=100), tmp_path) as client:
        response = client.post("/analyze", json=ECO_LAPTOP_PAYLOAD)
        errors = client.get("/metrics/errors").json()

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "heuristic"
    assert body["confidence"] == 0.6
    assert body["overall_score"] > 0.5
    assert len(errors) == 1
    assert errors[0]["context"]["stage"] == "predict"


def test_analyze_endpoint_validates_input(tmp_path) -> None:
    with build_client(FakeModel(), tmp_path) as client:
        response = client.post("/analyze", json={"title": "", "price": -1})

    assert response.status_code == 422


def test_feedback_endpoint_updates_accuracy(tmp_path) -> None:
    payload = {"product": {"title": "Oak chair", "price": 80.0}, "actual_score": 0.6}

    with build_client(FakeModel(score=0.4), tmp_path) as client:
        response = client.post("/analyze/feedback", json=payload)

    assert response.status_code == 200
    assert abs(response.json()["accuracy_score"] - 0.8) < 1e-9
    assert response.json()["total_predictions"] == 1
