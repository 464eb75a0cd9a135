# tests/test_analyze.py

import io
import time

import pytest

import fitai.routes.analyze as analyze_routes
from fitai.models.food import Food
from fitai.services.plate import resolve_ingredient
from fitai.services.scene import detect_scene_type

QUINOA = {"name": "quinoa", "kcal": 120, "protein": 4.4, "carbs": 21.3, "fat": 1.9}


@pytest.fixture
def with_openai(app):
    app.config["OPENAI_API_KEY"] = "sk-test"
    return app


# -----------------------------------------------------------------------------#
# Plato
# -----------------------------------------------------------------------------#
def test_analyze_plate_requires_image(client):
    resp = client.post("/api/analyze-plate", json={})
    assert resp.status_code == 400


def test_analyze_plate_without_openai_key(client):
    resp = client.post("/api/analyze-plate", json={"imageBase64": "aGVsbG8="})
    assert resp.status_code == 502
    assert "error" in resp.get_json()


def test_analyze_plate_local_and_nutritionix(with_openai, client, add_food, monkeypatch):
    add_food("Grilled chicken breast", kcal=165, protein=25, fat=3.6, carbs=0)
    monkeypatch.setattr(analyze_routes, "identify_ingredients",
                        lambda client, image, model: ["chicken", "quinoa", "mystery garnish"])
    monkeypatch.setattr(analyze_routes, "natural_nutrients",
                        lambda name, **kw: QUINOA if name == "quinoa" else None)

    resp = client.post("/api/analyze-plate", json={"imageBase64": "aGVsbG8="})
    assert resp.status_code == 200
    data = resp.get_json()

    assert [i["matched"] for i in data["items"]] == ["local", "nutritionix"]
    assert data["totals"] == {"calories": 285.0, "protein": 29.4, "carbs": 21.3, "fat": 5.5}

    quinoa = Food.query.filter_by(name_en="quinoa").one()
    assert quinoa.source == "nutritionix"
    assert quinoa.kcal == 120


def test_external_result_only_copies_nutrients(app):
    data = {"name": "Tempeh", "kcal": 192, "protein": 20.3, "fat": 10.8,
            "id": 999, "query": "tempeh 100g", "serving_qty": 1}
    item = resolve_ingredient("tempeh", lambda name: data)
    assert item["matched"] == "nutritionix"

    tempeh = Food.query.filter_by(name_en="Tempeh").one()
    assert tempeh.id != 999
    assert item["foodId"] == tempeh.id
    assert tempeh.kcal == 192
    assert tempeh.fat == 10.8
    assert not hasattr(tempeh, "serving_qty")


def test_analyze_plate_multipart(with_openai, client, monkeypatch):
    seen = {}

    def fake_identify(client, image, model):
        seen["image"] = image
        return []

    monkeypatch.setattr(analyze_routes, "identify_ingredients", fake_identify)
    resp = client.post(
        "/api/analyze-plate",
        data={"image": (io.BytesIO(b"hello"), "plate.jpg")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json() == {"items": [], "totals": {"calories": 0, "protein": 0, "carbs": 0, "fat": 0}}
    assert seen["image"] == "aGVsbG8="


# -----------------------------------------------------------------------------#
# Tipo de escena
# -----------------------------------------------------------------------------#
def test_scene_classifier_wins():
    assert detect_scene_type(lambda: "product", timeout=1) == "product"


def test_scene_timeout_falls_back_to_meal():
    def slow():
        time.sleep(0.5)
        return "product"

    started = time.monotonic()
    assert detect_scene_type(slow, timeout=0.05) == "meal"
    assert time.monotonic() - started < 0.4


def test_scene_error_or_garbage_falls_back():
    def boom():
        raise RuntimeError("api down")

    assert detect_scene_type(boom, timeout=1) == "meal"
    assert detect_scene_type(lambda: "a cat", timeout=1) == "meal"


def test_scene_endpoint(with_openai, client, monkeypatch):
    monkeypatch.setattr(analyze_routes, "classify_scene", lambda client, image, model: "product")
    resp = client.post("/api/detect-scene-type", json={"image": "aGVsbG8="})
    assert resp.get_json() == {"success": True, "type": "product"}


def test_scene_endpoint_without_key_is_meal(client):
    resp = client.post("/api/detect-scene-type", json={"image": "aGVsbG8="})
    assert resp.get_json() == {"success": True, "type": "meal"}


def test_scene_endpoint_requires_image(client):
    assert client.post("/api/detect-scene-type", json={}).status_code == 400


def test_scene_client_uses_scene_timeout(with_openai, client, monkeypatch):
    with_openai.config["SCENE_DETECT_TIMEOUT"] = 2.5
    seen = {}

    def fake_make_client(api_key, timeout=30):
        seen["timeout"] = timeout
        return object()

    monkeypatch.setattr(analyze_routes, "make_client", fake_make_client)
    monkeypatch.setattr(analyze_routes, "classify_scene", lambda client, image, model: "product")
    resp = client.post("/api/detect-scene-type", json={"image": "aGVsbG8="})
    assert resp.get_json() == {"success": True, "type": "product"}
    assert seen["timeout"] == 2.5
