# tests/test_api_foods.py

import fitai.routes.foods as foods_routes
import fitai.utils.off_api as off_api
from fitai.models.audit import FoodAuditLog
from fitai.models.food import Food


def _usda(**nutrients):
    return {"description": "Chicken, broilers, breast, grilled", "fdcId": 171477, "nutrients": nutrients}


# -----------------------------------------------------------------------------#
# Salud
# -----------------------------------------------------------------------------#
def test_health(client):
    assert client.get("/healthz").get_json() == {"status": "ok"}
    resp = client.get("/ping")
    assert resp.status_code == 200
    assert resp.data == b"pong"


def test_unknown_api_route_is_json(client):
    resp = client.get("/api/does-not-exist")
    assert resp.status_code == 404
    assert "error" in resp.get_json()


# -----------------------------------------------------------------------------#
# Búsqueda local
# -----------------------------------------------------------------------------#
def test_search_food_requires_name(client):
    resp = client.post("/api/search-food", json={})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Field 'food' is required"}


def test_search_food_local(client, add_food):
    add_food("Grilled chicken breast", name_local="Pechuga de pollo", kcal=165)
    add_food("Apple", kcal=52)

    resp = client.post("/api/search-food", json={"food": "pollo"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert [f["name_en"] for f in data] == ["Grilled chicken breast"]
    assert data[0]["kcal"] == 165

    assert client.post("/api/search-food", json={"food": "durian"}).status_code == 404


def test_foods_search_prefers_local(client, add_food, monkeypatch):
    add_food("Apple", kcal=52)
    monkeypatch.setattr(off_api, "search_off", lambda *a, **k: _must_not_call())

    resp = client.get("/api/foods/search?q=app")
    data = resp.get_json()
    assert resp.status_code == 200
    assert data[0]["name_en"] == "Apple"
    assert data[0]["source"] == "local"


def _must_not_call():
    raise AssertionError("no debería consultar OpenFoodFacts")


def test_foods_search_short_query(client):
    assert client.get("/api/foods/search?q=a").get_json() == []


def test_foods_search_off_fallback_is_cached(client, monkeypatch):
    calls = []

    def fake_search(name, limit=5, timeout=5):
        calls.append(name)
        return [{"id": None, "name": "Skyr natural", "kcal": 63, "source": "openfoodfacts"}]

    monkeypatch.setattr(off_api, "search_off", fake_search)

    first = client.get("/api/foods/search?q=skyr").get_json()
    second = client.get("/api/foods/search?q=Skyr").get_json()
    assert first == second
    assert first[0]["source"] == "openfoodfacts"
    assert calls == ["skyr"]


def test_foods_search_off_disabled(app, client, monkeypatch):
    app.config["OFF_ENABLED"] = False
    monkeypatch.setattr(off_api, "search_off", lambda *a, **k: _must_not_call())
    assert client.get("/api/foods/search?q=skyr").get_json() == []


def test_off_failures_not_cached(app, monkeypatch):
    monkeypatch.setattr(off_api, "search_off", lambda *a, **k: [])
    cache = app.extensions["fitai_suggestions"]
    assert off_api.suggest("kefir", cache) == []
    assert len(cache) == 0


def test_off_suggestion_normalization():
    row = off_api.as_suggestion({
        "code": "123",
        "product_name": "Granola",
        "nutriments": {"energy_100g": 1841, "proteins_100g": 9, "fat_100g": "15"},
    })
    assert row["kcal"] == 440.0
    assert row["fat"] == 15.0
    assert row["carbs"] == 0.0
    assert off_api.as_suggestion({"product_name": "  "}) is None


def test_get_food_by_id(client, add_food):
    f = add_food("Apple", kcal=52, vitamin_c=4.6)
    data = client.get(f"/api/foods/{f.id}").get_json()
    assert data["name_en"] == "Apple"
    assert data["vitamin_c"] == 4.6
    assert client.get("/api/foods/999").status_code == 404


# -----------------------------------------------------------------------------#
# USDA
# -----------------------------------------------------------------------------#
def test_usda_sync_creates_reference_record(client, monkeypatch):
    monkeypatch.setattr(foods_routes, "search_food",
                        lambda name, api_key, timeout: _usda(kcal=151, protein=30.5, fat=3.2, carbs=0))

    resp = client.post("/api/usda-sync", json={"food": "Grilled chicken breast"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["created"] is True
    assert data["fdcId"] == 171477

    f = Food.query.filter_by(name_en="Grilled chicken breast").one()
    assert f.source == "USDA"
    assert f.region == "global"
    assert f.is_global is True
    assert f.accuracy_score == 1.0
    assert f.protein == 30.5
    assert FoodAuditLog.query.filter_by(action="usda_sync").count() == 1


def test_usda_sync_updates_existing(client, add_food, monkeypatch):
    add_food("Apple", kcal=10, accuracy_score=0.2)
    monkeypatch.setattr(foods_routes, "search_food",
                        lambda name, api_key, timeout: _usda(kcal=52))

    data = client.post("/api/usda-sync", json={"food": "apple"}).get_json()
    assert data["created"] is False
    assert Food.query.one().kcal == 52


def test_usda_sync_not_found(client, monkeypatch):
    monkeypatch.setattr(foods_routes, "search_food", lambda name, api_key, timeout: None)
    resp = client.post("/api/usda-sync", json={"food": "moon cheese"})
    assert resp.status_code == 404
    assert Food.query.count() == 0


def test_verify_source(client, add_food, monkeypatch):
    add_food("Grilled chicken breast", kcal=165, protein=25, fat=None, carbs=0)
    monkeypatch.setattr(foods_routes, "search_food",
                        lambda name, api_key, timeout: _usda(kcal=150, protein=25, fat=3, carbs=0))

    resp = client.post("/api/verify-source", json={"food": "Grilled chicken breast"})
    assert resp.status_code == 200
    cmp = resp.get_json()["comparison"]
    assert cmp["kcal"]["match"] == 90.0
    assert cmp["protein"]["match"] == 100.0
    assert cmp["fat"]["match"] == "N/A"
    assert cmp["carbs"]["match"] == "N/A"


def test_verify_source_unknown_food(client):
    resp = client.post("/api/verify-source", json={"food": "Durian"})
    assert resp.status_code == 404
