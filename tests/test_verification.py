# tests/test_verification.py


def test_verify_empty_table(client):
    resp = client.get("/api/verify-accuracy")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["totalFoods"] == 0
    assert data["macroAccuracy"] == 0.0
    assert data["microAccuracy"] == 0.0
    assert data["overallAccuracy"] == 0.0
    assert data["outlierSamples"] == []


def test_verify_counts_values_in_band(client, add_food):
    add_food("Grilled chicken breast", kcal=165, protein=25, fat=3.6, carbs=0)
    add_food("Soy sauce", sodium=40000, iron=2)

    data = client.get("/api/verify-accuracy").get_json()
    assert data["totalFoods"] == 2
    assert data["macroAccuracy"] == 100.0
    assert data["microAccuracy"] == 50.0
    assert data["overallAccuracy"] == 75.0
    assert data["outlierCount"] == 1
    assert data["outlierSamples"][0]["food"] == "Soy sauce"
    assert data["outlierSamples"][0]["issue"].startswith("sodium=")


def test_verify_is_read_only(client, add_food):
    from fitai.models.food import Food

    add_food("Soy sauce", sodium=40000)
    client.get("/api/verify-accuracy")
    assert Food.query.one().sodium == 40000
