# tests/test_cli.py

import csv
import json

import pytest

from fitai.models.food import Food


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


def test_import_from_json(runner, tmp_path):
    path = tmp_path / "foods.json"
    path.write_text(json.dumps([
        {"name_en": "Apple", "kcal": 52, "carbs": "14", "region": "es", "is_global": "true"},
        {"name": "Brown rice", "kcal": 111},
        {"kcal": 10},  # sin nombre: se ignora
    ]), encoding="utf-8")

    result = runner.invoke(args=["foods", "import", "--from-json", str(path)])
    assert result.exit_code == 0
    assert "Nuevos: 2" in result.output

    apple = Food.query.filter_by(name_en="Apple").one()
    assert apple.carbs == 14.0
    assert apple.is_global is True

    # segunda importación: actualiza
    result = runner.invoke(args=["foods", "import", "--from-json", str(path)])
    assert "Actualizados: 2" in result.output
    assert Food.query.count() == 2


def test_import_from_csv(runner, tmp_path):
    path = tmp_path / "foods.csv"
    path.write_text("name_en,kcal,protein,sodium\nSalmon fillet,208,20,\n", encoding="utf-8")

    result = runner.invoke(args=["foods", "import", "--from-csv", str(path)])
    assert result.exit_code == 0
    salmon = Food.query.one()
    assert salmon.kcal == 208
    assert salmon.sodium is None


def test_import_missing_file(runner):
    result = runner.invoke(args=["foods", "import", "--from-csv", "/nope/foods.csv"])
    assert "No se encontró" in result.output
    assert Food.query.count() == 0


def test_dedupe_keeps_lowest_id(runner, add_food):
    first = add_food("Apple", kcal=52)
    add_food("apple ", kcal=50)
    add_food("Pear", kcal=57)

    result = runner.invoke(args=["foods", "dedupe"])
    assert "Duplicados eliminados: 1" in result.output
    assert [f.id for f in Food.query.filter(Food.name_en.ilike("apple%")).all()] == [first.id]
    assert Food.query.count() == 2


def test_reset_requires_confirmation(runner, add_food):
    add_food("Apple", kcal=52)
    runner.invoke(args=["foods", "reset"])
    assert Food.query.count() == 1

    result = runner.invoke(args=["foods", "reset", "--yes"])
    assert result.exit_code == 0
    assert Food.query.count() == 0


def test_check_and_ensure_columns(runner):
    result = runner.invoke(args=["foods", "check-columns"])
    assert "Esquema OK" in result.output
    assert "accuracy_score" in result.output

    result = runner.invoke(args=["foods", "ensure-columns"])
    assert "Columnas añadidas: 0" in result.output


def test_export(runner, add_food, tmp_path):
    add_food("Apple", kcal=52, vitamin_c=4.6)
    dest = tmp_path / "out" / "foods.csv"

    result = runner.invoke(args=["foods", "export", "--to", str(dest)])
    assert "Exportado 1" in result.output
    with open(dest, encoding="utf-8") as fh:
        rows = list(csv.DictReader(fh))
    assert rows[0]["name_en"] == "Apple"
    assert rows[0]["vitamin_c"] == "4.6"


def test_calibrate_commands(runner, add_food):
    add_food("Olive oil", kcal=9, protein=0, fat=100, carbs=0)
    add_food("Soy sauce", sodium=40000)

    result = runner.invoke(args=["calibrate", "normalize", "--limit", "5"])
    assert result.exit_code == 0
    assert "Alimentos corregidos: 1" in result.output

    result = runner.invoke(args=["calibrate", "run"])
    assert result.exit_code == 0
    assert "calibrados: 2" in result.output
    assert Food.query.filter_by(name_en="Olive oil").one().kcal == 900
