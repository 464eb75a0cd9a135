# fitai/routes/foods.py

from datetime import datetime

from flask import Blueprint, current_app, jsonify, request
from sqlalchemy import func, or_

from fitai import db
from fitai.errors import NotFound, ValidationError
from fitai.models.audit import FoodAuditLog
from fitai.models.food import Food
from fitai.services.nutrients import MACRO_FIELDS, NUTRIENT_FIELDS
from fitai.utils.off_api import suggest
from fitai.utils.params import parse_limit
from fitai.utils.usda_api import search_food

foods_bp = Blueprint("foods", __name__, url_prefix="/api")

SOURCE_USDA = "USDA"


# -----------------------------------------------------------------------------#
# Helpers
# -----------------------------------------------------------------------------#
def _food_name_from_body() -> str:
    data = request.get_json(silent=True) or {}
    name = (data.get("food") or "").strip()
    if not name:
        raise ValidationError("Field 'food' is required")
    return name


def _local_search(q: str, limit: int):
    like = f"%{q}%"
    return (Food.query
            .filter(or_(Food.name_en.ilike(like), Food.name_local.ilike(like)))
            .order_by(Food.id.asc())
            .limit(limit)
            .all())


def _match_pct(local, reference):
    if local is None or reference is None or reference <= 0:
        return "N/A"
    return round(max(0.0, 100.0 - abs(local - reference) / reference * 100.0), 1)


# -----------------------------------------------------------------------------#
# Búsqueda
# -----------------------------------------------------------------------------#
@foods_bp.post("/search-food")
def search_food_local():
    """{food} -> hasta 10 alimentos locales (404 si no hay ninguno)."""
    name = _food_name_from_body()
    rows = _local_search(name, 10)
    if not rows:
        raise NotFound("Food not found")
    return jsonify([f.to_dict() for f in rows]), 200


@foods_bp.get("/foods/search")
def search_foods():
    """
    Primero la tabla local; si no hay resultados, sugerencias de OpenFoodFacts
    (pasando por la caché de sugerencias).
    """
    q = (request.args.get("q") or "").strip()
    if len(q) < 2:
        return jsonify([]), 200

    limit = min(parse_limit(request.args.get("limit"), 20), 50)

    local = [dict(f.to_dict(), source=f.source or "local") for f in _local_search(q, limit)]
    if local:
        return jsonify(local), 200

    if not current_app.config["OFF_ENABLED"]:
        return jsonify([]), 200
    off_res = suggest(
        q,
        cache=current_app.extensions["fitai_suggestions"],
        limit=limit,
        timeout=current_app.config["EXTERNAL_TIMEOUT"],
    )
    return jsonify(off_res), 200


@foods_bp.get("/foods/<int:food_id>")
def get_food(food_id: int):
    food = db.session.get(Food, food_id)
    if food is None:
        raise NotFound("Food not found")
    return jsonify(food.to_dict(full=True)), 200


# -----------------------------------------------------------------------------#
# USDA FoodData Central
# -----------------------------------------------------------------------------#
@foods_bp.post("/usda-sync")
def usda_sync():
    """Crea/actualiza el alimento con los datos de USDA (fuente de referencia)."""
    name = _food_name_from_body()
    cfg = current_app.config
    usda = search_food(name, api_key=cfg["USDA_API_KEY"], timeout=cfg["EXTERNAL_TIMEOUT"])
    if not usda:
        raise NotFound(f"No USDA data for '{name}'")

    food = Food.query.filter(func.lower(Food.name_en) == name.lower()).first()
    created = food is None
    if created:
        food = Food(name_en=name)
        db.session.add(food)

    for key, value in usda["nutrients"].items():
        if key in NUTRIENT_FIELDS:
            setattr(food, key, value)
    food.source = SOURCE_USDA
    food.region = "global"
    food.is_global = True
    food.accuracy_score = 1.0
    food.updated_at = datetime.utcnow()
    db.session.flush()

    FoodAuditLog.record(food.id, "usda_sync", {
        "fdcId": usda["fdcId"],
        "description": usda["description"],
        "fields": sorted(usda["nutrients"]),
    })
    db.session.commit()
    current_app.logger.info(f"[usda] {'creado' if created else 'actualizado'}: {name}")

    return jsonify({
        "success": True,
        "created": created,
        "fdcId": usda["fdcId"],
        "food": food.to_dict(full=True),
    }), 200


@foods_bp.post("/verify-source")
def verify_source():
    """Compara los macros locales con USDA: % de coincidencia por macro."""
    name = _food_name_from_body()
    food = Food.query.filter(func.lower(Food.name_en) == name.lower()).first()
    if food is None:
        raise NotFound("Food not found")

    cfg = current_app.config
    usda = search_food(name, api_key=cfg["USDA_API_KEY"], timeout=cfg["EXTERNAL_TIMEOUT"])
    if not usda:
        raise NotFound(f"No USDA data for '{name}'")

    reference = usda["nutrients"]
    comparison = {
        key: {
            "local": getattr(food, key),
            "usda": reference.get(key),
            "match": _match_pct(getattr(food, key), reference.get(key)),
        }
        for key in MACRO_FIELDS
    }
    return jsonify({
        "food": food.name_en,
        "usdaDescription": usda["description"],
        "comparison": comparison,
    }), 200
