# fitai/services/plate.py
"""
Análisis de un plato: ingredientes (visión) -> tabla foods o Nutritionix -> totales.
Los valores son por 100 g: no se estima el peso de cada ingrediente.
"""
import logging
from typing import Callable, List, Optional

from sqlalchemy import func

from fitai import db
from fitai.models.food import Food
from fitai.services.nutrients import NUTRIENT_FIELDS
from fitai.utils.matching import find_local_food

logger = logging.getLogger(__name__)

SOURCE_NUTRITIONIX = "nutritionix"

Lookup = Callable[[str], Optional[dict]]


def _item(name: str, food: Food, matched: str) -> dict:
    return {
        "name": name,
        "foodId": food.id,
        "food": food.name_en,
        "matched": matched,
        "source": food.source,
        "calories": food.kcal or 0,
        "protein": food.protein or 0,
        "carbs": food.carbs or 0,
        "fat": food.fat or 0,
    }


def _save_external(name: str, data: dict) -> Food:
    """Guarda (o reutiliza) el resultado de Nutritionix en foods."""
    name_en = (data.get("name") or name).strip()
    food = Food.query.filter(func.lower(Food.name_en) == name_en.lower()).first()
    if food:
        return food
    food = Food(name_en=name_en, source=SOURCE_NUTRITIONIX, image_url=data.get("image_url"))
    for key, value in data.items():
        if key in NUTRIENT_FIELDS:
            setattr(food, key, value)
    db.session.add(food)
    db.session.commit()
    logger.info(f"[plate] nuevo alimento desde Nutritionix: {name_en}")
    return food


def resolve_ingredient(name: str, lookup: Lookup) -> Optional[dict]:
    food = find_local_food(name)
    if food:
        return _item(name, food, "local")
    data = lookup(name)
    if not data:
        logger.info(f"[plate] ingrediente sin datos: {name}")
        return None
    return _item(name, _save_external(name, data), SOURCE_NUTRITIONIX)


def summarize(items: List[dict]) -> dict:
    return {
        "calories": round(sum(i["calories"] for i in items), 1),
        "protein": round(sum(i["protein"] for i in items), 1),
        "carbs": round(sum(i["carbs"] for i in items), 1),
        "fat": round(sum(i["fat"] for i in items), 1),
    }


def analyze_plate(ingredients: List[str], lookup: Lookup) -> dict:
    items = []
    for name in ingredients:
        item = resolve_ingredient(name, lookup)
        if item:
            items.append(item)
    return {"items": items, "totals": summarize(items)}
