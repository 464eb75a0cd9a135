# fitai/utils/nutritionix_api.py
import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

NUTRITIONIX_URL = "https://trackapi.nutritionix.com/v2/natural/nutrients"


def natural_nutrients(query: str, app_id: str, api_key: str, timeout: float = 5) -> Optional[dict]:
    """
    Consulta el endpoint de lenguaje natural de Nutritionix y devuelve los
    macros del primer alimento por 100 g, o None si no hay credenciales/resultado.
    """
    if not app_id or not api_key:
        return None
    headers = {
        "x-app-id": app_id,
        "x-app-key": api_key,
        "Content-Type": "application/json",
    }
    try:
        r = requests.post(NUTRITIONIX_URL, json={"query": query}, headers=headers, timeout=timeout)
        r.raise_for_status()
        foods = (r.json() or {}).get("foods", [])
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"[nutritionix] error con '{query}': {e}")
        return None
    if not foods:
        return None

    f = foods[0]
    grams = f.get("serving_weight_grams") or 100
    try:
        factor = 100.0 / float(grams)
    except (TypeError, ValueError, ZeroDivisionError):
        factor = 1.0

    def per100(key):
        v = f.get(key)
        return round(float(v) * factor, 2) if v is not None else None

    return {
        "name": f.get("food_name") or query,
        "kcal": per100("nf_calories"),
        "protein": per100("nf_protein"),
        "carbs": per100("nf_total_carbohydrate"),
        "fat": per100("nf_total_fat"),
        "fiber": per100("nf_dietary_fiber"),
        "sugar": per100("nf_sugars"),
        "sodium": per100("nf_sodium"),
        "cholesterol": per100("nf_cholesterol"),
        "potassium": per100("nf_potassium"),
        "image_url": (f.get("photo") or {}).get("thumb"),
    }
