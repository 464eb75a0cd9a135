# fitai/utils/usda_api.py
"""
Cliente mínimo de USDA FoodData Central (https://fdc.nal.usda.gov/api-guide.html).
"""
import logging
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)

FDC_SEARCH_URL = "https://api.nal.usda.gov/fdc/v1/foods/search"

# nutrientName de FDC -> columna de foods
FDC_NUTRIENTS = {
    "Energy": "kcal",
    "Protein": "protein",
    "Carbohydrate, by difference": "carbs",
    "Total lipid (fat)": "fat",
    "Fiber, total dietary": "fiber",
    "Sugars, total including NLEA": "sugar",
    "Total Sugars": "sugar",
    "Sodium, Na": "sodium",
    "Vitamin A, RAE": "vitamin_a",
    "Vitamin C, total ascorbic acid": "vitamin_c",
    "Vitamin D (D2 + D3)": "vitamin_d",
    "Vitamin E (alpha-tocopherol)": "vitamin_e",
    "Vitamin K (phylloquinone)": "vitamin_k",
    "Vitamin B-6": "vitamin_b6",
    "Vitamin B-12": "vitamin_b12",
    "Calcium, Ca": "calcium",
    "Iron, Fe": "iron",
    "Magnesium, Mg": "magnesium",
    "Phosphorus, P": "phosphorus",
    "Potassium, K": "potassium",
    "Zinc, Zn": "zinc",
    "Copper, Cu": "copper",
    "Manganese, Mn": "manganese",
    "Selenium, Se": "selenium",
    "Iodine, I": "iodine",
    "Cholesterol": "cholesterol",
    "Water": "water",
}


def extract_nutrients(fdc_food: dict) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for n in fdc_food.get("foodNutrients", []) or []:
        field = FDC_NUTRIENTS.get(n.get("nutrientName"))
        if not field or field in out:
            continue
        # Energy viene en kcal y kJ: sólo nos vale la primera en KCAL
        if field == "kcal" and (n.get("unitName") or "").upper() != "KCAL":
            continue
        try:
            out[field] = float(n.get("value"))
        except (TypeError, ValueError):
            continue
    return out


def search_food(name: str, api_key: str = "DEMO_KEY", timeout: float = 5) -> Optional[dict]:
    """Primer resultado de FDC para `name` como {description, fdcId, nutrients} o None."""
    params = {"query": name, "pageSize": 1, "api_key": api_key}
    try:
        r = requests.get(FDC_SEARCH_URL, params=params, timeout=timeout)
        r.raise_for_status()
        foods = (r.json() or {}).get("foods", [])
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"[usda] error buscando '{name}': {e}")
        return None
    if not foods:
        return None
    first = foods[0]
    return {
        "description": first.get("description") or name,
        "fdcId": first.get("fdcId"),
        "nutrients": extract_nutrients(first),
    }
