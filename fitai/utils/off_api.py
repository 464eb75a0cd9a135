# fitai/utils/off_api.py
import logging
from typing import Any, Dict, List, Optional

import requests

from fitai.utils.cache import TTLCache

logger = logging.getLogger(__name__)

OFF_SEARCH_URL = "https://world.openfoodfacts.org/cgi/search.pl"


def _f(x, d=0.0) -> float:
    try:
        return float(x) if x is not None else float(d)
    except (TypeError, ValueError):
        return float(d)


def as_suggestion(p: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Normaliza un producto de OpenFoodFacts (por 100 g)."""
    name = (p.get("product_name") or p.get("product_name_en") or "").strip()
    if not name:
        return None
    n = p.get("nutriments", {}) or {}
    kcal = n.get("energy-kcal_100g")
    # Si solo viene energy_100g (kJ), lo convertimos a kcal aprox.
    if kcal in (None, "", 0) and "energy_100g" in n:
        kcal = _f(n["energy_100g"]) / 4.184
    return {
        "id": None,
        "name": name,
        "kcal": round(_f(kcal), 1),
        "protein": _f(n.get("proteins_100g")),
        "carbs": _f(n.get("carbohydrates_100g")),
        "fat": _f(n.get("fat_100g")),
        "source": "openfoodfacts",
        "source_ref": p.get("code") or "",
    }


def search_off(name: str, limit: int = 5, timeout: float = 5) -> List[Dict[str, Any]]:
    """
    Busca hasta `limit` productos en OpenFoodFacts cuyo nombre contenga `name`.
    Devuelve [] ante cualquier fallo de red o de formato.
    """
    params = {
        "search_terms": name,
        "search_simple": 1,
        "action": "process",
        "json": 1,
        "page_size": min(max(limit, 1), 20),
        "fields": "code,product_name,product_name_en,nutriments",
    }
    try:
        r = requests.get(OFF_SEARCH_URL, params=params, timeout=timeout)
        r.raise_for_status()
        prods = (r.json() or {}).get("products", [])
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"[off] error buscando '{name}': {e}")
        return []

    results = []
    for p in prods:
        row = as_suggestion(p)
        if row:
            results.append(row)
    return results[:limit]


def suggest(name: str, cache: TTLCache, limit: int = 5, timeout: float = 5) -> List[Dict[str, Any]]:
    """search_off a través de la caché de sugerencias (clave: nombre normalizado + limit)."""
    key = (name.strip().lower(), limit)
    cached = cache.get(key)
    if cached is not None:
        return cached
    results = search_off(name, limit=limit, timeout=timeout)
    # sólo se cachean resultados no vacíos
    if results:
        cache.set(key, results)
    return results
