# fitai/services/ranges.py
from typing import Dict, Optional

from fitai.services.nutrients import Band, MACRO_FIELDS

# Rangos científicos por categoría (por 100 g), inclusivos
CATEGORY_RANGES: Dict[str, Dict[str, tuple]] = {
    "meat":         {"kcal": (100, 280), "protein": (18, 30),  "fat": (2, 20),   "carbs": (0, 5)},
    "fish":         {"kcal": (70, 220),  "protein": (16, 26),  "fat": (1, 10),   "carbs": (0, 2)},
    "dairy":        {"kcal": (40, 120),  "protein": (3, 9),    "fat": (1, 7),    "carbs": (3, 10)},
    "vegetable":    {"kcal": (15, 90),   "protein": (1, 4),    "fat": (0, 2),    "carbs": (3, 10)},
    "fruit":        {"kcal": (30, 90),   "protein": (0.5, 2),  "fat": (0, 1),    "carbs": (8, 20)},
    "starch":       {"kcal": (100, 350), "protein": (2, 10),   "fat": (0, 5),    "carbs": (15, 60)},
    "bread/cereal": {"kcal": (200, 450), "protein": (6, 15),   "fat": (1, 8),    "carbs": (30, 70)},
    "fat/oil":      {"kcal": (700, 900), "protein": (0, 0),    "fat": (70, 100), "carbs": (0, 0)},
    "sweet":        {"kcal": (300, 550), "protein": (1, 4),    "fat": (5, 25),   "carbs": (50, 80)},
    "drink":        {"kcal": (0, 80),    "protein": (0, 2),    "fat": (0, 2),    "carbs": (1, 10)},
    "sauce":        {"kcal": (50, 200),  "protein": (1, 5),    "fat": (1, 15),   "carbs": (2, 20)},
}


def ranges_for(category: Optional[str]) -> Optional[Dict[str, tuple]]:
    """Rangos de la categoría, o None (p.ej. 'unknown')."""
    return CATEGORY_RANGES.get(category or "")


def macro_bands(category: Optional[str]) -> Dict[str, Band]:
    """Rangos de la categoría convertidos a bandas del corrector."""
    ranges = ranges_for(category) or {}
    unit = {"kcal": "kcal"}
    return {
        f: Band(lo, hi, unit.get(f, "g"))
        for f, (lo, hi) in ranges.items()
        if f in MACRO_FIELDS
    }
