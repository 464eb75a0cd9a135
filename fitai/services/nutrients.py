# fitai/services/nutrients.py
"""
Lista explícita de nutrientes de la tabla 'foods' (todos por 100 g) y la tabla
de bandas de magnitud esperada por campo.

La tabla es el único sitio donde vive la política de escala: el corrector de
unidades, la verificación y los tests la consumen como datos.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

MACRO_FIELDS: Tuple[str, ...] = ("kcal", "protein", "carbs", "fat")

MICRO_FIELDS: Tuple[str, ...] = (
    "fiber", "sugar", "sodium",
    "vitamin_a", "vitamin_c", "vitamin_d", "vitamin_e", "vitamin_k",
    "vitamin_b6", "vitamin_b12",
    "calcium", "iron", "magnesium", "phosphorus", "potassium",
    "zinc", "copper", "manganese", "selenium", "iodine",
    "cholesterol", "water",
)

NUTRIENT_FIELDS: Tuple[str, ...] = MACRO_FIELDS + MICRO_FIELDS


@dataclass(frozen=True)
class Band:
    """Banda [low, high] de valores plausibles por 100 g."""
    low: float
    high: float
    unit: str = "g"

    def contains(self, value: float) -> bool:
        return self.low <= value <= self.high

    def as_tuple(self) -> Tuple[float, float]:
        return (self.low, self.high)


# Bandas genéricas (sin categoría). Los macros se estrechan con la categoría.
NUTRIENT_BANDS: Dict[str, Band] = {
    "kcal":        Band(0, 900, "kcal"),
    "protein":     Band(0, 90),
    "carbs":       Band(0, 100),
    "fat":         Band(0, 100),
    "fiber":       Band(0, 50),
    "sugar":       Band(0, 100),
    "sodium":      Band(0, 8000, "mg"),
    "vitamin_a":   Band(0, 3000, "µg"),
    "vitamin_c":   Band(0, 250, "mg"),
    "vitamin_d":   Band(0, 25, "µg"),
    "vitamin_e":   Band(0, 50, "mg"),
    "vitamin_k":   Band(0, 1000, "µg"),
    "vitamin_b6":  Band(0, 5, "mg"),
    "vitamin_b12": Band(0, 100, "µg"),
    "calcium":     Band(0, 1200, "mg"),
    "iron":        Band(0, 30, "mg"),
    "magnesium":   Band(0, 500, "mg"),
    "phosphorus":  Band(0, 1200, "mg"),
    "potassium":   Band(0, 2000, "mg"),
    "zinc":        Band(0, 15, "mg"),
    "copper":      Band(0, 5, "mg"),
    "manganese":   Band(0, 10, "mg"),
    "selenium":    Band(0, 150, "µg"),
    "iodine":      Band(0, 1000, "µg"),
    "cholesterol": Band(0, 1200, "mg"),
    "water":       Band(0, 100),
}


def is_missing(value) -> bool:
    """None y 0 cuentan como 'sin dato' para el relleno de nutrientes."""
    if value is None:
        return True
    try:
        return float(value) == 0.0
    except (TypeError, ValueError):
        return True
