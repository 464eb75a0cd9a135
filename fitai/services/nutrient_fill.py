# fitai/services/nutrient_fill.py
"""
Relleno de nutrientes que faltan (None o 0).

Orden de fuentes por campo:
  1. media de los alimentos globales de la misma región,
  2. media del data hub (nutrient_averages),
  3. estimación del LLM (sólo si se pasa un `estimator`).
Después se pasa el corrector de escala sobre los valores rellenados.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, Optional

from sqlalchemy import func

from fitai import db
from fitai.models.audit import FoodAuditLog
from fitai.models.food import Food
from fitai.services.corrector import bands_for_category, correct_fields
from fitai.services.datahub import load_datahub
from fitai.services.nutrients import Band
from fitai.services.ranges import macro_bands
from fitai.services.scoring import bump_accuracy

logger = logging.getLogger(__name__)

ACTION_FILL = "nutrient_fill"
SOURCE_AVERAGE = "FitAI_avg"
RECORD_ERRORS = (ValueError, TypeError, AttributeError, KeyError)

Estimator = Callable[[str, str], Optional[float]]


class _RegionAverages:
    """Medias por (región, campo) de los alimentos globales, calculadas bajo demanda."""

    def __init__(self):
        self._cache: Dict[tuple, Optional[float]] = {}

    def get(self, region: Optional[str], field: str) -> Optional[float]:
        if not region:
            return None
        key = (region, field)
        if key not in self._cache:
            col = getattr(Food, field)
            avg = (db.session.query(func.avg(col))
                   .filter(Food.is_global.is_(True), Food.region == region, col > 0)
                   .scalar())
            self._cache[key] = round(float(avg), 3) if avg is not None else None
        return self._cache[key]


def _fill_food(food: Food, bands: Dict[str, Band], region_avgs: _RegionAverages,
               hub: Dict[str, float], estimator: Optional[Estimator]) -> Dict[str, dict]:
    filled: Dict[str, dict] = {}
    for field in food.missing_fields():
        # rango [0, 0] en la categoría (proteína de un aceite): el 0 es el dato correcto
        if field in bands and bands[field].high <= 0:
            continue
        value = region_avgs.get(food.region, field)
        provenance = "region_average"
        if value is None:
            value = hub.get(field)
            provenance = "datahub"
        if value is None and estimator is not None:
            value = estimator(food.display_name, field)
            provenance = "ai_estimate"
        if value is None or value <= 0:
            continue
        filled[field] = {"value": value, "provenance": provenance}
    return filled


def run_nutrient_fill(limit: Optional[int] = 10, estimator: Optional[Estimator] = None,
                      step: float = 0.05, ceiling: float = 1.0) -> dict:
    query = Food.query.order_by(Food.id.asc())
    region_avgs = _RegionAverages()
    hub = load_datahub()

    filled_count = 0
    logs = []
    for food in query.all():
        if limit and filled_count >= limit:
            break
        if not food.missing_fields():
            continue
        try:
            bands = bands_for_category(macro_bands(food.category))
            filled = _fill_food(food, bands, region_avgs, hub, estimator)
            if not filled:
                continue
            values = {f: info["value"] for f, info in filled.items()}
            corrected, changes = correct_fields(values, {f: bands[f] for f in values if f in bands})
        except RECORD_ERRORS:
            logger.exception(f"[fill] food {food.id} ignorado")
            db.session.rollback()
            continue

        for f, v in corrected.items():
            filled[f]["value"] = v
            setattr(food, f, v)
        if any(info["provenance"] != "ai_estimate" for info in filled.values()):
            food.source = SOURCE_AVERAGE
        food.accuracy_score = bump_accuracy(food.accuracy_score, step, ceiling)
        food.updated_at = datetime.utcnow()

        FoodAuditLog.record(food.id, ACTION_FILL, {
            "filled": filled,
            "changes": [c.to_dict() for c in changes],
            "accuracyScore": food.accuracy_score,
        })
        db.session.commit()

        filled_count += 1
        logs.append({
            "id": food.id,
            "food": food.name_en,
            "filledKeys": sorted(filled),
            "accuracy_score": food.accuracy_score,
        })

    logger.info(f"[fill] {filled_count} alimentos completados")
    return {"success": True, "filled": filled_count, "logs": logs}
