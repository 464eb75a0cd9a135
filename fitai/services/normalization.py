# fitai/services/normalization.py
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fitai import db
from fitai.models.audit import FoodAuditLog
from fitai.models.food import Food
from fitai.services.corrector import correct_fields
from fitai.services.nutrients import NUTRIENT_BANDS
from fitai.services.scoring import bump_accuracy

logger = logging.getLogger(__name__)

ACTION_NORMALIZATION = "unit_normalization"
RECORD_ERRORS = (ValueError, TypeError, AttributeError, KeyError)


def run_normalization(limit: Optional[int] = 10, step: float = 0.05, ceiling: float = 0.96) -> dict:
    """
    Corrige errores de escala en todos los nutrientes con las bandas genéricas
    (sin clasificar). Devuelve {success, updated, logs}.
    """
    query = Food.query.order_by(Food.id.asc())
    if limit:
        query = query.limit(limit)

    updated = 0
    logs = []
    for food in query.all():
        try:
            _, changes = correct_fields(food.nutrient_values(), NUTRIENT_BANDS)
        except RECORD_ERRORS:
            logger.exception(f"[normalize] food {food.id} ignorado")
            db.session.rollback()
            continue
        if not changes:
            continue

        for c in changes:
            setattr(food, c.field, c.new_value)
        new_accuracy = bump_accuracy(food.accuracy_score, step, ceiling)
        food.accuracy_score = new_accuracy
        food.updated_at = datetime.utcnow()

        change_dicts = [c.to_dict() for c in changes]
        FoodAuditLog.record(food.id, ACTION_NORMALIZATION, {
            "changes": change_dicts,
            "accuracyScore": new_accuracy,
        })
        db.session.commit()

        updated += 1
        logs.append({
            "id": food.id,
            "food": food.name_en,
            "correctedKeys": [c.field for c in changes],
            "changes": change_dicts,
            "accuracy_score": new_accuracy,
        })
        logger.debug(f"[normalize] {food.name_en}: {[c.reason for c in changes]}")

    logger.info(f"[normalize] {updated} alimentos corregidos")
    return {"success": True, "updated": updated, "logs": logs}
