# fitai/services/calibration.py
"""
Calibración científica de la tabla foods.

Un único pase secuencial: para cada alimento
  clasificar -> puntuar macros -> corregir escala -> (si procede) guardar + auditar.
Cada alimento se confirma por separado; un fallo de datos en uno no aborta el lote.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from fitai import db
from fitai.models.audit import FoodAuditLog
from fitai.models.food import Food
from fitai.services.classifier import detect_category
from fitai.services.corrector import FieldChange, bands_for_category, correct_fields
from fitai.services.ranges import macro_bands, ranges_for
from fitai.services.scoring import score_record

logger = logging.getLogger(__name__)

ACTION_CALIBRATION = "scientific_calibration"
ACTION_BATCH = "scientific_batch"

# Errores de forma de un registro concreto (se registran y se sigue)
RECORD_ERRORS = (ValueError, TypeError, AttributeError, KeyError)


@dataclass
class CalibrationResult:
    category: str
    initial_accuracy: Optional[float]
    final_accuracy: Optional[float]
    changes: List[FieldChange] = field(default_factory=list)


@dataclass
class CalibrationSummary:
    total_foods: int = 0
    calibrated: int = 0
    outliers: int = 0
    average_accuracy: float = 0.0
    date: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "totalFoods": self.total_foods,
            "calibrated": self.calibrated,
            "outliers": self.outliers,
            "averageAccuracy": self.average_accuracy,
            "date": (self.date or datetime.utcnow()).isoformat(),
        }


def calibrate_food(food: Food) -> CalibrationResult:
    """Cálculo puro (no toca la sesión)."""
    category = detect_category(food.name_en or food.name_local)
    ranges = ranges_for(category)

    values = food.nutrient_values()
    initial = score_record(values, ranges) if ranges else None

    corrected, changes = correct_fields(values, bands_for_category(macro_bands(category)))
    final = score_record(corrected, ranges) if ranges else None

    return CalibrationResult(category, initial, final, changes)


def _needs_persist(food: Food, result: CalibrationResult, threshold: float) -> bool:
    if result.changes:
        return True
    if result.initial_accuracy is not None and result.initial_accuracy < threshold:
        return True
    if food.category != result.category:
        return True
    return result.final_accuracy is not None and food.accuracy_score != result.final_accuracy


def _persist(food: Food, result: CalibrationResult, now: datetime) -> None:
    before = {c.field: c.old_value for c in result.changes}
    after = {c.field: c.new_value for c in result.changes}

    for c in result.changes:
        setattr(food, c.field, c.new_value)
    previous_category = food.category
    food.category = result.category
    if result.final_accuracy is not None:
        food.accuracy_score = result.final_accuracy
    food.updated_at = now

    FoodAuditLog.record(food.id, ACTION_CALIBRATION, {
        "category": result.category,
        "previousCategory": previous_category,
        "initialAccuracy": result.initial_accuracy,
        "accuracyScore": result.final_accuracy,
        "before": before,
        "after": after,
        "changes": [c.to_dict() for c in result.changes],
    })
    db.session.commit()


def run_calibration(limit: Optional[int] = None, threshold: float = 0.8) -> CalibrationSummary:
    """
    Recorre todos los alimentos (o los `limit` primeros por id).
    Los errores de almacenamiento se propagan; los de datos se registran y se sigue.
    """
    query = Food.query.order_by(Food.id.asc())
    if limit:
        query = query.limit(limit)
    foods = query.all()

    summary = CalibrationSummary(total_foods=len(foods))
    total_accuracy = 0.0

    for food in foods:
        try:
            result = calibrate_food(food)
        except RECORD_ERRORS:
            logger.exception(f"[calibration] food {food.id} ignorado")
            db.session.rollback()
            continue

        if result.final_accuracy is not None:
            summary.calibrated += 1
            total_accuracy += result.final_accuracy
            if result.final_accuracy < threshold:
                summary.outliers += 1

        if _needs_persist(food, result, threshold):
            _persist(food, result, datetime.utcnow())

    if summary.calibrated:
        summary.average_accuracy = round(total_accuracy / summary.calibrated, 3)
    summary.date = datetime.utcnow()

    logger.info(f"[calibration] terminado: {summary.to_dict()}")
    return summary


def run_scientific_batch(limit: Optional[int] = None, threshold: float = 0.8,
                         prev_accuracy: float = 0.0, step: float = 0.05,
                         ceiling: float = 0.96) -> dict:
    """
    Ciclo completo: normalización de unidades -> calibración -> entrada de lote en auditoría.
    """
    from fitai.services.normalization import run_normalization  # evita import circular

    started = datetime.utcnow()
    batch_id = f"run_{started.isoformat()}"

    correction = run_normalization(limit=limit, step=step, ceiling=ceiling)
    calibration = run_calibration(limit=limit, threshold=threshold).to_dict()

    improvement = (float(calibration["averageAccuracy"]) - float(prev_accuracy or 0)) * 100
    improvement_str = f"{improvement:.2f}%"

    FoodAuditLog.record(None, ACTION_BATCH, {
        "batchId": batch_id,
        "correction": {"updated": correction["updated"]},
        "calibration": calibration,
        "improvement": improvement_str,
    })
    db.session.commit()

    return {
        "success": True,
        "batchId": batch_id,
        "correction": correction,
        "calibration": calibration,
        "improvement": improvement_str,
        "date": datetime.utcnow().isoformat(),
    }
