# fitai/services/datahub.py
import logging
from datetime import datetime
from typing import Dict

from sqlalchemy import func

from fitai import db
from fitai.errors import NotFound
from fitai.models.datahub import NutrientAverage
from fitai.models.food import Food
from fitai.services.nutrients import NUTRIENT_FIELDS

logger = logging.getLogger(__name__)


def refresh_datahub() -> dict:
    """
    Recalcula la media de cada nutriente (sólo valores > 0) sobre toda la tabla
    foods y la guarda en nutrient_averages. Tabla vacía -> NotFound.
    """
    total = db.session.query(func.count(Food.id)).scalar() or 0
    if not total:
        raise NotFound("No foods found")

    now = datetime.utcnow()
    averages: Dict[str, float] = {}
    for key in NUTRIENT_FIELDS:
        col = getattr(Food, key)
        avg, samples = db.session.query(func.avg(col), func.count(col)).filter(col > 0).one()
        if not samples:
            continue
        avg = round(float(avg), 3)
        averages[key] = avg

        row = NutrientAverage.query.filter_by(nutrient_key=key).first()
        if row is None:
            row = NutrientAverage(nutrient_key=key, avg_value=avg)
            db.session.add(row)
        row.avg_value = avg
        row.samples_count = int(samples)
        row.updated_at = now

    db.session.commit()
    logger.info(f"[datahub] {len(averages)} medias actualizadas sobre {total} alimentos")
    return {"success": True, "totalFoods": total, "updated": len(averages), "averages": averages}


def load_datahub() -> Dict[str, float]:
    return {row.nutrient_key: row.avg_value for row in NutrientAverage.query.all()}
