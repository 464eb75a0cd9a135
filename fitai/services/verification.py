# fitai/services/verification.py
from fitai.models.food import Food
from fitai.services.nutrients import MACRO_FIELDS, MICRO_FIELDS, NUTRIENT_BANDS


def _pct(ok: int, total: int) -> float:
    return round(ok / total * 100, 1) if total else 0.0


def verify_accuracy(sample_size: int = 5) -> dict:
    """
    Auditoría de sólo lectura: % de valores presentes dentro de su banda genérica,
    separado en macros y micros, más una muestra de outliers.
    """
    foods = Food.query.order_by(Food.id.asc()).all()

    macro_ok = macro_total = micro_ok = micro_total = 0
    outliers = []

    for f in foods:
        for key in MACRO_FIELDS + MICRO_FIELDS:
            val = getattr(f, key)
            if not val or val <= 0:
                continue
            in_band = NUTRIENT_BANDS[key].contains(val)
            if key in MACRO_FIELDS:
                macro_total += 1
                macro_ok += in_band
            else:
                micro_total += 1
                micro_ok += in_band
            if not in_band:
                outliers.append({"id": f.id, "food": f.name_en, "issue": f"{key}={val}"})

    macro_accuracy = _pct(macro_ok, macro_total)
    micro_accuracy = _pct(micro_ok, micro_total)
    return {
        "totalFoods": len(foods),
        "macroAccuracy": macro_accuracy,
        "microAccuracy": micro_accuracy,
        "overallAccuracy": round((macro_accuracy + micro_accuracy) / 2, 1),
        "outlierCount": len(outliers),
        "outlierSamples": outliers[:sample_size],
    }
