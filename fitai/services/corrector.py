# fitai/services/corrector.py
"""
Corrector de errores de escala (µg guardados como mg, kJ/g cruzados, etc.).

Política única para todos los campos:
  1. None, NaN, <= 0 o ya dentro de su banda -> no se toca.
  2. El valor tiene que salirse de la banda al menos MIN_SCALE_EVIDENCE veces;
     si no, es un valor raro pero no un error de unidad.
  3. Se prueba 10, 100 y 1000 en la dirección de la banda; gana la primera
     potencia que deja el valor dentro de la banda ampliada por LANDING_TOLERANCE.
  4. El resultado se recorta a [low, high], así que corregir dos veces no cambia nada.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from fitai.services.nutrients import Band, NUTRIENT_BANDS

MIN_SCALE_EVIDENCE = 5.0
LANDING_TOLERANCE = 2.0
POWERS = (1, 2, 3)


@dataclass(frozen=True)
class FieldChange:
    field: str
    old_value: float
    new_value: float
    reason: str

    def to_dict(self) -> dict:
        return {
            "field": self.field,
            "oldValue": self.old_value,
            "newValue": self.new_value,
            "reason": self.reason,
        }


def correct_value(field: str, value, band: Optional[Band] = None) -> Tuple[Optional[float], Optional[FieldChange]]:
    """
    Devuelve (valor, cambio). Si no hay corrección, el valor vuelve tal cual y cambio=None.
    Un valor no numérico lanza ValueError/TypeError (lo gestiona el lote).
    """
    band = band or NUTRIENT_BANDS.get(field)
    if band is None or value is None:
        return value, None

    v = float(value)
    if math.isnan(v) or v <= 0 or band.high <= 0 or band.contains(v):
        return value, None

    if v > band.high:
        if v < band.high * MIN_SCALE_EVIDENCE:
            return value, None
        going_up = False
    else:
        if v * MIN_SCALE_EVIDENCE > band.low:
            return value, None
        going_up = True

    lo_ok = band.low / LANDING_TOLERANCE
    hi_ok = band.high * LANDING_TOLERANCE
    for power in POWERS:
        factor = 10 ** power
        scaled = v * factor if going_up else v / factor
        if lo_ok <= scaled <= hi_ok:
            new = min(max(round(scaled, 4), band.low), band.high)
            side = "below" if going_up else "above"
            op = "x" if going_up else "/"
            reason = f"{op}{factor} ({side} {band.low:g}-{band.high:g} {band.unit})"
            return new, FieldChange(field, v, new, reason)

    # Ninguna potencia de diez lo explica: outlier, pero no se toca
    return value, None


def correct_fields(values: Mapping[str, Optional[float]],
                   bands: Mapping[str, Band]) -> Tuple[Dict[str, Optional[float]], List[FieldChange]]:
    """Aplica correct_value a cada campo con banda. No modifica la entrada."""
    out = dict(values)
    changes: List[FieldChange] = []
    for field, band in bands.items():
        if field not in out:
            continue
        new, change = correct_value(field, out[field], band)
        if change:
            out[field] = new
            changes.append(change)
    return out, changes


def bands_for_category(ranges_bands: Mapping[str, Band]) -> Dict[str, Band]:
    """Bandas genéricas con los macros sustituidos por los de la categoría."""
    bands = dict(NUTRIENT_BANDS)
    bands.update(ranges_bands)
    return bands
