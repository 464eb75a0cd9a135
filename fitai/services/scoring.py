# fitai/services/scoring.py
import math
from typing import Mapping, Optional, Tuple


def clamp_accuracy(value) -> float:
    """Cualquier score termina en [0, 1]; None/NaN -> 0."""
    try:
        x = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(x):
        return 0.0
    return max(0.0, min(1.0, x))


def score_value(value, bounds: Tuple[float, float]) -> float:
    """
    Confianza 0..1 de un valor frente a su rango [min, max]:
      - None/NaN -> 0
      - dentro del rango -> 1
      - fuera -> decae linealmente hasta 0 a un ancho de rango del borde
    """
    if value is None:
        return 0.0
    try:
        v = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(v):
        return 0.0

    lo, hi = bounds
    if lo <= v <= hi:
        return 1.0
    width = hi - lo
    if width <= 0:
        # rango degenerado (p.ej. proteína de un aceite): fuera = 0
        return 0.0
    diff = lo - v if v < lo else v - hi
    return max(0.0, 1.0 - diff / width)


def score_record(values: Mapping[str, Optional[float]], ranges: Optional[Mapping[str, tuple]]) -> float:
    """
    Media sin pesos de los campos con rango aplicable (los demás no penalizan).
    Sin campos puntuables -> 0.0.
    """
    if not ranges:
        return 0.0
    scores = [score_value(values.get(field), bounds) for field, bounds in ranges.items()]
    if not scores:
        return 0.0
    return round(clamp_accuracy(sum(scores) / len(scores)), 3)


def bump_accuracy(prior, step: float, ceiling: float) -> float:
    """
    Sube el score un paso sin pasar del techo y sin bajar nunca del valor previo.
    """
    prior = clamp_accuracy(prior)
    bumped = min(clamp_accuracy(ceiling), prior + step)
    return round(clamp_accuracy(max(prior, bumped)), 3)
