# fitai/utils/params.py
from typing import Optional


def parse_limit(value, default: Optional[int] = None) -> Optional[int]:
    """
    `limit` de un cuerpo JSON o querystring. Ausente, no numérico o <= 0 -> default.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        n = int(float(value))
    except (TypeError, ValueError):
        return default
    return n if n > 0 else default


def parse_float(value, default: float = 0.0) -> float:
    try:
        return float(value) if value is not None else float(default)
    except (TypeError, ValueError):
        return float(default)
