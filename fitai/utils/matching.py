# fitai/utils/matching.py
"""
Emparejador difuso ingenuo entre nombres de ingredientes y la tabla foods.
"""
from typing import Iterable, Optional, Sequence, Tuple

SIMILARITY_THRESHOLD = 0.4
PREFIX_LEN = 3


def _norm(text: Optional[str]) -> str:
    return (text or "").strip().lower()


def string_similarity(a: str, b: str) -> float:
    """
    Proporción de palabras de `a` que comparten las 3 primeras letras con
    alguna palabra de `b`, sobre el número de palabras del nombre más largo.
    """
    words_a = _norm(a).split()
    words_b = _norm(b).split()
    if not words_a or not words_b:
        return 0.0
    matches = 0
    for w in words_a:
        if any(w[:PREFIX_LEN] == x[:PREFIX_LEN] for x in words_b):
            matches += 1
    return matches / max(len(words_a), len(words_b))


def best_match(name: str, candidates: Iterable[Tuple[object, Sequence[Optional[str]]]],
               threshold: float = SIMILARITY_THRESHOLD):
    """
    candidates: pares (objeto, [nombres]). Devuelve el objeto elegido o None.
    1) contención exacta en cualquier dirección; 2) mejor similitud >= threshold.
    """
    query = _norm(name)
    if not query:
        return None

    candidates = list(candidates)
    for obj, names in candidates:
        for n in names:
            n = _norm(n)
            if n and (n in query or query in n):
                return obj

    best, best_score = None, 0.0
    for obj, names in candidates:
        for n in names:
            score = string_similarity(query, n)
            if score > best_score:
                best, best_score = obj, score
    return best if best_score >= threshold else None


def find_local_food(name: str):
    """Busca en la tabla foods el alimento que mejor encaja con `name`."""
    from fitai.models.food import Food

    foods = Food.query.order_by(Food.id.asc()).all()
    return best_match(name, ((f, (f.name_en, f.name_local)) for f in foods))
