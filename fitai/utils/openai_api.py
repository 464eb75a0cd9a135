# fitai/utils/openai_api.py
"""
Llamadas a OpenAI (visión y estimaciones). Cliente síncrono: Flask atiende
cada petición en su propio hilo.
"""
import json
import logging
import re
from typing import List, Optional

from openai import OpenAI, OpenAIError

from fitai.errors import ExternalServiceError

logger = logging.getLogger(__name__)

PLATE_PROMPT = (
    "You are a nutrition expert. Return JSON with an 'ingredients' array "
    "(English names) of every food visible on the plate."
)
SCENE_PROMPT = (
    "You are an image classifier for a nutrition app. "
    'Reply with only one word: "meal" or "product".'
)


def make_client(api_key: str, timeout: float = 30) -> OpenAI:
    return OpenAI(api_key=api_key, timeout=timeout)


def _as_data_url(image_b64: str) -> str:
    if image_b64.startswith("data:") or image_b64.startswith("http"):
        return image_b64
    return f"data:image/jpeg;base64,{image_b64}"


def identify_ingredients(client: OpenAI, image_b64: str, model: str = "gpt-4o-mini") -> List[str]:
    """Lista de ingredientes visibles. Falla con ExternalServiceError."""
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": PLATE_PROMPT},
                {"role": "user", "content": [
                    {"type": "image_url", "image_url": {"url": _as_data_url(image_b64)}},
                ]},
            ],
            response_format={"type": "json_object"},
            temperature=0,
        )
        parsed = json.loads(resp.choices[0].message.content or "{}")
    except (OpenAIError, json.JSONDecodeError) as e:
        raise ExternalServiceError(f"Vision analysis failed: {e}") from e

    ingredients = parsed.get("ingredients") or []
    out = []
    for ing in ingredients:
        # a veces llegan como objetos {"name": ...}
        name = ing.get("name") if isinstance(ing, dict) else ing
        if isinstance(name, str) and name.strip():
            out.append(name.strip())
    return out


def classify_scene(client: OpenAI, image: str, model: str = "gpt-4o-mini") -> str:
    """'meal' | 'product'. Cualquier respuesta ambigua cuenta como 'meal'."""
    resp = client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": SCENE_PROMPT},
            {"role": "user", "content": [
                {"type": "image_url", "image_url": {"url": _as_data_url(image)}},
            ]},
        ],
    )
    raw = (resp.choices[0].message.content or "").strip().lower()
    logger.debug(f"[scene] respuesta OpenAI: {raw!r}")
    return "product" if "product" in raw else "meal"


def estimate_nutrient(client: OpenAI, food_name: str, field: str, model: str = "gpt-4o-mini") -> Optional[float]:
    """Estimación numérica por 100 g; None si no hay número utilizable."""
    prompt = (
        f"Estimate typical amount of {field.replace('_', ' ')} in 100g of {food_name}. "
        "Return only numeric value."
    )
    try:
        resp = client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": "You are a precise food nutrition scientist."},
                {"role": "user", "content": prompt},
            ],
            temperature=0,
        )
    except OpenAIError as e:
        logger.warning(f"[estimate] {food_name} ({field}): {e}")
        return None

    content = resp.choices[0].message.content or ""
    match = re.search(r"\d+(?:\.\d+)?", content)
    if not match:
        return None
    value = float(match.group(0))
    return value if value > 0 else None
