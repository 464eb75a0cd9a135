# fitai/services/scene.py
import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from typing import Callable

logger = logging.getLogger(__name__)

FALLBACK_SCENE = "meal"
SCENE_TYPES = ("meal", "product")

# Pool compartido: la llamada que pierde la carrera termina en segundo plano
_pool = ThreadPoolExecutor(max_workers=8, thread_name_prefix="scene")


def detect_scene_type(classify: Callable[[], str], timeout: float = 4) -> str:
    """
    Carrera entre la clasificación externa y un timeout fijo: gana lo primero.
    Timeout, error o respuesta fuera de SCENE_TYPES -> 'meal'.
    """
    future = _pool.submit(classify)
    try:
        result = future.result(timeout=timeout)
    except FutureTimeout:
        logger.info(f"[scene] sin respuesta en {timeout}s, se usa '{FALLBACK_SCENE}'")
        return FALLBACK_SCENE
    except Exception as e:
        logger.warning(f"[scene] fallo clasificando: {e}")
        return FALLBACK_SCENE

    return result if result in SCENE_TYPES else FALLBACK_SCENE
