# fitai/utils/cache.py
import threading
import time
from typing import Any, Callable, Hashable, Optional

import cachetools


class TTLCache:
    """
    Caché de sugerencias sobre cachetools.TTLCache, compartida entre hilos de peticiones.

    - El reloj se inyecta (por defecto time.monotonic) para poder probar la caducidad.
    - Al llenarse se expulsa la entrada usada hace más tiempo (LRU).
    - Las entradas caducadas dejan de verse al instante; purge_expired() las libera.
    """

    def __init__(self, ttl: float = 600, maxsize: int = 256, clock: Callable[[], float] = time.monotonic):
        if maxsize < 1:
            raise ValueError("maxsize debe ser >= 1")
        self.ttl = float(ttl)
        self.maxsize = int(maxsize)
        self._cache: cachetools.TTLCache = cachetools.TTLCache(maxsize=self.maxsize, ttl=self.ttl, timer=clock)
        # cachetools no es thread-safe
        self._lock = threading.Lock()

    def get(self, key: Hashable, default: Optional[Any] = None) -> Any:
        with self._lock:
            return self._cache.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._cache[key] = value

    def purge_expired(self) -> int:
        """Elimina las entradas caducadas y devuelve cuántas se han quitado."""
        with self._lock:
            before = len(self._cache)
            self._cache.expire()
            return before - len(self._cache)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._cache

    def __len__(self) -> int:
        with self._lock:
            self._cache.expire()
            return len(self._cache)
