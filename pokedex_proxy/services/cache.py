import copy
import logging
import threading
import time
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from cachetools import TLRUCache

logger = logging.getLogger(__name__)

# Marca de fallo: None es un payload JSON valido
_MISS = object()


class CacheEntry(NamedTuple):
    payload: Any
    ttl: float


def _entry_expiry(key: str, entry: CacheEntry, now: float) -> float:
    return now + entry.ttl


class TTLCache:
    """Cache clave-valor en memoria con caducidad fija.

    El almacen es un TLRUCache de cachetools (cada entrada caduca segun su
    ttl). Guarda y devuelve copias, asi nadie comparte objetos mutables
    con la cache.
    """

    def __init__(
            self,
            default_ttl: float = 3600,
            clock: Callable[[], float] = time.monotonic,
            maxsize: int = 4096
    ):
        self.default_ttl = default_ttl
        self._store = TLRUCache(maxsize=maxsize, ttu=_entry_expiry, timer=clock)
        # cachetools no es thread-safe
        self._lock = threading.Lock()
        # Lock por clave mientras alguien la esta cargando: [lock, esperando]
        self._key_locks: Dict[str, List[Any]] = {}

    def get(self, key: str) -> Optional[Any]:
        payload = self._lookup(key)
        return None if payload is _MISS else payload

    def put(self, key: str, payload: Any, ttl: Optional[float] = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        entry = CacheEntry(copy.deepcopy(payload), ttl)
        with self._lock:
            self._store[key] = entry

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def fetch(self, key: str, loader: Callable[[], Any], ttl: Optional[float] = None) -> Any:
        # Devuelve lo cacheado o llama a loader y lo guarda.
        # Si loader lanza excepcion no se guarda nada.
        cached = self._lookup(key)
        if cached is not _MISS:
            logger.debug(f"Cache hit: {key}")
            return cached

        lock = self._acquire_key_lock(key)
        try:
            with lock:
                cached = self._lookup(key)
                if cached is not _MISS:
                    logger.debug(f"Cache hit tras esperar: {key}")
                    return cached

                logger.info(f"Cache miss: {key}")
                payload = loader()
                self.put(key, payload, ttl)
                return copy.deepcopy(payload)
        finally:
            self._release_key_lock(key)

    def __len__(self) -> int:
        with self._lock:
            self._store.expire()
            return len(self._store)

    def _lookup(self, key: str) -> Any:
        with self._lock:
            entry = self._store.get(key, _MISS)
            if entry is _MISS:
                return _MISS
            return copy.deepcopy(entry.payload)

    def _acquire_key_lock(self, key: str) -> threading.Lock:
        with self._lock:
            slot = self._key_locks.get(key)
            if slot is None:
                slot = self._key_locks[key] = [threading.Lock(), 0]
            slot[1] += 1
            return slot[0]

    def _release_key_lock(self, key: str) -> None:
        with self._lock:
            slot = self._key_locks[key]
            slot[1] -= 1
            if slot[1] == 0:
                del self._key_locks[key]
