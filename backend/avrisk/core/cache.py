"""Cache de vistas del dashboard, indexado por generación de la colección."""

import time
from collections import OrderedDict
from datetime import date
from typing import Callable, Generic, Hashable, TypeVar

V = TypeVar("V")

ViewKey = tuple[Hashable, date]


class ViewCache(Generic[V]):
    """
    Vistas derivadas de una generación de la colección, con TTL y LRU.

    Cada generación invalida las vistas de las anteriores: al guardar una
    vista de una generación nueva se descartan todas las demás.

    Uso:
        views = ViewCache[TieredBuckets](ttl_seconds=60, max_size=64)
        view = views.lookup(generation, filters, today)
        if view is None:
            views.store(generation, filters, today, derive_view(...))
    """

    def __init__(
        self,
        ttl_seconds: float,
        max_size: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._max_size = max_size
        self._clock = clock
        self._generation: int | None = None
        self._views: OrderedDict[ViewKey, tuple[float, V]] = OrderedDict()

    @property
    def generation(self) -> int | None:
        return self._generation

    def lookup(self, generation: int, filters: Hashable, day: date) -> V | None:
        """Vista vigente para (filtros, día) si pertenece a `generation`."""
        if generation != self._generation:
            return None

        key = (filters, day)
        entry = self._views.get(key)
        if entry is None:
            return None

        stored_at, view = entry
        if self._clock() - stored_at > self._ttl_seconds:
            del self._views[key]
            return None

        self._views.move_to_end(key)
        return view

    def store(self, generation: int, filters: Hashable, day: date, view: V) -> None:
        """Guarda una vista; una generación distinta vacía el cache primero."""
        if generation != self._generation:
            self._views.clear()
            self._generation = generation

        key = (filters, day)
        self._views[key] = (self._clock(), view)
        self._views.move_to_end(key)
        # Eviction LRU
        while len(self._views) > self._max_size:
            self._views.popitem(last=False)

    def __len__(self) -> int:
        return len(self._views)
