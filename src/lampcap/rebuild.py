"""Background rebuilds that a newer request can supersede.

Interactive editing fires a rebuild on every parameter change.  CSG caps
can take long enough at high resolution that rebuilds should leave the
caller's thread, but a slow, stale build must never win over a newer one:
each submission takes a generation number, pending older builds are
cancelled, and results from superseded generations are dropped.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import RLock
from typing import Callable, Optional

from lampcap.assembly import LampAssembly, build_lamp
from lampcap.config import LampDesign

logger = logging.getLogger(__name__)

__all__ = ["CapRebuilder"]


class CapRebuilder:
    """Run :func:`build_lamp` on a worker pool, keeping only the newest result."""

    def __init__(self, executor: Optional[ThreadPoolExecutor] = None,
                 builder: Callable[[LampDesign], LampAssembly] = build_lamp):
        self._own_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1,
                                                        thread_name_prefix="lampcap")
        self._builder = builder
        self._lock = RLock()
        self._generation = 0
        self._pending: Optional[Future] = None
        self._latest: Optional[LampAssembly] = None
        self._latest_generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def submit(self, design: LampDesign) -> Future:
        """Schedule a rebuild of ``design``, superseding earlier requests."""

        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._pending is not None and self._pending.cancel():
                logger.debug("cancelled pending rebuild before generation %d", generation)
            future = self._executor.submit(self._run, generation, design)
            self._pending = future
        return future

    def _run(self, generation: int, design: LampDesign) -> Optional[LampAssembly]:
        if generation != self._generation:
            return None
        result = self._builder(design)
        with self._lock:
            if generation != self._generation:
                logger.debug("discarded stale rebuild %d (current %d)",
                             generation, self._generation)
                return None
            self._latest = result
            self._latest_generation = generation
        return result

    def latest(self) -> Optional[LampAssembly]:
        """Result of the newest submission, or ``None`` while it is in flight."""

        with self._lock:
            if self._latest_generation != self._generation:
                return None
            return self._latest

    def shutdown(self, wait: bool = True) -> None:
        if self._own_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "CapRebuilder":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
