"""
Batch generation.

BatchGenerator.generate() is CPU work meant for the COMPUTE pool of the
ThreadManager. It never touches Qt objects, so it is safe off the UI thread.
"""
from __future__ import annotations

import random
import threading
import time
from typing import List, Optional

from core.logging.logger import get_logger
from core.logging.tags import TAG_GEN, TAG_PERF
from engine.errors import GenerationCancelled, GenerationError
from engine.shape_factory import ShapeFactory
from engine.shapes import Batch, ShapeSpec

logger = get_logger(__name__)


class BatchGenerator:
    """Builds a Batch by calling the factory ``count`` times, in order.

    The random source is owned by the generator and mutated only by
    generate(); the scheduler guarantees at most one call is in flight.
    """

    def __init__(self, factory: ShapeFactory, rng: Optional[random.Random] = None):
        self.factory = factory
        self.rng = rng if rng is not None else random.Random()
        self._sequence = 0

    def generate(self, count: int, cancel_event: Optional[threading.Event] = None) -> Batch:
        """
        Produce exactly ``count`` shapes.

        Args:
            count: Number of shapes, a non-negative int
            cancel_event: Optional event checked between shapes

        Returns:
            Batch with the shapes in production order

        Raises:
            GenerationCancelled: if ``cancel_event`` was set mid-batch
            GenerationError: for a bad count or any failure while producing
        """
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise GenerationError(f"Shape count must be a non-negative int, got {count!r}")

        start = time.perf_counter()
        shapes: List[ShapeSpec] = []
        for index in range(count):
            if cancel_event is not None and cancel_event.is_set():
                raise GenerationCancelled(f"Generation cancelled after {index} of {count} shapes")
            try:
                shapes.append(self.factory.produce(self.rng))
            except Exception as e:
                raise GenerationError(f"Failed producing shape {index} of {count}: {e}") from e

        self._sequence += 1
        elapsed = time.perf_counter() - start
        logger.debug("%s %s Batch #%d: %d shapes in %.1fms",
                     TAG_GEN, TAG_PERF, self._sequence, count, elapsed * 1000.0)
        return Batch(tuple(shapes), sequence=self._sequence, generation_seconds=elapsed)
