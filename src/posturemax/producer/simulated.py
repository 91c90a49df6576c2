"""Random posture sample producer.

Stand-in for a real classifier: emits a sample every few seconds at a
randomly chosen interval, good with a fixed probability.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import datetime
from typing import Callable

from posturemax.domain.models import StatusSample
from posturemax.producer.base import SampleCallback, SampleProducer

logger = logging.getLogger(__name__)


class RandomSampleProducer(SampleProducer):
    """Emits random samples from an asyncio task."""

    def __init__(
        self,
        min_interval: float = 3.0,
        max_interval: float = 8.0,
        good_probability: float = 0.7,
        seed: int | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        if min_interval <= 0 or max_interval < min_interval:
            raise ValueError("need 0 < min_interval <= max_interval")
        self._min_interval = min_interval
        self._max_interval = max_interval
        self._good_probability = good_probability
        self._rng = random.Random(seed)
        self._clock = clock
        self._task: asyncio.Task | None = None

    @property
    def is_producing(self) -> bool:
        return self._task is not None and not self._task.done()

    def begin(self, callback: SampleCallback) -> None:
        self.stop()
        self._task = asyncio.get_running_loop().create_task(
            self._produce(callback), name="sample-producer"
        )
        logger.debug("Sample production started")

    def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("Sample production stopped")

    def next_sample(self) -> StatusSample:
        return StatusSample(
            timestamp=self._clock(),
            is_good=self._rng.random() < self._good_probability,
        )

    def next_interval(self) -> float:
        return self._rng.uniform(self._min_interval, self._max_interval)

    async def _produce(self, callback: SampleCallback) -> None:
        while True:
            await asyncio.sleep(self.next_interval())
            try:
                callback(self.next_sample())
            except Exception as e:
                logger.error("Sample callback failed: %s", e)
