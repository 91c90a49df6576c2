"""Abstract base class for status sample producers.

A producer emits timestamped posture samples at its own cadence once
begun, until stopped. The orchestrator only sees the callback, so a real
classifier can replace the random stand-in without touching it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Callable

from posturemax.domain.models import StatusSample

logger = logging.getLogger(__name__)

SampleCallback = Callable[[StatusSample], None]


class SampleProducer(ABC):
    """Source of :class:`StatusSample` values.

    Example usage::

        producer.begin(orchestrator.record_sample)
        ...
        producer.stop()
    """

    @property
    @abstractmethod
    def is_producing(self) -> bool: ...

    @abstractmethod
    def begin(self, callback: SampleCallback) -> None:
        """Start emitting samples to ``callback``.

        Calling begin() while already producing restarts production with
        the new callback.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop emitting samples. Safe to call when not producing."""
        ...
