"""Status sample producers for posturemax.

Public API:
    SampleProducer -- Abstract base class
    RandomSampleProducer -- Random stand-in producer
"""

from posturemax.producer.base import SampleCallback, SampleProducer
from posturemax.producer.simulated import RandomSampleProducer

__all__ = ["RandomSampleProducer", "SampleCallback", "SampleProducer"]
