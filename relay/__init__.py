"""Resilient delivery to the webhook consumer - Module Exports"""

from .downstream import DownstreamClient, DownstreamError, DownstreamResponse
from .gate import DeliveryGate
from .queue import ReactionSource, RelayItem, RetryQueue

__all__ = [
    "DownstreamClient",
    "DownstreamError",
    "DownstreamResponse",
    "DeliveryGate",
    "ReactionSource",
    "RelayItem",
    "RetryQueue",
]
