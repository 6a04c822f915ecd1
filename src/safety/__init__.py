"""
Safety module: classification of service replies.

Tenet #1: Safety First - An unreachable service resolves to crisis guidance
"""

from src.safety.response_classifier import (
    CRISIS_FALLBACK_TEXT,
    INVALID_RESPONSE_TEXT,
    ResponseClassifier,
)
from src.safety.wire import ServiceReply, ServiceRequest

__all__ = [
    "CRISIS_FALLBACK_TEXT",
    "INVALID_RESPONSE_TEXT",
    "ResponseClassifier",
    "ServiceReply",
    "ServiceRequest",
]
