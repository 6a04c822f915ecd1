"""
Client module for the remote classification service.

Tenet #4: Fail loud, fail early - Invalid configuration raises at construction
Tenet #11: Graceful degradation - Retry with exponential backoff
"""

from src.client.config import ClientConfig
from src.client.executor import ResilientExecutor, RequestFailure

__all__ = ["ClientConfig", "ResilientExecutor", "RequestFailure"]
