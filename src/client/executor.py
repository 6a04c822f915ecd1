"""
Resilient Request Executor - HTTP with Exponential Backoff

Sends one JSON request to the classification service and retries on
transient failure.

Retry Policy:
- Up to max_attempts tries per call (default 3)
- Wait backoff_base_ms * 2^attempt_index between tries (1s, 2s)
- Non-2xx status counts as a failed attempt, not a reply
- Undecodable JSON bodies count as a failed attempt
- After the last attempt, raises RequestFailure

Each call owns its retry budget; nothing is shared between calls.
Backoff waits are awaited, so they suspend only the calling task.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional
import httpx
import structlog

from src.client.config import ClientConfig

logger = structlog.get_logger()

SleepFunc = Callable[[float], Awaitable[Any]]


class RequestFailure(Exception):
    """
    Raised when every attempt for a request has failed.
    
    Attributes:
        attempts: Number of attempts made
        last_error: Underlying error of the final attempt (kept for diagnostics)
    """
    
    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(f"API request failed after {attempts} attempts")


class ResilientExecutor:
    """
    Async HTTP executor with bounded retries.
    
    Design:
    - A fresh httpx.AsyncClient per call (no shared connection state)
    - Transport and sleep are injectable for deterministic tests
    - Only httpx errors and bad JSON are retried; anything else propagates
    
    Example:
        executor = ResilientExecutor(ClientConfig(endpoint=url))
        data = await executor.execute(url, {"user_message": "I feel anxious"})
    """
    
    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: SleepFunc = asyncio.sleep
    ):
        """
        Args:
            config: Retry ceiling, backoff base and timeout
            transport: Optional httpx transport (e.g. httpx.MockTransport)
            sleep: Coroutine used for backoff waits
        """
        self.config = config
        self._transport = transport
        self._sleep = sleep
    
    async def execute(self, endpoint: str, payload: dict) -> Any:
        """
        POST payload to endpoint, retrying on failure.
        
        Args:
            endpoint: Target URL
            payload: JSON-serialisable request body
            
        Returns:
            Parsed JSON response body
            
        Raises:
            RequestFailure: If all attempts failed
        """
        max_attempts = self.config.max_attempts
        last_error: Optional[Exception] = None
        
        for attempt in range(max_attempts):
            try:
                data = await self._attempt(endpoint, payload)
                logger.info(
                    "service_request_succeeded",
                    attempt=attempt + 1,
                    max_attempts=max_attempts
                )
                return data
            except (httpx.HTTPError, ValueError) as e:
                last_error = e
                
                if attempt < max_attempts - 1:
                    delay = self.config.backoff_delay(attempt)
                    logger.warning(
                        "service_request_retry",
                        attempt=attempt + 1,
                        max_attempts=max_attempts,
                        delay_seconds=delay,
                        error=str(e)
                    )
                    await self._sleep(delay)
        
        logger.error(
            "service_request_exhausted",
            attempts=max_attempts,
            error=str(last_error)
        )
        raise RequestFailure(max_attempts, last_error) from last_error
    
    async def _attempt(self, endpoint: str, payload: dict) -> Any:
        """Single attempt. Raises on transport error, non-2xx status or bad JSON."""
        async with httpx.AsyncClient(
            timeout=self.config.timeout_seconds,
            transport=self._transport
        ) as client:
            response = await client.post(
                endpoint,
                json=payload,
                headers={"Content-Type": "application/json"}
            )
            response.raise_for_status()
            return response.json()
