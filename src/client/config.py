"""
Client configuration for the Companionly service connection.

Values come from explicit arguments first, then the environment
(optionally loaded from a .env file).
"""

from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BACKOFF_BASE_MS = 1000
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable connection settings.
    
    Attributes:
        endpoint: Classification service URL (required)
        max_attempts: Retry ceiling, including the first attempt
        backoff_base_ms: Delay before the first retry; doubles per retry
        timeout_seconds: Per-attempt transport timeout
        
    Example:
        config = ClientConfig(endpoint="https://companionly-api.example.com/chat")
        config.backoff_delay(1)  # 2.0 seconds
    """
    endpoint: str
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    backoff_base_ms: int = DEFAULT_BACKOFF_BASE_MS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    
    def __post_init__(self):
        if not self.endpoint or not self.endpoint.startswith(("http://", "https://")):
            raise ValueError(f"endpoint must be an http(s) URL, got {self.endpoint!r}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.backoff_base_ms < 0:
            raise ValueError(f"backoff_base_ms must be >= 0, got {self.backoff_base_ms}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
    
    def backoff_delay(self, attempt_index: int) -> float:
        """Delay in seconds after the failed attempt at attempt_index (0-based)."""
        return self.backoff_base_ms * (2 ** attempt_index) / 1000
    
    def to_dict(self) -> dict:
        return {
            "endpoint": self.endpoint,
            "max_attempts": self.max_attempts,
            "backoff_base_ms": self.backoff_base_ms,
            "timeout_seconds": self.timeout_seconds,
        }
    
    @classmethod
    def from_env(
        cls,
        endpoint: Optional[str] = None,
        max_attempts: Optional[int] = None,
        backoff_base_ms: Optional[int] = None,
        timeout_seconds: Optional[float] = None
    ) -> "ClientConfig":
        """
        Build config from arguments, falling back to the environment.
        
        Environment:
            COMPANIONLY_API_URL: Service endpoint (required unless passed)
            COMPANIONLY_MAX_ATTEMPTS: Retry ceiling (default: 3)
            COMPANIONLY_BACKOFF_BASE_MS: Initial backoff (default: 1000)
            COMPANIONLY_TIMEOUT_SECONDS: Per-attempt timeout (default: 30)
            
        Raises:
            ValueError: If the endpoint is missing or a setting is invalid
        """
        load_dotenv()
        
        endpoint = endpoint or os.getenv("COMPANIONLY_API_URL")
        if not endpoint:
            raise ValueError("COMPANIONLY_API_URL not set")
        
        if max_attempts is None:
            max_attempts = int(os.getenv("COMPANIONLY_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS)))
        if backoff_base_ms is None:
            backoff_base_ms = int(os.getenv("COMPANIONLY_BACKOFF_BASE_MS", str(DEFAULT_BACKOFF_BASE_MS)))
        if timeout_seconds is None:
            timeout_seconds = float(os.getenv("COMPANIONLY_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
        
        return cls(
            endpoint=endpoint,
            max_attempts=max_attempts,
            backoff_base_ms=backoff_base_ms,
            timeout_seconds=timeout_seconds
        )
