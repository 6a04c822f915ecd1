"""
Conversation Controller - One Turn at a Time

State machine:
    Idle     + submit(text) -> Awaiting   (user message appended)
    Awaiting                -> Idle       (exactly one bot message appended)

Guards (silently rejected, no state change, nothing appended):
- Text empty after trimming
- A turn is already in flight

The pending flag is the only concurrency control. It is set before the
first await, so two submissions scheduled on the same loop cannot both
pass the guard.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional, Tuple
import structlog

from src.client.config import ClientConfig
from src.client.executor import RequestFailure, ResilientExecutor
from src.conversation.message import Message
from src.conversation.store import ConversationStore
from src.safety.response_classifier import ResponseClassifier
from src.safety.wire import ServiceRequest

logger = structlog.get_logger()


@dataclass(frozen=True)
class ConversationState:
    """Read-only view for renderers."""
    messages: Tuple[Message, ...]
    pending: bool


class ConversationController:
    """
    Orchestrates user turns against the classification service.
    
    Flow per accepted turn:
    1. Append trimmed user message, set pending
    2. Execute request with retry (ResilientExecutor)
    3. Classify reply or failure (ResponseClassifier)
    4. Append the bot message, clear pending
    
    Errors never escape submit(): a terminal request failure becomes the
    crisis fallback message.
    
    Example:
        controller = ConversationController(ClientConfig.from_env())
        await controller.submit("I feel anxious")
        for message in controller.messages:
            print(message.display_name, message.text)
    """
    
    def __init__(
        self,
        config: ClientConfig,
        executor: Optional[ResilientExecutor] = None,
        classifier: Optional[ResponseClassifier] = None,
        store: Optional[ConversationStore] = None
    ):
        self.config = config
        self.executor = executor or ResilientExecutor(config)
        self.classifier = classifier or ResponseClassifier()
        self._store = store or ConversationStore()
        self._pending = False
        
        logger.info(
            "conversation_controller_initialized",
            max_attempts=config.max_attempts,
            backoff_base_ms=config.backoff_base_ms
        )
    
    @property
    def pending(self) -> bool:
        return self._pending
    
    @property
    def messages(self) -> Tuple[Message, ...]:
        return self._store.snapshot()
    
    def state(self) -> ConversationState:
        return ConversationState(messages=self._store.snapshot(), pending=self._pending)
    
    async def submit(self, text: str) -> bool:
        """
        Run one turn for the given user text.
        
        Args:
            text: Raw user input (trimmed before sending)
            
        Returns:
            True if the turn was accepted, False if rejected by a guard
        """
        user_text = (text or "").strip()
        if not user_text:
            logger.info("turn_rejected", reason="empty_input")
            return False
        if self._pending:
            logger.info("turn_rejected", reason="turn_pending")
            return False
        
        self._store.append(Message.user(user_text))
        self._pending = True
        logger.info("turn_started", text_length=len(user_text))
        
        try:
            bot_message = await self._run_turn(user_text)
            self._store.append(bot_message)
        except asyncio.CancelledError:
            self._store.append(self.classifier.crisis_fallback())
            logger.warning("turn_cancelled")
            raise
        finally:
            self._pending = False

        logger.info(
            "turn_completed",
            category=bot_message.category.value,
            message_count=len(self._store)
        )
        return True
    
    async def _run_turn(self, user_text: str) -> Message:
        payload = ServiceRequest(user_message=user_text).model_dump()
        
        try:
            data = await self.executor.execute(self.config.endpoint, payload)
        except RequestFailure as e:
            return self.classifier.classify(e)
        except Exception as e:
            # Unexpected executor errors still resolve the turn
            logger.error("turn_execution_failed", error=str(e), exc_info=True)
            return self.classifier.classify(RequestFailure(attempts=0, last_error=e))
        
        return self.classifier.classify(data)
