"""
Response Classifier - Service Reply to Bot Message

Maps the outcome of one service call onto exactly one bot Message.

Decision Logic:
- Reply present: status "crisis" -> CRISIS, anything else -> SUPPORT
- Reply present, response text missing/empty -> fixed "no valid text" string
- Request failed terminally -> fixed CRISIS fallback pointing to 988

Trust boundary:
    Payload content alone can only reach CRISIS through an explicit
    status "crisis". A malformed reply degrades to SUPPORT; only total
    request failure triggers the hard-coded crisis fallback.

classify() never raises.
"""

from typing import Any, Optional, Union
import structlog

from src.client.executor import RequestFailure
from src.conversation.message import Message, MessageCategory, Sender
from src.safety.wire import ServiceReply

logger = structlog.get_logger()

INVALID_RESPONSE_TEXT = "I didn't receive a valid text response."

CRISIS_FALLBACK_TEXT = (
    "I'm sorry, I'm experiencing technical difficulties. "
    "The server may be restarting. "
    "Please try again or reach out to the 988 Suicide & Crisis Lifeline."
)


class ResponseClassifier:
    """
    Turns raw service results into typed bot messages.
    
    Example:
        classifier = ResponseClassifier()
        
        classifier.classify({"status": "support", "response": "I hear you."})
        # Message(text="I hear you.", sender=BOT, category=SUPPORT)
        
        classifier.classify(RequestFailure(attempts=3))
        # Message(text=CRISIS_FALLBACK_TEXT, sender=BOT, category=CRISIS)
    """
    
    def classify(self, result: Union[Any, RequestFailure]) -> Message:
        """
        Classify a parsed reply body, or a RequestFailure.
        
        Args:
            result: Parsed JSON body from the service, or the
                    RequestFailure raised by the executor
                    
        Returns:
            Exactly one bot Message
        """
        if isinstance(result, RequestFailure):
            return self.crisis_fallback(result)
        
        reply = self._parse_reply(result)
        
        category = MessageCategory.CRISIS if reply.status == "crisis" else MessageCategory.SUPPORT
        text = reply.response or INVALID_RESPONSE_TEXT
        citation = reply.source_info or None
        
        if category is MessageCategory.CRISIS:
            logger.warning(
                "crisis_response_received",
                has_citation=citation is not None,
                response_length=len(text)
            )
        
        return Message(text=text, sender=Sender.BOT, category=category, citation=citation)
    
    def crisis_fallback(self, failure: Optional[RequestFailure] = None) -> Message:
        """
        Fixed fail-safe message for an unreachable service.
        
        Uncertainty about system health is treated as a safety event,
        so the turn resolves to crisis-line guidance instead of an error.
        """
        logger.error(
            "crisis_fallback_issued",
            attempts=failure.attempts if failure else None,
            error=str(failure.last_error) if failure and failure.last_error else None
        )
        return Message(
            text=CRISIS_FALLBACK_TEXT,
            sender=Sender.BOT,
            category=MessageCategory.CRISIS
        )
    
    def _parse_reply(self, result: Any) -> ServiceReply:
        if not isinstance(result, dict):
            logger.warning(
                "malformed_service_reply",
                body_type=type(result).__name__
            )
            return ServiceReply()
        return ServiceReply.model_validate(result)
