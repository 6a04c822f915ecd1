"""
Conversation message model.

Messages are frozen once created; the store only ever appends them.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Sender(Enum):
    """Who authored a message."""
    USER = "user"
    BOT = "bot"


class MessageCategory(Enum):
    """Classification of a bot message."""
    INITIAL = "initial"  # Synthetic welcome message
    SUPPORT = "support"  # Routine service reply
    CRISIS = "crisis"  # Safety-relevant reply or fail-safe fallback


INITIAL_TEXT = "Hello! I'm Companionly, your AI support. Please share what's on your mind."

BOT_DISPLAY_NAME = "Companionly"
CRISIS_DISPLAY_NAME = "Safety Gateway"
USER_DISPLAY_NAME = "You"


@dataclass(frozen=True)
class Message:
    """
    Immutable conversation message.
    
    Attributes:
        text: Display text (non-empty)
        sender: USER or BOT
        category: Bot messages only; None for user messages
        citation: Optional attribution for bot messages
        
    Example:
        Message(
            text="I hear you.",
            sender=Sender.BOT,
            category=MessageCategory.SUPPORT,
            citation="guide-1"
        )
    """
    text: str
    sender: Sender
    category: Optional[MessageCategory] = None
    citation: Optional[str] = None
    
    def __post_init__(self):
        if not self.text:
            raise ValueError("Message text must not be empty")
        if self.sender is Sender.USER and (self.category is not None or self.citation is not None):
            raise ValueError("User messages carry no category or citation")
        if self.sender is Sender.BOT and self.category is None:
            raise ValueError("Bot messages require a category")
    
    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(text=text, sender=Sender.USER)
    
    @classmethod
    def initial(cls) -> "Message":
        return cls(text=INITIAL_TEXT, sender=Sender.BOT, category=MessageCategory.INITIAL)
    
    @property
    def is_bot(self) -> bool:
        return self.sender is Sender.BOT
    
    @property
    def display_name(self) -> str:
        """Label a renderer shows above the message."""
        if not self.is_bot:
            return USER_DISPLAY_NAME
        if self.category is MessageCategory.CRISIS:
            return CRISIS_DISPLAY_NAME
        return BOT_DISPLAY_NAME
    
    def to_dict(self) -> dict:
        """Plain dict for renderers; absent fields are omitted."""
        data = {"text": self.text, "sender": self.sender.value}
        if self.category is not None:
            data["category"] = self.category.value
        if self.citation is not None:
            data["citation"] = self.citation
        return data
