"""
Conversation Store - append-only message log.

Single source of truth for what is displayed. Created with exactly the
initial bot message; no deletion, no update in place.
"""

from typing import Iterator, Tuple

from src.conversation.message import Message


class ConversationStore:
    """
    Ordered, append-only sequence of messages.
    
    Readers get an immutable tuple from snapshot(), so later appends
    never change a snapshot already handed out.
    
    Note:
        History is unbounded. Fine for one interactive session; a
        long-running deployment would need eviction.
    """
    
    def __init__(self):
        self._messages = [Message.initial()]
    
    def append(self, message: Message) -> None:
        if not isinstance(message, Message):
            raise TypeError(f"Expected Message, got {type(message).__name__}")
        self._messages.append(message)
    
    def snapshot(self) -> Tuple[Message, ...]:
        return tuple(self._messages)
    
    @property
    def last(self) -> Message:
        return self._messages[-1]
    
    def __len__(self) -> int:
        return len(self._messages)
    
    def __iter__(self) -> Iterator[Message]:
        return iter(self.snapshot())
