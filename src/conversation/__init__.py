"""
Conversation module: message model and append-only store.

Tenet #7: Immutability by default - Messages are frozen, snapshots are tuples
"""

from src.conversation.message import Message, MessageCategory, Sender
from src.conversation.store import ConversationStore

__all__ = ["Message", "MessageCategory", "Sender", "ConversationStore"]
