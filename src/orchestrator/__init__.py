"""
Orchestrator module: the conversation state machine.

Tenet #3: Explicit Over Clever - Two states, two transitions
"""

from src.orchestrator.controller import ConversationController, ConversationState

__all__ = ["ConversationController", "ConversationState"]
