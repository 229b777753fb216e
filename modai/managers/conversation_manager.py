"""Conversation history manager"""
from typing import Dict, List

from modai.protocol import ConversationTurn


class ConversationManager:
    """Append-only history for one conversation session"""

    def __init__(self):
        self.history: List[ConversationTurn] = []

    def add_user_message(self, content: str):
        """Add a user message to history"""
        self.history.append(ConversationTurn("user", content))

    def add_assistant_message(self, content: str):
        """Add an assistant message to history"""
        self.history.append(ConversationTurn("assistant", content))

    def get_turns(self) -> List[ConversationTurn]:
        """Snapshot of the history; callers cannot append to it"""
        return list(self.history)

    def get_messages(self) -> List[Dict[str, str]]:
        """History as role/content dicts for API requests"""
        return [turn.to_dict() for turn in self.history]

    def __len__(self) -> int:
        return len(self.history)
