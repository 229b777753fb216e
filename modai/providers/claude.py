"""Anthropic messages API provider"""
from typing import Dict, Sequence

from modai.protocol import ConversationTurn
from .base import Provider

ANTHROPIC_VERSION = "2023-06-01"


class ClaudeProvider(Provider):
    name = "claude"
    default_url = "https://api.anthropic.com/v1/messages"
    default_model = "claude-3-sonnet-20240229"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.config.api_key or "",
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def generate_response(self, message: str, system_prompt: str,
                          history: Sequence[ConversationTurn] = ()) -> str:
        # System prompt is a top-level field here, not a message
        payload = {
            "model": self.model,
            "max_tokens": 4096,
            "system": system_prompt,
            "messages": self._chat_messages(message, history),
        }
        data = self._post(self.url, payload)
        return self._extract(data, "content", 0, "text")
