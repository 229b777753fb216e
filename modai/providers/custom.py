"""Any OpenAI-compatible endpoint given by base_url"""
from typing import Dict, Sequence

from modai.protocol import ConversationTurn
from .base import Provider


class CustomProvider(Provider):
    name = "custom"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def generate_response(self, message: str, system_prompt: str,
                          history: Sequence[ConversationTurn] = ()) -> str:
        messages = self._chat_messages(message, history)
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})
        data = self._post(self.url, {"model": self.model, "messages": messages})
        return self._extract(data, "choices", 0, "message", "content")
