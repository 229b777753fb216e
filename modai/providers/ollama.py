"""Local Ollama provider"""
from typing import Sequence

from modai.protocol import ConversationTurn
from .base import Provider


class OllamaProvider(Provider):
    name = "ollama"
    default_url = "http://localhost:11434"
    default_model = "llama2"

    @property
    def url(self) -> str:
        return f"{(self.config.base_url or self.default_url).rstrip('/')}/api/chat"

    def generate_response(self, message: str, system_prompt: str,
                          history: Sequence[ConversationTurn] = ()) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}] + self._chat_messages(message, history),
            "stream": False,
        }
        data = self._post(self.url, payload)
        return self._extract(data, "message", "content")
