"""OpenAI chat completions provider"""
from typing import Dict, Sequence

from modai.protocol import ConversationTurn
from .base import Provider


class OpenAIProvider(Provider):
    name = "openai"
    default_url = "https://api.openai.com/v1/chat/completions"
    default_model = "gpt-4"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.config.api_key}",
        }

    def generate_response(self, message: str, system_prompt: str,
                          history: Sequence[ConversationTurn] = ()) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "system", "content": system_prompt}] + self._chat_messages(message, history),
            "temperature": 0.7,
        }
        data = self._post(self.url, payload)
        return self._extract(data, "choices", 0, "message", "content")
