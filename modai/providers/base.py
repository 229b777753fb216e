"""Provider contract and the shared HTTP call"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import requests

from modai.config import REQUEST_TIMEOUT, ModaiConfig
from modai.exceptions import ProviderError
from modai.protocol import ConversationTurn
from modai.utils.event_log import EventLog


class Provider(ABC):
    """
    Turns (message, system prompt, history) into one model reply.

    Implementations format a single HTTP request and pull one string out of
    the response. Anything that goes wrong on the way raises ProviderError.
    """

    name = "provider"
    default_url = ""
    default_model: Optional[str] = None

    def __init__(self, config: ModaiConfig, event_log: Optional[EventLog] = None,
                 timeout: int = REQUEST_TIMEOUT):
        self.config = config
        self.event_log = event_log or EventLog()
        self.timeout = timeout

    @property
    def url(self) -> str:
        return self.config.base_url or self.default_url

    @property
    def model(self) -> Optional[str]:
        return self.config.model or self.default_model

    @abstractmethod
    def generate_response(self, message: str, system_prompt: str,
                          history: Sequence[ConversationTurn] = ()) -> str:
        ...

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def _chat_messages(self, message: str, history: Sequence[ConversationTurn]) -> List[Dict[str, str]]:
        return [turn.to_dict() for turn in history] + [{"role": "user", "content": message}]

    def _post(self, url: str, payload: Dict[str, Any]) -> Any:
        if not url:
            raise ProviderError(f"No endpoint configured for the {self.name} provider")

        headers = {**self._headers(), **self.config.custom_headers}
        self.event_log.log_request(self.name, url, len(payload.get("messages", [])), payload.get("model"))
        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            status_code = e.response.status_code if e.response is not None else None
            error_body = e.response.text if e.response is not None else str(e)
            self.event_log.log_api_error(self.name, status_code, error_body)
            raise ProviderError(f"HTTP {status_code}: {error_body[:200]}", status_code=status_code) from e
        except requests.exceptions.RequestException as e:
            self.event_log.log_api_error(self.name, None, str(e))
            raise ProviderError(f"Request to {url} failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(f"{self.name} returned a non-JSON body") from e

    def _extract(self, data: Any, *path) -> str:
        """Walk ``path`` through the decoded body; a missing step is a ProviderError"""
        node = data
        try:
            for key in path:
                node = node[key]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected {self.name} response shape: missing {path}") from e
        if not isinstance(node, str):
            raise ProviderError(f"Unexpected {self.name} response shape: {path} is not text")
        self.event_log.log_response(self.name, node)
        return node
