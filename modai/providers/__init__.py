"""Model providers"""
from typing import Dict, Optional, Type

from modai.config import ModaiConfig
from modai.utils.event_log import EventLog
from .base import Provider
from .claude import ClaudeProvider
from .custom import CustomProvider
from .ollama import OllamaProvider
from .openai import OpenAIProvider

PROVIDERS: Dict[str, Type[Provider]] = {
    "openai": OpenAIProvider,
    "claude": ClaudeProvider,
    "ollama": OllamaProvider,
    "custom": CustomProvider,
}


def create_provider(config: ModaiConfig, event_log: Optional[EventLog] = None) -> Provider:
    """Instantiate the provider named by ``config.provider``"""
    provider_cls = PROVIDERS.get((config.provider or "").lower())
    if provider_cls is None:
        raise ValueError(f"Unknown provider: {config.provider}. Choose one of: {', '.join(PROVIDERS)}")
    return provider_cls(config, event_log=event_log)


__all__ = [
    'Provider', 'OpenAIProvider', 'ClaudeProvider', 'OllamaProvider', 'CustomProvider',
    'PROVIDERS', 'create_provider',
]
