"""Configuration module for the modai agent"""
from .settings import (
    API_KEY,
    API_URL,
    MODEL_ID,
    PROVIDER,
    MAX_TURNS,
    TOOL_TIMEOUT,
    REQUEST_TIMEOUT,
    MODAI_HOME,
    LOG_PATH,
    DEBUG,
    Colors,
    ModaiConfig,
)

__all__ = [
    'API_KEY', 'API_URL', 'MODEL_ID', 'PROVIDER', 'MAX_TURNS', 'TOOL_TIMEOUT',
    'REQUEST_TIMEOUT', 'MODAI_HOME', 'LOG_PATH', 'DEBUG', 'Colors', 'ModaiConfig',
]
