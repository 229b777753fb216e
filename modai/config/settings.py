"""Environment configuration and constants"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# --- API Configuration ---
API_KEY = os.getenv("API_KEY")
API_URL = os.getenv("API_URL")
MODEL_ID = os.getenv("MODEL_ID", "gpt-4.1")
PROVIDER = os.getenv("MODAI_PROVIDER", "custom")

# --- Agent Configuration ---
# Upper bound on generate/execute cycles per user message
MAX_TURNS = int(os.getenv("MODAI_MAX_TURNS", "5"))

# Seconds a shell/python tool may run before it is killed
TOOL_TIMEOUT = int(os.getenv("MODAI_TOOL_TIMEOUT", "30"))

# Seconds to wait on a provider HTTP call
REQUEST_TIMEOUT = int(os.getenv("MODAI_REQUEST_TIMEOUT", "60"))

# --- Plugin / Logging Configuration ---
MODAI_HOME = Path(os.getenv("MODAI_HOME", str(Path.home() / ".modai")))
LOG_PATH = os.getenv("MODAI_LOG", "modai_chat.log")
DEBUG = os.getenv("DEBUG") == "1"


# --- ANSI Color Codes ---
class Colors:
    """ANSI color codes for terminal output"""
    GREEN = "\033[92m"
    CYAN = "\033[96m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    MAGENTA = "\033[95m"
    GRAY = "\033[90m"
    RESET = "\033[0m"


@dataclass
class ModaiConfig:
    """Provider selection and credentials for one session"""
    provider: str = "custom"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    custom_headers: Dict[str, str] = field(default_factory=dict)
    no_user_tools: bool = False
    name: str = "modai"

    @classmethod
    def from_env(cls) -> "ModaiConfig":
        return cls(provider=PROVIDER, api_key=API_KEY, base_url=API_URL, model=MODEL_ID)
