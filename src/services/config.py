"""
Loads and handles config from config.yml
Secrets (SEARCH_API_KEY) and the digest definition URL (PROMPT_FILE_URL) are loaded from .env
"""
import os
from typing import List, Dict, Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel

from services.speech import SpeechOptions


class Config(BaseModel):
    # Core
    DATABASE_PATH: str
    REDIS_URL: str
    LOG_LEVEL: str = "INFO"

    # Ollama
    OLLAMA_BASE_URL: str
    OLLAMA_MODEL: str
    OLLAMA_TEMPERATURE: float = 0.1

    # Digest definition
    PROMPT_FILE_URL: Optional[str] = None

    # Search service
    SEARCH_API_URL: str
    SEARCH_API_KEY: Optional[str] = None

    # Scheduling
    DIGEST_HOUR: int = 8
    DIGEST_USER_IDS: List[str] = []

    # Speech
    SPEECH_PRIMARY_VOICE: str = "en-US-JennyNeural"
    SPEECH_SECONDARY_VOICE: str = "en-US-GuyNeural"
    SPEECH_LANGUAGE: str = "en-US"

    def speech_options(self) -> SpeechOptions:
        return SpeechOptions(
            primary_voice=self.SPEECH_PRIMARY_VOICE,
            secondary_voice=self.SPEECH_SECONDARY_VOICE,
            language=self.SPEECH_LANGUAGE,
        )


def _get_config_path() -> str:
    """Get the path to config.yml, handling different working directories."""
    # Try relative path first
    if os.path.exists('resources/config.yml'):
        return 'resources/config.yml'

    # Try from project root
    project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
    config_path = os.path.join(project_root, 'resources', 'config.yml')
    if os.path.exists(config_path):
        return config_path

    raise FileNotFoundError("Cannot find resources/config.yml")


def _user_ids(value: Any) -> List[str]:
    """Accept either a YAML list or a comma separated string."""
    if not value:
        return []
    if isinstance(value, str):
        return [v.strip() for v in value.split(",") if v.strip()]
    return [str(v) for v in value]


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from config.yml and secrets from .env."""
    load_dotenv()

    config_path = config_path or _get_config_path()

    with open(config_path, 'r') as file:
        config: Dict[str, Any] = yaml.safe_load(file) or {}

    return Config(
        DATABASE_PATH=config.get("DATABASE_PATH", "data/digests.db"),
        REDIS_URL=os.getenv("REDIS_URL", config.get("REDIS_URL", "redis://localhost:6379/0")),
        LOG_LEVEL=str(config.get("LOG_LEVEL", "INFO")).upper(),

        OLLAMA_BASE_URL=config.get("OLLAMA_BASE_URL", "http://localhost:11434"),
        OLLAMA_MODEL=config.get("OLLAMA_MODEL", "llama3.1:8b"),
        OLLAMA_TEMPERATURE=float(config.get("OLLAMA_TEMPERATURE", 0.1)),

        PROMPT_FILE_URL=os.getenv("PROMPT_FILE_URL", config.get("PROMPT_FILE_URL")),

        SEARCH_API_URL=config.get("SEARCH_API_URL", "http://localhost:4000/api"),
        SEARCH_API_KEY=os.getenv("SEARCH_API_KEY"),

        DIGEST_HOUR=int(config.get("DIGEST_HOUR", 8)),
        DIGEST_USER_IDS=_user_ids(os.getenv("DIGEST_USER_IDS") or config.get("DIGEST_USER_IDS")),

        SPEECH_PRIMARY_VOICE=config.get("SPEECH_PRIMARY_VOICE", "en-US-JennyNeural"),
        SPEECH_SECONDARY_VOICE=config.get("SPEECH_SECONDARY_VOICE", "en-US-GuyNeural"),
        SPEECH_LANGUAGE=config.get("SPEECH_LANGUAGE", "en-US"),
    )
