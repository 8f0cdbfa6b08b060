"""
Runtime configuration for the AI Money Machine

Values come from environment variables. config/credentials.env (and a local
.env, if present) are loaded first so API keys can live outside the shell.

Environment Variables:
    API_KEY / GEMINI_API_KEY: Google Gemini key
    OPENAI_API_KEY, ANTHROPIC_API_KEY, XAI_API_KEY: alternative providers
    AIMM_DB_PATH: SQLite file backing the key-value store
    AIMM_PROVIDER: provider selected at startup
    AIMM_TICK_SECONDS, AIMM_EVENT_PROBABILITY: simulation clock
    AIMM_HOST, AIMM_PORT: dashboard bind address
    AIMM_LOG_LEVEL, AIMM_LOG_DIR: logging
"""

import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

from moneymachine.models import ModelProvider
from moneymachine.strategy_config import SIMULATION

CREDENTIALS_FILE = "config/credentials.env"

DEFAULT_MODELS = {
    ModelProvider.GEMINI: "gemini-2.5-flash",
    ModelProvider.OPENAI: "gpt-4",
    ModelProvider.ANTHROPIC: "claude-3-5-sonnet-latest",
    ModelProvider.XAI: "grok-beta",
}


@dataclass
class MachineConfig:
    """Configuration for one running simulation"""
    api_keys: Dict[ModelProvider, Optional[str]] = field(default_factory=dict)
    models: Dict[ModelProvider, str] = field(default_factory=lambda: dict(DEFAULT_MODELS))
    db_path: str = "data/aimm.db"
    provider: ModelProvider = ModelProvider.GEMINI
    tick_seconds: float = SIMULATION["TICK_SECONDS"]
    event_probability: float = SIMULATION["EVENT_PROBABILITY"]
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "INFO"
    log_dir: str = "logs"
    request_timeout: float = 30.0

    def api_key(self, provider: ModelProvider) -> Optional[str]:
        return self.api_keys.get(provider) or None

    def model_name(self, provider: ModelProvider) -> str:
        return self.models.get(provider, DEFAULT_MODELS[provider])


def load_config(env_file: Optional[str] = CREDENTIALS_FILE) -> MachineConfig:
    if env_file:
        load_dotenv(env_file)
    load_dotenv()

    env = os.environ
    api_keys = {
        ModelProvider.GEMINI: env.get("API_KEY") or env.get("GEMINI_API_KEY"),
        ModelProvider.OPENAI: env.get("OPENAI_API_KEY"),
        ModelProvider.ANTHROPIC: env.get("ANTHROPIC_API_KEY"),
        ModelProvider.XAI: env.get("XAI_API_KEY"),
    }
    models = {
        provider: env.get(f"AIMM_{provider.value}_MODEL", default)
        for provider, default in DEFAULT_MODELS.items()
    }

    return MachineConfig(
        api_keys=api_keys,
        models=models,
        db_path=env.get("AIMM_DB_PATH", "data/aimm.db"),
        provider=ModelProvider.parse(env.get("AIMM_PROVIDER", "GEMINI")),
        tick_seconds=float(env.get("AIMM_TICK_SECONDS", SIMULATION["TICK_SECONDS"])),
        event_probability=float(env.get("AIMM_EVENT_PROBABILITY", SIMULATION["EVENT_PROBABILITY"])),
        host=env.get("AIMM_HOST", "127.0.0.1"),
        port=int(env.get("AIMM_PORT", 8000)),
        log_level=env.get("AIMM_LOG_LEVEL", "INFO").upper(),
        log_dir=env.get("AIMM_LOG_DIR", "logs"),
    )
