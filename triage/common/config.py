"""
Configuration Management for Triage

Loads configuration from ~/.triage/config.json and environment variables.
"""

import os
import json
import logging
from pathlib import Path
from dataclasses import dataclass, field

logger = logging.getLogger("triage.common.config")

# Default config paths
CONFIG_DIR = Path.home() / ".triage"
CONFIG_PATH = CONFIG_DIR / "config.json"
LOGS_DIR = CONFIG_DIR / "logs"
STATE_PATH = CONFIG_DIR / "behavior_state.json"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class LLMConfig:
    """LLM provider configuration for the advisory classifier"""
    provider: str = "anthropic"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-3-5-haiku-20241022"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    google_api_key: str = ""
    google_model: str = "gemini-2.0-flash-exp"

    def api_key_for(self, provider: str) -> str:
        return getattr(self, f"{provider}_api_key", "") or ""

    def model_for(self, provider: str) -> str:
        return getattr(self, f"{provider}_model", "") or ""


@dataclass
class AdvisoryConfig:
    """External classifier override settings"""
    enabled: bool = False
    timeout: float = 5.0  # seconds; a timeout counts as a failed call
    max_tokens: int = 200
    preference_hint: str = ""  # free-text user preference, appended to the prompt


@dataclass
class LearningConfig:
    """Behavior learning settings"""
    enabled: bool = True
    recalculate_interval_hours: int = 6  # 0 disables the server's periodic run


@dataclass
class ServerConfig:
    """HTTP service settings"""
    host: str = "127.0.0.1"
    port: int = 8090


@dataclass
class TriageConfig:
    """Main Triage configuration"""
    llm: LLMConfig = field(default_factory=LLMConfig)
    advisory: AdvisoryConfig = field(default_factory=AdvisoryConfig)
    learning: LearningConfig = field(default_factory=LearningConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    state_path: str = str(STATE_PATH)
    _env_sourced_keys: set = field(default_factory=set, repr=False)


def _parse_llm_config(data: dict) -> LLMConfig:
    """Parse llm section from config dict"""
    llm_data = data.get("llm", {})
    defaults = LLMConfig()
    return LLMConfig(
        provider=llm_data.get("provider", defaults.provider),
        anthropic_api_key=llm_data.get("anthropic_api_key", ""),
        anthropic_model=llm_data.get("anthropic_model", defaults.anthropic_model),
        openai_api_key=llm_data.get("openai_api_key", ""),
        openai_model=llm_data.get("openai_model", defaults.openai_model),
        google_api_key=llm_data.get("google_api_key", ""),
        google_model=llm_data.get("google_model", defaults.google_model),
    )


def _parse_advisory_config(data: dict) -> AdvisoryConfig:
    """Parse advisory section from config dict"""
    advisory_data = data.get("advisory", {})
    return AdvisoryConfig(
        enabled=bool(advisory_data.get("enabled", False)),
        timeout=float(advisory_data.get("timeout", 5.0)),
        max_tokens=int(advisory_data.get("max_tokens", 200)),
        preference_hint=advisory_data.get("preference_hint", ""),
    )


def _parse_learning_config(data: dict) -> LearningConfig:
    """Parse learning section from config dict"""
    learning_data = data.get("learning", {})
    return LearningConfig(
        enabled=bool(learning_data.get("enabled", True)),
        recalculate_interval_hours=int(learning_data.get("recalculate_interval_hours", 6)),
    )


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server section from config dict"""
    server_data = data.get("server", {})
    return ServerConfig(
        host=server_data.get("host", "127.0.0.1"),
        port=int(server_data.get("port", 8090)),
    )


def load_config() -> TriageConfig:
    """
    Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables
    2. Config file (~/.triage/config.json)
    3. Default values
    """
    config = TriageConfig()

    if CONFIG_PATH.exists():
        try:
            with open(CONFIG_PATH) as f:
                data = json.load(f)

            config.llm = _parse_llm_config(data)
            config.advisory = _parse_advisory_config(data)
            config.learning = _parse_learning_config(data)
            config.server = _parse_server_config(data)
            config.state_path = data.get("state_path", str(STATE_PATH))
        except (json.JSONDecodeError, IOError, ValueError, TypeError) as e:
            logger.warning("Failed to load config file %s: %s", CONFIG_PATH, e)

    if os.getenv("TRIAGE_ADVISORY_ENABLED"):
        config.advisory.enabled = os.getenv("TRIAGE_ADVISORY_ENABLED").lower() in _TRUTHY
    if os.getenv("TRIAGE_ADVISORY_TIMEOUT"):
        config.advisory.timeout = float(os.getenv("TRIAGE_ADVISORY_TIMEOUT"))
    if os.getenv("TRIAGE_LEARNING_ENABLED"):
        config.learning.enabled = os.getenv("TRIAGE_LEARNING_ENABLED").lower() in _TRUTHY
    if os.getenv("TRIAGE_PORT"):
        config.server.port = int(os.getenv("TRIAGE_PORT"))
    if os.getenv("TRIAGE_STATE_PATH"):
        config.state_path = os.getenv("TRIAGE_STATE_PATH")

    # LLM env var overrides (track env-sourced keys so they are never saved)
    _env_llm_map = {
        "ANTHROPIC_API_KEY": "anthropic_api_key",
        "ANTHROPIC_MODEL": "anthropic_model",
        "OPENAI_API_KEY": "openai_api_key",
        "OPENAI_MODEL": "openai_model",
        "GOOGLE_API_KEY": "google_api_key",
        "GEMINI_API_KEY": "google_api_key",
        "GOOGLE_MODEL": "google_model",
        "TRIAGE_LLM_PROVIDER": "provider",
    }
    for env_var, attr in _env_llm_map.items():
        val = os.getenv(env_var)
        if val:
            setattr(config.llm, attr, val)
            config._env_sourced_keys.add(attr)

    return config


def save_config(config: TriageConfig) -> None:
    """Save configuration to file.

    API key fields that were sourced from environment variables are written
    as empty strings so that secrets are not persisted to disk.
    """
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    env_sourced = getattr(config, "_env_sourced_keys", set())

    llm_section = {
        "provider": config.llm.provider,
        "anthropic_api_key": config.llm.anthropic_api_key,
        "anthropic_model": config.llm.anthropic_model,
        "openai_api_key": config.llm.openai_api_key,
        "openai_model": config.llm.openai_model,
        "google_api_key": config.llm.google_api_key,
        "google_model": config.llm.google_model,
    }
    for key in ("anthropic_api_key", "openai_api_key", "google_api_key"):
        if key in env_sourced:
            llm_section[key] = ""

    data = {
        "llm": llm_section,
        "advisory": {
            "enabled": config.advisory.enabled,
            "timeout": config.advisory.timeout,
            "max_tokens": config.advisory.max_tokens,
            "preference_hint": config.advisory.preference_hint,
        },
        "learning": {
            "enabled": config.learning.enabled,
            "recalculate_interval_hours": config.learning.recalculate_interval_hours,
        },
        "server": {
            "host": config.server.host,
            "port": config.server.port,
        },
        "state_path": config.state_path,
    }

    with open(CONFIG_PATH, "w") as f:
        json.dump(data, f, indent=2)

    # Set secure permissions
    CONFIG_PATH.chmod(0o600)


def ensure_directories() -> None:
    """Ensure required directories exist"""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)
