"""Configuration loading for coinwatch.

Settings live in ``~/.config/coinwatch/config.toml``. Secrets may also be
supplied through environment variables, which take precedence over empty
config values.
"""

import copy
import os
from pathlib import Path
from typing import Optional

import toml

from coinwatch.exceptions import ConfigError


CONFIG_DIR = Path.home() / ".config" / "coinwatch"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "coinwatch.db"

DEFAULT_CONFIG = {
    "telegram": {
        "bot_token": "",  # Leave empty to use TELEGRAM_BOT_TOKEN env var
        "chat_id": "",  # Default destination for alerts created from the CLI
    },
    "openai": {
        "api_key": "",  # Leave empty to use OPENAI_API_KEY env var
        "model": "gpt-4o",
    },
    "feed": {
        "base_url": "https://api.binance.com/api/v3",
        "quote_asset": "USDT",
        "timeout_seconds": 10.0,
    },
    "monitor": {
        "interval_seconds": 120,
    },
    "storage": {
        "backend": "sqlite",  # sqlite or memory
        "db_path": "",
    },
}

LOCAL_CHAT_ID = "local"


def _merge(defaults: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Optional[Path] = None) -> dict:
    """Load configuration merged over the defaults.

    Args:
        path: Config file path. Uses ``~/.config/coinwatch/config.toml``
            when not given.

    Returns:
        Config dict. A missing file yields the defaults.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """
    config_path = Path(path) if path else CONFIG_PATH
    if not config_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        loaded = toml.load(config_path)
    except (toml.TomlDecodeError, OSError) as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e

    return _merge(DEFAULT_CONFIG, loaded)


def create_template_config(path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Returns:
        Path of the written file.
    """
    config_path = Path(path) if path else CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        toml.dump(DEFAULT_CONFIG, f)

    return config_path


def get_db_path(config: dict) -> Path:
    """Get the SQLite database path."""
    db_path = config.get("storage", {}).get("db_path")
    return Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH


def get_interval(config: dict) -> float:
    """Get the alert check interval in seconds.

    Raises:
        ConfigError: If the configured value is not a positive number.
    """
    value = config.get("monitor", {}).get("interval_seconds", 120)
    try:
        interval = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"monitor.interval_seconds must be a number, got {value!r}") from e
    if interval <= 0:
        raise ConfigError("monitor.interval_seconds must be positive")
    return interval


def get_telegram_token(config: dict) -> Optional[str]:
    """Get the Telegram bot token from config, falling back to the env var."""
    token = config.get("telegram", {}).get("bot_token")
    return token or os.environ.get("TELEGRAM_BOT_TOKEN") or None


def get_default_chat(config: dict) -> str:
    """Get the destination used for alerts created from the CLI."""
    chat_id = config.get("telegram", {}).get("chat_id")
    return str(chat_id) if chat_id else LOCAL_CHAT_ID


def get_openai_key(config: dict) -> Optional[str]:
    """Get the OpenAI API key from config, falling back to the env var."""
    key = config.get("openai", {}).get("api_key")
    if not key or key == "your-openai-api-key":
        key = os.environ.get("OPENAI_API_KEY")
    return key or None


def get_openai_model(config: dict) -> Optional[str]:
    """Get the model override for AI commentary, if any."""
    return os.environ.get("OPENAI_MODEL") or config.get("openai", {}).get("model") or None
