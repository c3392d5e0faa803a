"""Config loader — reads YAML, applies UPDOWN_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from updown_bot.config.schema import AppConfig

# env var -> (section, key); section None means top level
_ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "UPDOWN_MODE": (None, "mode"),
    "UPDOWN_INDEX_MODE": ("trending_index", "mode"),
    "UPDOWN_GAMMA_API_URL": ("polymarket", "gamma_api_url"),
    "UPDOWN_CLOB_API_URL": ("polymarket", "clob_api_url"),
    "UPDOWN_API_KEY": ("polymarket", "api_key"),
    "UPDOWN_LOG_LEVEL": ("logging", "level"),
    "UPDOWN_LOG_FORMAT": ("logging", "format"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults.

    Environment variable overrides:
        UPDOWN_MODE           -> mode (simulation | live)
        UPDOWN_INDEX_MODE     -> trending_index.mode
        UPDOWN_GAMMA_API_URL  -> polymarket.gamma_api_url
        UPDOWN_CLOB_API_URL   -> polymarket.clob_api_url
        UPDOWN_API_KEY        -> polymarket.api_key
        UPDOWN_LOG_LEVEL      -> logging.level
        UPDOWN_LOG_FORMAT     -> logging.format
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        if section is None:
            data[key] = value
        else:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
