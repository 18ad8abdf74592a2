"""
Configuration — loads settings from .llm_patcher.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).

A :class:`Config` is passed explicitly into each workflow; nothing here is
process-wide state.
"""

import os

import yaml

from .editing.phrases import (
    DEFAULT_LANGUAGE, DEFAULT_PHRASES, LanguageProfile, PhraseBook,
    get_language_profile,
)
from .file_ops import DEFAULT_BACKUP_SUFFIX


_DEFAULTS = {
    "language": DEFAULT_LANGUAGE,
    "model": "llama3.2",
    "ollama_base_url": "http://localhost:11434/api/chat",
    "stream": True,
    "llm_max_retries": 3,
    "llm_retry_delay": 2.0,
    "llm_timeout": 300,
    "auto_approve": False,
    "use_tui": False,
    "backup_suffix": DEFAULT_BACKUP_SUFFIX,
    "metrics": False,
    "log_dir": ".llm_patcher/logs",
}

# Config file search locations
_CONFIG_FILENAMES = [".llm_patcher.yaml", ".llm_patcher.yml"]

# YAML keys under ``phrases:`` → PhraseBook field names
_PHRASE_KEYS = (
    "foreign_markers", "prose_phrases", "trailing_phrases", "response_prefixes",
)


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller via :meth:`override`)
    2. Environment variables (``LLM_PATCHER_*``)
    3. .llm_patcher.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(key: str, cast=str):
            env_val = os.getenv(f"LLM_PATCHER_{key.upper()}")
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[key]

        def _get_bool(key: str) -> bool:
            env_val = os.getenv(f"LLM_PATCHER_{key.upper()}")
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes")
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[key]

        self.LANGUAGE = _get("language")
        self.MODEL = _get("model")
        self.OLLAMA_BASE_URL = _get("ollama_base_url")
        self.STREAM_RESPONSES = _get_bool("stream")
        self.LLM_MAX_RETRIES = _get("llm_max_retries", cast=int)
        self.LLM_RETRY_DELAY = _get("llm_retry_delay", cast=float)
        self.LLM_TIMEOUT = _get("llm_timeout", cast=int)

        self.AUTO_APPROVE = _get_bool("auto_approve")
        self.USE_TUI = _get_bool("use_tui")
        self.BACKUP_SUFFIX = _get("backup_suffix")
        self.METRICS_ENABLED = _get_bool("metrics")
        self.LOG_DIR = _get("log_dir")

        # Heuristic phrase lists: extend the built-ins unless told to replace
        self.PHRASE_OVERRIDES: dict[str, list[str]] = {}
        self.REPLACE_PHRASES = False
        phrases_section = yd.get("phrases", {})
        if isinstance(phrases_section, dict):
            self.REPLACE_PHRASES = bool(phrases_section.get("replace", False))
            for key in _PHRASE_KEYS:
                values = phrases_section.get(key)
                if isinstance(values, list):
                    self.PHRASE_OVERRIDES[key] = [str(v) for v in values]

    def override(self, **values) -> "Config":
        """Apply CLI-level overrides; ``None`` values are ignored."""
        for key, value in values.items():
            if value is not None:
                setattr(self, key.upper(), value)
        return self

    def phrase_book(self) -> PhraseBook:
        if not self.PHRASE_OVERRIDES:
            return DEFAULT_PHRASES
        if self.REPLACE_PHRASES:
            return DEFAULT_PHRASES.replaced(**self.PHRASE_OVERRIDES)
        return DEFAULT_PHRASES.extended(**self.PHRASE_OVERRIDES)

    def language_profile(self) -> LanguageProfile:
        return get_language_profile(self.LANGUAGE)

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
