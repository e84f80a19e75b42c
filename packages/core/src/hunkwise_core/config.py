import os
from pathlib import Path
from typing import Optional

import yaml

from hunkwise_core.errors import ConfigError
from hunkwise_core.filters import parse_patterns

PROVIDERS = ("openai", "anthropic")

DEFAULT_CONFIG: dict = {
    "provider": "openai",
    "model": None,  # None = the provider's default model
    "exclude": [],  # glob patterns matched against the full path (e.g. "*.md", "dist/**")
    "max_chars_per_chunk": 20000,
    "max_workers": 1,  # >1 reviews chunks concurrently; output order is unchanged
    "restrict_to_chunk": False,  # drop findings whose line is not in the reviewed chunk
    "github_api_url": "https://api.github.com",
}

# config key → environment variable names, first match wins. The INPUT_*
# names are how GitHub Actions exposes an action step's `with:` inputs.
_ENV_KEYS: dict[str, tuple[str, ...]] = {
    "github_token": ("INPUT_GITHUB_TOKEN", "GITHUB_TOKEN"),
    "openai_api_key": ("INPUT_OPENAI_API_KEY", "OPENAI_API_KEY"),
    "anthropic_api_key": ("INPUT_ANTHROPIC_API_KEY", "ANTHROPIC_API_KEY"),
    "model": ("INPUT_OPENAI_API_MODEL", "OPENAI_API_MODEL", "HUNKWISE_MODEL"),
    "exclude": ("INPUT_EXCLUDE", "HUNKWISE_EXCLUDE"),
    "github_api_url": ("GITHUB_API_URL",),
}


def _from_env(names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None


def load_config(config_path: str = ".hunkwise.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .hunkwise.yml in the current directory
      3. Environment variables (action inputs first)
      4. CLI argument overrides
    """
    config = {**DEFAULT_CONFIG, "exclude": list(DEFAULT_CONFIG["exclude"])}
    config.update({"github_token": None, "openai_api_key": None, "anthropic_api_key": None})

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ConfigError(f"{config_path} must contain a mapping of settings.")
        config.update(file_config)

    for key, names in _ENV_KEYS.items():
        value = _from_env(names)
        if value is not None:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["exclude"] = parse_patterns(config.get("exclude"))
    return config


def validate_config(config: dict) -> None:
    """Fail before any network call if a credential or setting is unusable."""
    if not config.get("github_token"):
        raise ConfigError("No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.")

    provider = config.get("provider")
    if provider not in PROVIDERS:
        raise ConfigError(f"Unknown model provider: {provider!r}. Choose one of: {', '.join(PROVIDERS)}.")
    if provider == "openai" and not config.get("openai_api_key"):
        raise ConfigError("OPENAI_API_KEY environment variable is not set.")
    if provider == "anthropic" and not config.get("anthropic_api_key"):
        raise ConfigError("ANTHROPIC_API_KEY environment variable is not set.")

    try:
        workers = int(config.get("max_workers", 1))
    except (TypeError, ValueError):
        raise ConfigError(f"max_workers must be an integer, got {config.get('max_workers')!r}.")
    if workers < 1:
        raise ConfigError("max_workers must be at least 1.")
    config["max_workers"] = workers
