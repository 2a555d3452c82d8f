# testgen/config.py
"""
Provider configuration, read once at process startup.

Env vars:
  AI_PROVIDER=deepseek|openai|anthropic|mock   (default: deepseek)
  <PROVIDER>_API_KEY=...                       (required unless mock)
  <PROVIDER>_MODEL=...                         (default: depends on provider)
  <PROVIDER>_MAX_TOKENS=4000                   (positive int, else default)
  <PROVIDER>_TEMPERATURE=0.2                   (clamped to [0, 2], [0, 1] for anthropic)
  AI_TIMEOUT_SECONDS=60                        (SDK transport timeout)

Usage:
  from testgen.config import load_provider_config
  config = load_provider_config()      # raises ConfigurationError
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, SecretStr

from testgen.errors import ConfigurationError

DEFAULT_PROVIDER = "deepseek"
DEFAULT_MAX_TOKENS = 4000
DEFAULT_TEMPERATURE = 0.2
DEFAULT_TIMEOUT_SECONDS = 60.0
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0
# Anthropic rejects temperatures above 1
PROVIDER_MAX_TEMPERATURE = {"anthropic": 1.0}

DEEPSEEK_BASE_URL = "https://api.deepseek.com/v1"

# provider name -> (env prefix, default model, base url)
PROVIDER_DEFAULTS = {
    "deepseek": ("DEEPSEEK", "deepseek-coder", DEEPSEEK_BASE_URL),
    "openai": ("OPENAI", "gpt-4o-mini", None),
    "anthropic": ("ANTHROPIC", "claude-sonnet-4-20250514", None),
    "mock": ("MOCK", "mock-test-writer", None),
}

# providers that run without a credential
KEYLESS_PROVIDERS = ("mock",)


class ProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str
    api_key: Optional[SecretStr] = None
    model: str
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE
    base_url: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def _parse_max_tokens(raw: Optional[str]) -> int:
    if not raw:
        return DEFAULT_MAX_TOKENS
    try:
        value = int(raw.strip())
    except ValueError:
        return DEFAULT_MAX_TOKENS
    return value if value > 0 else DEFAULT_MAX_TOKENS


def _parse_temperature(raw: Optional[str], ceiling: float = MAX_TEMPERATURE) -> float:
    if not raw:
        return DEFAULT_TEMPERATURE
    try:
        value = float(raw.strip())
    except ValueError:
        return DEFAULT_TEMPERATURE
    if value != value:  # NaN
        return DEFAULT_TEMPERATURE
    return min(max(value, MIN_TEMPERATURE), ceiling)


def _parse_timeout(raw: Optional[str]) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        value = float(raw.strip())
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return value if value > 0 else DEFAULT_TIMEOUT_SECONDS


def supported_providers():
    return sorted(PROVIDER_DEFAULTS)


def load_provider_config(env: Optional[Mapping[str, str]] = None) -> ProviderConfig:
    """
    Build the immutable provider config from the environment.
    Raises ConfigurationError for an unsupported provider or a missing key.
    """
    env = os.environ if env is None else env

    provider = (env.get("AI_PROVIDER") or DEFAULT_PROVIDER).strip().lower()
    if provider not in PROVIDER_DEFAULTS:
        raise ConfigurationError(
            f'Unsupported AI_PROVIDER "{provider}". '
            f"Supported providers: {', '.join(supported_providers())}."
        )

    prefix, default_model, base_url = PROVIDER_DEFAULTS[provider]

    api_key = (env.get(f"{prefix}_API_KEY") or "").strip()
    if not api_key and provider not in KEYLESS_PROVIDERS:
        raise ConfigurationError(
            f"{prefix}_API_KEY is required when AI_PROVIDER={provider}. "
            "Set it in your environment (e.g. .env) and restart the application."
        )

    model = (env.get(f"{prefix}_MODEL") or "").strip() or default_model

    return ProviderConfig(
        provider=provider,
        api_key=SecretStr(api_key) if api_key else None,
        model=model,
        max_tokens=_parse_max_tokens(env.get(f"{prefix}_MAX_TOKENS")),
        temperature=_parse_temperature(
            env.get(f"{prefix}_TEMPERATURE"),
            PROVIDER_MAX_TEMPERATURE.get(provider, MAX_TEMPERATURE),
        ),
        base_url=(env.get(f"{prefix}_BASE_URL") or "").strip() or base_url,
        timeout=_parse_timeout(env.get("AI_TIMEOUT_SECONDS")),
    )
