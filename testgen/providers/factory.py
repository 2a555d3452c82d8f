# testgen/providers/factory.py
"""Provider factory: maps the configured provider name to its backend class."""

from typing import Dict, Optional, Type

from testgen import monitoring
from testgen.config import ProviderConfig, load_provider_config
from testgen.errors import ConfigurationError
from testgen.providers.anthropic_provider import AnthropicProvider
from testgen.providers.base import TestGenerationProvider
from testgen.providers.mock import MockProvider, UnconfiguredProvider
from testgen.providers.openai_compatible import OpenAICompatibleProvider

_providers: Dict[str, Type[TestGenerationProvider]] = {
    "deepseek": OpenAICompatibleProvider,
    "openai": OpenAICompatibleProvider,
    "anthropic": AnthropicProvider,
    "mock": MockProvider,
}


def available_providers():
    return sorted(_providers)


def create_provider(config: ProviderConfig) -> TestGenerationProvider:
    if config.provider not in _providers:
        raise ConfigurationError(
            f'Unsupported AI_PROVIDER "{config.provider}". '
            f"Supported providers: {', '.join(available_providers())}."
        )
    return _providers[config.provider](config)


def provider_from_env(env: Optional[Dict[str, str]] = None) -> TestGenerationProvider:
    """
    Startup helper: load config and build the provider once.
    On a configuration error the returned provider fails every call with
    that same error, and the error is logged here.
    """
    try:
        config = load_provider_config(env)
        provider = create_provider(config)
    except ConfigurationError as e:
        monitoring.logger.error(
            "AI provider is not configured; generation requests will fail",
            extra={"error_code": e.error_code, "error": e.message},
        )
        return UnconfiguredProvider(e)
    monitoring.logger.info(
        "AI provider configured",
        extra={"provider": provider.provider_name, "model": config.model},
    )
    return provider
