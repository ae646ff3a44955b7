"""Generative content service: OpenAI and Anthropic behind a common protocol."""

from vca.config import Settings
from vca.llm.anthropic_provider import AnthropicProvider
from vca.llm.base import LLMProvider, parse_structured
from vca.llm.openai_provider import OpenAIProvider


def get_provider(provider_name: str, **kwargs: object) -> LLMProvider:
    """Return the configured LLM provider. provider_name: 'openai' | 'anthropic'."""
    if provider_name.lower() == "anthropic":
        return AnthropicProvider(**kwargs)
    return OpenAIProvider(**kwargs)


def provider_from_settings(
    settings: Settings,
    provider_name: str | None = None,
    model: str | None = None,
) -> LLMProvider:
    """Resolve API key and default model for the named provider.

    Raises ValueError when the provider has no API key configured.
    """
    name = (provider_name or settings.vca_llm_provider).lower()
    if name == "anthropic":
        api_key, default_model = settings.anthropic_api_key, settings.vca_anthropic_model
    else:
        api_key, default_model = settings.openai_api_key, settings.vca_openai_model
    if not api_key:
        raise ValueError(f"API key not configured for provider '{name}'.")
    return get_provider(name, api_key=api_key, model=model or default_model)


__all__ = [
    "AnthropicProvider",
    "LLMProvider",
    "OpenAIProvider",
    "get_provider",
    "parse_structured",
    "provider_from_settings",
]
