# testgen/providers/openai_compatible.py
"""
Chat-completions backend for OpenAI and OpenAI-compatible APIs (DeepSeek).
DeepSeek is reached through the same SDK by pointing base_url at its endpoint.
"""

from typing import Dict, List, Optional

from openai import AsyncOpenAI

from testgen.config import ProviderConfig
from testgen.providers.base import TestGenerationProvider


class OpenAICompatibleProvider(TestGenerationProvider):

    def __init__(self, config: ProviderConfig, client: Optional[AsyncOpenAI] = None):
        super().__init__(config)
        if client is None:
            client = AsyncOpenAI(
                api_key=config.api_key.get_secret_value() if config.api_key else None,
                base_url=config.base_url,
                timeout=config.timeout,
                max_retries=0,
            )
        self.client = client

    @property
    def provider_name(self) -> str:
        return self.config.provider

    async def _complete(self, messages: List[Dict[str, str]]) -> Optional[str]:
        resp = await self.client.chat.completions.create(
            model=self.config.model,
            messages=messages,
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        choices = getattr(resp, "choices", None) or []
        if not choices:
            return None
        message = getattr(choices[0], "message", None)
        return getattr(message, "content", None)
