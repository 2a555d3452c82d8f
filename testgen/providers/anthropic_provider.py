# testgen/providers/anthropic_provider.py
from typing import Dict, List, Optional

from anthropic import AsyncAnthropic

from testgen.config import ProviderConfig
from testgen.providers.base import TestGenerationProvider


class AnthropicProvider(TestGenerationProvider):
    """Anthropic Messages API backend."""

    def __init__(self, config: ProviderConfig, client: Optional[AsyncAnthropic] = None):
        super().__init__(config)
        if client is None:
            client = AsyncAnthropic(
                api_key=config.api_key.get_secret_value() if config.api_key else None,
                timeout=config.timeout,
                max_retries=0,
            )
        self.client = client

    @property
    def provider_name(self) -> str:
        return "anthropic"

    async def _complete(self, messages: List[Dict[str, str]]) -> Optional[str]:
        # Anthropic uses a separate system param, not a system message in messages list
        system_text = ""
        chat_messages = []
        for m in messages:
            if m["role"] == "system":
                system_text += m["content"] + "\n"
            else:
                chat_messages.append({"role": m["role"], "content": m["content"]})

        kwargs = {
            "model": self.config.model,
            "max_tokens": self.config.max_tokens,
            "temperature": self.config.temperature,
            "messages": chat_messages,
        }
        if system_text.strip():
            kwargs["system"] = system_text.strip()

        resp = await self.client.messages.create(**kwargs)

        # the first text block is the completion; tool/thinking blocks are skipped
        for block in getattr(resp, "content", None) or []:
            if hasattr(block, "text"):
                return block.text
        return None
