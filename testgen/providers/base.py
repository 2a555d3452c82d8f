# testgen/providers/base.py
"""Abstract provider interface for test generation backends."""

import time
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from testgen import monitoring
from testgen.config import ProviderConfig
from testgen.errors import EmptyResponseError, GenerationError, UpstreamError
from testgen.processors.prompt_builder import build_messages


class TestGenerationProvider(ABC):
    """
    One subclass per LLM backend. Subclasses only implement _complete();
    the message layout, error wrapping and metrics live here so every
    backend honours the same contract:

    - returns the trimmed text of the first completion choice
    - raises UpstreamError when the backend call fails
    - raises EmptyResponseError when the call succeeds with no content
    """

    __test__ = False  # not a pytest test class

    def __init__(self, config: ProviderConfig):
        self.config = config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        pass

    @property
    def model(self) -> str:
        return self.config.model

    @abstractmethod
    async def _complete(self, messages: List[Dict[str, str]]) -> Optional[str]:
        """Submit the exchange to the backend and return the first choice's text."""
        pass

    async def generate_unit_tests(self, code: str, language: str) -> str:
        messages = build_messages(code, language)
        start = time.time()
        try:
            content = await self._complete(messages)
        except GenerationError as e:
            monitoring.observe_provider_call(start, self.provider_name, e.error_code)
            raise
        except Exception as e:
            monitoring.observe_provider_call(start, self.provider_name, UpstreamError.error_code)
            monitoring.logger.warning(
                "Provider call failed",
                extra={"provider": self.provider_name, "model": self.model, "error": str(e)},
            )
            raise UpstreamError(
                f"AI test generation failed: {e}. Please try again later."
            ) from e

        text = (content or "").strip()
        if not text:
            monitoring.observe_provider_call(start, self.provider_name, EmptyResponseError.error_code)
            raise EmptyResponseError("AI returned an empty response. Please try again.")

        monitoring.observe_provider_call(start, self.provider_name, "success")
        return text
