# testgen/orchestrator.py
from typing import Dict, Any, List

from sqlalchemy.exc import SQLAlchemyError

# Import modules (not bare functions) so monkeypatching in tests works correctly
import testgen.processors.normalizer as _normalizer
from testgen import monitoring
from testgen import db as dbmod
from testgen.errors import (
    ConfigurationError,
    EmptyResponseError,
    GenerationError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)
from testgen.providers.base import TestGenerationProvider
from testgen.validator import validate_input, normalize_language

# errors surfaced to the caller unchanged; anything else is wrapped
_PASSTHROUGH_ERRORS = (ValidationError, ConfigurationError, UpstreamError)


class GenerationOrchestrator:
    """
    Runs one generation request end to end:

    1. validate input (no record is created for bad input)
    2. store a pending record
    3. ask the provider for tests
    4. strip any enclosing code fence
    5. mark the record completed, or failed before re-raising

    A process crash between a provider failure and step 5 leaves the record
    pending; there is no reconciliation job for that.
    """

    def __init__(self, provider: TestGenerationProvider):
        self.provider = provider

    async def create(self, owner_id: str, code: str, language: str) -> Dict[str, Any]:
        error = validate_input(code, language)
        if error is not None:
            monitoring.inc_generation("rejected")
            raise error

        record = dbmod.create_generation(
            owner_id=owner_id,
            input_code=code,
            language=normalize_language(language),
        )
        generation_id = record["id"]
        log_extra = {
            "generation_id": generation_id,
            "owner_id": owner_id,
            "language": record["language"],
            "provider": self.provider.provider_name,
        }
        monitoring.logger.info("Generation started", extra={**log_extra, "code_chars": len(code)})

        try:
            raw = await self.provider.generate_unit_tests(code, language)
            generated_tests = _normalizer.strip_code_fence(raw)
            if not generated_tests:
                raise EmptyResponseError("AI returned an empty response. Please try again.")
            updated = dbmod.complete_generation(generation_id, generated_tests)
        except Exception as e:
            self._mark_failed(generation_id, log_extra)
            monitoring.inc_generation("failed")
            if isinstance(e, _PASSTHROUGH_ERRORS):
                monitoring.logger.warning(
                    "Generation failed",
                    extra={**log_extra, "error_code": e.error_code, "error": e.message},
                )
                raise
            monitoring.logger.exception("Generation failed unexpectedly", extra=log_extra)
            raise UpstreamError("Test generation failed. Please try again later.") from e

        monitoring.inc_generation("completed")
        monitoring.logger.info("Generation completed", extra=log_extra)
        return updated

    def _mark_failed(self, generation_id: str, log_extra: Dict[str, Any]) -> None:
        # the error that got us here is what the caller sees, even if this write fails too
        try:
            dbmod.fail_generation(generation_id)
        except (SQLAlchemyError, GenerationError):
            monitoring.logger.exception("Could not mark generation failed", extra=log_extra)

    def find_all_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        return dbmod.list_generations_for_owner(owner_id)

    def find_one(self, generation_id: str, owner_id: str) -> Dict[str, Any]:
        record = dbmod.get_generation(generation_id, owner_id)
        if record is None:
            raise NotFoundError("Generation not found")
        return record
