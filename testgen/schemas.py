# testgen/schemas.py
from typing import Optional
from pydantic import BaseModel, Field

from testgen.validator import MAX_LANGUAGE_LENGTH


class CreateGenerationRequest(BaseModel):
    # code length and blank checks happen in testgen.validator
    code: str
    language: str = Field(..., max_length=MAX_LANGUAGE_LENGTH)


class GenerationOut(BaseModel):
    id: str
    owner_id: str
    input_code: str
    language: str
    status: str  # "pending" | "completed" | "failed"
    generated_tests: Optional[str] = None
    created_at: str
    updated_at: str

