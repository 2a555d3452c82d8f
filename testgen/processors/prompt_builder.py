# testgen/processors/prompt_builder.py
from typing import Dict, List

from testgen.validator import normalize_language

_PROMPT_HEADER = (
    "You are a senior developer writing unit tests. Your response must contain ONLY "
    "executable test code: no explanations, no markdown headings, no commentary."
)

_REQUIREMENTS = [
    "Generate runnable unit tests that can be executed as-is (include necessary imports and setup).",
    "Cover normal cases, edge cases (empty input, boundaries, null/undefined where applicable), "
    "and at least one error or invalid-input case if relevant.",
    "Use the standard test framework for the given language "
    "(e.g. Jest/Vitest for JavaScript/TypeScript, pytest for Python, JUnit for Java).",
    "Assume the code under test is in the same project. "
    "Match the style and patterns of the language: {language}.",
    "Output only the test code. Do not wrap in markdown code blocks unless the user code "
    "was already in one.",
]


def build_system_prompt(language: str) -> str:
    """
    Deterministic system instruction for the given target language.
    The label is trimmed and lower-cased before it is interpolated.
    """
    lang = normalize_language(language)
    lines = [_PROMPT_HEADER, "Requirements:"]
    for i, req in enumerate(_REQUIREMENTS, start=1):
        lines.append(f"{i}. {req.format(language=lang)}")
    return "\n".join(lines)


def build_messages(code: str, language: str) -> List[Dict[str, str]]:
    """System instruction followed by the raw code as the user turn."""
    return [
        {"role": "system", "content": build_system_prompt(language)},
        {"role": "user", "content": code},
    ]
