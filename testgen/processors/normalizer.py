# testgen/processors/normalizer.py
"""
Response normalizer for provider output.

Functions:
- strip_code_fence(text) -> clean_text

Models are told not to fence their answer but often do anyway. When the whole
(trimmed) response is a single fenced block, e.g.

    ```python
    def test_add(): ...
    ```

the fence markers and the optional language hint are removed. Anything else
(prose around the block, several blocks, nested fences) is returned trimmed
but otherwise untouched.

The body of a stripped block never contains a fence marker, so applying the
function twice gives the same result as applying it once.
"""

import re

FENCE = "```"

_FENCED_BLOCK = re.compile(
    r"\A```[\w+#.-]*[ \t]*\r?\n(?P<body>.*?)\r?\n?```\Z",
    flags=re.DOTALL,
)


def strip_code_fence(text: str) -> str:
    trimmed = (text or "").strip()
    match = _FENCED_BLOCK.match(trimmed)
    if not match:
        return trimmed
    body = match.group("body")
    # a fence inside the body means this is not one single block
    if FENCE in body:
        return trimmed
    return body.strip()
