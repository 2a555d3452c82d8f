import pytest

from testgen.processors.normalizer import strip_code_fence


def test_fenced_block_with_hint():
    assert strip_code_fence("```js\nconst x=1;\n```") == "const x=1;"


def test_fenced_block_without_hint():
    assert strip_code_fence("```\nimport pytest\n\ndef test_a():\n    assert True\n```") == (
        "import pytest\n\ndef test_a():\n    assert True"
    )


def test_surrounding_whitespace_is_trimmed():
    assert strip_code_fence("\n\n  ```python\n  x = 1\n```  \n") == "x = 1"


def test_hint_with_symbols():
    assert strip_code_fence("```c++\nTEST(A, B) {}\n```") == "TEST(A, B) {}"
    assert strip_code_fence("```objective-c\nx\n```") == "x"


def test_crlf_newlines():
    assert strip_code_fence("```java\r\n@Test void a() {}\r\n```") == "@Test void a() {}"


def test_unfenced_text_is_only_trimmed():
    assert strip_code_fence("  def test_a():\n    pass\n") == "def test_a():\n    pass"


def test_prose_around_block_is_left_alone():
    text = "Here are your tests:\n```python\nx = 1\n```"
    assert strip_code_fence(text) == text


def test_two_blocks_are_left_alone():
    text = "```python\na = 1\n```\n\n```python\nb = 2\n```"
    assert strip_code_fence(text) == text


def test_nested_fence_is_left_alone():
    text = "```\n```python\nx = 1\n```\n```"
    assert strip_code_fence(text) == text


def test_empty_block_yields_empty_string():
    assert strip_code_fence("```\n```") == ""


def test_none_and_empty():
    assert strip_code_fence("") == ""
    assert strip_code_fence(None) == ""


@pytest.mark.parametrize(
    "text",
    [
        "```js\nconst x=1;\n```",
        "plain text",
        "```\n```python\nx\n```\n```",
        "```python\na\n```\n```python\nb\n```",
        "  ```go\n  func TestA(t *testing.T) {}\n```  ",
        "```",
        "``````",
        "",
    ],
)
def test_idempotent(text):
    once = strip_code_fence(text)
    assert strip_code_fence(once) == once
