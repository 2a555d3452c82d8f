from testgen.processors.prompt_builder import build_system_prompt, build_messages


def test_prompt_is_deterministic():
    assert build_system_prompt("python") == build_system_prompt("python")


def test_language_is_normalized_before_interpolation():
    p = build_system_prompt("  TypeScript ")
    assert "patterns of the language: typescript." in p
    assert "TypeScript " not in p
    assert build_system_prompt("TypeScript") == build_system_prompt("typescript")


def test_prompt_conveys_requirements():
    p = build_system_prompt("go")
    assert "ONLY executable test code" in p
    assert "edge cases" in p
    assert "invalid-input" in p
    assert "standard test framework" in p
    assert "same project" in p
    assert "Do not wrap in markdown code blocks" in p
    # numbered requirements 1..5
    for i in range(1, 6):
        assert f"\n{i}. " in p


def test_build_messages_two_turns():
    code = "function add(a,b){return a+b;}"
    msgs = build_messages(code, "JavaScript")
    assert [m["role"] for m in msgs] == ["system", "user"]
    assert msgs[0]["content"] == build_system_prompt("javascript")
    # the user turn is the raw code, untouched
    assert msgs[1]["content"] == code
