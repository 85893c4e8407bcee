from __future__ import annotations

from feature_scaffold import find_tokens, substitute


def test_substitute_replaces_every_occurrence() -> None:
    out = substitute("{{A}}-{{B}}-{{A}}", {"A": "x", "B": "y"})
    assert out == "x-y-x"


def test_unknown_tokens_are_left_untouched() -> None:
    text = "class {{FEATURE_NAME}} : {{FUTURE_TOKEN}} {{}} {{ spaced }}"
    out = substitute(text, {"FEATURE_NAME": "Cart"})
    assert out == "class Cart : {{FUTURE_TOKEN}} {{}} {{ spaced }}"


def test_identity_without_recognised_tokens() -> None:
    samples = [
        "",
        "plain text",
        "fun main() { println(\"{\") }",
        "{{NOT_MAPPED}} and {single}",
    ]
    for text in samples:
        assert substitute(text, {"FEATURE_NAME": "X", "PACKAGE": "p"}) == text
        assert substitute(text, {}) == text


def test_replacement_values_are_not_re_expanded() -> None:
    mapping = {"A": "{{B}}", "B": "boom"}
    assert substitute("{{A}}", mapping) == "{{B}}"


def test_resubstitution_is_stable_when_values_have_no_tokens() -> None:
    mapping = {"FEATURE_NAME": "UserProfile", "FEATURE_LOWER": "userprofile"}
    once = substitute("{{FEATURE_NAME}}/{{FEATURE_LOWER}}/{{OTHER}}", mapping)
    assert substitute(once, mapping) == once


def test_longest_token_wins_with_custom_delimiters() -> None:
    mapping = {"NAME": "short", "NAME_CAMEL": "long"}
    assert substitute("$NAME_CAMEL$ $NAME$", mapping, token_open="$", token_close="$") == "long short"

    # Without a closing delimiter one key is a prefix of the other.
    assert substitute("%NAME_CAMEL %NAME", mapping, token_open="%", token_close="") == "long short"


def test_find_tokens_lists_distinct_tokens_in_order() -> None:
    assert find_tokens("{{B}} {{A}} {{B}} {x}") == ["B", "A"]
    assert find_tokens("nothing here") == []
