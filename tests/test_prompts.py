"""Tests for overseer.prompts: Handlebars rendering and helpers."""

import pytest

from overseer.prompts import PromptError, render_prompt


class TestRenderPrompt:
    def test_variable_substitution(self) -> None:
        assert render_prompt("Hello {{name}}", {"name": "Arin"}) == "Hello Arin"

    def test_triple_stash_unescaped(self) -> None:
        assert render_prompt("{{{text}}}", {"text": "<b>&</b>"}) == "<b>&</b>"

    def test_bullets_helper(self) -> None:
        assert render_prompt("{{{bullets items}}}", {"items": ["a", "b"]}) == "- a\n- b"

    def test_bullets_fallback(self) -> None:
        assert render_prompt("{{{bullets items}}}", {"items": []}) == "None yet."
        assert render_prompt('{{{bullets items "None."}}}', {"items": []}) == "None."

    def test_join_helper(self) -> None:
        assert render_prompt('{{{join items " | "}}}', {"items": ["x", "y"]}) == "x | y"

    def test_if_else(self) -> None:
        template = "{{#if story}}{{{story}}}{{else}}empty{{/if}}"
        assert render_prompt(template, {"story": ""}) == "empty"
        assert render_prompt(template, {"story": "tale"}) == "tale"

    def test_compile_error(self) -> None:
        with pytest.raises(PromptError):
            render_prompt("{{#if x}}unclosed", {"x": True})
