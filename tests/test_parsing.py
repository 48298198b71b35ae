"""Tests for overseer.parsing: visible text and inline tool calls."""

from overseer.parsing import (
    extract_call_blocks,
    extract_named_blocks,
    extract_response_text,
    split_reply,
    strip_think_blocks,
)
from overseer.tools import Malformed, UpdateGold


class TestResponseText:
    def test_response_section_wins(self) -> None:
        assert extract_response_text("THOUGHT: plan it\nRESPONSE: I draw my bow.") == "I draw my bow."

    def test_thought_only_removed(self) -> None:
        assert extract_response_text("THOUGHT: hmm") == ""

    def test_plain_text_untouched(self) -> None:
        assert extract_response_text("  I nod.  ") == "I nod."


class TestNamedBlocks:
    def test_known_tool(self) -> None:
        calls = extract_named_blocks('Coins! <update_gold>{"amount": 5, "action": "ADD"}</update_gold>')
        assert len(calls) == 1
        assert calls[0].operation == UpdateGold(amount=5, action="ADD")

    def test_other_markup_ignored(self) -> None:
        assert extract_named_blocks("<em>softly</em>") == []

    def test_bad_json_is_malformed_call(self) -> None:
        calls = extract_named_blocks("<update_gold>lots</update_gold>")
        assert isinstance(calls[0].operation, Malformed)


class TestCallBlocks:
    def test_tool_call_block(self) -> None:
        text = '<tool_call>{"name": "address_character", "arguments": {"targetId": "dara"}}</tool_call>'
        calls = extract_call_blocks(text)
        assert [c.name for c in calls] == ["address_character"]

    def test_function_call_block_with_string_arguments(self) -> None:
        text = '<function-call>{"name": "update_gold", "arguments": "{\\"amount\\": 3, \\"action\\": \\"REMOVE\\"}"}</function-call>'
        calls = extract_call_blocks(text)
        assert calls[0].operation == UpdateGold(amount=3, action="REMOVE")

    def test_unknown_and_unparsable_skipped(self) -> None:
        text = '<tool_call>{"name": "fly"}</tool_call><tool_call>not json</tool_call>'
        assert extract_call_blocks(text) == []


class TestSplitReply:
    def test_visible_text_and_calls(self) -> None:
        raw = (
            "<think>should I?</think>"
            "I toss the innkeeper a coin."
            '<update_gold>{"amount": 1, "action": "REMOVE"}</update_gold>'
        )
        visible, calls = split_reply(raw)
        assert visible == "I toss the innkeeper a coin."
        assert [c.name for c in calls] == ["update_gold"]

    def test_only_tool_calls(self) -> None:
        visible, calls = split_reply('<update_gold>{"amount": 1, "action": "ADD"}</update_gold>')
        assert visible == ""
        assert len(calls) == 1

    def test_strip_think_blocks(self) -> None:
        assert strip_think_blocks("<think>\nsecret\n</think>Hello") == "Hello"
