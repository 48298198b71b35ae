"""Tests for overseer.sanitize."""

from overseer.sanitize import (
    bound_length,
    sanitize_agent_reply,
    sanitize_director_reply,
    sanitize_meta_reply,
)


class TestBoundLength:
    def test_sentence_limit(self) -> None:
        assert bound_length("One. Two! Three? Four.", 2, 500) == "One. Two!"

    def test_char_limit_adds_ellipsis(self) -> None:
        out = bound_length("a" * 50, 3, 10)
        assert out == "a" * 10 + "..."

    def test_whitespace_collapsed(self) -> None:
        assert bound_length("  Hello\n\n   there.  ", 3, 100) == "Hello there."

    def test_trailing_fragment_counts_as_sentence(self) -> None:
        assert bound_length("Done. And then", 5, 100) == "Done. And then"

    def test_empty(self) -> None:
        assert bound_length("   ", 3, 100) == ""


class TestAgentReply:
    def test_narrator_lines_removed(self) -> None:
        text = "Dungeon Master: The cave collapses.\nI brace the ceiling with my shield.\nDM: rocks fall"
        assert sanitize_agent_reply(text) == "I brace the ceiling with my shield."

    def test_narration_prefix_case_insensitive(self) -> None:
        assert sanitize_agent_reply("NARRATION: wind howls\nI shiver.") == "I shiver."

    def test_duplicate_lines_collapsed(self) -> None:
        assert sanitize_agent_reply("Stay close.\nStay close.\nMove.") == "Stay close. Move."

    def test_bounded(self) -> None:
        out = sanitize_agent_reply("x" * 1000)
        assert len(out) == 360 + 3

    def test_three_sentences(self) -> None:
        assert sanitize_agent_reply("A. B. C. D.") == "A. B. C."


class TestOtherRoles:
    def test_director_bounds(self) -> None:
        assert sanitize_director_reply("A. B. C. D. E.") == "A. B. C. D."
        assert len(sanitize_director_reply("y" * 2000)) == 520 + 3

    def test_director_keeps_prefixed_lines(self) -> None:
        assert sanitize_director_reply("Narration: the gate opens.") == "Narration: the gate opens."

    def test_meta_bounds(self) -> None:
        assert sanitize_meta_reply("A. B. C.") == "A. B."
        assert len(sanitize_meta_reply("z" * 500)) == 240 + 3
