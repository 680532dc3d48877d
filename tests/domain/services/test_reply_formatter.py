"""Tests for reply post-processing and text classification."""

import re

import pytest

from chatfleet.domain.services.reply_formatter import (
    MAX_REPLY_WORDS,
    clean_participant_id,
    collapse_markdown_links,
    contains_question,
    format_reply,
    is_affirmative,
    is_group_chat,
    is_negative,
    strip_greeting,
    strip_role_labels,
    truncate_reply,
)


def words_with_period_at(total: int, period_index: int | None) -> str:
    """Build ``total`` words, putting a period after the word at ``period_index``."""
    words = [f"w{i}" for i in range(total)]
    if period_index is not None:
        words[period_index] += "."
    return " ".join(words)


class TestTruncateReply:
    """truncate_reply tests."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_reply("Claro, te ayudo") == "Claro, te ayudo"

    def test_cut_on_sentence_boundary(self) -> None:
        """Test that a cut landing on punctuation keeps exactly the budget."""
        text = words_with_period_at(300, MAX_REPLY_WORDS - 1)

        reply = truncate_reply(text)

        assert len(reply.split(" ")) == MAX_REPLY_WORDS
        assert reply.endswith(".")

    def test_extends_through_next_sentence(self) -> None:
        text = words_with_period_at(300, 209)

        reply = truncate_reply(text)

        assert len(reply.split(" ")) == 210
        assert reply.endswith("w209.")

    def test_no_punctuation_after_cut(self) -> None:
        text = words_with_period_at(300, None)

        reply = truncate_reply(text)

        assert len(reply.split(" ")) == MAX_REPLY_WORDS

    @pytest.mark.parametrize("period_index", [199, 200, 205, 250, 299])
    def test_ends_on_sentence_when_source_has_one(self, period_index: int) -> None:
        """Test the reply ends on [.!?] whenever punctuation exists at or after the cut."""
        text = words_with_period_at(300, period_index)

        reply = truncate_reply(text)

        assert re.search(r"[.!?]$", reply.strip())
        assert len(reply.split(" ")) <= period_index + 1

    @pytest.mark.parametrize("mark", ["!", "?"])
    def test_other_sentence_marks(self, mark: str) -> None:
        words = [f"w{i}" for i in range(260)]
        words[230] += mark

        reply = truncate_reply(" ".join(words))

        assert reply.endswith(f"w230{mark}")


class TestStripGreeting:
    """strip_greeting tests."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Hola, ¿cómo estás?", "¿cómo estás?"),
            ("¡Hola! Bienvenido", "Bienvenido"),
            ("hello there", "there"),
            ("HI, claro", "claro"),
        ],
    )
    def test_strips_leading_greeting(self, text: str, expected: str) -> None:
        assert strip_greeting(text) == expected

    def test_keeps_words_starting_with_greeting(self) -> None:
        assert strip_greeting("Hilario te ayuda") == "Hilario te ayuda"

    def test_only_leading_greeting(self) -> None:
        assert strip_greeting("Te digo hola") == "Te digo hola"


class TestCleanupSteps:
    """Role label and markdown link cleanup tests."""

    def test_strip_role_labels(self) -> None:
        assert strip_role_labels("Bot: Claro. User: gracias") == "Claro. gracias"

    def test_collapse_markdown_links(self) -> None:
        assert (
            collapse_markdown_links("Mira [nuestra web](https://example.com) hoy")
            == "Mira https://example.com hoy"
        )

    def test_format_reply_applies_every_step(self) -> None:
        raw = "Hola! Bot: Visita [la tienda](https://shop.example)."

        assert format_reply(raw) == "Visita https://shop.example."


class TestClassification:
    """Inbound text classification tests."""

    @pytest.mark.parametrize("text", ["¿Quieres verlo?", "Quieres verlo?"])
    def test_contains_question(self, text: str) -> None:
        assert contains_question(text) is True

    def test_not_a_question(self) -> None:
        assert contains_question("Aquí está.") is False

    @pytest.mark.parametrize("text", ["Sí", " si ", "OK", "claro", "Por supuesto"])
    def test_is_affirmative(self, text: str) -> None:
        assert is_affirmative(text) is True
        assert is_negative(text) is False

    @pytest.mark.parametrize("text", ["no", "NO GRACIAS", "para nada"])
    def test_is_negative(self, text: str) -> None:
        assert is_negative(text) is True
        assert is_affirmative(text) is False

    def test_neither(self) -> None:
        assert is_affirmative("tal vez") is False
        assert is_negative("tal vez") is False

    def test_is_group_chat(self) -> None:
        assert is_group_chat("120363000000@g.us") is True
        assert is_group_chat("5215550002@s.whatsapp.net") is False

    def test_clean_participant_id(self) -> None:
        assert clean_participant_id("5215550002@s.whatsapp.net") == "5215550002"
