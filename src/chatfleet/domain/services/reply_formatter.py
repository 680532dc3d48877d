"""Reply post-processing and inbound text classification."""

import re

MAX_REPLY_WORDS = 200

_ENDS_WITH_SENTENCE = re.compile(r"[.!?]$")
_NEXT_SENTENCE = re.compile(r"^.*?[.!?]", re.DOTALL)
_LEADING_GREETING = re.compile(
    r"^(?:¡?hola|hello|hi)(?!\w)\s*[,!?]*\s*", re.IGNORECASE
)
_ROLE_LABELS = re.compile(r"(?:User|Bot):\s*")
_MARKDOWN_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")

AFFIRMATIVE_RESPONSES = frozenset(
    {"sí", "si", "yes", "ok", "claro", "por supuesto", "dale", "bueno", "está bien"}
)
NEGATIVE_RESPONSES = frozenset({"no", "nope", "para nada", "no gracias", "no quiero"})

GROUP_CHAT_SUFFIX = "@g.us"


def truncate_reply(text: str, max_words: int = MAX_REPLY_WORDS) -> str:
    """Cut a reply to ``max_words`` words, finishing the sentence in progress.

    When the cut does not land on ``.``, ``!`` or ``?``, the remainder of the
    next sentence is appended.

    Args:
        text: Completion text.
        max_words: Number of space-separated words to keep.

    Returns:
        Truncated text.
    """
    words = text.split(" ")
    reply = " ".join(words[:max_words])
    if _ENDS_WITH_SENTENCE.search(reply.strip()):
        return reply

    remaining = " ".join(words[max_words:])
    next_sentence = _NEXT_SENTENCE.match(remaining)
    if next_sentence:
        reply += " " + next_sentence.group(0)
    return reply


def strip_greeting(text: str) -> str:
    return _LEADING_GREETING.sub("", text, count=1)


def strip_role_labels(text: str) -> str:
    return _ROLE_LABELS.sub("", text)


def collapse_markdown_links(text: str) -> str:
    """Replace ``[label](url)`` with the bare url."""
    return _MARKDOWN_LINK.sub(r"\2", text)


def format_reply(text: str, max_words: int = MAX_REPLY_WORDS) -> str:
    """Apply every post-processing step to a completion.

    Args:
        text: Raw completion text.
        max_words: Word budget passed to truncate_reply.

    Returns:
        Reply ready to be sent.
    """
    reply = truncate_reply(text, max_words)
    reply = strip_greeting(reply)
    reply = strip_role_labels(reply)
    reply = collapse_markdown_links(reply)
    return reply.strip()


def contains_question(text: str) -> bool:
    return "?" in text or "¿" in text


def _normalize(text: str) -> str:
    return text.lower().strip()


def is_affirmative(text: str) -> bool:
    return _normalize(text) in AFFIRMATIVE_RESPONSES


def is_negative(text: str) -> bool:
    return _normalize(text) in NEGATIVE_RESPONSES


def is_group_chat(chat_id: str) -> bool:
    return chat_id.endswith(GROUP_CHAT_SUFFIX)


def clean_participant_id(sender: str) -> str:
    """Keep only the digits of a sender identity ("5215550001@s.whatsapp.net")."""
    return re.sub(r"[^0-9]", "", sender)
