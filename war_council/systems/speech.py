"""Speech normalizer - forces advisor speech into the allowed shape."""

from __future__ import annotations
import re

SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
TERMINAL_PUNCTUATION = re.compile(r"[.!?]$")

SPEECH_FALLBACK = "I do not know. What is the specific detail you want me to confirm?"
PLAN_FALLBACK = "I do not know. What is the specific plan you want me to evaluate?"


def split_sentences(text: str) -> list[str]:
    return [part for part in SENTENCE_BREAK.split(text) if part.strip()]


def _truncate_words(words: list[str], limit: int) -> str:
    text = " ".join(words[:limit]).strip()
    if text and not TERMINAL_PUNCTUATION.search(text):
        text += "."
    return text


def normalize_speech(raw: str, max_sentences: int, max_words: int) -> str:
    """Cap sentences and words, with no semicolons and at least two sentences.

    When the word cap would leave a single sentence, the lead sentence is
    shortened further to make room for the fallback clause. If `max_words`
    is smaller than the fallback clause itself, the word cap wins.

    Pure: the same input and limits always give the same output.
    """
    cleaned = raw.replace(";", ".").strip()
    sentences = split_sentences(cleaned)[:max_sentences]

    text = " ".join(sentences)
    if len(sentences) < 2:
        text = f"{text} {SPEECH_FALLBACK}".strip()

    words = text.split()
    if len(words) <= max_words:
        return text

    truncated = _truncate_words(words, max_words)
    if len(split_sentences(truncated)) >= 2:
        return truncated

    budget = max_words - len(SPEECH_FALLBACK.split())
    if budget < 1:
        return truncated
    return f"{_truncate_words(words, budget)} {SPEECH_FALLBACK}"
