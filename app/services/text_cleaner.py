"""Clean up model output before it is shown as an insight summary.

Hosted text-generation models tend to echo the prompt, use typographic
punctuation and run past the length we asked for.
"""

from __future__ import annotations

import re
from typing import Optional


# Typographic characters mapped to plain ASCII
AI_REPLACEMENTS = {
    "\u2014": "-",      # em dash
    "\u2013": "-",      # en dash
    "\u201c": '"',      # left double quotation
    "\u201d": '"',      # right double quotation
    "\u2018": "'",      # left single quotation
    "\u2019": "'",      # right single quotation
    "\u2026": "...",    # horizontal ellipsis
    "\u00a0": " ",      # non-breaking space
    "\u2022": "-",      # bullet
    "\u2212": "-",      # minus sign
    "\u200b": "",       # zero-width space
    "\ufeff": "",       # BOM
}

_TRANSLATION_TABLE = str.maketrans(AI_REPLACEMENTS)


def clean_ai_text(text: Optional[str]) -> Optional[str]:
    """
    Replace typographic characters, collapse whitespace and strip.

    Returns None for None input.
    """
    if text is None:
        return None
    cleaned = text.translate(_TRANSLATION_TABLE)
    cleaned = re.sub(r"\s+", " ", cleaned)
    cleaned = re.sub(r"-{2,}", "-", cleaned)
    return cleaned.strip()


def strip_prompt_echo(text: str, prompt: str) -> str:
    """Drop the prompt when the model repeats it before its answer."""
    stripped_prompt = prompt.strip()
    candidate = text.lstrip()
    if stripped_prompt and candidate.startswith(stripped_prompt):
        return candidate[len(stripped_prompt):].lstrip()
    return text


def truncate_summary(text: str, max_chars: int = 600) -> str:
    """
    Cut ``text`` to at most ``max_chars``.

    Prefers the last sentence end inside the limit, then the last word
    boundary (with an ellipsis).
    """
    if not text or len(text) <= max_chars:
        return text

    window = text[:max_chars]
    last_break = max(window.rfind(". "), window.rfind("! "), window.rfind("? "))
    if last_break > max_chars // 2:
        return window[: last_break + 1].strip()

    last_space = window.rfind(" ", 0, max_chars - 3)
    if last_space > 0:
        window = window[:last_space]
    else:
        window = window[: max_chars - 3]
    return window.rstrip(".,;:!? ") + "..."
