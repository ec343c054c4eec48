from __future__ import annotations

from typing import List


def wrap_words(text: str, max_chars: int) -> List[str]:
    """Greedy word packing; words longer than ``max_chars`` are split into chunks."""
    max_chars = max(1, max_chars)
    lines: List[str] = []
    current: List[str] = []
    count = 0
    for word in text.split():
        if current and count + 1 + len(word) <= max_chars:
            current.append(word)
            count += 1 + len(word)
            continue
        if current:
            lines.append(" ".join(current))
            current = []
        for idx in range(0, len(word), max_chars):
            chunk = word[idx : idx + max_chars]
            if current:
                lines.append(" ".join(current))
            current = [chunk]
            count = len(chunk)
    if current:
        lines.append(" ".join(current))
    return lines or [""]


def wrap_label(text: str, max_chars: int) -> List[str]:
    """Wrap each explicit line of ``text`` independently."""
    lines: List[str] = []
    for paragraph in text.replace("<br>", "\n").replace("<br/>", "\n").splitlines() or [""]:
        lines.extend(wrap_words(paragraph, max_chars))
    return lines
