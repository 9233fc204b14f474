"""Validators for command arguments."""
from typing import List, Optional


def validate_timeout_minutes(raw: str) -> tuple[bool, Optional[int]]:
    """Parse a password timeout. Only a plain positive decimal integer is accepted."""
    raw = raw.strip()
    if not raw.isdigit():
        return False, None

    minutes = int(raw)
    if minutes <= 0:
        return False, None

    return True, minutes


def normalize_blacklist_words(words: List[str]) -> List[str]:
    """Lower-case the words and drop duplicates, keeping the given order."""
    seen = []
    for word in words:
        word = word.strip().lower()
        if word and word not in seen:
            seen.append(word)
    return seen


def truncate_text(text: str, max_length: int, marker: str = "...") -> str:
    """Cut the text to max_length characters and append the marker if it was longer."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + marker
