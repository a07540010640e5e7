# hackathons/sanitizers.py
"""
Input sanitization for hackathon team profiles and repository links.
"""
import re
from typing import Optional

TEAM_NAME_MAX_LENGTH = 50

URL_PATTERN = re.compile(
    r"^https?://"
    r"(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)+[A-Z]{2,6}\.?|"
    r"localhost|"
    r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3})"
    r"(?::\d+)?"
    r"(?:/?|[/?]\S+)$",
    re.IGNORECASE,
)


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input.

    - Strips leading/trailing whitespace
    - Removes control characters
    - Enforces maximum length
    - Returns empty string for None input
    """
    if text is None:
        return ""

    if strip:
        text = text.strip()

    # Remove control characters except newlines and tabs
    text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_team_name(name: Optional[str]) -> str:
    """Single line, no control characters, at most 50 chars."""
    name = sanitize_text(name, strip=True)
    name = re.sub(r"\s+", " ", name)
    return name[:TEAM_NAME_MAX_LENGTH]


def validate_url(url: Optional[str]) -> bool:
    """http(s) URLs only."""
    if not url:
        return False
    return bool(URL_PATTERN.match(url.strip()))
