"""Page/block identifier parsing.

Accepts a canonical id, an id without hyphens, or a notion.so / notion.site
link ending with the id, and returns the canonical 8-4-4-4-12 form.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import urlsplit

from ..errors import InvalidReference

_UUID_SUFFIX = re.compile(
    r"([a-f0-9]{8}-?[a-f0-9]{4}-?[a-f0-9]{4}-?[a-f0-9]{4}-?[a-f0-9]{12})$", re.IGNORECASE
)
_HEX_SUFFIX = re.compile(r"([a-f0-9]{32})$", re.IGNORECASE)
_RAW_HEX = re.compile(r"^[a-f0-9]{32}$", re.IGNORECASE)
_HOST_PATH = re.compile(r"notion\.(?:so|site)(/[^?#]*)", re.IGNORECASE)


def format_identifier(raw_id: str) -> str:
    """Return the hyphenated 8-4-4-4-12 form of a 32 hex character id."""
    clean = raw_id.replace("-", "").lower()
    if len(clean) != 32:
        return raw_id
    return f"{clean[:8]}-{clean[8:12]}-{clean[12:16]}-{clean[16:20]}-{clean[20:]}"


def _extract_path(text: str) -> str:
    parts = urlsplit(text)
    if parts.scheme and parts.netloc:
        return parts.path
    if "notion.so/" in text or "notion.site/" in text:
        match = _HOST_PATH.search(text)
        if match:
            return match.group(1)
    return text


def resolve_identifier(text: Optional[str]) -> Optional[str]:
    """Resolve free-form input to a canonical identifier, or None."""
    if not text:
        return None
    trimmed = text.strip()
    path = _extract_path(trimmed)

    match = _UUID_SUFFIX.search(path) or _HEX_SUFFIX.search(path)
    if match:
        return format_identifier(match.group(1))

    raw_id = trimmed.replace("-", "")
    if _RAW_HEX.match(raw_id):
        return format_identifier(raw_id)
    return None


def require_identifier(text: Optional[str]) -> str:
    """Like ``resolve_identifier`` but raises ``InvalidReference``."""
    resolved = resolve_identifier(text)
    if resolved is None:
        raise InvalidReference(text or "")
    return resolved
