import re
from typing import Mapping, Optional

Lookup = Mapping[str, str]

_TYPOGRAPHIC_REPLACEMENTS = (
    ("\u2013", "-"),    # en dash
    ("\u2014", "-"),    # em dash
    ("\u2018", "'"),
    ("\u2019", "'"),
    ("\u201c", '"'),
    ("\u201d", '"'),
    ("\u2026", "..."),
    ("\u00a0", " "),    # nbsp
)

_MARKUP_RE = re.compile(r"\s*<(?=[A-Za-z/])[^<>]*>\s*")
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


def sanitize_text(text: Optional[str]) -> Optional[str]:
    """Normalize typographic punctuation to ASCII and strip inline markup like <img=...>."""
    if not text:
        return text
    for src, dst in _TYPOGRAPHIC_REPLACEMENTS:
        text = text.replace(src, dst)
    text = _MARKUP_RE.sub(" ", text)
    text = _WHITESPACE_RUN_RE.sub(" ", text)
    return text.strip()


def lookup_text(lookup: Optional[Lookup], key: Optional[str]) -> Optional[str]:
    """Sanitized lookup value, or None when the key is missing, empty or not a string."""
    if not lookup or not isinstance(key, str) or not key:
        return None
    value = lookup.get(key)
    if not isinstance(value, str) or not value:
        return None
    return sanitize_text(value) or None
