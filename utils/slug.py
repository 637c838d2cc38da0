# utils/slug.py
import re
import unicodedata

from config import SLUG_MAX_LENGTH

_COMBINING_MARKS = re.compile(r'[\u0300-\u036f]')
_INVALID_CHARS = re.compile(r'[^a-z0-9\s\-_]')
_WHITESPACE = re.compile(r'\s+')
_HYPHENS = re.compile(r'-+')
_EDGE_SEPARATORS = re.compile(r'^[-_]+|[-_]+$')


def normalize_slug(value):
    """
    Turns arbitrary text into a URL-safe slug of at most 60 characters.

    Never raises. Returns an empty string when nothing usable is left
    (e.g. emoji-only input); callers must treat that as "no slug".
    """
    if value is None:
        return ""
    s = str(value).lower()
    s = unicodedata.normalize('NFKD', s)
    s = _COMBINING_MARKS.sub('', s)
    s = _INVALID_CHARS.sub('', s)
    s = s.strip()
    s = _WHITESPACE.sub('-', s)
    s = _HYPHENS.sub('-', s)
    s = _EDGE_SEPARATORS.sub('', s)
    s = s[:SLUG_MAX_LENGTH]
    # truncation can expose a trailing separator again
    return _EDGE_SEPARATORS.sub('', s)


def derive_slug(title, start_location, destination, start_date):
    """Fallback slug built from the trip's own fields when the user leaves the slug blank."""
    parts = [str(p).strip() for p in (title, start_location, destination, start_date) if p]
    return normalize_slug(" ".join(parts))
