from __future__ import annotations

import re
from functools import lru_cache
from typing import Optional, Pattern, Union
from urllib.parse import urljoin, urlparse, urlunparse

Number = Union[int, float]

_NON_DIGITS = re.compile(r"[^\d]")
_NON_DECIMAL = re.compile(r"[^\d.,]")
_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:[.,]\d+)?)")


def normalize_url(url: str) -> str:
    """
    Normalize URL by parsing it and dropping the fragment.
    No other canonicalization: case, query order and trailing slashes are kept.
    """
    parts = list(urlparse(url))
    parts[5] = ""  # strip fragment
    return urlunparse(parts)


def absolute_url(base_url: str, href: str) -> str:
    return normalize_url(urljoin(base_url, href))


def origin_of(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


@lru_cache(maxsize=32)
def _glob_regex(pattern: str) -> Pattern[str]:
    out = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out) + r"\Z")


def matches_glob(url: str, pattern: Optional[str]) -> bool:
    """
    Match a URL against a crawl glob where ``**`` spans path segments and ``*`` does not.
    An empty pattern matches everything.
    """
    if not pattern:
        return True
    return _glob_regex(pattern).match(url) is not None


def digits_only(text: str) -> str:
    return _NON_DIGITS.sub("", text)


def parse_int(text: str) -> Optional[int]:
    """Strip everything but digits and parse what is left; None when nothing is left."""
    digits = digits_only(text)
    return int(digits) if digits else None


def parse_decimal(text: str) -> Optional[float]:
    """
    Keep digits and decimal separators, then parse as float.
    A comma is read as the decimal separator ("4,8" -> 4.8).
    """
    cleaned = _NON_DECIMAL.sub("", text).replace(",", ".").strip(".")
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def letters_only(text: str, alphabet: str) -> str:
    """Drop every character that is neither in the regex character-class ``alphabet`` nor a hyphen."""
    return re.sub(f"[^{alphabet}\\-]", "", text)


def leading_number(text: str) -> Optional[Number]:
    match = _LEADING_NUMBER.match(text)
    if not match:
        return None
    value = float(match.group(1).replace(",", "."))
    return int(value) if value.is_integer() else value
