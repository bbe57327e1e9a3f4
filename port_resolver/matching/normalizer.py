"""Name normalization for port matching.

Port labels arrive from user input and from itinerary strings, which
often wrap the port name in descriptive noise:

    >>> sanitize_port_query("History of the Port of Tianjin")
    'Tianjin'
    >>> sanitize_port_query("Kona (history)")
    'Kona'
    >>> normalize("  Cozumél ")
    'cozumel'

All functions here are pure and total: they never raise, and empty
input yields empty output.
"""

from __future__ import annotations

import re
import unicodedata
from typing import List, Optional

# Leading phrases that carry no identifying information
NOISE_PREFIXES = [
    re.compile(r"^(?:the\s+)?history\s+of\s+(?:the\s+)?", re.IGNORECASE),
    re.compile(r"^(?:the\s+)?port\s+of\s+call\s*:\s*", re.IGNORECASE),
    re.compile(r"^(?:cruise\s+)?port\s*:\s*", re.IGNORECASE),
    re.compile(r"^(?:the\s+)?(?:cruise\s+)?port\s+of\s+", re.IGNORECASE),
]

# Trailing annotation such as "(history)" or "(tender)"
TRAILING_PARENTHETICAL = re.compile(r"\s*\([^()]*\)\s*$")

_WHITESPACE = re.compile(r"\s+")
_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


def normalize(s: Optional[str]) -> str:
    """Strip, remove diacritical marks and lowercase.

    Args:
        s: Any text (None is treated as empty).

    Returns:
        The normalized text.
    """
    if not s:
        return ""
    decomposed = unicodedata.normalize("NFD", str(s).strip())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.lower()


def sanitize_port_query(s: Optional[str]) -> str:
    """Remove noise phrases and trailing annotations from a port label.

    The original casing of the remaining fragment is kept. Rules are
    applied repeatedly until the text stops changing, so nested noise
    like "History of the Port of X" collapses to "X".

    Args:
        s: Raw port label.

    Returns:
        The proper-noun fragment, or an empty string.
    """
    if not s:
        return ""

    text = _WHITESPACE.sub(" ", str(s)).strip()
    previous = None
    while text and text != previous:
        previous = text
        text = TRAILING_PARENTHETICAL.sub("", text).strip()
        for pattern in NOISE_PREFIXES:
            text = pattern.sub("", text).strip()
    return text


def tokenize(s: Optional[str]) -> List[str]:
    """Split normalized text on non-alphanumeric boundaries."""
    return [t for t in _TOKEN_SPLIT.split(normalize(s)) if t]
