"""Text canonicalization and edit-distance similarity for album matching."""

from __future__ import annotations

import unicodedata

from rapidfuzz.distance import Levenshtein


# Unicode White_Space: ASCII controls \t-\r, NEL, and the Z* separators.
# str.isspace() would also admit U+001C-U+001F, which are dropped here.
_SPACE_CONTROLS = frozenset("\t\n\v\f\r\x85")


def _is_space(ch: str) -> bool:
    return ch in _SPACE_CONTROLS or unicodedata.category(ch) in ("Zs", "Zl", "Zp")


def _keep(ch: str) -> bool:
    return unicodedata.category(ch)[0] in ("L", "N") or _is_space(ch)


def normalize(s: str) -> str:
    """Lower-case, strip diacritics and punctuation, collapse whitespace.

    >>> normalize("  Björk:  Homogénic!! ")
    'bjork homogenic'
    """
    decomposed = unicodedata.normalize("NFD", s.lower())
    kept = "".join(
        ch for ch in decomposed
        if not unicodedata.category(ch).startswith("M") and _keep(ch)
    )
    return " ".join(kept.split())


def similarity(a: str, b: str) -> float:
    """
    Closeness in [0, 1] from Levenshtein distance over code points.
    Inputs are expected to be normalized already. An empty side scores 0.
    """
    if not a or not b:
        return 0.0
    d = Levenshtein.distance(a, b)
    return 1.0 - d / max(len(a), len(b))
