# File: webgrep/matcher.py
"""webgrep.matcher: keyword counting in exact, default and fuzzy modes."""

from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import List, Union

__all__ = [
    "MatchMode",
    "count_matches",
    "count_substring",
    "levenshtein",
    "simplify",
    "simplify_with_spaces",
]

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")
_NON_ALNUM_KEEP_SPACE_RE = re.compile(r"[^a-z0-9\s]")


class MatchMode(str, Enum):
    DEFAULT = "default"
    EXACT = "exact"
    FUZZY = "fuzzy"


def _strip_marks(value: str) -> str:
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.category(ch).startswith("M"))


def simplify(value: str) -> str:
    """Fold diacritics and case, then drop everything but ``[a-z0-9]``.

    >>> simplify("Crème Brûlée!")
    'cremebrulee'
    """
    if not value:
        return ""
    return _NON_ALNUM_RE.sub("", _strip_marks(value).lower())


def simplify_with_spaces(value: str) -> str:
    """Like :func:`simplify`, but punctuation becomes a space so words survive."""
    if not value:
        return ""
    return _NON_ALNUM_KEEP_SPACE_RE.sub(" ", _strip_marks(value).lower())


def count_substring(haystack: str, needle: str) -> int:
    """Non-overlapping occurrences, scanning left to right."""
    if not needle:
        return 0
    return haystack.count(needle)


def levenshtein(s1: str, s2: str) -> int:
    """Edit distance with unit insert/delete/substitute costs."""
    rows, cols = len(s1) + 1, len(s2) + 1
    dp: List[List[int]] = [[0] * cols for _ in range(rows)]
    for i in range(rows):
        dp[i][0] = i
    for j in range(cols):
        dp[0][j] = j
    for i in range(1, rows):
        for j in range(1, cols):
            cost = 0 if s1[i - 1] == s2[j - 1] else 1
            dp[i][j] = min(dp[i - 1][j] + 1, dp[i][j - 1] + 1, dp[i - 1][j - 1] + cost)
    return dp[-1][-1]


def _fuzzy_threshold(keyword: str) -> int:
    return 1 if len(keyword) <= 4 else 2


def _count_fuzzy(text: str, keyword: str) -> int:
    simple_keyword = simplify(keyword)
    if not simple_keyword:
        return 0

    count = count_substring(simplify(text), simple_keyword)
    if count:
        return count

    threshold = _fuzzy_threshold(simple_keyword)
    return sum(
        1 for word in simplify_with_spaces(text).split()
        if levenshtein(word, simple_keyword) <= threshold
    )


def _count_default(text: str, keyword: str) -> int:
    pattern = re.compile(re.escape(keyword), re.IGNORECASE)
    count = len(pattern.findall(text.replace("\u00a0", " ")))
    if count:
        return count
    return count_substring(simplify(text), simplify(keyword))


def count_matches(text: str, keyword: str, mode: Union[MatchMode, str] = MatchMode.DEFAULT) -> int:
    """
    Count *keyword* in *text*.

    * ``exact`` – case-sensitive literal count.
    * ``default`` – case-insensitive count; when nothing is found, a
      diacritic- and punctuation-insensitive count instead.
    * ``fuzzy`` – folded substring count, or else the number of words
      within edit distance 1 (keywords up to 4 chars) or 2 of the keyword.
    """
    if not text or not keyword:
        return 0
    mode = MatchMode(mode)
    if mode is MatchMode.EXACT:
        return count_substring(text, keyword)
    if mode is MatchMode.FUZZY:
        return _count_fuzzy(text, keyword)
    return _count_default(text, keyword)
