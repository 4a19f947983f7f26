"""
Character normalization pre-pass.

Folds full-width forms to half-width and upper case to lower case, one
character at a time. Characters whose normal form is not exactly one
character are left alone, so the output always has the input's length
and term offsets stay valid for the original text.
"""

import unicodedata
from functools import lru_cache
from typing import Protocol


class CharNormalizer(Protocol):
    def normalize(self, text: str) -> str:
        ...


@lru_cache(maxsize=4096)
def _fold(char: str) -> str:
    folded = unicodedata.normalize("NFKC", char).lower()
    return folded if len(folded) == 1 else char


class WidthCaseNormalizer:
    """NFKC + lower case, per character, length preserving."""

    def normalize(self, text: str) -> str:
        if text.isascii():
            return text.lower()
        return "".join(_fold(c) for c in text)


class IdentityNormalizer:
    def normalize(self, text: str) -> str:
        return text
