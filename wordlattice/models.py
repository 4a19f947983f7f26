"""
Lightweight data structures shared across the engine.

DictionaryEntry is the payload stored in the prefix index, Hit is what the
scanner reports, and WordTerm is the final output unit.
"""

from dataclasses import dataclass
from typing import NamedTuple


@dataclass(frozen=True, slots=True)
class DictionaryEntry:
    """
    A word from a built dictionary.

    Attributes:
        word: The word text
        weight: Frequency of the word (larger = more likely)
        tag: Part of speech or category label (e.g. "n", "ns", "q")
        index: Ordinal assigned when the dictionary was built
    """
    word: str
    weight: float
    tag: str
    index: int


class Hit(NamedTuple):
    """A dictionary match reported by the scanner, [begin, end) in the buffer."""
    begin: int
    end: int
    entry: DictionaryEntry

    @property
    def ordinal(self) -> int:
        return self.entry.index

    @property
    def length(self) -> int:
        return self.end - self.begin


@dataclass(slots=True)
class WordTerm:
    """
    A segmented word.

    Attributes:
        word: The word text as it appears in the input
        tag: Part of speech label
        offset: Character offset of the word in the input
    """
    word: str
    tag: str
    offset: int

    @property
    def end(self) -> int:
        return self.offset + len(self.word)

    def __repr__(self) -> str:
        return f"WordTerm({self.word!r}, tag={self.tag!r}, offset={self.offset})"

    def __str__(self) -> str:
        return f"{self.word}/{self.tag}"
