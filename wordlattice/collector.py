"""
Term collection: turn the selected path into WordTerms.
"""

from typing import Iterator, Optional

from wordlattice.lattice import Wordpath
from wordlattice.models import WordTerm


class TermSequence:
    """
    Lazy, restartable view of the terms of a path.

    Each iteration walks the path afresh; whitespace-only vertices are
    skipped but still consume their span, so offsets stay true to the input.
    """

    __slots__ = ("_path", "_base_offset", "_text")

    def __init__(self, path: Wordpath, base_offset: int = 0, text: Optional[str] = None):
        self._path = path
        self._base_offset = base_offset
        self._text = text

    def __iter__(self) -> Iterator[WordTerm]:
        base = self._base_offset
        text = self._text
        for vertex in self._path:
            # Report the caller's characters, not the normalized ones
            word = vertex.word if text is None else text[vertex.begin:vertex.end]
            if word.isspace():
                continue
            yield WordTerm(word, vertex.tag, base + vertex.begin)

    def __repr__(self) -> str:
        return f"TermSequence({self._path.words()!r})"


class TermCollector:
    """Collects the terms of the best path, dropping whitespace."""

    def collect(self, path: Wordpath, base_offset: int = 0, text: Optional[str] = None) -> TermSequence:
        """
        Args:
            path: The selected path
            base_offset: Added to every term offset
            text: The un-normalized buffer the path was built from, if the
                lattice was built over a normalized copy
        """
        if text is not None and len(text) != path.length:
            raise ValueError(f"text has length {len(text)}, path covers {path.length}")
        return TermSequence(path, base_offset, text)
