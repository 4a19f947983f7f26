"""
Exception types for wordlattice.

All errors raised by the engine derive from SegmentationError so callers
can catch the whole family with one clause.
"""

from typing import Optional


class SegmentationError(Exception):
    """Base class for all wordlattice errors."""
    pass


class InvalidEntry(SegmentationError, ValueError):
    """Raised when a malformed word (e.g. empty) is inserted into an index."""

    def __init__(self, word, reason: str = "word must be a non-empty string"):
        self.word = word
        self.reason = reason
        super().__init__(f"invalid dictionary entry {word!r}: {reason}")


class FrozenIndexError(SegmentationError):
    """Raised when inserting into a prefix index after it has been frozen."""
    pass


class LatticeUnreachable(SegmentationError):
    """
    Raised when the end of the lattice cannot be reached from offset 0.

    This always means a pipeline stage broke the coverage invariant. It is a
    configuration defect, not a data error, and is never recovered from.
    """

    def __init__(self, offset: int, stage: Optional[str] = None):
        self.offset = offset
        self.stage = stage
        where = f" after stage {stage!r}" if stage else ""
        super().__init__(f"no vertex covers offset {offset}{where}")


class ConfigurationError(SegmentationError, ValueError):
    """Raised for unknown stage ids, unknown path algorithms or bad options."""
    pass


class DictionaryFormatError(SegmentationError, ValueError):
    """Raised when a dictionary source line cannot be parsed."""

    def __init__(self, path, line_no: int, line: str, reason: str):
        self.path = path
        self.line_no = line_no
        self.line = line
        super().__init__(f"{path}:{line_no}: {reason}: {line!r}")


class AnalysisTimeoutError(SegmentationError):
    """Raised when async segmentation times out."""
    pass
