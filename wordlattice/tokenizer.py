"""
Tokenizer module for wordlattice.

A Segmenter wires the components together for one dictionary:

    text -> normalize -> scan -> build wordnet -> pipeline stages
         -> select best path -> collect terms

The scanner, pipeline and path selector are built once in the constructor
and shared by every call; each call builds its own wordnet and path, so one
Segmenter may be used from several threads at once.
"""

import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from wordlattice.collector import TermCollector, TermSequence
from wordlattice.config import SegmenterConfig
from wordlattice.lattice import LatticeBuilder, Wordnet, Wordpath
from wordlattice.models import WordTerm
from wordlattice.normalize import CharNormalizer, IdentityNormalizer, WidthCaseNormalizer
from wordlattice.pathing import create_selector
from wordlattice.scanner import Scanner
from wordlattice.scoring import FrequencyScorer, Scorer
from wordlattice.stages import build_pipeline
from wordlattice.trie import PrefixIndex

logger = logging.getLogger(__name__)


class Segmenter:
    """
    Dictionary-driven word segmenter.

    Args:
        index: Main dictionary (frozen on construction if it isn't yet)
        config: Pipeline, path algorithm and custom dictionary options
        scorer: Cost model; defaults to FrequencyScorer over index weights
        normalizer: Character pre-pass; defaults to width/case folding when
            config.normalize is set, otherwise none

    Raises:
        ConfigurationError: If config names an unknown stage or algorithm

    Example:
        >>> seg = Segmenter(index)
        >>> [t.word for t in seg.segment("北京大学生")]
        ['北京大学', '生']
    """

    def __init__(
        self,
        index: PrefixIndex,
        config: Optional[SegmenterConfig] = None,
        scorer: Optional[Scorer] = None,
        normalizer: Optional[CharNormalizer] = None,
    ):
        if not index.frozen:
            index.freeze()
        self.index = index
        self.config = config if config is not None else SegmenterConfig()
        self.scorer = scorer if scorer is not None else FrequencyScorer(index.total_weight)
        if normalizer is None:
            normalizer = WidthCaseNormalizer() if self.config.normalize else IdentityNormalizer()
        self.normalizer = normalizer

        # Lookup runs over normalized text, so dictionary words are folded too
        if isinstance(normalizer, IdentityNormalizer):
            self.lookup_index = index
            stage_normalizer = None
        else:
            self.lookup_index = index.folded(normalizer.normalize)
            stage_normalizer = normalizer

        self.scanner = Scanner(self.lookup_index)
        self.builder = LatticeBuilder()
        self.pipeline = build_pipeline(self.config, self.lookup_index, stage_normalizer)
        self.selector = create_selector(self.config.path_algorithm, self.scorer)
        self.collector = TermCollector()
        logger.debug("Segmenter ready: %d words, stages %s, %s path",
                     len(index), self.pipeline.names, self.config.path_algorithm)

    @classmethod
    def from_path(cls, path: Union[str, Path], config: Optional[SegmenterConfig] = None) -> "Segmenter":
        """Load a dictionary (compiled or text) and build a Segmenter over it."""
        from wordlattice.dictionary import load_dictionary
        return cls(load_dictionary(path), config)

    # -------------------------------------------------------------------------
    # Stages of one call
    # -------------------------------------------------------------------------

    def _slice(self, text: str, offset: int, length: Optional[int]) -> str:
        if length is None:
            length = len(text) - offset
        if offset < 0 or length < 0 or offset + length > len(text):
            raise ValueError(
                f"slice [{offset}, {offset + length}) outside text of length {len(text)}"
            )
        return text[offset:offset + length]

    def lattice(self, text: str) -> Wordnet:
        """Build the wordnet for text and run the pipeline over it."""
        lookup = self.normalizer.normalize(text)
        hits = self.scanner.scan(lookup)
        wordnet = self.builder.build(lookup, hits)
        logger.debug("Scanned %d chars: %d hits, %d vertices", len(lookup), len(hits), len(wordnet))
        self.pipeline.apply(wordnet)
        return wordnet

    def best_path(self, text: str) -> Wordpath:
        """
        Raises:
            LatticeUnreachable: If a stage broke lattice coverage
        """
        return self.selector.select(self.lattice(text))

    def terms(self, text: Optional[str], offset: int = 0, length: Optional[int] = None) -> TermSequence:
        """
        Segment text[offset:offset + length] lazily.

        Offsets of the returned terms are relative to text, not the slice.
        """
        if not text:
            return self.collector.collect(Wordpath((), 0))
        buffer = self._slice(text, offset, length)
        path = self.best_path(buffer)
        return self.collector.collect(path, base_offset=offset, text=buffer)

    def segment(self, text: Optional[str], offset: int = 0, length: Optional[int] = None) -> List[WordTerm]:
        """
        Segment text into words.

        Args:
            text: Input text; None or "" yields an empty list
            offset: Start of the region to segment
            length: Length of the region (default: to the end of text)

        Returns:
            WordTerms in text order, whitespace dropped

        Raises:
            ValueError: If the region lies outside text
            LatticeUnreachable: If a stage broke lattice coverage
        """
        return list(self.terms(text, offset, length))

    def segment_with_cost(self, text: str) -> Tuple[List[WordTerm], float]:
        """Segment text and also return the total cost of the chosen path."""
        if not text:
            return [], 0.0
        path = self.best_path(text)
        return list(self.collector.collect(path, text=text)), path.cost

    def __repr__(self) -> str:
        return f"<Segmenter {len(self.index)} words, {self.pipeline!r}, {self.config.path_algorithm}>"
