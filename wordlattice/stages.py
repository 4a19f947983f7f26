"""
Pipeline stages that mutate the wordnet before path selection.

A stage is any object with a ``name`` and an ``apply(wordnet)`` method.
Stages run in configured order and each one sees the changes made by the
stages before it. Every stage must leave the coverage invariant intact:
a vertex may only be removed if another vertex still starts at the same
offset (Wordnet.remove_covered() restores a fallback otherwise).

Stages keep no per-call state. The custom dictionary stage holds a
compiled scanner, which is shared read-only.
"""

import logging
import re
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from wordlattice.characters import is_all_digits, is_word_char, word_run_end
from wordlattice.counters import (
    TAG_NUMERAL,
    TAG_NUMERAL_QUANTIFIER,
    find_number_quantifier,
    find_numeral_end,
    is_numeral_start,
    parse_number,
)
from wordlattice.lattice import Wordnet
from wordlattice.errors import ConfigurationError
from wordlattice.models import Hit
from wordlattice.normalize import CharNormalizer
from wordlattice.recognizers import OrganizationRecognizer, PersonRecognizer, PlaceRecognizer
from wordlattice.scanner import Scanner
from wordlattice.trie import PrefixIndex

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

# Frequencies given to merged candidates. They only need to beat the
# fallback pieces they replace.
NUMERAL_WEIGHT = 100.0
NUMERAL_QUANTIFIER_WEIGHT = 200.0
LETTER_RUN_WEIGHT = 100.0
PATTERN_WEIGHT = 1000.0

# Custom words with override on are scored at least this frequent
CUSTOM_PRIORITY_WEIGHT = 1e8

SOURCE_CUSTOM = "custom"

TAG_LETTERS = "nx"


class Stage(Protocol):
    name: str

    def apply(self, wordnet: Wordnet) -> None:
        ...


# =============================================================================
# Custom Dictionary
# =============================================================================

def _leftmost_longest(hits: Sequence[Hit]) -> List[Hit]:
    """Greedy non-overlapping selection: at each begin take the longest hit."""
    chosen = []
    covered_to = 0
    by_begin: Dict[int, Hit] = {}
    for hit in hits:
        by_begin[hit.begin] = hit  # hits are sorted by end within a begin
    for begin in sorted(by_begin):
        hit = by_begin[begin]
        if begin >= covered_to:
            chosen.append(hit)
            covered_to = hit.end
    return chosen


class CustomDictionaryStage:
    """
    Apply a custom dictionary with priority over the main one.

    Every custom word found in the text replaces all vertices with the same
    span. With override on, custom words (leftmost-longest, non-overlapping)
    also evict the vertices that cross or contain them and are boosted to
    CUSTOM_PRIORITY_WEIGHT.
    """

    name = "custom_dictionary"

    def __init__(self, index: PrefixIndex, override: bool = True):
        self.index = index
        self.override = override
        self._scanner = Scanner(index)

    def apply(self, wordnet: Wordnet) -> None:
        if not len(self._scanner):
            return
        hits = self._scanner.scan(wordnet.text)
        if not hits:
            return

        forced = set(_leftmost_longest(hits)) if self.override else set()
        for hit in hits:
            entry = hit.entry
            weight = max(entry.weight, CUSTOM_PRIORITY_WEIGHT) if hit in forced else entry.weight
            for v in wordnet.find(hit.begin, hit.end):
                wordnet.remove(v)
            wordnet.add_span(hit.begin, hit.end, weight, entry.tag, entry.index, SOURCE_CUSTOM)

        for hit in sorted(forced, key=lambda h: h.begin):
            rivals = wordnet.crossing(hit.begin, hit.end) + wordnet.containing(hit.begin, hit.end)
            for v in rivals:
                logger.debug("Custom word %r evicts %r", hit.entry.word, v)
                wordnet.remove_covered(v)


# =============================================================================
# Number Merging
# =============================================================================

class NumberQuantifierStage:
    """
    Merge numerals, and numerals followed by a quantifier.

    23个 -> one "mq" candidate; 二〇一八 -> one "m" candidate.
    """

    name = "number_quantifier"

    def __init__(self, index: Optional[PrefixIndex] = None):
        self.index = index

    def apply(self, wordnet: Wordnet) -> None:
        text = wordnet.text
        p = 0
        n = len(text)
        while p < n:
            if not is_numeral_start(text, p):
                p += 1
                continue
            numeral_end = find_numeral_end(text, p)
            if numeral_end == p or parse_number(text[p:numeral_end]) is None:
                p += 1
                continue

            if numeral_end - p > 1 and not wordnet.has_span(p, numeral_end):
                wordnet.add_span(p, numeral_end, NUMERAL_WEIGHT, TAG_NUMERAL, source=self.name)

            expression = find_number_quantifier(text, p, self.index)
            if expression is not None and not wordnet.has_span(p, expression.end):
                wordnet.add_span(p, expression.end, NUMERAL_QUANTIFIER_WEIGHT,
                                 TAG_NUMERAL_QUANTIFIER, source=self.name)
            p = numeral_end


class NumberLetterStage:
    """
    Merge runs of letters and digits into one candidate.

    iPhone12 -> "nx"; 3.14 -> "m"; C++ -> "nx".
    """

    name = "number_letter"

    def apply(self, wordnet: Wordnet) -> None:
        text = wordnet.text
        p = 0
        n = len(text)
        while p < n:
            if not is_word_char(text[p]):
                p += 1
                continue
            end = word_run_end(text, p)
            if end - p > 1 and not wordnet.has_span(p, end):
                run = text[p:end]
                tag = TAG_NUMERAL if is_all_digits(run) else TAG_LETTERS
                wordnet.add_span(p, end, LETTER_RUN_WEIGHT, tag, source=self.name)
            p = end


# =============================================================================
# Patterns
# =============================================================================

DEFAULT_PATTERNS: Tuple[Tuple[str, str], ...] = (
    ("email", r"[A-Za-z0-9][A-Za-z0-9._%+-]*@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}"),
    ("url", r"(?:https?://|www\.)[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+"),
)


class PatternStage:
    """
    Merge regular-expression matches into one candidate each.

    A match is authoritative: vertices crossing its boundaries are removed.
    """

    name = "common_pattern"

    def __init__(self, patterns: Iterable[Tuple[str, str]] = DEFAULT_PATTERNS):
        self.patterns: List[Tuple[str, re.Pattern]] = [(tag, re.compile(rx)) for tag, rx in patterns]

    def apply(self, wordnet: Wordnet) -> None:
        text = wordnet.text
        for tag, pattern in self.patterns:
            for match in pattern.finditer(text):
                begin, end = match.span()
                if end <= begin or wordnet.has_span(begin, end):
                    continue
                wordnet.add_span(begin, end, PATTERN_WEIGHT, tag, source=self.name)
                for v in wordnet.crossing(begin, end):
                    wordnet.remove_covered(v)


# =============================================================================
# Pipeline
# =============================================================================

class Pipeline:
    """Ordered chain of stages. Coverage is checked after every stage."""

    def __init__(self, stages: Iterable[Stage] = ()):
        self.stages: List[Stage] = list(stages)

    @property
    def names(self) -> List[str]:
        return [stage.name for stage in self.stages]

    def apply(self, wordnet: Wordnet) -> None:
        """
        Raises:
            LatticeUnreachable: If a stage left some offset uncovered
        """
        for stage in self.stages:
            before = len(wordnet)
            stage.apply(wordnet)
            logger.debug("Stage %s: %d -> %d vertices", stage.name, before, len(wordnet))
            wordnet.check_coverage(stage.name)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        return f"Pipeline({self.names})"


# Stage id -> factory(config, index, normalizer). The config is a
# SegmenterConfig; index and normalizer are the ones lookup runs with.
StageFactory = Callable[[object, PrefixIndex, Optional[CharNormalizer]], Stage]


def _custom_stage(config, index: PrefixIndex, normalizer: Optional[CharNormalizer]) -> Stage:
    fold = normalizer.normalize if normalizer is not None else None
    return CustomDictionaryStage(config.custom_index(fold), override=config.custom_override)


STAGE_REGISTRY: Dict[str, StageFactory] = {
    CustomDictionaryStage.name: _custom_stage,
    NumberQuantifierStage.name: lambda config, index, normalizer: NumberQuantifierStage(index),
    NumberLetterStage.name: lambda config, index, normalizer: NumberLetterStage(),
    PatternStage.name: lambda config, index, normalizer: PatternStage(),
    PersonRecognizer.name: lambda config, index, normalizer: PersonRecognizer(),
    PlaceRecognizer.name: lambda config, index, normalizer: PlaceRecognizer(),
    OrganizationRecognizer.name: lambda config, index, normalizer: OrganizationRecognizer(),
}


def create_stage(
    stage_id: str,
    config,
    index: PrefixIndex,
    normalizer: Optional[CharNormalizer] = None,
) -> Stage:
    """
    Raises:
        ConfigurationError: If stage_id is not registered
    """
    try:
        factory = STAGE_REGISTRY[stage_id]
    except KeyError:
        raise ConfigurationError(
            f"unknown pipeline stage {stage_id!r}; expected one of {sorted(STAGE_REGISTRY)}"
        ) from None
    return factory(config, index, normalizer)


def build_pipeline(config, index: PrefixIndex, normalizer: Optional[CharNormalizer] = None) -> Pipeline:
    """
    Create the stages named by config.stage_ids(), in order.

    With a normalizer, custom words are folded the same way as the text.
    """
    return Pipeline(
        create_stage(stage_id, config, index, normalizer) for stage_id in config.stage_ids()
    )
