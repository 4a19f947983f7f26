"""
Vertex and transition costs for path selection.

A scorer turns a vertex's weight into a cost the path selector minimizes,
and may add a cost for moving from one tag to the next. Costs are negative
log-probabilities, so the cheapest path is the most likely segmentation.
"""

import logging
import math
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple, Union

from wordlattice.errors import DictionaryFormatError

logger = logging.getLogger(__name__)

# Weight floor for unseen words (fallback vertices have weight 0)
DEFAULT_WEIGHT_FLOOR = 0.5


class Scorer(Protocol):
    """Cost model consumed by the path selectors."""

    def vertex_cost(self, vertex) -> float:
        ...

    def transition_cost(self, prev_tag: Optional[str], tag: str) -> float:
        ...


class FrequencyScorer:
    """
    Unigram cost: -log(weight / total).

    Weights are word frequencies. Anything below floor (including the zero
    weight of fallback vertices) is scored as floor.
    """

    def __init__(self, total_weight: float, floor: float = DEFAULT_WEIGHT_FLOOR):
        if floor <= 0:
            raise ValueError("floor must be positive")
        self.floor = floor
        self.log_total = math.log(max(total_weight, floor, 1.0))

    def vertex_cost(self, vertex) -> float:
        return self.log_total - math.log(max(vertex.weight, self.floor))

    def transition_cost(self, prev_tag: Optional[str], tag: str) -> float:
        return 0.0


class TransitionScorer:
    """
    Adds tag-to-tag transition costs to a base scorer.

    transitions maps (prev_tag, tag) to a cost; prev_tag None is the start
    of the sentence. Missing pairs cost default.
    """

    def __init__(
        self,
        base: Scorer,
        transitions: Dict[Tuple[Optional[str], str], float],
        default: float = 0.0,
    ):
        self.base = base
        self.transitions = dict(transitions)
        self.default = default

    def vertex_cost(self, vertex) -> float:
        return self.base.vertex_cost(vertex)

    def transition_cost(self, prev_tag: Optional[str], tag: str) -> float:
        return self.transitions.get((prev_tag, tag), self.default)


# Name for the start-of-sentence tag in transition files
START_TAG = "<s>"


def load_transitions(path: Union[str, Path]) -> Dict[Tuple[Optional[str], str], float]:
    """
    Load a transition table from a text file.

    Each non-blank, non-comment line is "prev_tag tag cost". Use "<s>" as
    prev_tag for sentence-initial transitions.

    Raises:
        FileNotFoundError: If path doesn't exist
        DictionaryFormatError: If a line can't be parsed
    """
    path = Path(path)
    transitions: Dict[Tuple[Optional[str], str], float] = {}
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            parts = stripped.split()
            if len(parts) != 3:
                raise DictionaryFormatError(path, line_no, stripped, "expected 'prev tag cost'")
            prev, tag, cost = parts
            try:
                value = float(cost)
            except ValueError:
                raise DictionaryFormatError(path, line_no, stripped, "cost is not a number")
            transitions[(None if prev == START_TAG else prev, tag)] = value
    logger.info("Loaded %d tag transitions from %s", len(transitions), path)
    return transitions
