"""
Best-path selection over a wordnet.

Both selectors run a dynamic program in increasing end offset, so every
predecessor is resolved before it is used. Predecessor links are vids into
the wordnet arena.

Tie-break: candidates are ordered by (total cost, vertex count, vid). On
equal cost the path with fewer vertices (longer words) wins; if that is
also equal, the vertex enumerated earliest wins.
"""

from typing import Dict, List, Optional, Protocol, Tuple

from wordlattice.errors import ConfigurationError, LatticeUnreachable
from wordlattice.lattice import Wordnet, Wordpath
from wordlattice.scoring import Scorer

# (cost, vertex count, vid of the last vertex)
_State = Tuple[float, int, int]


class PathSelector(Protocol):
    def select(self, wordnet: Wordnet) -> Wordpath:
        ...


def _backtrack(wordnet: Wordnet, last_vid: int, prev_of: Dict[int, int], cost: float) -> Wordpath:
    vertices = []
    vid = last_vid
    while vid >= 0:
        vertex = wordnet.vertex(vid)
        vertices.append(vertex)
        vid = prev_of[vid]
    vertices.reverse()
    return Wordpath(tuple(vertices), wordnet.length, cost)


class ShortestPathSelector:
    """
    Minimum-cost path by offset.

    best(p) = min over v ending at p of best(begin(v)) + cost(v), best(0) = 0.
    Tag transitions are ignored; use ViterbiPathSelector for those.
    """

    name = "shortest"

    def __init__(self, scorer: Scorer):
        self.scorer = scorer

    def select(self, wordnet: Wordnet) -> Wordpath:
        n = wordnet.length
        if n == 0:
            return Wordpath((), 0)

        vertex_cost = self.scorer.vertex_cost
        best: List[Optional[_State]] = [None] * (n + 1)
        best[0] = (0.0, 0, -1)
        prev_of: Dict[int, int] = {}

        for p in range(1, n + 1):
            chosen: Optional[_State] = None
            for v in wordnet.ending_at(p):
                origin = best[v.begin]
                if origin is None:
                    continue
                candidate = (origin[0] + vertex_cost(v), origin[1] + 1, v.vid)
                if chosen is None or candidate < chosen:
                    chosen = candidate
            if chosen is not None:
                best[p] = chosen
                vertex = wordnet.vertex(chosen[2])
                prev_of[chosen[2]] = best[vertex.begin][2]

        final = best[n]
        if final is None:
            raise LatticeUnreachable(_first_unreachable(best))
        return _backtrack(wordnet, final[2], prev_of, final[0])


class ViterbiPathSelector:
    """
    Minimum-cost path by vertex, with tag transition costs.

    best(v) = cost(v) + min over u ending at begin(v) of
              best(u) + transition(tag(u), tag(v))
    with the start-of-sentence tag None before vertices beginning at 0.
    """

    name = "viterbi"

    def __init__(self, scorer: Scorer):
        self.scorer = scorer

    def select(self, wordnet: Wordnet) -> Wordpath:
        n = wordnet.length
        if n == 0:
            return Wordpath((), 0)

        vertex_cost = self.scorer.vertex_cost
        transition_cost = self.scorer.transition_cost
        best: Dict[int, _State] = {}
        prev_of: Dict[int, int] = {}

        # Vertices starting at p only depend on vertices ending at p, which
        # were all scored while handling earlier start offsets.
        for p in range(n):
            incoming = wordnet.ending_at(p)
            for v in wordnet.starting_at(p):
                own = vertex_cost(v)
                if p == 0:
                    best[v.vid] = (own + transition_cost(None, v.tag), 1, v.vid)
                    prev_of[v.vid] = -1
                    continue
                chosen: Optional[Tuple[float, int, int]] = None
                for u in incoming:
                    state = best.get(u.vid)
                    if state is None:
                        continue
                    candidate = (state[0] + transition_cost(u.tag, v.tag), state[1], u.vid)
                    if chosen is None or candidate < chosen:
                        chosen = candidate
                if chosen is not None:
                    best[v.vid] = (chosen[0] + own, chosen[1] + 1, v.vid)
                    prev_of[v.vid] = chosen[2]

        final: Optional[_State] = None
        for v in wordnet.ending_at(n):
            state = best.get(v.vid)
            if state is not None and (final is None or state < final):
                final = state
        if final is None:
            raise LatticeUnreachable(_first_unreachable_vertexwise(wordnet, best))
        return _backtrack(wordnet, final[2], prev_of, final[0])


def _first_unreachable(best: List[Optional[_State]]) -> int:
    for p, state in enumerate(best):
        if state is None:
            return p
    return len(best) - 1


def _first_unreachable_vertexwise(wordnet: Wordnet, best: Dict[int, _State]) -> int:
    for p in range(1, wordnet.length + 1):
        if not any(v.vid in best for v in wordnet.ending_at(p)):
            return p
    return wordnet.length


PATH_ALGORITHMS = {
    ShortestPathSelector.name: ShortestPathSelector,
    ViterbiPathSelector.name: ViterbiPathSelector,
}


def create_selector(name: str, scorer: Scorer) -> PathSelector:
    """
    Raises:
        ConfigurationError: If name is not a known path algorithm
    """
    try:
        factory = PATH_ALGORITHMS[name]
    except KeyError:
        raise ConfigurationError(
            f"unknown path algorithm {name!r}; expected one of {sorted(PATH_ALGORITHMS)}"
        ) from None
    return factory(scorer)
