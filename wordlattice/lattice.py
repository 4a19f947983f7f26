"""
Word lattice (wordnet) for one input buffer.

The wordnet is an arena of Vertex objects. A vertex's id (vid) is its slot
in the arena and never changes; removed vertices leave an empty slot. Vertices
are also indexed by start and end offset, which is all the path selector
and the pipeline stages need: edges are implicit (a vertex ending at p
connects to every vertex starting at p).

Coverage invariant: for a buffer of length N, every offset 0..N-1 has at
least one vertex starting there. That alone guarantees a path from 0 to N.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Tuple

from wordlattice.characters import char_tag
from wordlattice.errors import LatticeUnreachable
from wordlattice.models import Hit

# Weight (frequency) given to synthesized single-character vertices
FALLBACK_WEIGHT = 0.0

SOURCE_DICT = "dict"
SOURCE_FALLBACK = "fallback"


# =============================================================================
# Vertex
# =============================================================================

@dataclass(slots=True)
class Vertex:
    """A candidate token spanning [begin, end) of the input."""
    begin: int
    end: int
    word: str
    weight: float
    tag: str
    ordinal: int = -1
    source: str = SOURCE_DICT
    vid: int = -1

    @property
    def length(self) -> int:
        return self.end - self.begin

    def __repr__(self) -> str:
        return f"Vertex({self.word!r}, [{self.begin},{self.end}), tag={self.tag!r}, vid={self.vid})"


# =============================================================================
# Wordnet
# =============================================================================

class Wordnet:
    """All candidate vertices for one input buffer."""

    def __init__(self, text: str):
        self.text = text
        n = len(text)
        self._arena: List[Optional[Vertex]] = []
        self._starts: List[List[int]] = [[] for _ in range(n)]
        self._ends: List[List[int]] = [[] for _ in range(n + 1)]
        self._live = 0

    @property
    def length(self) -> int:
        return len(self.text)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, vertex: Vertex) -> Vertex:
        """
        Add a vertex and assign its vid.

        Raises:
            ValueError: If the span lies outside the buffer or is empty
        """
        begin, end = vertex.begin, vertex.end
        if not 0 <= begin < end <= len(self.text):
            raise ValueError(f"vertex span [{begin},{end}) outside buffer of length {len(self.text)}")
        if not vertex.word:
            vertex.word = self.text[begin:end]
        vertex.vid = len(self._arena)
        self._arena.append(vertex)
        self._starts[begin].append(vertex.vid)
        self._ends[end].append(vertex.vid)
        self._live += 1
        return vertex

    def add_span(
        self,
        begin: int,
        end: int,
        weight: float,
        tag: str,
        ordinal: int = -1,
        source: str = SOURCE_DICT,
    ) -> Vertex:
        """Add a vertex covering text[begin:end]."""
        return self.add(Vertex(begin, end, self.text[begin:end], weight, tag, ordinal, source))

    def add_fallback(self, position: int, weight: float = FALLBACK_WEIGHT) -> Vertex:
        """Add a single-character vertex at position."""
        char = self.text[position]
        return self.add(Vertex(position, position + 1, char, weight, char_tag(char),
                               source=SOURCE_FALLBACK))

    def remove(self, vertex: Vertex) -> None:
        """
        Remove a vertex. Callers must keep coverage: see ensure_coverage().

        Raises:
            ValueError: If the vertex is not part of this wordnet
        """
        vid = vertex.vid
        if not 0 <= vid < len(self._arena) or self._arena[vid] is not vertex:
            raise ValueError(f"{vertex!r} is not in this wordnet")
        self._arena[vid] = None
        self._starts[vertex.begin].remove(vid)
        self._ends[vertex.end].remove(vid)
        self._live -= 1

    def replace(self, old: Vertex, new: Vertex) -> Vertex:
        self.remove(old)
        return self.add(new)

    def ensure_coverage(self, position: int) -> Optional[Vertex]:
        """Add a fallback vertex at position if nothing starts there."""
        if position < len(self.text) and not self._starts[position]:
            return self.add_fallback(position)
        return None

    def remove_covered(self, vertex: Vertex) -> None:
        """Remove a vertex, restoring a fallback if its start becomes uncovered."""
        self.remove(vertex)
        self.ensure_coverage(vertex.begin)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def vertex(self, vid: int) -> Optional[Vertex]:
        return self._arena[vid]

    def starting_at(self, position: int) -> List[Vertex]:
        if not 0 <= position < len(self._starts):
            return []
        return [self._arena[v] for v in self._starts[position]]

    def ending_at(self, position: int) -> List[Vertex]:
        if not 0 <= position < len(self._ends):
            return []
        return [self._arena[v] for v in self._ends[position]]

    def find(self, begin: int, end: int) -> List[Vertex]:
        """All vertices spanning exactly [begin, end)."""
        return [v for v in self.starting_at(begin) if v.end == end]

    def has_span(self, begin: int, end: int) -> bool:
        return any(v.end == end for v in self.starting_at(begin))

    def crossing(self, begin: int, end: int) -> List[Vertex]:
        """Vertices that overlap [begin, end) without nesting in or containing it."""
        result = []
        for p in range(begin + 1, end):
            for v in self.starting_at(p):
                if v.end > end:
                    result.append(v)
        for p in range(begin + 1, end):
            for v in self.ending_at(p):
                if v.begin < begin:
                    result.append(v)
        return result

    def containing(self, begin: int, end: int) -> List[Vertex]:
        """Vertices that strictly contain [begin, end)."""
        result = []
        for p in range(begin + 1):
            for v in self.starting_at(p):
                if v.end >= end and (p, v.end) != (begin, end):
                    result.append(v)
        return result

    def check_coverage(self, stage: Optional[str] = None) -> None:
        """
        Raises:
            LatticeUnreachable: If some offset has no vertex starting there
        """
        for position, vids in enumerate(self._starts):
            if not vids:
                raise LatticeUnreachable(position, stage)

    def __iter__(self) -> Iterator[Vertex]:
        return (v for v in self._arena if v is not None)

    def __len__(self) -> int:
        return self._live

    def __repr__(self) -> str:
        return f"<Wordnet {self.text!r} {self._live} vertices>"


# =============================================================================
# Wordpath
# =============================================================================

@dataclass(frozen=True)
class Wordpath:
    """
    The selected segmentation: consecutive vertices covering [0, length).

    Raises:
        ValueError: If the vertices do not partition [0, length)
    """
    vertices: Tuple[Vertex, ...]
    length: int
    cost: float = 0.0

    def __post_init__(self):
        position = 0
        for v in self.vertices:
            if v.begin != position:
                raise ValueError(f"path gap or overlap at offset {position}: {v!r}")
            position = v.end
        if position != self.length:
            raise ValueError(f"path ends at {position}, expected {self.length}")

    def __iter__(self) -> Iterator[Vertex]:
        return iter(self.vertices)

    def __len__(self) -> int:
        return len(self.vertices)

    def words(self) -> List[str]:
        return [v.word for v in self.vertices]


# =============================================================================
# Lattice Builder
# =============================================================================

class LatticeBuilder:
    """
    Turns scanner hits into a connected wordnet.

    Every hit becomes a vertex. Offsets where no hit begins get a
    single-character fallback vertex, so a path from 0 to N always exists.
    Vertices are added offset by offset, so vid order follows scan order.
    """

    def __init__(self, fallback_weight: float = FALLBACK_WEIGHT):
        self.fallback_weight = fallback_weight

    def build(self, buffer: str, hits: Iterable[Hit]) -> Wordnet:
        wordnet = Wordnet(buffer)
        n = len(buffer)
        if n == 0:
            return wordnet

        by_begin: List[List[Hit]] = [[] for _ in range(n)]
        for hit in hits:
            by_begin[hit.begin].append(hit)

        for position in range(n):
            row = by_begin[position]
            if not row:
                wordnet.add_fallback(position, self.fallback_weight)
                continue
            for hit in row:
                entry = hit.entry
                wordnet.add(Vertex(hit.begin, hit.end, buffer[hit.begin:hit.end],
                                   entry.weight, entry.tag, entry.index, SOURCE_DICT))
        return wordnet
