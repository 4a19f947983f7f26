"""
Prefix index for dictionary lookup.

The index is a tail-compressed patricia trie: every node stores the label of
the edge leading into it, so a chain of single-child nodes collapses into a
single node whose label is the whole chain ("tail"). Children are keyed by
the first character of their label, which keeps the invariant that siblings
never share a leading character.

The index is built once, frozen, and then shared read-only by every
segmentation call. Nothing mutates it after freeze(), so concurrent readers
need no locking.
"""

import logging
import math
from typing import Callable, Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from wordlattice.errors import FrozenIndexError, InvalidEntry
from wordlattice.models import DictionaryEntry

logger = logging.getLogger(__name__)


# =============================================================================
# Nodes
# =============================================================================

class PrefixNode:
    """A node of the prefix index. Owned by its parent."""

    __slots__ = ("label", "children", "entry")

    def __init__(self, label: str = "", entry: Optional[DictionaryEntry] = None):
        self.label = label
        self.children: Optional[Dict[str, "PrefixNode"]] = None
        self.entry = entry

    def child(self, char: str) -> Optional["PrefixNode"]:
        if self.children is None:
            return None
        return self.children.get(char)

    def attach(self, node: "PrefixNode") -> None:
        if self.children is None:
            self.children = {}
        self.children[node.label[0]] = node

    def sorted_children(self) -> List["PrefixNode"]:
        if not self.children:
            return []
        return [self.children[k] for k in sorted(self.children)]

    def __repr__(self) -> str:
        return f"PrefixNode({self.label!r}, terminal={self.entry is not None})"


class BuildWarning(NamedTuple):
    """A rejected entry reported by PrefixIndex.build()."""
    position: int
    word: object
    reason: str


def coerce_weight(word, weight) -> float:
    """
    Weight as a finite non-negative float.

    Raises:
        InvalidEntry: If weight is not a number, or is negative, NaN or infinite
    """
    if isinstance(weight, bool):
        raise InvalidEntry(word, f"weight is not a number: {weight!r}")
    try:
        value = float(weight)
    except (TypeError, ValueError):
        raise InvalidEntry(word, f"weight is not a number: {weight!r}") from None
    if not math.isfinite(value) or value < 0:
        raise InvalidEntry(word, f"weight must be finite and non-negative: {weight!r}")
    return value


def _skipped(position: int, word, error: InvalidEntry) -> BuildWarning:
    logger.warning("Skipping dictionary entry #%d: %s", position, error)
    return BuildWarning(position, word, error.reason)


def _common_prefix_length(a: str, b: str) -> int:
    i = 0
    n = min(len(a), len(b))
    while i < n and a[i] == b[i]:
        i += 1
    return i


# =============================================================================
# Prefix Index
# =============================================================================

class PrefixIndex:
    """
    Word -> DictionaryEntry map organized as a compressed trie.

    Supports exact lookup, enumeration of every dictionary word that is a
    prefix of a buffer at some position (the scanner's building block), and
    predictive enumeration of words sharing a prefix.
    """

    def __init__(self):
        self._root = PrefixNode()
        self._size = 0
        self._total_weight = 0.0
        self._frozen = False

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        pairs: Iterable[Tuple[str, DictionaryEntry]],
        freeze: bool = True,
    ) -> Tuple["PrefixIndex", List[BuildWarning]]:
        """
        Build an index from (word, entry) pairs.

        Malformed entries are skipped rather than aborting the build; each
        one is logged and returned in the warning list.

        Args:
            pairs: (word, entry) pairs, applied in order (last writer wins)
            freeze: Freeze the index once built

        Returns:
            Tuple of (index, warnings)
        """
        index = cls()
        warnings: List[BuildWarning] = []
        for position, (word, entry) in enumerate(pairs):
            try:
                index.insert(word, entry)
            except InvalidEntry as e:
                warnings.append(_skipped(position, word, e))
        if freeze:
            index.freeze()
        return index, warnings

    @classmethod
    def from_triples(
        cls,
        triples: Iterable[Tuple[str, float, str]],
        freeze: bool = True,
    ) -> Tuple["PrefixIndex", List[BuildWarning]]:
        """
        Build an index from (word, weight, tag) triples.

        Ordinals are assigned in input order, counting only accepted words.
        Triples with an empty word or a weight that is not a finite
        non-negative number are skipped and reported like in build().
        """
        index = cls()
        warnings: List[BuildWarning] = []
        ordinal = 0
        for position, (word, weight, tag) in enumerate(triples):
            try:
                entry = DictionaryEntry(word, coerce_weight(word, weight), tag, ordinal)
                index.insert(word, entry)
            except InvalidEntry as e:
                warnings.append(_skipped(position, word, e))
                continue
            ordinal += 1
        if freeze:
            index.freeze()
        return index, warnings

    @classmethod
    def rebuild(cls, other: "PrefixIndex") -> "PrefixIndex":
        """Build a fresh index holding the same word -> entry mapping as other."""
        index, _ = cls.build(other.items())
        return index

    def folded(self, fold: Callable[[str], str]) -> "PrefixIndex":
        """
        Frozen index keyed by fold(word) for every word.

        Words that fold to the same key keep the entry inserted last (the
        highest ordinal). Returns self when fold leaves every word unchanged.
        """
        pairs = sorted(self.items(), key=lambda item: item[1].index)
        keyed = [(fold(word), entry) for word, entry in pairs]
        if all(key == word for (key, _), (word, _) in zip(keyed, pairs)):
            return self
        index, _ = type(self).build(keyed)
        return index

    def insert(self, word: str, entry: DictionaryEntry) -> None:
        """
        Add a word. A word inserted twice keeps the last entry.

        Raises:
            InvalidEntry: If word is empty or not a string, entry is missing,
                or its weight is not a finite non-negative number
            FrozenIndexError: If the index has been frozen
        """
        if self._frozen:
            raise FrozenIndexError("cannot insert into a frozen prefix index")
        if not isinstance(word, str) or not word:
            raise InvalidEntry(word)
        if not isinstance(entry, DictionaryEntry):
            raise InvalidEntry(word, "payload must be a DictionaryEntry")
        coerce_weight(word, entry.weight)

        node = self._root
        rest = word
        while True:
            if not rest:
                self._set_entry(node, entry)
                return

            child = node.child(rest[0])
            if child is None:
                node.attach(PrefixNode(rest, entry))
                self._size += 1
                self._total_weight += entry.weight
                return

            label = child.label
            i = _common_prefix_length(rest, label)
            if i == len(label):
                node = child
                rest = rest[i:]
                continue

            # Diverges inside the child's tail: split it at i
            mid = PrefixNode(label[:i])
            child.label = label[i:]
            mid.attach(child)
            node.attach(mid)
            rest = rest[i:]
            if rest:
                mid.attach(PrefixNode(rest, entry))
                self._size += 1
                self._total_weight += entry.weight
            else:
                self._set_entry(mid, entry)
            return

    def _set_entry(self, node: PrefixNode, entry: DictionaryEntry) -> None:
        if node.entry is None:
            self._size += 1
        else:
            self._total_weight -= node.entry.weight
        node.entry = entry
        self._total_weight += entry.weight

    def freeze(self) -> "PrefixIndex":
        """Make the index read-only. Returns self for chaining."""
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def lookup_exact(self, word: str) -> Optional[DictionaryEntry]:
        """Return the entry stored for word, or None."""
        if not word:
            return None
        node = self._root
        rest = word
        while rest:
            child = node.child(rest[0])
            if child is None or not rest.startswith(child.label):
                return None
            rest = rest[len(child.label):]
            node = child
        return node.entry

    get = lookup_exact

    def __contains__(self, word) -> bool:
        return isinstance(word, str) and self.lookup_exact(word) is not None

    def has_prefix(self, prefix: str) -> bool:
        """True if any word in the index starts with prefix."""
        return self._locate(prefix)[0] is not None

    def scan_from(
        self,
        buffer: str,
        position: int,
        longest_only: bool = False,
    ) -> Iterator[Tuple[int, DictionaryEntry]]:
        """
        Enumerate every dictionary word that is a prefix of buffer[position:].

        Matches are yielded lazily, shortest first. With longest_only only
        the longest match (if any) is yielded.

        Args:
            buffer: Text to match against
            position: Offset in buffer where matches must start
            longest_only: Yield only the longest match

        Yields:
            (matched_length, entry) tuples
        """
        n = len(buffer)
        if position < 0 or position >= n:
            return
        node = self._root
        pos = position
        best = None
        while pos < n:
            child = node.child(buffer[pos])
            if child is None:
                break
            label = child.label
            if not buffer.startswith(label, pos):
                break
            pos += len(label)
            node = child
            if node.entry is not None:
                if longest_only:
                    best = (pos - position, node.entry)
                else:
                    yield pos - position, node.entry
        if best is not None:
            yield best

    def longest_match(self, buffer: str, position: int) -> Optional[Tuple[int, DictionaryEntry]]:
        """Return (length, entry) of the longest word starting at position."""
        for match in self.scan_from(buffer, position, longest_only=True):
            return match
        return None

    # -------------------------------------------------------------------------
    # Enumeration
    # -------------------------------------------------------------------------

    def _locate(self, prefix: str) -> Tuple[Optional[PrefixNode], str]:
        """
        Find the node reached by prefix.

        Returns (node, pending) where pending is the unconsumed remainder of
        the node's label when prefix ends mid-tail. (None, "") if absent.
        """
        node = self._root
        rest = prefix
        while rest:
            child = node.child(rest[0])
            if child is None:
                return None, ""
            label = child.label
            i = _common_prefix_length(rest, label)
            if i == len(label):
                rest = rest[i:]
                node = child
                continue
            if i == len(rest):
                return child, label[i:]
            return None, ""
        return node, ""

    def _walk(self, node: PrefixNode, prefix: str) -> Iterator[Tuple[str, DictionaryEntry]]:
        # Iterative DFS in lexicographic order of labels
        stack = [(node, prefix)]
        while stack:
            current, text = stack.pop()
            if current.entry is not None:
                yield text, current.entry
            for child in reversed(current.sorted_children()):
                stack.append((child, text + child.label))

    def predictive(self, prefix: str) -> Iterator[Tuple[str, DictionaryEntry]]:
        """Yield (word, entry) for every word starting with prefix, in order."""
        node, pending = self._locate(prefix)
        if node is None:
            return
        yield from self._walk(node, prefix + pending)

    def items(self) -> Iterator[Tuple[str, DictionaryEntry]]:
        """Yield every (word, entry) pair in lexicographic order of word."""
        return self._walk(self._root, "")

    def words(self) -> Iterator[str]:
        for word, _ in self.items():
            yield word

    def __iter__(self) -> Iterator[str]:
        return self.words()

    def __len__(self) -> int:
        return self._size

    @property
    def total_weight(self) -> float:
        """Sum of the weights of every stored entry."""
        return self._total_weight

    def node_count(self) -> int:
        """Number of nodes including the root."""
        count = 0
        stack = [self._root]
        while stack:
            node = stack.pop()
            count += 1
            if node.children:
                stack.extend(node.children.values())
        return count

    def __eq__(self, other) -> bool:
        if not isinstance(other, PrefixIndex):
            return NotImplemented
        return len(self) == len(other) and dict(self.items()) == dict(other.items())

    __hash__ = None

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"<PrefixIndex {self._size} words, {state}>"
