"""
Multi-pattern scanner.

Compiles an Aho-Corasick automaton from a PrefixIndex and reports every
occurrence of every dictionary word in a buffer in a single left-to-right
pass. Running time is linear in the buffer length plus the number of hits.
"""

import logging
from collections import deque
from typing import Dict, Iterator, List, Optional

from wordlattice.models import DictionaryEntry, Hit
from wordlattice.trie import PrefixIndex

logger = logging.getLogger(__name__)


class Scanner:
    """
    Aho-Corasick automaton over the words of a PrefixIndex.

    State 0 is the root. For each state we keep the goto table, the failure
    link, the entry that ends there (if any) and a link to the nearest
    suffix state that carries an entry, so output chains skip non-terminal
    states.
    """

    __slots__ = ("_goto", "_fail", "_output", "_depth", "_dict_link", "_size")

    def __init__(self, index: PrefixIndex):
        self._goto: List[Dict[str, int]] = [{}]
        self._fail: List[int] = [0]
        self._output: List[Optional[DictionaryEntry]] = [None]
        self._depth: List[int] = [0]
        self._dict_link: List[int] = [0]
        self._size = 0

        for word, entry in index.items():
            self._add(word, entry)
        self._link()
        logger.debug("Compiled scanner: %d words, %d states", self._size, len(self._goto))

    def _add(self, word: str, entry: DictionaryEntry) -> None:
        state = 0
        for char in word:
            nxt = self._goto[state].get(char)
            if nxt is None:
                nxt = len(self._goto)
                self._goto.append({})
                self._fail.append(0)
                self._output.append(None)
                self._depth.append(self._depth[state] + 1)
                self._dict_link.append(0)
                self._goto[state][char] = nxt
            state = nxt
        self._output[state] = entry
        self._size += 1

    def _link(self) -> None:
        goto, fail, output, dict_link = self._goto, self._fail, self._output, self._dict_link
        queue = deque(goto[0].values())
        while queue:
            state = queue.popleft()
            for char, child in goto[state].items():
                queue.append(child)
                f = fail[state]
                while f and char not in goto[f]:
                    f = fail[f]
                target = goto[f].get(char, 0)
                if target == child:
                    target = 0
                fail[child] = target
                dict_link[child] = target if output[target] is not None else dict_link[target]

    def __len__(self) -> int:
        return self._size

    def iter_hits(self, buffer: str, start: int = 0, end: Optional[int] = None) -> Iterator[Hit]:
        """
        Yield hits in discovery order (increasing end; longest first per end).

        Offsets are relative to buffer[start:end].
        """
        if end is None:
            end = len(buffer)
        goto, fail, output, depth, dict_link = (
            self._goto, self._fail, self._output, self._depth, self._dict_link,
        )
        state = 0
        for i in range(start, end):
            char = buffer[i]
            while state and char not in goto[state]:
                state = fail[state]
            state = goto[state].get(char, 0)
            hit_end = i + 1 - start
            t = state if output[state] is not None else dict_link[state]
            while t:
                yield Hit(hit_end - depth[t], hit_end, output[t])
                t = dict_link[t]

    def scan(self, buffer: str, start: int = 0, end: Optional[int] = None) -> List[Hit]:
        """
        Report every dictionary word occurring in buffer[start:end].

        Returns:
            Hits ordered by begin, ties broken by increasing end
        """
        if end is None:
            end = len(buffer)
        length = max(end - start, 0)
        if length == 0 or self._size == 0:
            return []

        # Hits are discovered in increasing end order, so each begin bucket
        # fills already sorted by end.
        buckets: List[List[Hit]] = [[] for _ in range(length)]
        for hit in self.iter_hits(buffer, start, end):
            buckets[hit.begin].append(hit)
        return [hit for bucket in buckets for hit in bucket]
