"""
Tests for lattice.py - wordnet, wordpath and the lattice builder.
"""

import pytest

from wordlattice.errors import LatticeUnreachable
from wordlattice.lattice import (
    SOURCE_FALLBACK,
    LatticeBuilder,
    Vertex,
    Wordnet,
    Wordpath,
)
from wordlattice.scanner import Scanner


def build(index, text):
    return LatticeBuilder().build(text, Scanner(index).scan(text))


def span_set(wordnet):
    return {(v.begin, v.end) for v in wordnet}


class TestLatticeBuilder:
    """Tests for building the wordnet from hits."""

    def test_hits_and_fallbacks(self, index):
        """Test hits and fallbacks become vertices."""
        wordnet = build(index, "北京大学生")
        assert span_set(wordnet) == {(0, 2), (0, 4), (1, 2), (2, 4), (3, 5), (4, 5)}

    def test_fallback_only_where_no_hit_begins(self, index):
        """Test fallbacks fill only offsets without a hit."""
        wordnet = build(index, "我在北京")
        fallbacks = [(v.begin, v.word) for v in wordnet if v.source == SOURCE_FALLBACK]
        assert fallbacks == [(0, "我"), (1, "在"), (3, "京")]

    def test_coverage(self, index):
        """Test every offset has an outgoing vertex."""
        for text in ["北京大学生前来应聘", "a b", "？！", "xyz北京"]:
            wordnet = build(index, text)
            for p in range(len(text)):
                assert wordnet.starting_at(p), f"offset {p} of {text!r} uncovered"
            wordnet.check_coverage()

    def test_vid_order_follows_scan_order(self, index):
        """Test vids follow scan order."""
        wordnet = build(index, "北京大学生")
        order = [(v.begin, v.end) for v in wordnet]
        assert order == sorted(order)
        assert [v.vid for v in wordnet] == list(range(len(wordnet)))

    def test_fallback_tags(self, index):
        """Test fallback tags come from the character class."""
        wordnet = build(index, "我 1x，")
        tags = [v.tag for v in wordnet]
        assert tags == ["x", "w", "m", "nx", "w"]

    def test_dictionary_vertex_carries_entry(self, index):
        """Test dictionary vertices carry weight, tag and ordinal."""
        wordnet = build(index, "北京")
        vertex = wordnet.find(0, 2)[0]
        assert vertex.tag == "ns"
        assert vertex.weight == 100.0
        assert vertex.ordinal == index.get("北京").index

    def test_empty_buffer(self, index):
        """Test an empty buffer gives an empty wordnet."""
        wordnet = build(index, "")
        assert len(wordnet) == 0
        assert list(wordnet) == []


class TestWordnet:
    """Tests for wordnet editing and queries."""

    def test_add_rejects_bad_span(self):
        """Test spans outside the buffer are rejected."""
        wordnet = Wordnet("abc")
        with pytest.raises(ValueError):
            wordnet.add_span(2, 2, 1.0, "x")
        with pytest.raises(ValueError):
            wordnet.add_span(1, 4, 1.0, "x")

    def test_remove_and_queries(self):
        """Test removal updates the start and end lists."""
        wordnet = Wordnet("abc")
        ab = wordnet.add_span(0, 2, 1.0, "x")
        a = wordnet.add_fallback(0)
        assert wordnet.starting_at(0) == [ab, a]
        assert wordnet.ending_at(2) == [ab]
        wordnet.remove(ab)
        assert wordnet.starting_at(0) == [a]
        assert wordnet.vertex(ab.vid) is None
        assert len(wordnet) == 1
        with pytest.raises(ValueError):
            wordnet.remove(ab)

    def test_remove_covered_restores_fallback(self):
        """Test removing the last vertex at an offset restores a fallback."""
        wordnet = Wordnet("abc")
        ab = wordnet.add_span(0, 2, 1.0, "x")
        wordnet.remove_covered(ab)
        assert [(v.begin, v.end, v.source) for v in wordnet] == [(0, 1, SOURCE_FALLBACK)]

    def test_crossing_and_containing(self):
        """Test crossing and containing queries."""
        wordnet = Wordnet("abcdef")
        outer = wordnet.add_span(0, 6, 1.0, "x")
        left = wordnet.add_span(0, 3, 1.0, "x")
        inner = wordnet.add_span(2, 4, 1.0, "x")
        right = wordnet.add_span(3, 6, 1.0, "x")
        same = wordnet.add_span(2, 4, 2.0, "y")
        assert {v.vid for v in wordnet.crossing(2, 4)} == {left.vid, right.vid}
        assert [v.vid for v in wordnet.containing(2, 4)] == [outer.vid]
        assert inner not in wordnet.containing(2, 4)
        assert same not in wordnet.crossing(2, 4)

    def test_check_coverage_names_stage(self):
        """Test a coverage error names the stage."""
        wordnet = Wordnet("ab")
        wordnet.add_fallback(0)
        with pytest.raises(LatticeUnreachable) as exc_info:
            wordnet.check_coverage("broken")
        assert exc_info.value.offset == 1
        assert exc_info.value.stage == "broken"


class TestWordpath:
    """Tests for path validation."""

    def test_partition_is_validated(self):
        """Test a path must partition the buffer."""
        a = Vertex(0, 1, "a", 1.0, "x")
        b = Vertex(1, 2, "b", 1.0, "x")
        assert Wordpath((a, b), 2).words() == ["a", "b"]
        with pytest.raises(ValueError):
            Wordpath((b,), 2)
        with pytest.raises(ValueError):
            Wordpath((a,), 2)

    def test_empty_path(self):
        """Test an empty path has length zero."""
        path = Wordpath((), 0)
        assert len(path) == 0
        assert list(path) == []
