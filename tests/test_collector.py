"""
Tests for collector.py and normalize.py.
"""

import pytest

from wordlattice.collector import TermCollector
from wordlattice.lattice import Vertex, Wordpath
from wordlattice.models import WordTerm
from wordlattice.normalize import IdentityNormalizer, WidthCaseNormalizer


def path_of(*pieces):
    vertices = []
    position = 0
    for word, tag in pieces:
        vertices.append(Vertex(position, position + len(word), word, 1.0, tag))
        position += len(word)
    return Wordpath(tuple(vertices), position)


class TestTermCollector:
    """Tests for turning a word path into terms."""

    def test_whitespace_dropped_offsets_kept(self):
        """Test whitespace words are skipped without shifting offsets."""
        terms = list(TermCollector().collect(path_of(("a", "nx"), (" ", "w"), ("b", "nx"))))
        assert terms == [WordTerm("a", "nx", 0), WordTerm("b", "nx", 2)]

    def test_restartable(self):
        """Test each iteration starts a fresh traversal."""
        sequence = TermCollector().collect(path_of(("北京", "ns"), ("生", "n")))
        first = [t.word for t in sequence]
        second = [t.word for t in sequence]
        assert first == second == ["北京", "生"]

    def test_base_offset(self):
        """Test base_offset shifts term offsets."""
        terms = list(TermCollector().collect(path_of(("北京", "ns")), base_offset=10))
        assert terms[0].offset == 10
        assert terms[0].end == 12

    def test_original_text_wins(self):
        """Test words are taken from the original text."""
        sequence = TermCollector().collect(path_of(("abc", "nx")), text="ABC")
        assert [t.word for t in sequence] == ["ABC"]

    def test_text_length_must_match(self):
        """Test text of the wrong length is rejected."""
        with pytest.raises(ValueError):
            TermCollector().collect(path_of(("abc", "nx")), text="AB")

    def test_empty_path(self):
        """Test an empty path gives no terms."""
        assert list(TermCollector().collect(Wordpath((), 0))) == []

    def test_all_whitespace(self):
        """Test a whitespace-only path gives no terms."""
        assert list(TermCollector().collect(path_of(("  ", "w"), ("\t", "w")))) == []


class TestWordTerm:
    """Tests for the WordTerm record."""

    def test_str_and_end(self):
        """Test str() and the end property."""
        term = WordTerm("北京", "ns", 3)
        assert str(term) == "北京/ns"
        assert term.end == 5


class TestNormalizer:
    """Tests for character normalizers."""

    def test_width_and_case(self):
        """Test full-width and upper case are folded."""
        assert WidthCaseNormalizer().normalize("ＡＢＣ１２３abc") == "abc123abc"

    def test_length_preserved(self):
        """Test folding never changes the length."""
        for text in ["ﬁ文字", "㍿株式", "Ａ　Ｂ", "北京"]:
            assert len(WidthCaseNormalizer().normalize(text)) == len(text)

    def test_multi_char_forms_untouched(self):
        """Test characters with multi-character forms are kept."""
        # NFKC expands these ligatures to two characters
        assert WidthCaseNormalizer().normalize("ﬁ") == "ﬁ"

    def test_identity(self):
        """Test the identity normalizer returns its input."""
        assert IdentityNormalizer().normalize("ＡＢ") == "ＡＢ"
