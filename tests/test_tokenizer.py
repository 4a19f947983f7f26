"""
Tests for tokenizer.py - end-to-end segmentation.
"""

import pytest

from wordlattice.config import SegmenterConfig
from wordlattice.errors import ConfigurationError, LatticeUnreachable
from wordlattice.models import WordTerm
from wordlattice.tokenizer import Segmenter


def words(terms):
    return [t.word for t in terms]


@pytest.fixture
def segmenter(index):
    return Segmenter(index)


class TestSegment:
    """Tests for end-to-end segmentation."""

    def test_longest_likely_words(self, segmenter):
        """Test the most likely segmentation."""
        assert words(segmenter.segment("北京大学生前来应聘")) == ["北京大学", "生", "前来", "应聘"]

    def test_tags_and_offsets(self, segmenter):
        """Test terms carry tags and offsets."""
        terms = segmenter.segment("北京大学生")
        assert terms == [WordTerm("北京大学", "nt", 0), WordTerm("生", "n", 4)]

    def test_whitespace_dropped(self, segmenter):
        """Test whitespace is not reported."""
        terms = segmenter.segment("a b")
        assert [(t.word, t.offset) for t in terms] == [("a", 0), ("b", 2)]

    @pytest.mark.parametrize("text", ["", None])
    def test_empty_input(self, segmenter, text):
        """Test empty input gives no terms."""
        assert segmenter.segment(text) == []

    def test_unknown_characters_fall_back(self, segmenter):
        """Test unknown characters become single-character terms."""
        terms = segmenter.segment("我在北京")
        assert words(terms) == ["我", "在", "北京"]
        assert terms[0].tag == "x"

    def test_number_quantifier_merged(self, segmenter):
        """Test numerals and quantifiers are merged."""
        terms = segmenter.segment("买23个苹果")
        assert [(t.word, t.tag) for t in terms] == [("买", "x"), ("23个", "mq"), ("苹果", "n")]

    def test_letter_run_merged(self, segmenter):
        """Test letter runs are merged."""
        assert "iPhone12" in words(segmenter.segment("用iPhone12拍"))

    def test_email_merged(self, segmenter):
        """Test e-mail addresses are kept whole."""
        assert "abc@example.com" in words(segmenter.segment("邮箱abc@example.com"))

    def test_concatenation_reproduces_input(self, segmenter):
        """Test the words rebuild the input."""
        for text in ["北京大学生前来应聘", "买23个苹果", "用iPhone12拍照", "？！…"]:
            assert "".join(words(segmenter.segment(text))) == text

    def test_deterministic(self, segmenter):
        """Test repeated calls agree."""
        text = "北京大学生前来应聘海淀区"
        assert segmenter.segment(text) == segmenter.segment(text)


class TestRegion:
    """Tests for segmenting part of a text."""

    def test_offset_and_length(self, segmenter):
        """Test a region gives offsets in the whole text."""
        text = "我在北京大学生"
        terms = segmenter.segment(text, offset=2, length=4)
        assert [(t.word, t.offset) for t in terms] == [("北京大学", 2)]

    def test_offset_to_end(self, segmenter):
        """Test a region running to the end."""
        terms = segmenter.segment("我在北京", offset=2)
        assert [(t.word, t.offset) for t in terms] == [("北京", 2)]

    def test_region_outside_text(self, segmenter):
        """Test a region outside the text is rejected."""
        with pytest.raises(ValueError):
            segmenter.segment("北京", offset=1, length=5)
        with pytest.raises(ValueError):
            segmenter.segment("北京", offset=-1)


class TestComponents:
    """Tests for the Segmenter's intermediate results."""

    def test_lattice_and_best_path(self, segmenter):
        """Test lattice() and best_path()."""
        wordnet = segmenter.lattice("北京大学生")
        assert wordnet.has_span(0, 4)
        path = segmenter.best_path("北京大学生")
        assert path.words() == ["北京大学", "生"]

    def test_terms_are_lazy_and_restartable(self, segmenter):
        """Test terms() can be iterated twice."""
        sequence = segmenter.terms("北京大学生")
        assert words(sequence) == words(sequence) == ["北京大学", "生"]

    def test_segment_with_cost(self, segmenter):
        """Test the path cost is returned."""
        terms, cost = segmenter.segment_with_cost("北京大学生")
        assert words(terms) == ["北京大学", "生"]
        assert cost > 0

    def test_from_path_text(self, dict_file):
        """Test loading a text dictionary by path."""
        segmenter = Segmenter.from_path(dict_file)
        assert len(segmenter.index) == 12
        assert words(segmenter.segment("北京大学生")) == ["北京大学", "生"]

    def test_from_path_compiled(self, tmp_path, words):
        """Test loading a compiled dictionary by path."""
        from wordlattice.dictionary import compile_dictionary
        path = tmp_path / "words.dic"
        compile_dictionary(words, path)
        config = SegmenterConfig(pipeline_stages=())
        segmenter = Segmenter.from_path(str(path), config)
        assert segmenter.config is config
        assert [t.word for t in segmenter.segment("买23个苹果")] == ["买", "2", "3", "个", "苹果"]

    def test_from_path_missing(self, tmp_path):
        """Test a missing dictionary raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            Segmenter.from_path(tmp_path / "none.dic")

    def test_index_is_frozen(self, words):
        """Test the index is frozen on construction."""
        from wordlattice.trie import PrefixIndex
        idx, _ = PrefixIndex.from_triples(words, freeze=False)
        Segmenter(idx)
        assert idx.frozen


class TestConfiguration:
    """Tests for Segmenter configuration options."""

    def test_custom_dictionary(self, index):
        """Test custom words take priority."""
        config = SegmenterConfig(custom_dictionary={"京大": (1.0, "nz")})
        terms = Segmenter(index, config).segment("北京大学生")
        assert [(t.word, t.tag) for t in terms] == [("北", "x"), ("京大", "nz"), ("学生", "n")]

    def test_viterbi_matches_shortest_without_transitions(self, index):
        """Test viterbi agrees with shortest without transitions."""
        shortest = Segmenter(index).segment("北京大学生前来应聘")
        viterbi = Segmenter(index, SegmenterConfig(path_algorithm="viterbi")).segment("北京大学生前来应聘")
        assert shortest == viterbi

    def test_no_stages(self, index):
        """Test an empty pipeline leaves digits apart."""
        config = SegmenterConfig(pipeline_stages=())
        terms = Segmenter(index, config).segment("买23个苹果")
        assert words(terms) == ["买", "2", "3", "个", "苹果"]

    def test_normalize(self, index):
        """Test normalized lookup reports original characters."""
        config = SegmenterConfig(normalize=True)
        terms = Segmenter(index, config).segment("Ａ b")
        assert [(t.word, t.tag, t.offset) for t in terms] == [("Ａ", "nx", 0), ("b", "nx", 2)]

    @pytest.mark.parametrize("text", ["iPhone", "IPHONE", "ｉＰｈｏｎｅ"])
    def test_normalize_folds_dictionary_words(self, text):
        """Test mixed-case dictionary words match folded text."""
        from wordlattice.trie import PrefixIndex
        idx, _ = PrefixIndex.from_triples([("iPhone", 10, "nz"), ("手机", 5, "n")])
        config = SegmenterConfig(normalize=True, pipeline_stages=())
        terms = Segmenter(idx, config).segment(text)
        assert [(t.word, t.tag, t.offset) for t in terms] == [(text, "nz", 0)]

    def test_normalize_folds_full_width_dictionary_words(self):
        """Test full-width dictionary words match folded text."""
        from wordlattice.trie import PrefixIndex
        idx, _ = PrefixIndex.from_triples([("ＡＢＣ", 10, "nz")])
        config = SegmenterConfig(normalize=True, pipeline_stages=())
        terms = Segmenter(idx, config).segment("abc")
        assert [(t.word, t.tag) for t in terms] == [("abc", "nz")]

    def test_normalize_folds_custom_words(self, index):
        """Test mixed-case custom words match folded text."""
        config = SegmenterConfig(
            normalize=True,
            pipeline_stages=("custom_dictionary",),
            custom_dictionary={"MacBook": (1.0, "nz")},
        )
        terms = Segmenter(index, config).segment("北京macbook")
        assert [(t.word, t.tag, t.offset) for t in terms] == [("北京", "ns", 0), ("macbook", "nz", 2)]

    def test_without_normalize_case_matters(self):
        """Test case is significant without normalization."""
        from wordlattice.trie import PrefixIndex
        idx, _ = PrefixIndex.from_triples([("iPhone", 10, "nz")])
        segmenter = Segmenter(idx, SegmenterConfig(pipeline_stages=()))
        assert segmenter.lookup_index is idx
        assert len(segmenter.segment("iphone")) == 6

    def test_unknown_algorithm(self, index):
        """Test an unknown algorithm is rejected."""
        with pytest.raises(ConfigurationError):
            Segmenter(index, SegmenterConfig(path_algorithm="beam"))

    def test_broken_stage_propagates(self, index):
        """Test a stage breaking coverage raises LatticeUnreachable."""
        segmenter = Segmenter(index)

        class Breaker:
            name = "breaker"

            def apply(self, wordnet):
                for v in wordnet.starting_at(0):
                    wordnet.remove(v)

        segmenter.pipeline.stages.append(Breaker())
        with pytest.raises(LatticeUnreachable):
            segmenter.segment("北京")
