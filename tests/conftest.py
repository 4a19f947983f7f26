"""
Shared fixtures for wordlattice tests.
"""

import pytest

from wordlattice.trie import PrefixIndex

# (word, weight, tag). Weights are frequencies; the total is 430.
WORDS = [
    ("北京", 100, "ns"),
    ("北京大学", 50, "nt"),
    ("大学", 80, "n"),
    ("生", 10, "n"),
    ("学生", 60, "n"),
    ("前来", 20, "v"),
    ("应聘", 20, "v"),
    ("a", 5, "nx"),
    ("b", 5, "nx"),
    ("个", 30, "q"),
    ("苹果", 30, "n"),
    ("海淀", 20, "ns"),
]


@pytest.fixture
def words():
    return list(WORDS)


@pytest.fixture
def index():
    """Frozen index over WORDS."""
    built, warnings = PrefixIndex.from_triples(WORDS)
    assert warnings == []
    return built


@pytest.fixture
def dict_file(tmp_path):
    """WORDS written as a text dictionary."""
    path = tmp_path / "words.txt"
    lines = ["# test dictionary", ""]
    lines += [f"{word} {weight} {tag}" for word, weight, tag in WORDS]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def default_index(index):
    """Install index as the process-wide default for the test."""
    from wordlattice.dictionary import set_default_index

    previous = set_default_index(index)
    yield index
    set_default_index(previous)
