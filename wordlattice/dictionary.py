"""
Dictionary sources for wordlattice.

Two formats are supported:

- Text dictionaries: one word per line, "word [weight [tag]]", separated by
  whitespace. Weight defaults to 1 and tag to "n". Blank lines and lines
  starting with "#" are skipped.
- Compiled dictionaries (.dic): a marisa_trie.RecordTrie mapping each word
  to a (weight, tag id, ordinal) record, plus a ".tags" sidecar holding the
  tag table. Compiled dictionaries are memory-mapped for fast loading.

Either way the result is a frozen PrefixIndex. This module also owns the
process-wide default index used by wordlattice.tokenize().
"""

import logging
import math
import struct
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import marisa_trie

from wordlattice.errors import DictionaryFormatError
from wordlattice.models import DictionaryEntry
from wordlattice.trie import PrefixIndex

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]
Triple = Tuple[str, float, str]

DEFAULT_WEIGHT = 1.0
DEFAULT_TAG = "n"

# ============================================================================
# Binary Record Schema
# ============================================================================
# Each word stores:
#   - weight: float64 (8 bytes) - word frequency
#   - tag_id: uint16 (2 bytes) - index into the .tags table
#   - ordinal: uint32 (4 bytes) - DictionaryEntry.index
#
# Format string: little-endian double, uint16, uint32

RECORD_FORMAT = "<dHI"
RECORD_SIZE = struct.calcsize(RECORD_FORMAT)
MAX_TAGS = 1 << 16

COMPILED_SUFFIX = ".dic"
TAGS_SUFFIX = ".tags"


def tags_path_for(path: PathLike) -> Path:
    """Sidecar tag table path for a compiled dictionary."""
    path = Path(path)
    return path.with_suffix(path.suffix + TAGS_SUFFIX)


# ============================================================================
# Text Dictionaries
# ============================================================================

def parse_dictionary_line(line: str, path: PathLike = "<string>", line_no: int = 0) -> Optional[Triple]:
    """
    Parse one text dictionary line.

    Returns:
        (word, weight, tag), or None for blank and comment lines

    Raises:
        DictionaryFormatError: If the weight is not a non-negative number
            or the line has too many fields
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None
    parts = stripped.split()
    if len(parts) > 3:
        raise DictionaryFormatError(path, line_no, stripped, "expected 'word [weight [tag]]'")

    word = parts[0]
    weight = DEFAULT_WEIGHT
    if len(parts) > 1:
        try:
            weight = float(parts[1])
        except ValueError:
            raise DictionaryFormatError(path, line_no, stripped, "weight is not a number") from None
        if weight < 0 or math.isnan(weight) or math.isinf(weight):
            raise DictionaryFormatError(path, line_no, stripped, "weight must be a finite non-negative number")
    tag = parts[2] if len(parts) > 2 else DEFAULT_TAG
    return word, weight, tag


def read_text_dictionary(path: PathLike) -> List[Triple]:
    """
    Read a text dictionary.

    Args:
        path: Path to a UTF-8 text file

    Returns:
        List of (word, weight, tag) triples in file order

    Raises:
        FileNotFoundError: If path doesn't exist
        DictionaryFormatError: On the first malformed line
    """
    path = Path(path)
    triples: List[Triple] = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, 1):
            triple = parse_dictionary_line(line, path, line_no)
            if triple is not None:
                triples.append(triple)
    logger.info("Read %d entries from %s", len(triples), path)
    return triples


def load_text_dictionary(path: PathLike) -> PrefixIndex:
    """Read a text dictionary and build a frozen PrefixIndex from it."""
    index, warnings = PrefixIndex.from_triples(read_text_dictionary(path))
    if warnings:
        logger.warning("%s: %d entries skipped", path, len(warnings))
    return index


# ============================================================================
# Compiled Dictionaries
# ============================================================================

def compile_dictionary(triples: Iterable[Triple], output_path: PathLike) -> marisa_trie.RecordTrie:
    """
    Build and save a compiled dictionary.

    Duplicate words keep their last occurrence; ordinals count accepted
    words in input order, like PrefixIndex.from_triples().

    Args:
        triples: (word, weight, tag) triples
        output_path: Where to write the .dic file (the tag table goes
            next to it)

    Returns:
        The built RecordTrie

    Raises:
        DictionaryFormatError: If the triples use more than MAX_TAGS tags
    """
    output_path = Path(output_path)
    index, warnings = PrefixIndex.from_triples(triples)
    for warning in warnings:
        logger.warning("Skipping entry #%d %r: %s", warning.position, warning.word, warning.reason)

    tag_ids: Dict[str, int] = {}

    def generate_items():
        for word, entry in index.items():
            tag_id = tag_ids.setdefault(entry.tag, len(tag_ids))
            if tag_id >= MAX_TAGS:
                raise DictionaryFormatError(output_path, entry.index, word, f"more than {MAX_TAGS} distinct tags")
            yield word, (entry.weight, tag_id, entry.index)

    logger.info("Building marisa_trie.RecordTrie (%d words)...", len(index))
    trie = marisa_trie.RecordTrie(RECORD_FORMAT, generate_items())

    output_path.parent.mkdir(parents=True, exist_ok=True)
    trie.save(str(output_path))
    save_tags(sorted(tag_ids, key=tag_ids.get), tags_path_for(output_path))

    size_kb = output_path.stat().st_size / 1024
    logger.info("Saved dictionary to %s (%.1f KB)", output_path, size_kb)
    return trie


def save_tags(tags: List[str], output_path: PathLike) -> None:
    """Write the tag table: count (4 bytes), then len (2 bytes) + text per tag."""
    with open(output_path, "wb") as f:
        f.write(struct.pack("<I", len(tags)))
        for tag in tags:
            tag_bytes = tag.encode("utf-8")
            f.write(struct.pack("<H", len(tag_bytes)))
            f.write(tag_bytes)


def load_tags(path: PathLike) -> List[str]:
    """
    Raises:
        FileNotFoundError: If the tag table is missing
        DictionaryFormatError: If the table is truncated
    """
    tags = []
    with open(path, "rb") as f:
        try:
            count = struct.unpack("<I", f.read(4))[0]
            for _ in range(count):
                length = struct.unpack("<H", f.read(2))[0]
                raw = f.read(length)
                if len(raw) != length:
                    raise struct.error("short read")
                tags.append(raw.decode("utf-8"))
        except struct.error:
            raise DictionaryFormatError(path, len(tags) + 1, "", "truncated tag table") from None
    return tags


def load_compiled_dictionary(path: PathLike) -> PrefixIndex:
    """
    Load a compiled dictionary into a frozen PrefixIndex.

    The RecordTrie is memory-mapped, so only the index build touches every
    record.

    Raises:
        FileNotFoundError: If the .dic file or its tag table doesn't exist
        DictionaryFormatError: If a record names an unknown tag
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(
            f"Dictionary not found at {path}. "
            "Run 'python scripts/build_dictionary.py' to build it."
        )
    tags = load_tags(tags_path_for(path))

    trie = marisa_trie.RecordTrie(RECORD_FORMAT)
    trie.mmap(str(path))

    entries = []
    for word, (weight, tag_id, ordinal) in trie.items():
        if tag_id >= len(tags):
            raise DictionaryFormatError(path, ordinal, word, f"unknown tag id {tag_id}")
        entries.append(DictionaryEntry(word, weight, tags[tag_id], ordinal))
    entries.sort(key=lambda e: e.index)

    index, _ = PrefixIndex.build((e.word, e) for e in entries)
    logger.info("Loaded %d words from %s", len(index), path)
    return index


def load_dictionary(path: PathLike) -> PrefixIndex:
    """Load a compiled (.dic) or text dictionary, by suffix."""
    path = Path(path)
    if path.suffix == COMPILED_SUFFIX:
        return load_compiled_dictionary(path)
    return load_text_dictionary(path)


# ============================================================================
# Default Index
# ============================================================================

# Module-level singleton, replaced wholesale by set_default_index()
_DEFAULT_INDEX: Optional[PrefixIndex] = None


def is_dictionary_loaded() -> bool:
    """Check if the default dictionary is loaded."""
    return _DEFAULT_INDEX is not None


def get_default_index(path: Optional[PathLike] = None) -> PrefixIndex:
    """
    Return the default index, loading it on first use.

    Args:
        path: Dictionary to load if none is loaded yet. Defaults to
            WORDLATTICE_DICT_PATH or the bundled data/wordlattice.dic.

    Raises:
        FileNotFoundError: If no dictionary is loaded and path doesn't exist
    """
    global _DEFAULT_INDEX

    index = _DEFAULT_INDEX
    if index is not None:
        return index

    from wordlattice.config import resolve_dict_path
    index = load_dictionary(resolve_dict_path(path))
    _DEFAULT_INDEX = index
    return index


def set_default_index(index: Optional[PrefixIndex]) -> Optional[PrefixIndex]:
    """
    Replace the default index. Returns the previous one.

    Segmentations already running keep the index they started with.
    """
    global _DEFAULT_INDEX

    if index is not None and not index.frozen:
        index.freeze()
    previous = _DEFAULT_INDEX
    _DEFAULT_INDEX = index
    return previous


def get_dictionary_size() -> int:
    """Get the number of words in the default dictionary (0 if not loaded)."""
    index = _DEFAULT_INDEX
    return len(index) if index is not None else 0


def unload_dictionary() -> None:
    """Drop the default index."""
    set_default_index(None)
