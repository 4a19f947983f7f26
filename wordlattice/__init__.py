"""
wordlattice: Dictionary-driven word segmentation

Segments unsegmented text (Chinese, Japanese, ...) into tagged words by
building a lattice of dictionary candidates and picking the cheapest
gap-free path through it.

Basic Usage:
    import wordlattice

    # Segment with the default dictionary
    for term in wordlattice.tokenize("北京大学生前来应聘"):
        print(f"{term.word}/{term.tag} @ {term.offset}")

    # Or bring your own dictionary
    from wordlattice import PrefixIndex, Segmenter
    index, _ = PrefixIndex.from_triples([("北京", 100, "ns"), ("大学", 80, "n")])
    segmenter = Segmenter(index)
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import List, Optional, Tuple

from wordlattice.config import ASYNC_TIMEOUT, ASYNC_WORKERS, EntityRecognition, SegmenterConfig, load_config
from wordlattice.errors import (
    AnalysisTimeoutError,
    ConfigurationError,
    DictionaryFormatError,
    FrozenIndexError,
    InvalidEntry,
    LatticeUnreachable,
    SegmentationError,
)
from wordlattice.models import DictionaryEntry, Hit, WordTerm
from wordlattice.tokenizer import Segmenter
from wordlattice.trie import PrefixIndex

__version__ = "0.1.0"


# =============================================================================
# Main API
# =============================================================================

# Segmenter over the default index, rebuilt when the index is swapped
_segmenter: Optional[Segmenter] = None
_segmenter_lock = threading.Lock()


def get_segmenter() -> Segmenter:
    """
    Segmenter over the current default dictionary.

    Raises:
        FileNotFoundError: If no default dictionary is loaded or found
    """
    global _segmenter
    from wordlattice.dictionary import get_default_index

    index = get_default_index()
    segmenter = _segmenter
    if segmenter is not None and segmenter.index is index:
        return segmenter
    with _segmenter_lock:
        if _segmenter is None or _segmenter.index is not index:
            _segmenter = Segmenter(index)
        return _segmenter


def tokenize(text: Optional[str]) -> List[WordTerm]:
    """
    Segment text with the default dictionary.

    Args:
        text: Text to segment; None or "" gives []

    Returns:
        List of WordTerm objects, whitespace dropped

    Example:
        >>> [t.word for t in wordlattice.tokenize("北京大学生")]
        ['北京大学', '生']
    """
    if not text:
        return []
    return get_segmenter().segment(text)


def warm_up(verbose: bool = False) -> Tuple[float, dict]:
    """
    Pre-load the default dictionary and compile its scanner.

    Args:
        verbose: If True, print timing information

    Returns:
        Tuple of (total_time_seconds, timing_details_dict)
    """
    from wordlattice.dictionary import get_default_index, get_dictionary_size

    timings = {}
    total_start = time.perf_counter()

    if verbose:
        print("Loading wordlattice dictionary...")

    t0 = time.perf_counter()
    get_default_index()
    timings['dictionary'] = (time.perf_counter() - t0) * 1000

    t0 = time.perf_counter()
    get_segmenter()
    timings['scanner'] = (time.perf_counter() - t0) * 1000

    if verbose:
        print(f"  Dictionary:     {timings['dictionary']:>7.1f}ms ({get_dictionary_size():,} entries)")
        print(f"  Scanner:        {timings['scanner']:>7.1f}ms")

    total_time = time.perf_counter() - total_start
    timings['total'] = total_time * 1000

    if verbose:
        print(f"Total warm-up:    {timings['total']:>7.1f}ms")

    return total_time, timings


def get_version() -> str:
    """Get the library version."""
    return __version__


# =============================================================================
# Async API
# =============================================================================

# Thread pool for async operations
_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def _get_executor() -> ThreadPoolExecutor:
    """Get or create the thread pool executor."""
    global _executor

    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(max_workers=ASYNC_WORKERS, thread_name_prefix="wordlattice")
    return _executor


async def tokenize_async(
    text: Optional[str],
    timeout: float = ASYNC_TIMEOUT,
) -> List[WordTerm]:
    """
    Segment text asynchronously in a worker thread.

    Args:
        text: Text to segment
        timeout: Maximum time in seconds (default 30s)

    Returns:
        List of WordTerm objects

    Raises:
        AnalysisTimeoutError: If segmentation exceeds timeout

    Example:
        >>> import asyncio
        >>> terms = asyncio.run(wordlattice.tokenize_async("北京大学生"))
    """
    import asyncio

    loop = asyncio.get_running_loop()
    executor = _get_executor()

    try:
        future = loop.run_in_executor(executor, tokenize, text)
        return await asyncio.wait_for(future, timeout=timeout)
    except asyncio.TimeoutError:
        raise AnalysisTimeoutError(f"Segmentation timed out after {timeout}s") from None


def shutdown():
    """
    Shutdown the thread pool executor.

    Call this when your application is shutting down to cleanly
    release resources.
    """
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=True)
            _executor = None


# =============================================================================
# Session Context (for batch processing)
# =============================================================================

@contextmanager
def session_context(index: Optional[PrefixIndex] = None):
    """
    Context manager for batch segmentation.

    Loads the default dictionary up front, or, when index is given, makes
    it the default for the duration of the block.

    Example:
        >>> with wordlattice.session_context():
        ...     for text in texts:
        ...         terms = wordlattice.tokenize(text)
    """
    from wordlattice.dictionary import get_default_index, set_default_index

    if index is None:
        get_default_index()
        yield
        return

    previous = set_default_index(index)
    try:
        yield
    finally:
        set_default_index(previous)


# =============================================================================
# Module-level exports
# =============================================================================

__all__ = [
    # Data classes
    "DictionaryEntry",
    "Hit",
    "WordTerm",
    # Engine
    "PrefixIndex",
    "Segmenter",
    "SegmenterConfig",
    "EntityRecognition",
    "load_config",
    # Sync API
    "tokenize",
    "get_segmenter",
    "warm_up",
    "get_version",
    # Async API
    "tokenize_async",
    "shutdown",
    # Batch processing
    "session_context",
    # Exceptions
    "SegmentationError",
    "InvalidEntry",
    "FrozenIndexError",
    "LatticeUnreachable",
    "ConfigurationError",
    "DictionaryFormatError",
    "AnalysisTimeoutError",
    # Version
    "__version__",
]
