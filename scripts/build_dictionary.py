#!/usr/bin/env python3
"""
Dictionary Builder for wordlattice.

This script compiles one or more text dictionaries ("word [weight [tag]]"
per line) into the binary format read by wordlattice: a
marisa_trie.RecordTrie plus a .tags sidecar.

Later inputs override earlier ones for words they both define.

Usage:
    python scripts/build_dictionary.py words.txt [more.txt ...] [--output PATH]
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Iterator, List

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from wordlattice.config import DEFAULT_DICT_PATH
from wordlattice.dictionary import Triple, compile_dictionary, read_text_dictionary
from wordlattice.errors import DictionaryFormatError

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def read_sources(paths: List[Path], min_weight: float = 0.0) -> Iterator[Triple]:
    """Yield triples from every source in order, dropping rare words."""
    dropped = 0
    for path in paths:
        for word, weight, tag in read_text_dictionary(path):
            if weight < min_weight:
                dropped += 1
                continue
            yield word, weight, tag
    if dropped:
        logger.info(f"Dropped {dropped} entries below weight {min_weight}")


def main():
    parser = argparse.ArgumentParser(
        description="Build a wordlattice binary dictionary from text dictionaries"
    )
    parser.add_argument(
        'inputs',
        type=Path,
        nargs='+',
        help="Text dictionary files ('word [weight [tag]]' lines)"
    )
    parser.add_argument(
        '--output', '-o',
        type=Path,
        default=DEFAULT_DICT_PATH,
        help=f"Output dictionary path (default: {DEFAULT_DICT_PATH})"
    )
    parser.add_argument(
        '--min-weight', '-m',
        type=float,
        default=0.0,
        help="Skip words with a smaller weight (default: keep all)"
    )

    args = parser.parse_args()

    for path in args.inputs:
        if not path.exists():
            logger.error(f"Dictionary source not found: {path}")
            sys.exit(1)

    start_time = time.time()

    try:
        compile_dictionary(read_sources(args.inputs, args.min_weight), args.output)
    except DictionaryFormatError as e:
        logger.error(str(e))
        sys.exit(1)

    elapsed = time.time() - start_time
    logger.info(f"Build completed in {elapsed:.1f} seconds")


if __name__ == '__main__':
    main()
