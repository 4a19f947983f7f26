"""
CLI interface for wordlattice.

Usage:
    wordlattice "北京大学生前来应聘"
    wordlattice --tags --dict words.txt "北京大学生"
    echo "北京大学生" | wordlattice --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from wordlattice import __version__
from wordlattice.config import DEBUG, SegmenterConfig, load_config, resolve_dict_path
from wordlattice.dictionary import load_dictionary, read_text_dictionary
from wordlattice.errors import SegmentationError
from wordlattice.models import WordTerm
from wordlattice.pathing import PATH_ALGORITHMS
from wordlattice.scoring import FrequencyScorer, TransitionScorer, load_transitions
from wordlattice.tokenizer import Segmenter

logger = logging.getLogger(__name__)


# ============================================================================
# Output Formatting
# ============================================================================

def format_default(terms: List[WordTerm]) -> str:
    """Words separated by spaces."""
    return " ".join(t.word for t in terms)


def format_tagged(terms: List[WordTerm]) -> str:
    """word/tag pairs separated by spaces."""
    return " ".join(str(t) for t in terms)


def format_json(terms: List[WordTerm]) -> str:
    data = [{"word": t.word, "tag": t.tag, "offset": t.offset} for t in terms]
    return json.dumps(data, ensure_ascii=False, indent=2)


# ============================================================================
# Segmenter Setup
# ============================================================================

def build_config(args: argparse.Namespace) -> SegmenterConfig:
    """Merge the config file (if any) with command line overrides."""
    config = load_config(args.config) if args.config else SegmenterConfig()

    if args.stage:
        config.pipeline_stages = tuple(args.stage)
    if args.algorithm:
        config.path_algorithm = args.algorithm
    if args.person:
        config.entity_recognition.person = True
    if args.place:
        config.entity_recognition.place = True
    if args.organization:
        config.entity_recognition.organization = True
    if args.normalize:
        config.normalize = True
    if args.custom:
        for word, weight, tag in read_text_dictionary(args.custom):
            config.custom_dictionary[word] = (weight, tag)

    config.validate()
    return config


def build_segmenter(args: argparse.Namespace) -> Segmenter:
    config = build_config(args)
    index = load_dictionary(resolve_dict_path(args.dict))
    scorer = None
    if args.transitions:
        scorer = TransitionScorer(FrequencyScorer(index.total_weight), load_transitions(args.transitions))
    return Segmenter(index, config, scorer=scorer)


# ============================================================================
# Main
# ============================================================================

def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wordlattice",
        description="Dictionary-driven word segmentation",
    )
    parser.add_argument(
        "text",
        nargs="?",
        help="Text to segment (read from stdin if omitted)",
    )
    parser.add_argument(
        "--dict", "-d",
        type=Path,
        default=None,
        help="Dictionary file, compiled (.dic) or text (default: $WORDLATTICE_DICT_PATH)",
    )
    parser.add_argument(
        "--custom",
        type=Path,
        help="Text dictionary applied as the custom dictionary",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="JSON configuration file",
    )
    parser.add_argument(
        "--algorithm",
        choices=sorted(PATH_ALGORITHMS),
        help="Path selection algorithm",
    )
    parser.add_argument(
        "--stage",
        action="append",
        metavar="ID",
        help="Pipeline stage to run, in order (repeatable; replaces the default chain)",
    )
    parser.add_argument(
        "--transitions",
        type=Path,
        help="Tag transition cost table ('prev tag cost' lines)",
    )
    parser.add_argument("--person", action="store_true", help="Recognize person names")
    parser.add_argument("--place", action="store_true", help="Recognize place names")
    parser.add_argument("--organization", action="store_true", help="Recognize organization names")
    parser.add_argument(
        "--normalize", "-n",
        action="store_true",
        help="Fold full-width and upper-case characters before lookup",
    )
    parser.add_argument(
        "--json", "-j",
        action="store_true",
        help="Output as JSON",
    )
    parser.add_argument(
        "--tags", "-t",
        action="store_true",
        help="Output word/tag pairs",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"wordlattice {__version__}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if (args.verbose or DEBUG) else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    if args.text is None:
        # Read from stdin
        text = sys.stdin.read().strip()
    else:
        text = args.text

    if not text:
        parser.print_help(sys.stderr)
        return 1

    try:
        segmenter = build_segmenter(args)
        logger.debug("Segmenting %d chars with %r", len(text), segmenter)
        terms = segmenter.segment(text)
    except (OSError, SegmentationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(format_json(terms))
    elif args.tags:
        print(format_tagged(terms))
    else:
        print(format_default(terms))
    return 0


if __name__ == "__main__":
    sys.exit(main())
