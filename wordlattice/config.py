"""
Settings and configuration for wordlattice.

Module constants hold process-wide settings read from the environment.
SegmenterConfig holds per-segmenter options: the pipeline stage order,
the path algorithm, entity recognition switches and the custom dictionary.
"""

import json
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from wordlattice.errors import ConfigurationError

# Data directory paths
PACKAGE_DIR = Path(__file__).parent
DATA_DIR = PACKAGE_DIR / "data"

# Compiled default dictionary - defaults to data/wordlattice.dic
DEFAULT_DICT_PATH = DATA_DIR / "wordlattice.dic"

# Environment variable for a custom dictionary path
DICT_PATH = Path(os.environ.get("WORDLATTICE_DICT_PATH", DEFAULT_DICT_PATH))

# Debug mode
DEBUG = os.environ.get("WORDLATTICE_DEBUG", "").lower() in ("1", "true", "yes")

# Timeout for tokenize_async, in seconds
ASYNC_TIMEOUT = float(os.environ.get("WORDLATTICE_ASYNC_TIMEOUT", "30"))

# Worker threads used by tokenize_async
ASYNC_WORKERS = 4

DEFAULT_STAGES: Tuple[str, ...] = (
    "custom_dictionary",
    "number_quantifier",
    "number_letter",
    "common_pattern",
)

DEFAULT_PATH_ALGORITHM = "shortest"

# Tag given to custom words that do not name one
DEFAULT_CUSTOM_TAG = "n"
DEFAULT_CUSTOM_WEIGHT = 1.0


@dataclass(slots=True)
class EntityRecognition:
    """Which recognizer stages to run."""
    person: bool = False
    place: bool = False
    organization: bool = False

    def enabled(self) -> List[str]:
        """Enabled recognizer ids, in fixed order."""
        return [name for name in ("person", "place", "organization") if getattr(self, name)]


@dataclass
class SegmenterConfig:
    """
    Options for a Segmenter.

    Attributes:
        pipeline_stages: Stage ids, applied in order
        path_algorithm: "shortest" or "viterbi"
        entity_recognition: Recognizers appended after pipeline_stages
        custom_dictionary: word -> (weight, tag), applied with priority
        custom_override: Let custom words evict crossing candidates
        normalize: Fold width and case before lookup
    """
    pipeline_stages: Tuple[str, ...] = DEFAULT_STAGES
    path_algorithm: str = DEFAULT_PATH_ALGORITHM
    entity_recognition: EntityRecognition = field(default_factory=EntityRecognition)
    custom_dictionary: Dict[str, Tuple[float, str]] = field(default_factory=dict)
    custom_override: bool = True
    normalize: bool = False

    def __post_init__(self):
        self.pipeline_stages = tuple(self.pipeline_stages)
        self.validate()

    def validate(self) -> None:
        """
        Raises:
            ConfigurationError: On an unknown stage id or path algorithm, or a
                custom entry without a usable word, weight or tag
        """
        # Imported here: the registries import this module's neighbours
        from wordlattice.pathing import PATH_ALGORITHMS
        from wordlattice.stages import STAGE_REGISTRY

        for stage_id in self.pipeline_stages:
            if stage_id not in STAGE_REGISTRY:
                raise ConfigurationError(
                    f"unknown pipeline stage {stage_id!r}; expected one of {sorted(STAGE_REGISTRY)}"
                )
        if self.path_algorithm not in PATH_ALGORITHMS:
            raise ConfigurationError(
                f"unknown path algorithm {self.path_algorithm!r}; "
                f"expected one of {sorted(PATH_ALGORITHMS)}"
            )
        for word, value in self.custom_dictionary.items():
            if not isinstance(word, str) or not word:
                raise ConfigurationError(f"custom dictionary word must be a non-empty string: {word!r}")
            if not isinstance(value, tuple) or len(value) != 2:
                raise ConfigurationError(f"custom dictionary value for {word!r} must be (weight, tag)")
            weight, tag = value
            if (isinstance(weight, bool) or not isinstance(weight, (int, float))
                    or not math.isfinite(weight) or weight < 0):
                raise ConfigurationError(
                    f"custom dictionary weight for {word!r} must be a finite non-negative number: {weight!r}"
                )
            if not isinstance(tag, str) or not tag:
                raise ConfigurationError(f"custom dictionary tag for {word!r} must be a non-empty string")

    def stage_ids(self) -> List[str]:
        """Configured stages followed by enabled recognizers not already listed."""
        ids = list(self.pipeline_stages)
        for name in self.entity_recognition.enabled():
            if name not in ids:
                ids.append(name)
        return ids

    def custom_index(self, fold: Optional[Callable[[str], str]] = None):
        """
        Frozen PrefixIndex over custom_dictionary (possibly empty).

        With fold, words are keyed by fold(word); words that fold alike keep
        the one listed last.
        """
        from wordlattice.trie import PrefixIndex

        if fold is None:
            fold = str
        triples = ((fold(word), weight, tag) for word, (weight, tag) in self.custom_dictionary.items())
        index, _ = PrefixIndex.from_triples(triples)
        return index

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SegmenterConfig":
        """
        Build a config from a mapping, as read from JSON.

        Both snake_case and camelCase keys are accepted. Custom dictionary
        values may be a weight, a [weight, tag] pair or a {"weight", "tag"}
        object.

        Raises:
            ConfigurationError: On unknown keys or bad values
        """
        known = {
            "pipeline_stages": "pipeline_stages",
            "pipelineStages": "pipeline_stages",
            "path_algorithm": "path_algorithm",
            "pathAlgorithm": "path_algorithm",
            "entity_recognition": "entity_recognition",
            "enableEntityRecognition": "entity_recognition",
            "custom_dictionary": "custom_dictionary",
            "customDictionary": "custom_dictionary",
            "custom_override": "custom_override",
            "customOverride": "custom_override",
            "normalize": "normalize",
        }
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                raise ConfigurationError(f"unknown configuration key {key!r}")
            kwargs[known[key]] = value

        if "pipeline_stages" in kwargs:
            stages = kwargs["pipeline_stages"]
            if isinstance(stages, str) or not all(isinstance(s, str) for s in stages):
                raise ConfigurationError("pipeline_stages must be a list of stage ids")
            kwargs["pipeline_stages"] = tuple(stages)
        if "entity_recognition" in kwargs:
            kwargs["entity_recognition"] = _parse_entity_recognition(kwargs["entity_recognition"])
        if "custom_dictionary" in kwargs:
            kwargs["custom_dictionary"] = _parse_custom_dictionary(kwargs["custom_dictionary"])
        return cls(**kwargs)


def _parse_entity_recognition(value: Any) -> EntityRecognition:
    if isinstance(value, EntityRecognition):
        return value
    if isinstance(value, bool):
        return EntityRecognition(value, value, value)
    if not isinstance(value, Mapping):
        raise ConfigurationError("entity recognition must be a boolean or a mapping")
    unknown = set(value) - {"person", "place", "organization"}
    if unknown:
        raise ConfigurationError(f"unknown entity types: {sorted(unknown)}")
    return EntityRecognition(**{k: bool(v) for k, v in value.items()})


def _parse_custom_dictionary(value: Any) -> Dict[str, Tuple[float, str]]:
    if not isinstance(value, Mapping):
        raise ConfigurationError("custom dictionary must be a mapping of word -> weight/tag")
    result = {}
    for word, item in value.items():
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            weight, tag = item, DEFAULT_CUSTOM_TAG
        elif isinstance(item, Mapping):
            weight = item.get("weight", DEFAULT_CUSTOM_WEIGHT)
            tag = item.get("tag", DEFAULT_CUSTOM_TAG)
        elif isinstance(item, (list, tuple)) and len(item) == 2:
            weight, tag = item
        else:
            raise ConfigurationError(f"bad custom dictionary value for {word!r}: {item!r}")
        try:
            result[word] = (float(weight), str(tag))
        except (TypeError, ValueError):
            raise ConfigurationError(f"bad weight for custom word {word!r}: {weight!r}") from None
    return result


def load_config(path) -> SegmenterConfig:
    """
    Load a SegmenterConfig from a JSON file.

    Raises:
        FileNotFoundError: If path does not exist
        ConfigurationError: If the file is not a JSON object or has bad values
    """
    path = Path(path)
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"{path}: invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path}: configuration must be a JSON object")
    return SegmenterConfig.from_dict(data)


def resolve_dict_path(path: Optional[Path] = None) -> Path:
    """Explicit path, else WORDLATTICE_DICT_PATH, else the bundled default."""
    return Path(path) if path is not None else DICT_PATH
