"""
Tests for config.py - SegmenterConfig parsing and validation.
"""

import json

import pytest

from wordlattice.config import (
    DEFAULT_STAGES,
    EntityRecognition,
    SegmenterConfig,
    load_config,
)
from wordlattice.errors import ConfigurationError


class TestDefaults:
    """Tests for default configuration values."""

    def test_default_values(self):
        """Test the documented defaults."""
        config = SegmenterConfig()
        assert config.pipeline_stages == DEFAULT_STAGES
        assert config.path_algorithm == "shortest"
        assert config.entity_recognition == EntityRecognition()
        assert config.custom_dictionary == {}
        assert config.custom_override is True
        assert config.normalize is False

    def test_configs_do_not_share_state(self):
        """Test mutable fields are per instance."""
        a = SegmenterConfig()
        b = SegmenterConfig()
        a.entity_recognition.person = True
        a.custom_dictionary["词"] = (1.0, "n")
        assert not b.entity_recognition.person
        assert b.custom_dictionary == {}


class TestStageIds:
    """Tests for stage id resolution and the custom index."""

    def test_recognizers_appended_in_fixed_order(self):
        """Test enabled recognizers follow the configured stages."""
        config = SegmenterConfig(entity_recognition=EntityRecognition(person=True, organization=True))
        assert config.stage_ids() == list(DEFAULT_STAGES) + ["person", "organization"]

    def test_listed_recognizer_not_duplicated(self):
        """Test a recognizer already listed keeps its place."""
        config = SegmenterConfig(
            pipeline_stages=("place", "number_letter"),
            entity_recognition=EntityRecognition(place=True),
        )
        assert config.stage_ids() == ["place", "number_letter"]

    def test_custom_index(self):
        """Test the custom dictionary becomes a frozen index."""
        config = SegmenterConfig(custom_dictionary={"京大": (3.0, "nz")})
        index = config.custom_index()
        assert index.frozen
        assert index.get("京大").weight == 3.0
        assert index.get("京大").tag == "nz"

    def test_custom_index_folded(self):
        """Test custom words are folded, last one winning."""
        config = SegmenterConfig(custom_dictionary={"MacBook": (3.0, "nz"), "macbook": (1.0, "n")})
        index = config.custom_index(str.lower)
        assert list(index.words()) == ["macbook"]
        assert index.get("macbook").tag == "n"


class TestValidation:
    """Tests for rejecting bad options."""

    def test_unknown_stage(self):
        """Test an unknown stage id is rejected."""
        with pytest.raises(ConfigurationError):
            SegmenterConfig(pipeline_stages=("custom_dictionary", "spellcheck"))

    def test_unknown_algorithm(self):
        """Test an unknown path algorithm is rejected."""
        with pytest.raises(ConfigurationError):
            SegmenterConfig(path_algorithm="beam")

    def test_bad_custom_word(self):
        """Test an empty custom word is rejected."""
        with pytest.raises(ConfigurationError):
            SegmenterConfig(custom_dictionary={"": (1.0, "n")})

    @pytest.mark.parametrize("value", [
        ("heavy", "n"),
        (float("nan"), "n"),
        (float("inf"), "n"),
        (-1.0, "n"),
        (True, "n"),
        (1.0, ""),
    ])
    def test_bad_custom_value(self, value):
        """Test unusable custom weights and tags are rejected."""
        with pytest.raises(ConfigurationError):
            SegmenterConfig(custom_dictionary={"京大": value})

    def test_nan_from_json(self):
        """Test a NaN weight read from JSON is rejected."""
        with pytest.raises(ConfigurationError):
            SegmenterConfig.from_dict(json.loads('{"customDictionary": {"京大": NaN}}'))

    def test_configuration_error_is_value_error(self):
        """Test ConfigurationError is also a ValueError."""
        with pytest.raises(ValueError):
            SegmenterConfig(path_algorithm="beam")


class TestFromDict:
    """Tests for building a config from a mapping."""

    def test_camel_case(self):
        """Test camelCase option names."""
        config = SegmenterConfig.from_dict({
            "pipelineStages": ["number_quantifier"],
            "pathAlgorithm": "viterbi",
            "enableEntityRecognition": {"person": True},
            "customDictionary": {"京大": 5},
        })
        assert config.pipeline_stages == ("number_quantifier",)
        assert config.path_algorithm == "viterbi"
        assert config.entity_recognition == EntityRecognition(person=True)
        assert config.custom_dictionary == {"京大": (5.0, "n")}

    def test_snake_case(self):
        """Test snake_case option names."""
        config = SegmenterConfig.from_dict({
            "pipeline_stages": [],
            "custom_override": False,
            "normalize": True,
        })
        assert config.pipeline_stages == ()
        assert config.custom_override is False
        assert config.normalize is True

    def test_entity_recognition_boolean(self):
        """Test a boolean switches every recognizer."""
        config = SegmenterConfig.from_dict({"enableEntityRecognition": True})
        assert config.entity_recognition.enabled() == ["person", "place", "organization"]

    @pytest.mark.parametrize("value,expected", [
        (2, (2.0, "n")),
        ([2, "nz"], (2.0, "nz")),
        ({"tag": "nz"}, (1.0, "nz")),
        ({"weight": 4, "tag": "ns"}, (4.0, "ns")),
    ])
    def test_custom_dictionary_values(self, value, expected):
        """Test the accepted custom value shapes."""
        config = SegmenterConfig.from_dict({"customDictionary": {"词": value}})
        assert config.custom_dictionary == {"词": expected}

    @pytest.mark.parametrize("data", [
        {"pipelineStage": ["number_letter"]},
        {"pipeline_stages": "number_letter"},
        {"enableEntityRecognition": {"animal": True}},
        {"enableEntityRecognition": "yes"},
        {"customDictionary": ["京大"]},
        {"customDictionary": {"京大": "heavy"}},
        {"customDictionary": {"京大": ["heavy", "n"]}},
    ])
    def test_rejected(self, data):
        """Test malformed mappings are rejected."""
        with pytest.raises(ConfigurationError):
            SegmenterConfig.from_dict(data)


class TestLoadConfig:
    """Tests for reading JSON config files."""

    def test_load(self, tmp_path):
        """Test a config file is loaded."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"pathAlgorithm": "viterbi"}), encoding="utf-8")
        assert load_config(path).path_algorithm == "viterbi"

    def test_invalid_json(self, tmp_path):
        """Test invalid JSON is a configuration error."""
        path = tmp_path / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_not_an_object(self, tmp_path):
        """Test a non-object document is rejected."""
        path = tmp_path / "config.json"
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(path)

    def test_missing(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "none.json")
