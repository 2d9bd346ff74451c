"""Tests for extraction schema classification and tagging."""

import logging

import pytest

from cvconvert.errors import UnknownSchemaError
from cvconvert.schema import (
    CustomExtraction,
    LegacyExtraction,
    SchemaTag,
    classify,
    detect_schema,
    tag_extraction,
)


class TestClassify:
    """Tests for the total classify() function."""

    def test_custom_fingerprint(self):
        assert classify({"name": "A", "headline": "B", "years_experience": "5"}) is SchemaTag.CUSTOM

    def test_legacy_fingerprint(self):
        assert classify({"personalInfo": {}, "workExperience": [], "extractedText": ""}) is SchemaTag.LEGACY

    def test_empty_dict_falls_back_to_legacy(self):
        assert classify({}) is SchemaTag.LEGACY

    def test_custom_wins_when_both_fingerprints_match(self):
        raw = {
            "name": "", "headline": "", "years_experience": "",
            "personalInfo": {}, "workExperience": [], "extractedText": "",
        }
        assert classify(raw) is SchemaTag.CUSTOM

    def test_keys_matter_not_values(self):
        """A fingerprint key with a null value still counts."""
        assert classify({"name": None, "headline": None, "years_experience": None}) is SchemaTag.CUSTOM

    def test_partial_fingerprint_is_not_custom(self):
        assert classify({"name": "A", "headline": "B"}) is SchemaTag.LEGACY

    def test_tag_values(self):
        assert SchemaTag.CUSTOM.value == "custom"
        assert SchemaTag("legacy") is SchemaTag.LEGACY


class TestDetectSchema:
    """Tests for detect_schema(), which reports unknown shapes as None."""

    def test_unknown_shape(self):
        assert detect_schema({"foo": 1}) is None
        assert detect_schema({}) is None

    def test_non_dict(self):
        assert detect_schema(["name"]) is None
        assert detect_schema(None) is None


class TestTagExtraction:
    """Tests for building the tagged extraction union."""

    def test_custom_document(self, custom_cv):
        extraction = tag_extraction(custom_cv)
        assert isinstance(extraction, CustomExtraction)
        assert extraction.tag is SchemaTag.CUSTOM
        assert extraction.recognized is True
        assert extraction.data is custom_cv

    def test_legacy_document(self, legacy_cv):
        extraction = tag_extraction(legacy_cv)
        assert isinstance(extraction, LegacyExtraction)
        assert extraction.recognized is True

    def test_stored_tag_is_trusted(self, legacy_cv):
        """A persisted tag wins over the shape of the data."""
        extraction = tag_extraction(legacy_cv, "custom")
        assert isinstance(extraction, CustomExtraction)

    def test_stored_tag_accepts_enum(self, custom_cv):
        assert isinstance(tag_extraction(custom_cv, SchemaTag.LEGACY), LegacyExtraction)

    def test_invalid_stored_tag(self, custom_cv):
        with pytest.raises(UnknownSchemaError, match="'unknown'"):
            tag_extraction(custom_cv, "unknown")

    def test_unknown_shape_falls_back_with_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cvconvert"):
            extraction = tag_extraction({"foo": "bar"})
        assert isinstance(extraction, LegacyExtraction)
        assert extraction.recognized is False
        assert "Unrecognized extraction shape" in caplog.text
        assert "foo" in caplog.text

    def test_unknown_shape_strict(self):
        with pytest.raises(UnknownSchemaError, match="foo"):
            tag_extraction({"foo": "bar"}, strict=True)

    def test_non_dict_raises(self):
        with pytest.raises(UnknownSchemaError):
            tag_extraction(["not", "a", "dict"])

    def test_extractions_are_frozen(self, custom_cv):
        extraction = tag_extraction(custom_cv)
        with pytest.raises(AttributeError):
            extraction.recognized = False
