"""Tests for shared text utilities."""

import pytest

from cvconvert.shared import (
    as_dict,
    as_list,
    as_text,
    clean_list,
    clean_str,
    load_prompt,
    normalize_text_for_processing,
    sanitize_for_xml_in_obj,
    split_bullets,
    strip_html,
)


class TestCoercion:
    def test_as_dict_and_as_list(self):
        assert as_dict({"a": 1}) == {"a": 1}
        assert as_dict("x") == {}
        assert as_list([1]) == [1]
        assert as_list("abc") == []
        assert as_list(None) == []

    @pytest.mark.parametrize(
        "value, expected",
        [(" kept ", " kept "), (8, "8"), (2.5, "2.5"), (True, ""), (None, ""), (["x"], "")],
    )
    def test_as_text(self, value, expected):
        assert as_text(value) == expected

    def test_clean_str(self):
        assert clean_str("  Paris ") == "Paris"
        assert clean_str("   ") is None
        assert clean_str(None) is None
        assert clean_str(2020) == "2020"

    def test_clean_list(self):
        assert clean_list([" Go ", "", None, "Go", "Rust", 3]) == ["Go", "Rust", "3"]
        assert clean_list("Go") == []


class TestTextNormalization:
    def test_normalize(self):
        assert normalize_text_for_processing("a\u00a0b\u00adc\r\nd\x00") == "a b-c\nd"

    def test_sanitize_nested(self):
        data = {"a": ["x\x0b", {"b": "y z"}], "n": 3}
        assert sanitize_for_xml_in_obj(data) == {"a": ["x", {"b": "y z"}], "n": 3}

    def test_sanitize_returns_copy(self):
        data = {"a": "x\x00"}
        sanitize_for_xml_in_obj(data)
        assert data == {"a": "x\x00"}


class TestHtmlHelpers:
    def test_strip_html(self):
        assert strip_html("<p>Hello <b>world</b></p>") == "Hello world"

    def test_strip_html_plain_text(self):
        assert strip_html("no markup") == "no markup"

    def test_strip_html_empty(self):
        assert strip_html(None) == ""
        assert strip_html("   ") == ""

    def test_split_bullets(self):
        assert split_bullets("One<br>Two<BR/>\nThree\n\n  ") == ["One", "Two", "Three"]
        assert split_bullets(None) == []


class TestLoadPrompt:
    def test_packaged_prompts_exist(self):
        assert "years_experience" in load_prompt("cv_pdf_extraction_system")
        assert "personalInfo" in load_prompt("cv_image_extraction_system")

    def test_missing_prompt(self):
        assert load_prompt("does_not_exist") is None
