"""Tests for shared LLM response parsing utilities."""

import pytest
from triage.common.llm_utils import coerce_bool, coerce_unit_float, parse_llm_json


class TestParseLlmJson:
    def test_valid_json(self):
        assert parse_llm_json('{"key": "value"}') == {"key": "value"}

    def test_json_with_markdown_fences(self):
        raw = '```json\n{"important": true, "reason": "test"}\n```'
        assert parse_llm_json(raw) == {"important": True, "reason": "test"}

    def test_json_embedded_in_text(self):
        raw = 'Here is the result: {"key": "value"} and some trailing text.'
        assert parse_llm_json(raw) == {"key": "value"}

    def test_no_json_returns_empty_dict(self):
        assert parse_llm_json("This is not JSON at all") == {}

    def test_empty_string_returns_empty_dict(self):
        assert parse_llm_json("") == {}

    def test_non_object_json_returns_empty_dict(self):
        assert parse_llm_json("[1, 2, 3]") == {}

    def test_invalid_json_with_braces_returns_empty(self):
        assert parse_llm_json('{"broken: json') == {}


class TestCoercion:
    @pytest.mark.parametrize("value,expected", [
        (True, True), (False, False), ("true", True), ("False", False), ("yes", True), (0, False),
    ])
    def test_coerce_bool(self, value, expected):
        assert coerce_bool(value) is expected

    def test_coerce_unit_float_clamps(self):
        assert coerce_unit_float(1.7) == 1.0
        assert coerce_unit_float(-0.2) == 0.0
        assert coerce_unit_float("0.85") == 0.85

    def test_coerce_unit_float_defaults(self):
        assert coerce_unit_float(None) == 0.0
        assert coerce_unit_float("high", default=0.5) == 0.5
        assert coerce_unit_float(float("nan")) == 0.0
