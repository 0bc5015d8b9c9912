import json

import pytest

from leadrank.analysis import repair
from leadrank.core.errors import ErrorKind, LeadRankError


def test_fenced_payload_parses_like_unfenced():
    payload = '{"score": 42, "feedback": ["Add photos"], "consultingMessage": null}'
    fenced = f"```json\n{payload}\n```"

    assert repair.parse_model_json(fenced) == json.loads(payload)
    assert repair.strip_code_fences(fenced) == payload


def test_bare_fence_without_language_is_stripped():
    assert repair.parse_model_json('```\n{"score": 5}\n```') == {"score": 5}


def test_trailing_comma_in_fenced_output_is_repaired():
    assert repair.parse_model_json('```json {"score": 10,} ```') == {"score": 10}


def test_trailing_comma_pass_matches_comma_free_text_and_is_idempotent():
    text = '{"feedback": ["a", "b",\n  ], "score": 3}'
    expected = '{"feedback": ["a", "b"], "score": 3}'

    once = repair.remove_trailing_commas(text)

    assert json.loads(once) == json.loads(expected)
    assert repair.remove_trailing_commas(once) == once


def test_control_characters_are_removed_but_whitespace_kept():
    text = '{\n\t"score": 7\x00\x1b}\x7f'
    assert repair.strip_control_characters(text) == '{\n\t"score": 7}'
    assert repair.parse_model_json(text) == {"score": 7}


def test_missing_separator_between_array_items():
    text = '{"feedback": ["Add photos"\n    "List opening hours" "Reply to reviews"], "score": 50}'

    assert repair.parse_model_json(text) == {
        "feedback": ["Add photos", "List opening hours", "Reply to reviews"],
        "score": 50,
    }


def test_missing_separator_leaves_whitespace_strings_alone():
    text = '["a", " ", "b"]'
    assert repair.insert_missing_separators(text) == text


@pytest.mark.parametrize(
    "text, expected",
    [
        ('["Note:" "Add photos"]', ["Note:", "Add photos"]),
        ('["Add photos " "Reply"]', ["Add photos ", "Reply"]),
        ('["Add photos, hours," "Reply"]', ["Add photos, hours,", "Reply"]),
        ('["Add photos""Reply"]', ["Add photos", "Reply"]),
        ('["Say \\"hi\\"" "Reply"]', ['Say "hi"', "Reply"]),
    ],
)
def test_missing_separator_after_any_closing_quote(text, expected):
    assert repair.parse_model_json(text) == expected


def test_raw_newlines_inside_strings_are_escaped():
    text = '{"consultingMessage": "Hello!\nWe found 3 issues.", "score": 20}'

    assert repair.parse_model_json(text) == {"consultingMessage": "Hello!\nWe found 3 issues.", "score": 20}


def test_newline_escaping_ignores_structure_and_escaped_quotes():
    text = '{\n  "a": "say \\"hi\\"\nthere"\n}'
    assert repair.escape_newlines_in_strings(text) == '{\n  "a": "say \\"hi\\"\\nthere"\n}'


def test_passes_accumulate():
    text = '```json\n{"feedback": ["one"\n "two",], "consultingMessage": "line\nbreak", "score": 1,}\n```'

    assert repair.parse_model_json(text) == {
        "feedback": ["one", "two"],
        "consultingMessage": "line\nbreak",
        "score": 1,
    }


def test_unrepairable_text_keeps_raw_output():
    raw = "Sorry, I can't rate this business."

    with pytest.raises(LeadRankError) as excinfo:
        repair.parse_model_json(raw)

    assert excinfo.value.kind is ErrorKind.RESPONSE_PARSE
    assert excinfo.value.raw == raw


def test_repair_is_deterministic():
    raw = '{"score": 10, "feedback": ["a" "b",],}'
    assert repair.parse_model_json(raw) == repair.parse_model_json(raw)
