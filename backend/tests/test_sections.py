"""Tests for marker-based section extraction and risk normalization."""

import pytest

from workplace_inspector.services.ai.common.sections import extract_section, extract_sections, marker
from workplace_inspector.services.ai.vision.contracts import MISSING_SECTIONS_NOTE, SECTION_TAGS, RiskLevel
from workplace_inspector.services.ai.vision.service import normalize_risk, parse_analysis



def test_extracts_adjacent_sections_exactly():
    text = "[WHAT_I_SEE]\nFoo bar.\n[WHAT_THIS_MEANS]\nBaz."

    assert extract_section(text, "WHAT_I_SEE") == "Foo bar."
    assert extract_section(text, "WHAT_THIS_MEANS") == "Baz."


def test_text_without_markers_yields_empty_strings():
    text = "The kitchen looks fine to me, nothing to report."

    for tag in SECTION_TAGS:
        assert extract_section(text, tag) == ""


@pytest.mark.parametrize("text", ["", None, "   \n  "])
def test_empty_input_never_raises(text):
    assert extract_section(text, "RISK_LEVEL") == ""


def test_marker_lookup_is_case_insensitive():
    text = "[what_i_see]\nA mop bucket in the walkway.\n[Risk_Level]\nmedium"

    assert extract_section(text, "WHAT_I_SEE") == "A mop bucket in the walkway."
    assert extract_section(text, "RISK_LEVEL") == "medium"


def test_sections_can_be_reordered_or_missing():
    text = "[RISK_LEVEL]\nLOW - tidy.\n\n[WHAT_I_SEE]\n  Clean shelves.  \n"

    sections = extract_sections(text, SECTION_TAGS)

    assert sections["WHAT_I_SEE"] == "Clean shelves."
    assert sections["RISK_LEVEL"] == "LOW - tidy."
    assert sections["POSSIBLE_ISSUES"] == ""
    assert sections["WHAT_THIS_MEANS"] == ""


def test_multiline_section_keeps_bullets(sample_reply):
    sections = extract_sections(sample_reply, SECTION_TAGS)

    assert sections["POSSIBLE_ISSUES"] == (
        "- Raw meat stored next to ready-to-eat food.\n- Uncovered containers."
    )
    assert sections["WHAT_YOU_CAN_DO_NEXT"].startswith("1) Separate raw meat")


def test_inline_bracket_text_does_not_end_a_section():
    text = "[WHAT_I_SEE]\nA sign reading [EXIT] above the door.\n[RISK_LEVEL]\nLOW"

    assert extract_section(text, "WHAT_I_SEE") == "A sign reading [EXIT] above the door."


def test_marker_literal():
    assert marker("RISK_LEVEL") == "[RISK_LEVEL]"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("HIGH - visible grease fire risk", RiskLevel.HIGH),
        ("medium", RiskLevel.MEDIUM),
        ("Medium - cluttered walkway", RiskLevel.MEDIUM),
        ("LOW - tidy", RiskLevel.LOW),
        ("", RiskLevel.LOW),
        (None, RiskLevel.LOW),
        ("banana", RiskLevel.LOW),
        ("MEDIUM to HIGH", RiskLevel.HIGH),
    ],
)
def test_normalize_risk(raw, expected):
    assert normalize_risk(raw) is expected


def test_parse_analysis_populates_all_fields(sample_reply):
    result = parse_analysis(sample_reply)

    assert result.what_i_see == "A prep counter with raw chicken next to sliced vegetables."
    assert result.what_this_means == "This is an active food preparation area."
    assert result.risk_level is RiskLevel.HIGH
    assert result.raw == sample_reply
    assert result.error is None


def test_parse_analysis_defaults_to_low_without_risk_section():
    result = parse_analysis("[WHAT_I_SEE]\nSomething.")

    assert result.risk_level is RiskLevel.LOW
    assert result.what_i_see == "Something."
    assert result.error is None


@pytest.mark.parametrize("reply", ["I cannot help with that.", "[RISK_LEVEL]\nMEDIUM"])
def test_reply_without_text_sections_carries_note(reply):
    result = parse_analysis(reply)

    assert result.error == MISSING_SECTIONS_NOTE
    assert result.what_i_see == ""
    assert result.raw == reply
