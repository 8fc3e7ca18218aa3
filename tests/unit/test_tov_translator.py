"""
Tests for the tone-of-voice translator.

Run with:
    pytest tests/unit/test_tov_translator.py -v
"""

import pytest

from services.tov_translator import (
    DIRECTNESS,
    ENTHUSIASM,
    FORMALITY,
    HUMOR,
    WARMTH,
    get_tier,
    get_tov_label,
    translate_tov,
)


# ===================================================================
# TESTS - Tier boundaries
# ===================================================================

@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        (0.0, "low"),
        (0.3, "low"),
        (0.31, "medium"),
        (0.7, "medium"),
        (0.71, "high"),
        (1.0, "high"),
    ],
)
def test_tier_boundaries(value, expected):
    assert get_tier(value) == expected


# ===================================================================
# TESTS - Instructions
# ===================================================================

@pytest.mark.unit
def test_three_axes_only():
    """Humor and enthusiasm contribute nothing when omitted."""
    result = translate_tov(0.8, 0.6, 0.5)

    paragraphs = result.split("\n\n")
    assert paragraphs == [FORMALITY["high"], WARMTH["medium"], DIRECTNESS["medium"]]


@pytest.mark.unit
def test_paragraph_order_with_all_axes():
    result = translate_tov(
        formality=0.1,
        warmth=0.9,
        directness=0.2,
        humor=0.9,
        enthusiasm=0.0,
        custom_instructions="Mention our Series B.",
    )

    assert result.split("\n\n") == [
        FORMALITY["low"],
        WARMTH["high"],
        DIRECTNESS["low"],
        HUMOR["high"],
        ENTHUSIASM["low"],
        "Additional instructions: Mention our Series B.",
    ]


@pytest.mark.unit
def test_zero_humor_is_still_included():
    """0.0 is a value, not an omission."""
    result = translate_tov(0.5, 0.5, 0.5, humor=0.0)

    assert HUMOR["low"] in result
    assert len(result.split("\n\n")) == 4


@pytest.mark.unit
def test_empty_custom_instructions_are_skipped():
    result = translate_tov(0.5, 0.5, 0.5, custom_instructions="")

    assert "Additional instructions" not in result


@pytest.mark.unit
def test_translation_is_deterministic():
    assert translate_tov(0.4, 0.2, 0.9, 0.5, 0.5) == translate_tov(0.4, 0.2, 0.9, 0.5, 0.5)


# ===================================================================
# TESTS - Labels
# ===================================================================

@pytest.mark.unit
@pytest.mark.parametrize(
    "axes, expected",
    [
        ((0.9, 0.2, 0.5), "Formal, Cool"),
        ((0.1, 0.9, 0.9), "Casual, Warm, Direct"),
        ((0.5, 0.5, 0.1), "Consultative"),
        ((0.5, 0.5, 0.5), "Balanced"),
    ],
)
def test_tov_label(axes, expected):
    assert get_tov_label(*axes) == expected
