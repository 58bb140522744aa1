# tests/services/test_comment_rules.py
"""Tests for comment text rules and moderation reasons."""

import pytest

from vayam.services.comments import authoring_threshold, count_words, validate_comment_text
from vayam.services.errors import ValidationError
from vayam.services.moderation import FLAG_REASONS, OTHER_REASON, resolve_reason


def test_count_words_ignores_extra_whitespace():
    assert count_words("  one\ttwo \n three  ") == 3


def test_text_is_trimmed():
    assert validate_comment_text("  keep it short  ") == "keep it short"


@pytest.mark.parametrize("text", ["", "   ", " ".join(["w"] * 81), "x" * 10001])
def test_invalid_text(text):
    with pytest.raises(ValidationError):
        validate_comment_text(text)


def test_eighty_words_allowed():
    text = " ".join(["w"] * 80)
    assert validate_comment_text(text) == text


@pytest.mark.parametrize(("visible", "required"), [(0, 0), (3, 3), (5, 5), (12, 5)])
def test_authoring_threshold(visible, required):
    assert authoring_threshold(visible) == required


@pytest.mark.parametrize("reason", FLAG_REASONS)
def test_listed_reason_is_kept(reason):
    assert resolve_reason(reason) == reason


def test_other_reason_uses_custom_text():
    assert resolve_reason(OTHER_REASON, "  Duplicate of another comment ") == "Duplicate of another comment"


@pytest.mark.parametrize(("reason", "custom"), [(None, None), ("  ", None), (OTHER_REASON, "")])
def test_missing_reason(reason, custom):
    with pytest.raises(ValidationError):
        resolve_reason(reason, custom)
