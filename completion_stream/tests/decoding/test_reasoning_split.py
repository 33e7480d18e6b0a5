"""Reasoning segmentation cases.

Covers paired tags, close-only, multiple segments, no tags, empty tail and
the ``<thinking>`` variant.
"""
from __future__ import annotations

import pytest

from completion_stream.base.decoding import ReasoningTags, split_reasoning


def test_paired_tags():
    split = split_reasoning("<think>A</think>B")
    assert split.reasoning == "A"  # nosec B101
    assert split.final == "B"  # nosec B101
    assert split.has_reasoning  # nosec B101


def test_no_tags_returns_full_text():
    split = split_reasoning("  just an answer  ")
    assert split.reasoning == ""  # nosec B101
    assert split.final == "just an answer"  # nosec B101
    assert not split.has_reasoning  # nosec B101


def test_close_only_treats_prefix_as_reasoning():
    split = split_reasoning("step one\nstep two</think>The answer")
    assert split.reasoning == "step one\nstep two"  # nosec B101
    assert split.final == "The answer"  # nosec B101


def test_multiple_segments_are_joined():
    split = split_reasoning("<think>first</think> middle <thinking>second</thinking> final")
    assert split.segments == ("first", "second")  # nosec B101
    assert split.reasoning == "first\nsecond"  # nosec B101
    assert split.final == "final"  # nosec B101


def test_unpaired_close_after_paired_segment():
    split = split_reasoning("<think>a</think>b</think>c")
    assert split.segments == ("a", "b")  # nosec B101
    assert split.final == "c"  # nosec B101


def test_open_without_close_is_all_final():
    split = split_reasoning("<think>never closed")
    assert split.reasoning == ""  # nosec B101
    assert split.final == "<think>never closed"  # nosec B101


def test_nothing_after_last_close_is_all_final():
    split = split_reasoning("<think>only thoughts</think>   ")
    assert split.reasoning == ""  # nosec B101
    assert split.final == "<think>only thoughts</think>"  # nosec B101


def test_repeated_open_tag_inside_reasoning():
    split = split_reasoning("<think>x<think>y</think>z")
    assert split.reasoning == "xy"  # nosec B101
    assert split.final == "z"  # nosec B101


@pytest.mark.parametrize("text", ["", None])
def test_empty_input(text):
    split = split_reasoning(text or "")
    assert split.reasoning == "" and split.final == ""  # nosec B101


def test_custom_tags():
    tags = ReasoningTags(opens=("[r]",), closes=("[/r]",))
    split = split_reasoning("[r]why[/r]what", tags)
    assert (split.reasoning, split.final) == ("why", "what")  # nosec B101
