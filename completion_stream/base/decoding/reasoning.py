"""Reasoning / answer segmentation for free-text completions.

Some models inline their chain of thought in the content channel between
delimiter tags (``<think>...</think>``). :func:`split_reasoning` separates
that from the answer with a two-state scanner:

* ``OUTSIDE``: an open tag moves to ``INSIDE``; a close tag (unpaired) ends a
  segment that started at the previous boundary (stream start or the previous
  close tag).
* ``INSIDE``: a close tag ends the segment that started at the open tag;
  repeated open tags are skipped.

Every closed segment becomes a reasoning segment. The answer is the text after
the last close tag. With no close tag at all, or nothing after the last one,
the full input is the answer and reasoning is empty.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class ReasoningTags:
    """Open and close delimiter variants recognized by the scanner."""

    opens: Tuple[str, ...] = ("<think>", "<thinking>")
    closes: Tuple[str, ...] = ("</think>", "</thinking>")


DEFAULT_REASONING_TAGS = ReasoningTags()


@dataclass(frozen=True)
class ReasoningSplit:
    reasoning: str
    final: str
    segments: Tuple[str, ...] = ()

    @property
    def has_reasoning(self) -> bool:
        return bool(self.reasoning)


class _State(Enum):
    OUTSIDE = "outside"
    INSIDE = "inside"


def _next_tag(text: str, pos: int, tags: Sequence[str]) -> Optional[Tuple[int, str]]:
    """Earliest occurrence of any tag at or after ``pos`` (longest wins on ties)."""
    best: Optional[Tuple[int, str]] = None
    for tag in tags:
        idx = text.find(tag, pos)
        if idx == -1:
            continue
        if best is None or idx < best[0] or (idx == best[0] and len(tag) > len(best[1])):
            best = (idx, tag)
    return best


def split_reasoning(text: str, tags: ReasoningTags = DEFAULT_REASONING_TAGS) -> ReasoningSplit:
    """Split ``text`` into reasoning and final answer."""
    if not text:
        return ReasoningSplit(reasoning="", final="")

    all_tags = tuple(tags.opens) + tuple(tags.closes)
    closes = set(tags.closes)
    state = _State.OUTSIDE
    segments: List[str] = []
    pieces: List[str] = []
    mark = 0
    last_close_end: Optional[int] = None
    pos = 0

    while (found := _next_tag(text, pos, all_tags)) is not None:
        idx, tag = found
        end = idx + len(tag)
        if tag in closes:
            # OUTSIDE: unpaired close, segment runs from the previous boundary
            pieces.append(text[mark:idx])
            segments.append("".join(pieces))
            pieces = []
            state = _State.OUTSIDE
            last_close_end = end
        elif state is _State.OUTSIDE:
            state = _State.INSIDE
            pieces = []
        else:
            # repeated open tag inside reasoning
            pieces.append(text[mark:idx])
        mark = end
        pos = end

    if last_close_end is None:
        return ReasoningSplit(reasoning="", final=text.strip())

    final = text[last_close_end:].strip()
    if not final:
        return ReasoningSplit(reasoning="", final=text.strip())

    cleaned = tuple(seg.strip() for seg in segments if seg.strip())
    return ReasoningSplit(reasoning="\n".join(cleaned), final=final, segments=cleaned)


__all__ = ["ReasoningTags", "DEFAULT_REASONING_TAGS", "ReasoningSplit", "split_reasoning"]
