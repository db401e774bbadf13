"""
Segment engine: один раунд деления сегментов пополам.

Чистые функции без I/O. Сегмент длиннее MIN_SEGMENT_LENGTH делится
по индексу len // 2, остальные переносятся как есть. Свежие половинки
в том же раунде повторно не делятся.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Sequence

from recurse_splitter.errors import MalformedRecordError

# Сегменты длиной <= порога считаются готовыми
MIN_SEGMENT_LENGTH = 10


@dataclass(frozen=True)
class SplitOutcome:
    """Результат одного раунда."""

    next_segments: List[str]
    splits_made: int
    all_done: bool


def _check_segments(segments: Sequence[Any]) -> None:
    for idx, segment in enumerate(segments):
        if not isinstance(segment, str):
            raise MalformedRecordError(
                f"Segment {idx} is {type(segment).__name__}, expected str"
            )


def is_stable(segments: Sequence[str]) -> bool:
    """True, если все сегменты не длиннее порога (пустой список тоже)."""
    return all(len(s) <= MIN_SEGMENT_LENGTH for s in segments)


def split_segments(segments: Sequence[str]) -> SplitOutcome:
    """
    Один раунд деления.

    Args:
        segments: Текущие сегменты (может быть пустым)

    Returns:
        SplitOutcome; при all_done=True next_segments - исходные сегменты
    """
    _check_segments(segments)

    if is_stable(segments):
        return SplitOutcome(next_segments=list(segments), splits_made=0, all_done=True)

    next_segments: List[str] = []
    splits_made = 0

    for segment in segments:
        if len(segment) > MIN_SEGMENT_LENGTH:
            mid = len(segment) // 2
            next_segments.append(segment[:mid])
            next_segments.append(segment[mid:])
            splits_made += 1
        else:
            next_segments.append(segment)

    return SplitOutcome(next_segments=next_segments, splits_made=splits_made, all_done=False)


def initial_segments(properties: Mapping[str, Any]) -> List[str]:
    """
    Рабочие сегменты из свойств записи.

    segments, если они есть и не пустые; иначе [text]; иначе [].
    """
    segments = properties.get("segments")
    if segments:
        if isinstance(segments, str) or not isinstance(segments, Sequence):
            raise MalformedRecordError(
                f"segments is {type(segments).__name__}, expected a list of str"
            )
        return list(segments)

    text = properties.get("text") or ""
    if not isinstance(text, str):
        raise MalformedRecordError(f"text is {type(text).__name__}, expected str")
    return [text] if text else []


def segment_stats(segments: Sequence[str]) -> Dict[str, Any]:
    """Сводка для логов: количество, максимальная длина, длины."""
    lengths = [len(s) for s in segments]
    return {
        "count": len(lengths),
        "max_length": max(lengths) if lengths else 0,
        "lengths": lengths,
    }


def rounds_needed(length: int) -> int:
    """Сколько раундов нужно сегменту такой длины, чтобы стать готовым."""
    # Самая длинная половинка после k раундов: ceil(length / 2**k)
    rounds = 0
    while length > MIN_SEGMENT_LENGTH:
        length = (length + 1) // 2
        rounds += 1
    return rounds


def previous_split_count(properties: Mapping[str, Any]) -> int:
    """split_count из свойств записи; отсутствует или None - 0."""
    split_count = properties.get("split_count")
    if split_count is None:
        return 0
    # bool - подкласс int, но счётчиком не является
    if isinstance(split_count, bool) or not isinstance(split_count, int):
        raise MalformedRecordError(
            f"split_count is {type(split_count).__name__}, expected int"
        )
    return split_count
