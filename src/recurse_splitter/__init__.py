"""Recurse Splitter: рекурсивное деление текстовых сегментов записи."""

from recurse_splitter.contracts import JobRequest, RecordSnapshot, RecordStore, StepResult
from recurse_splitter.segmenter import MIN_SEGMENT_LENGTH, SplitOutcome, split_segments
from recurse_splitter.step import SplitStep

__all__ = [
    "MIN_SEGMENT_LENGTH",
    "JobRequest",
    "RecordSnapshot",
    "RecordStore",
    "SplitOutcome",
    "SplitStep",
    "StepResult",
    "split_segments",
]
