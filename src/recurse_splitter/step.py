"""
SplitStep - один шаг рекурсивного разбиения.

Шаги:
1. Fetch - прочитать свойства записи
2. Segment - один раунд деления сегментов
3. Если делить нечего - done=True, без записи
4. Иначе - свежий tip, условная запись, done=False

Шаг не хранит состояния между вызовами: всё берётся из записи.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from recurse_splitter.contracts import JobRequest, RecordStore, StepResult
from recurse_splitter.errors import StepError
from recurse_splitter.job_log import JobLog
from recurse_splitter.logging_config import get_logger
from recurse_splitter.segmenter import (
    initial_segments,
    previous_split_count,
    segment_stats,
    split_segments,
)


@dataclass
class SplitStep:
    """Use-case одного шага разбиения."""

    repository: RecordStore
    logger_name: str = field(default="splitter.step")

    def __post_init__(self):
        self.logger = get_logger(self.logger_name)

    def __call__(self, request: JobRequest, job_log: Optional[JobLog] = None) -> StepResult:
        """
        Выполнить один шаг для request.target_entity.

        Args:
            request: Запрос job'а (цель и глубина рекурсии)
            job_log: Журнал job'а; если не задан - создаётся локальный

        Returns:
            StepResult(done=True), если все сегменты уже готовы

        Raises:
            StepError: чтение, tip или условная запись не удались
        """
        log = job_log or JobLog(request.job_id, request.target_entity, self.logger_name)
        depth = request.recurse_depth

        log.info("Splitter starting", depth=depth, target=request.target_entity)

        try:
            return self._run(request, log)
        except StepError as exc:
            log.error(
                "Step failed",
                depth=depth,
                target=request.target_entity,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            raise

    def _run(self, request: JobRequest, log: JobLog) -> StepResult:
        depth = request.recurse_depth

        # 1. Fetch
        target = self.repository.fetch_record(request.target_entity)
        segments = initial_segments(target.properties)

        stats = segment_stats(segments)
        log.info(
            "Current state",
            depth=depth,
            segmentCount=stats["count"],
            maxLength=stats["max_length"],
        )

        # 2. Segment
        outcome = split_segments(segments)

        # 3. Терминальный путь: ничего не пишем
        if outcome.all_done:
            log.success(
                "All segments below threshold - terminating",
                depth=depth,
                segmentCount=stats["count"],
                segmentLengths=stats["lengths"],
            )
            return StepResult(entity_id=target.id, done=True)

        split_count = previous_split_count(target.properties) + 1

        # 4. Свежий tip прямо перед записью, tip из шага 1 не используется
        tip = self.repository.fetch_tip(target.id)

        properties = {
            **target.properties,
            "segments": outcome.next_segments,
            "split_count": split_count,
            "last_split_depth": depth,
        }
        self.repository.update_record(target.id, tip, properties)

        log.info(
            "Split complete - continuing recursion",
            depth=depth,
            prevSegments=stats["count"],
            newSegments=len(outcome.next_segments),
            splitsMade=outcome.splits_made,
            splitCount=split_count,
        )
        return StepResult(entity_id=target.id, done=False)
