"""
Локальный драйвер рекурсии.

Вызывает шаг для одной и той же записи, пока шаг не вернёт done=True
или не кончится лимит раундов. Сам шаг ничего о драйвере не знает.

Использование:
    python -m recurse_splitter.driver --text "$(printf 'A%.0s' {1..80})"
"""

from __future__ import annotations
import argparse
import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from recurse_splitter.contracts import JobRequest, StepResult
from recurse_splitter.jobs import Step
from recurse_splitter.logging_config import get_logger, setup_logging

logger = get_logger("splitter.driver")


@dataclass
class DriverReport:
    """Итог прогона драйвера."""

    rounds: int = 0
    results: List[StepResult] = field(default_factory=list)
    completed: bool = False


class RecursionDriver:
    """Повторяет шаг до done=True или до max_rounds."""

    def __init__(self, step: Step, max_rounds: int = 20, track_depth: bool = False):
        """
        Args:
            step: Шаг (SplitStep или совместимый callable)
            max_rounds: Максимум вызовов шага
            track_depth: Увеличивать recurse_depth на каждом раунде, как это
                делает оркестратор. Без него глубина остаётся как в запросе.
        """
        if max_rounds < 1:
            raise ValueError("max_rounds must be >= 1")
        self.step = step
        self.max_rounds = max_rounds
        self.track_depth = track_depth

    def run(self, target_entity: str, recurse_depth: int = 0, job_prefix: Optional[str] = None) -> DriverReport:
        report = DriverReport()
        prefix = job_prefix or uuid.uuid4().hex[:8]

        while report.rounds < self.max_rounds:
            depth = recurse_depth + report.rounds if self.track_depth else recurse_depth
            request = JobRequest(
                job_id=f"{prefix}-{report.rounds}",
                target_entity=target_entity,
                recurse_depth=depth,
            )
            result = self.step(request, None)
            report.rounds += 1
            report.results.append(result)

            if result.done:
                report.completed = True
                logger.info(f"Recursion finished | target={target_entity} rounds={report.rounds}")
                return report

        logger.warning(
            f"Round limit reached before done | target={target_entity} max_rounds={self.max_rounds}"
        )
        return report


def main(argv: Optional[List[str]] = None) -> int:
    """Прогнать разбиение локально на InMemoryRecordStore."""
    from recurse_splitter.repository import InMemoryRecordStore
    from recurse_splitter.settings import settings
    from recurse_splitter.step import SplitStep

    parser = argparse.ArgumentParser(description="Run the splitter step until done")
    parser.add_argument("--text", required=True, help="Initial text of the record")
    parser.add_argument("--max-rounds", type=int, default=settings.DRIVER_MAX_ROUNDS)
    parser.add_argument("--track-depth", action="store_true", help="Increment recurse_depth per round")
    args = parser.parse_args(argv)

    setup_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)

    store = InMemoryRecordStore()
    store.create_record("local", {"text": args.text})
    driver = RecursionDriver(SplitStep(repository=store), max_rounds=args.max_rounds, track_depth=args.track_depth)
    report = driver.run("local")

    props = store.get_properties("local")
    segments = props.get("segments") or []
    logger.info(
        f"Final state | rounds={report.rounds} completed={report.completed} "
        f"segments={len(segments)} split_count={props.get('split_count')}"
    )
    return 0 if report.completed else 1


if __name__ == "__main__":
    raise SystemExit(main())
