"""
Тесты локального драйвера рекурсии (сценарии полного прогона).
"""
import pytest

from recurse_splitter.contracts import StepResult
from recurse_splitter.driver import RecursionDriver, main


class TestRecursionDriver:
    """Полные прогоны до done=True."""

    def test_scenario_80_chars(self, memory_store, split_step):
        """80 символов: 3 раунда деления + 1 финальный, 8 сегментов по 10."""
        memory_store.create_record("e80", {"text": "A" * 80})

        report = RecursionDriver(split_step).run("e80")

        assert report.completed is True
        assert report.rounds == 4
        assert [r.done for r in report.results] == [False, False, False, True]

        props = memory_store.get_properties("e80")
        assert props["segments"] == ["A" * 10] * 8
        assert props["split_count"] == 3
        # Прямой вызов: глубина не отслеживается
        assert props["last_split_depth"] == 0

    def test_extra_terminal_invocation(self, memory_store, split_step, make_request):
        """Лишний вызов после done не меняет split_count."""
        memory_store.create_record("e80", {"text": "A" * 80})
        RecursionDriver(split_step).run("e80")
        writes = memory_store.write_count

        result = split_step(make_request(target_entity="e80", job_id="extra"))

        assert result.done is True
        assert memory_store.write_count == writes
        assert memory_store.get_properties("e80")["split_count"] == 3

    def test_scenario_small_text(self, memory_store, split_step):
        """'SMALL': один вызов, ничего не записано."""
        memory_store.create_record("small", {"text": "SMALL"})

        report = RecursionDriver(split_step).run("small")

        assert report.rounds == 1
        assert report.completed is True
        assert memory_store.get_properties("small") == {"text": "SMALL"}

    def test_scenario_320_chars(self, memory_store, split_step):
        """320 символов: 5 раундов деления + 1 финальный, 32 сегмента по 10."""
        memory_store.create_record("e320", {"text": "B" * 320})

        report = RecursionDriver(split_step).run("e320")

        assert report.rounds == 6
        props = memory_store.get_properties("e320")
        assert len(props["segments"]) == 32
        assert all(len(s) == 10 for s in props["segments"])
        assert props["split_count"] == 5

    def test_track_depth(self, memory_store, split_step):
        """С отслеживанием глубины last_split_depth - глубина последнего деления."""
        memory_store.create_record("e80", {"text": "A" * 80})

        RecursionDriver(split_step, track_depth=True).run("e80")

        props = memory_store.get_properties("e80")
        assert props["last_split_depth"] == 2
        assert props["split_count"] == 3

    def test_round_limit(self, memory_store, split_step):
        """Лимит раундов: completed=False, без исключения."""
        memory_store.create_record("e320", {"text": "B" * 320})

        report = RecursionDriver(split_step, max_rounds=2).run("e320")

        assert report.completed is False
        assert report.rounds == 2
        assert memory_store.get_properties("e320")["split_count"] == 2

    def test_invalid_max_rounds(self, split_step):
        with pytest.raises(ValueError):
            RecursionDriver(split_step, max_rounds=0)

    def test_step_errors_propagate(self, split_step):
        """Ошибка шага не глушится драйвером."""
        from recurse_splitter.errors import RecordFetchError

        with pytest.raises(RecordFetchError):
            RecursionDriver(split_step).run("missing")

    def test_same_target_every_round(self):
        """Драйвер каждый раз передаёт ту же цель и новый job_id."""
        seen = []

        def fake_step(request, job_log):
            seen.append((request.target_entity, request.job_id))
            return StepResult(entity_id=request.target_entity, done=len(seen) == 3)

        RecursionDriver(fake_step).run("t1", job_prefix="run")

        assert seen == [("t1", "run-0"), ("t1", "run-1"), ("t1", "run-2")]


class TestDriverCli:
    """Тесты entry point драйвера."""

    def test_main_completes(self):
        assert main(["--text", "C" * 40]) == 0

    def test_main_round_limit(self):
        assert main(["--text", "C" * 320, "--max-rounds", "2"]) == 1
