# tests/core/engine/test_executor.py
"""
Testes do SequenceExecutor (sequencial, fail-fast).

Os testes asseguram que:
- stages executam na ordem recebida e alimentam o contexto
- stages com should_execute falso são SKIPPED e não abortam a run
- skip_if_empty pula o stage após a extração
- a primeira falha aborta a run com StageExecutionError
- resultados anteriores à falha permanecem no contexto
- `dependencies` não condicionam a execução
"""

import pytest

from seqflow.core.engine.engine import SequenceExecutor, execution_summary
from seqflow.core.exceptions import StageExecutionError
from seqflow.core.pipeline.types import StageResult, StageStatus
from tests.fixtures.stages.dummy_stages import DummyStage


def _fake_clock():
    ticks = iter(range(0, 1000))
    return lambda: float(next(ticks))


def test_happy_path_runs_in_order(ctx):
    a = DummyStage("a", [{"id": 1}])
    b = DummyStage("b", [{"id": 2}, {"id": 3}])

    run = SequenceExecutor(stages=[a, b], ctx=ctx).run()

    assert run.executed == ["a", "b"]
    assert run.statuses == {"a": StageStatus.SUCCESS, "b": StageStatus.SUCCESS}
    assert ctx.previous_result().stage_name == "b"
    assert ctx.records_of("a") == [{"id": 1}]
    assert a.calls == ["extract", "transform", "load"]
    assert run.results[1].output_path == "memory://b"
    assert run.results[1].metadata["record_count"] == 2


def test_skipped_stage_does_not_abort(ctx):
    a = DummyStage("a", [{"id": 1}], execute=False)
    b = DummyStage("b", [{"id": 2}])

    run = SequenceExecutor(stages=[a, b], ctx=ctx).run()

    assert run.statuses["a"] == StageStatus.SKIPPED
    assert run.skipped == ["a"]
    assert run.executed == ["b"]
    assert a.calls == []


def test_skip_if_empty_after_extract(ctx):
    empty = DummyStage("empty", [], skip_if_empty=True)
    after = DummyStage("after", [{"id": 1}])

    run = SequenceExecutor(stages=[empty, after], ctx=ctx).run()

    assert run.statuses["empty"] == StageStatus.SKIPPED
    assert empty.calls == ["extract"]
    assert ctx.result_by_name("empty") is None


def test_empty_extract_without_skip_still_completes(ctx):
    run = SequenceExecutor(stages=[DummyStage("empty", [])], ctx=ctx).run()
    assert run.statuses["empty"] == StageStatus.SUCCESS
    assert run.results[0].record_count == 0


def test_fail_fast_aborts_run(ctx):
    a = DummyStage("a", [{"id": 1}])
    b = DummyStage("b", [{"id": 2}], fail_in="transform")
    c = DummyStage("c", [{"id": 3}])

    with pytest.raises(StageExecutionError) as exc:
        SequenceExecutor(stages=[a, b, c], ctx=ctx).run()

    err = exc.value
    assert err.message == "Pipeline 'b' failed: boom"
    assert err.details["stage"] == "b"
    assert err.details["completed"] == ["a"]
    assert err.details["error"]["type"] == "ENGINE_EXECUTION_ERROR"
    assert isinstance(err.__cause__, RuntimeError)
    assert c.calls == []
    assert [r.stage_name for r in ctx.results] == ["a"]
    assert any(e["level"] == "ERROR" and e["stage"] == "b" for e in ctx.events)


def test_dependencies_do_not_gate_execution(ctx):
    # "b" depende de "a", mas "a" é pulado: "b" executa mesmo assim
    a = DummyStage("a", [{"id": 1}], execute=False)
    b = DummyStage("b", [{"id": 2}], dependencies=["a"])

    run = SequenceExecutor(stages=[a, b], ctx=ctx).run()

    assert run.executed == ["b"]


def test_shared_pool_written_in_transform_is_visible_downstream(ctx):
    a = DummyStage("a", [{"id": 1}], on_transform=lambda c: c.set_shared("token", "abc"))
    b = DummyStage("b", [{"id": 2}], execute=lambda c: c.shared("token") == "abc")

    run = SequenceExecutor(stages=[a, b], ctx=ctx).run()

    assert run.executed == ["a", "b"]


def test_duration_uses_injected_clock(ctx):
    run = SequenceExecutor(stages=[DummyStage("a", [{"id": 1}])], ctx=ctx, clock=_fake_clock()).run()
    assert run.results[0].duration_ms == 1000


def test_events_include_execution_id(ctx):
    SequenceExecutor(stages=[DummyStage("a", [{"id": 1}])], ctx=ctx).run()

    assert ctx.events[0]["message"] == "sequence started"
    assert ctx.events[-1]["message"] == "sequence completed"
    assert all(e["execution_id"] == "exec_test" for e in ctx.events)


def test_execution_summary():
    results = [
        StageResult(stage_name="a", records=({"id": 1},), duration_ms=5),
        StageResult(stage_name="b", records=({"id": 2}, {"id": 3}), duration_ms=7),
    ]

    assert execution_summary(results) == {
        "total_pipelines": 2,
        "total_records": 3,
        "total_duration_ms": 12,
        "executed_pipelines": ["a", "b"],
    }
