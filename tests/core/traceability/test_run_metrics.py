# tests/core/traceability/test_run_metrics.py
"""
Testes do documento de métricas de execução.

Os testes asseguram que:
- janelas temporais são ISO-8601 em UTC e a duração é em ms
- stages concluídos, pulados e com falha recebem status
- warnings e eventos do contexto são incluídos
- o arquivo é JSON válido no caminho pedido
"""

import json
from datetime import datetime, timedelta, timezone

from seqflow.core.engine.engine import RunResult
from seqflow.core.pipeline.types import StageResult, StageStatus
from seqflow.core.traceability import build_run_metrics, default_metrics_path, save_metrics

START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
END = START + timedelta(seconds=2, milliseconds=500)


def test_successful_run_metrics(ctx):
    users = StageResult(stage_name="users", records=({"id": 1}, {"id": 2}), output_path="out/u.zip", duration_ms=40)
    ctx.add_result(users)
    ctx.add_warning(stage="users", message="Unsupported output format: xml")
    run = RunResult(
        execution_id=ctx.execution_id,
        results=[users],
        statuses={"users": StageStatus.SUCCESS, "posts": StageStatus.SKIPPED},
    )

    metrics = build_run_metrics(ctx, sequence_name="seq", config_hash="h", started_at=START,
                                finished_at=END, run=run)

    assert metrics["status"] == "success"
    assert metrics["started_at"] == "2024-01-01T12:00:00+00:00"
    assert metrics["duration_ms"] == 2500
    assert metrics["summary"]["total_records"] == 2
    assert metrics["stages"]["users"] == {
        "status": "success", "records": 2, "duration_ms": 40, "output_path": "out/u.zip",
    }
    assert metrics["stages"]["posts"] == {"status": "skipped"}
    assert metrics["warnings"] == {"users": ["Unsupported output format: xml"]}
    assert metrics["error"] is None


def test_failed_run_metrics(ctx):
    ctx.add_result(StageResult(stage_name="users", records=({"id": 1},)))
    error = {"message": "Pipeline 'posts' failed: boom", "details": {"stage": "posts"}, "hint": None}

    metrics = build_run_metrics(ctx, sequence_name="seq", config_hash="h", started_at=START,
                                finished_at=END, error=error)

    assert metrics["status"] == "failed"
    assert metrics["stages"]["users"]["status"] == "success"
    assert metrics["stages"]["posts"] == {"status": "failed"}
    assert metrics["error"] == error


def test_naive_datetimes_are_treated_as_utc(ctx):
    metrics = build_run_metrics(ctx, sequence_name="seq", config_hash="h",
                                started_at=datetime(2024, 1, 1), finished_at=datetime(2024, 1, 1, 0, 0, 1))
    assert metrics["started_at"].endswith("+00:00")
    assert metrics["duration_ms"] == 1000


def test_save_and_default_path(ctx, tmp_path):
    path = default_metrics_path("exec_1", str(tmp_path / "work"))
    assert path == tmp_path / "work" / "exec_1_metrics.json"

    ctx.log(stage="sequence", level="INFO", message="hello")
    save_metrics(build_run_metrics(ctx, sequence_name="seq", config_hash="h", started_at=START,
                                   finished_at=END), path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["execution_id"] == "exec_test"
    assert data["events"][0]["message"] == "hello"
