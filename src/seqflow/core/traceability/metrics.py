# src/seqflow/core/traceability/metrics.py
"""
Métricas de execução: documento JSON de rastreabilidade de uma run.

O documento consolida, ao final da run (sucesso ou falha):
    - identidade da execução (execution_id, sequence, config_hash)
    - janela temporal (started_at, finished_at, duration_ms)
    - resumo agregado (`execution_summary`)
    - status e duração por stage
    - warnings por stage
    - erro canônico (quando a run foi abortada)
    - Event Log completo do PipelineContext

Decisões arquiteturais:
    - UTC é o timezone canônico para todos os timestamps
    - A persistência é opt-in (`monitoring.export_metrics`)
    - O formato é JSON indentado, com chaves ordenadas

Limites explícitos:
    - Não amostra recursos do sistema (CPU, memória)
    - Não executa stages
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from seqflow.core.engine.engine import RunResult, execution_summary
from seqflow.core.pipeline.context import PipelineContext


def _iso(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat()


def _ms_between(start: datetime, end: datetime) -> int:
    return max(0, int((end - start).total_seconds() * 1000))


def build_run_metrics(
    ctx: PipelineContext,
    *,
    sequence_name: str,
    config_hash: str,
    started_at: datetime,
    finished_at: datetime,
    run: Optional[RunResult] = None,
    error: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Monta o documento de métricas de uma run.

    Em runs abortadas, `run` é None: os stages concluídos são lidos do
    histórico do contexto e `error` carrega o payload canônico da falha.
    """
    results = list(run.results) if run is not None else list(ctx.results)
    stages: Dict[str, Dict[str, Any]] = {}
    for result in results:
        stages[result.stage_name] = {
            "status": "success",
            "records": result.record_count,
            "duration_ms": result.duration_ms,
            "output_path": result.output_path,
        }
    if run is not None:
        for name, status in run.statuses.items():
            stages.setdefault(name, {})["status"] = status.value
    if error is not None:
        failed = (error.get("details") or {}).get("stage")
        if failed:
            stages.setdefault(failed, {})["status"] = "failed"

    return {
        "execution_id": ctx.execution_id,
        "sequence": sequence_name,
        "config_hash": config_hash,
        "status": "failed" if error is not None else "success",
        "started_at": _iso(started_at),
        "finished_at": _iso(finished_at),
        "duration_ms": _ms_between(started_at, finished_at),
        "summary": execution_summary(results),
        "stages": stages,
        "warnings": {k: list(v) for k, v in ctx.warnings.items()},
        "error": error,
        "events": list(ctx.events),
    }


def default_metrics_path(execution_id: str, working_directory: Optional[str] = None) -> Path:
    return Path(working_directory or ".") / f"{execution_id}_metrics.json"


def save_metrics(metrics: Dict[str, Any], path: Path) -> None:
    """
    Persiste o documento de métricas em JSON.

    Raises:
        OSError: Em caso de falha ao criar diretórios ou escrever o arquivo.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(metrics, indent=2, ensure_ascii=False, sort_keys=True, default=str),
        encoding="utf-8",
    )
