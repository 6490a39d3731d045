# src/seqflow/runner.py
"""
Montagem e execução de uma sequência a partir da definição tipada.

Fluxo:
    1. `config.validate()` (nomes, ciclos, URLs, paths)
    2. criação dos SequenceStage e planejamento (`plan_execution`)
    3. semeadura do pool compartilhado com `global.shared_variables`
    4. execução pelo SequenceExecutor (fail-fast)
    5. exportação opcional das métricas (`monitoring.export_metrics`),
       inclusive quando a run é abortada

Decisões arquiteturais:
    - O contexto pode ser fornecido pelo chamador para inspeção posterior
      (eventos, warnings, pool compartilhado)
    - `error_handling.on_pipeline_failure` não altera a execução: a run
      sempre aborta na primeira falha
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from seqflow.core.config.model import SequenceConfig
from seqflow.core.engine.engine import RunResult, SequenceExecutor
from seqflow.core.engine.planner import plan_execution
from seqflow.core.exceptions import StageExecutionError
from seqflow.core.pipeline.context import PipelineContext
from seqflow.core.traceability.metrics import build_run_metrics, default_metrics_path, save_metrics
from seqflow.extract.http import HttpTransport
from seqflow.stages.sequence_stage import SequenceStage
from seqflow.storage.base import Storage


def new_execution_id(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.strftime("seq_%Y%m%d_%H%M%S")


def build_stages(
    config: SequenceConfig,
    *,
    transport: Optional[HttpTransport] = None,
    storage: Optional[Storage] = None,
    fan_out_delay_ms: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> List[SequenceStage]:
    delay_ms = config.global_settings.fan_out_delay_ms if fan_out_delay_ms is None else fan_out_delay_ms
    return [
        SequenceStage(
            definition,
            storage=storage,
            transport=transport,
            fan_out_delay_s=delay_ms / 1000.0,
            sleep=sleep,
        )
        for definition in config.pipelines
    ]


def _export_metrics(
    config: SequenceConfig,
    ctx: PipelineContext,
    *,
    started_at: datetime,
    run: Optional[RunResult] = None,
    error: Optional[StageExecutionError] = None,
) -> Optional[Path]:
    monitoring = config.monitoring
    if not monitoring.export_metrics:
        return None

    metrics = build_run_metrics(
        ctx,
        sequence_name=config.sequence.name,
        config_hash=config.config_hash,
        started_at=started_at,
        finished_at=datetime.now(timezone.utc),
        run=run,
        error={"message": error.message, "details": dict(error.details), "hint": error.hint}
        if error is not None else None,
    )
    if monitoring.metrics_file:
        path = Path(monitoring.metrics_file)
    else:
        path = default_metrics_path(ctx.execution_id, config.global_settings.working_directory)
    save_metrics(metrics, path)
    ctx.meta["metrics_path"] = str(path)
    return path


def run_sequence(
    config: SequenceConfig,
    *,
    ctx: Optional[PipelineContext] = None,
    transport: Optional[HttpTransport] = None,
    storage: Optional[Storage] = None,
    only: Optional[Iterable[str]] = None,
    skip: Optional[Iterable[str]] = None,
    fan_out_delay_ms: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> RunResult:
    """
    Valida, planeja e executa a sequência.

    Args:
        config (SequenceConfig): Definição tipada.
        ctx (Optional[PipelineContext]): Contexto a utilizar; um novo é criado
            quando omitido.
        transport: Transporte HTTP (padrão: UrllibTransport).
        storage: Storage único para todos os stages (padrão: derivado de
            `load.output_path` de cada stage).
        only / skip: Filtros operacionais de stages.
        fan_out_delay_ms: Sobrescreve `global.fan_out_delay_ms`.

    Returns:
        RunResult: resultados e status por stage.

    Raises:
        ConfigError / UnknownStageError / CircularDependencyError: definição inválida.
        StageExecutionError: primeira falha de stage.
    """
    config.validate()

    stages = build_stages(
        config,
        transport=transport,
        storage=storage,
        fan_out_delay_ms=fan_out_delay_ms,
        sleep=sleep,
    )
    planned = plan_execution(stages, config.sequence.execution_order, only=only, skip=skip)

    ctx = ctx if ctx is not None else PipelineContext(execution_id=new_execution_id())
    ctx.meta.setdefault("sequence", config.sequence.name)
    ctx.meta.setdefault("config_hash", config.config_hash)
    for key, value in config.global_settings.shared_variables.items():
        ctx.set_shared(key, value)

    started_at = datetime.now(timezone.utc)
    try:
        run = SequenceExecutor(stages=planned, ctx=ctx).run()
    except StageExecutionError as exc:
        _export_metrics(config, ctx, started_at=started_at, error=exc)
        raise

    _export_metrics(config, ctx, started_at=started_at, run=run)
    return run
