# src/seqflow/core/engine/engine.py
"""
Executor sequencial de Stages do SeqFlow.

O SequenceExecutor percorre os Stages na ordem recebida (já planejada
por `plan_execution`) e, para cada um:

    Pending → (should_execute?) → Skipped
    Pending → Extracting → Transforming → Loading → Completed
    qualquer fase → Failed  (aborta a run inteira)

Ajustes de rastreabilidade:
- Cada transição relevante gera um evento estruturado via `ctx.log`.
- Exceções são convertidas em FlowErrorPayload (serializável e acionável)
  e propagadas como StageExecutionError, sem stack trace cru para o operador.
- Resultados de Stages já concluídos NÃO são desfeitos após uma falha.

Limites explícitos:
- Não há paralelismo entre Stages.
- Não há retry (configuração de retry é apenas placeholder).
- `dependencies` não influenciam a ordem (ver planner).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

import time

from seqflow.core.errors import (
    ENGINE_EXECUTION_ERROR,
    FlowErrorPayload,
    stage_execution_failed,
)
from seqflow.core.exceptions import FlowException, StageExecutionError
from seqflow.core.pipeline.context import PipelineContext
from seqflow.core.pipeline.registry import StageRegistry
from seqflow.core.pipeline.stage import Stage
from seqflow.core.pipeline.types import StageResult, StageStatus


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma run completa da sequência."""

    execution_id: str
    results: List[StageResult] = field(default_factory=list)
    statuses: Dict[str, StageStatus] = field(default_factory=dict)

    @property
    def executed(self) -> List[str]:
        return [r.stage_name for r in self.results]

    @property
    def skipped(self) -> List[str]:
        return [n for n, s in self.statuses.items() if s == StageStatus.SKIPPED]


def execution_summary(results: Sequence[StageResult]) -> Dict[str, Any]:
    """
    Resume uma lista de StageResult para relatório externo.

    Returns:
        Dict[str, Any]: total_pipelines, total_records, total_duration_ms
        e executed_pipelines (nomes, em ordem de execução).
    """
    return {
        "total_pipelines": len(results),
        "total_records": sum(r.record_count for r in results),
        "total_duration_ms": sum(int(r.duration_ms) for r in results),
        "executed_pipelines": [r.stage_name for r in results],
    }


class SequenceExecutor:
    """Executor canônico do SeqFlow (sequencial, fail-fast)."""

    def __init__(
        self,
        *,
        stages: Sequence[Stage],
        ctx: PipelineContext,
        clock: Callable[[], float] = time.perf_counter,
    ):
        registry = StageRegistry()
        for stage in stages:
            registry.add(stage)
        self.stages: List[Stage] = registry.list()
        self.ctx: PipelineContext = ctx
        self._clock = clock

    # ------------------------------------------------------------------
    # Guardrails: exceção -> FlowErrorPayload
    # ------------------------------------------------------------------

    def _exception_to_error(self, exc: Exception) -> FlowErrorPayload:
        """Converte exceções em FlowErrorPayload.

        Regras:
        - FlowException: já vem com message/details/hint/decision_required.
        - Outras exceções: encapsular como ENGINE_EXECUTION_ERROR.
        """
        if isinstance(exc, FlowException):
            return FlowErrorPayload(
                type=exc.__class__.__name__,
                message=str(exc) or "Erro de execução",
                details=dict(exc.details or {}),
                hint=exc.hint,
                decision_required=bool(exc.decision_required),
            )

        return FlowErrorPayload(
            type=ENGINE_EXECUTION_ERROR,
            message=str(exc) or "Erro inesperado durante execução",
            details={
                "exception_class": exc.__class__.__name__,
            },
            hint="Verifique o log de eventos e a definição do stage",
        )

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int(round((self._clock() - started) * 1000)))

    def _skip(self, stage: Stage, statuses: Dict[str, StageStatus], reason: str) -> None:
        statuses[stage.name] = StageStatus.SKIPPED
        self.ctx.log(stage=stage.name, level="INFO", message=f"skipped: {reason}")

    def run(self) -> RunResult:
        """
        Executa todos os Stages em ordem, abortando na primeira falha.

        Returns:
            RunResult: resultados ordenados e status por Stage.

        Raises:
            StageExecutionError: na primeira falha de qualquer fase;
                `details["error"]` contém o payload da causa original.
        """
        results: List[StageResult] = []
        statuses: Dict[str, StageStatus] = {}

        self.ctx.log(
            stage="sequence",
            level="INFO",
            message="sequence started",
            stages=[s.name for s in self.stages],
        )

        for stage in self.stages:
            name = stage.name

            if not stage.should_execute(self.ctx):
                self._skip(stage, statuses, "execution conditions not met")
                continue

            started = self._clock()
            try:
                self.ctx.log(stage=name, level="INFO", message="extract started")
                records = stage.extract(self.ctx)

                if not records and getattr(stage, "skip_if_empty", False):
                    self._skip(stage, statuses, "no records extracted")
                    continue

                self.ctx.log(stage=name, level="INFO", message="transform started", records=len(records))
                transformed = stage.transform(records, self.ctx)

                self.ctx.log(stage=name, level="INFO", message="load started")
                output_path = stage.load(transformed, self.ctx)

            except Exception as e:
                statuses[name] = StageStatus.FAILED
                cause = self._exception_to_error(e)
                failure = stage_execution_failed(stage=name, cause=cause)
                self.ctx.log(stage=name, level="ERROR", message=failure.message, error=failure.to_dict())

                details = dict(failure.details)
                details["completed"] = [r.stage_name for r in results]
                raise StageExecutionError(
                    message=failure.message,
                    details=details,
                    hint=failure.hint,
                    decision_required=failure.decision_required,
                ) from e

            result = StageResult(
                stage_name=name,
                records=tuple(transformed.processed_records),
                output_path=output_path,
                duration_ms=self._elapsed_ms(started),
                metadata={
                    "record_count": len(transformed.processed_records),
                    "intermediate_count": len(transformed.intermediate_records),
                    "warnings": list(self.ctx.warnings.get(name, [])),
                },
            )
            self.ctx.add_result(result)
            results.append(result)
            statuses[name] = StageStatus.SUCCESS
            self.ctx.log(
                stage=name,
                level="INFO",
                message="stage completed",
                records=result.record_count,
                duration_ms=result.duration_ms,
                output_path=output_path,
            )

        self.ctx.log(stage="sequence", level="INFO", message="sequence completed", **execution_summary(results))
        return RunResult(execution_id=self.ctx.execution_id, results=results, statuses=statuses)
