# src/seqflow/stages/sequence_stage.py
"""
Stage concreto do SeqFlow, dirigido pela definição declarada.

O SequenceStage compõe as peças de cada fase:

    should_execute → ExecutionConditions
    extract        → ParameterizedCaller + processamento pós-extração
    transform      → regras por registro + renderização CSV/TSV
    load           → ZIP gravado via Storage

Decisões arquiteturais:
    - O Stage não conhece o executor nem os demais Stages
    - Dependências externas (transporte HTTP, storage, sleep, relógio)
      são injetadas no construtor
    - `skip_if_empty` é exposto como atributo para o executor decidir
      o SKIPPED após a extração

Limites explícitos:
    - Sem retry
    - Sem execução concorrente de chamadas
"""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable, List, Optional

from seqflow.core.config.model import StageDefinition
from seqflow.core.pipeline.context import PipelineContext
from seqflow.core.pipeline.types import Record, TransformResult, json_equal
from seqflow.extract.caller import ParameterizedCaller
from seqflow.extract.http import HttpTransport, UrllibTransport
from seqflow.extract.processing import apply_data_processing
from seqflow.load.packaging import package_output
from seqflow.storage import Storage, storage_for_output_path
from seqflow.transform.records import transform_records
from seqflow.transform.tabular import render_csv, render_tsv


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SequenceStage:
    """Implementação canônica do protocolo `Stage` a partir de um StageDefinition."""

    def __init__(
        self,
        definition: StageDefinition,
        *,
        storage: Optional[Storage] = None,
        transport: Optional[HttpTransport] = None,
        fan_out_delay_s: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = _utc_now,
    ):
        self.definition = definition
        self.name = definition.name
        self.dependencies = list(definition.dependencies)
        self.skip_if_empty = definition.conditions.skip_if_empty
        self._storage = storage
        self._now = now
        self.caller = ParameterizedCaller(
            definition,
            transport=transport or UrllibTransport(),
            delay_s=fan_out_delay_s,
            sleep=sleep,
        )

    @property
    def storage(self) -> Storage:
        if self._storage is None:
            self._storage = storage_for_output_path(self.definition.load.output_path)
        return self._storage

    # ------------------------------------------------------------------
    # Condições
    # ------------------------------------------------------------------

    def should_execute(self, ctx: PipelineContext) -> bool:
        """
        Avalia `enabled` e `conditions`, nesta ordem, com curto-circuito.

        - when_previous_succeeded: exige um resultado anterior no contexto
        - when_records_count: contagem do stage nomeado (ou do anterior);
          stage ausente conta como 0
        - when_shared_data: cada chave deve existir no pool com o valor esperado
        """
        if not self.definition.enabled:
            ctx.log(stage=self.name, level="INFO", message="stage disabled")
            return False

        conditions = self.definition.conditions

        if conditions.when_previous_succeeded and ctx.previous_result() is None:
            ctx.log(stage=self.name, level="INFO", message="condition not met: when_previous_succeeded")
            return False

        count_cond = conditions.when_records_count
        if count_cond is not None:
            if count_cond.from_pipeline:
                source = ctx.result_by_name(count_cond.from_pipeline)
            else:
                source = ctx.previous_result()
            count = source.record_count if source is not None else 0
            if count_cond.min is not None and count < count_cond.min:
                ctx.log(stage=self.name, level="INFO", message="condition not met: when_records_count",
                        count=count, min=count_cond.min)
                return False
            if count_cond.max is not None and count > count_cond.max:
                ctx.log(stage=self.name, level="INFO", message="condition not met: when_records_count",
                        count=count, max=count_cond.max)
                return False

        for key, expected in conditions.when_shared_data.items():
            if not ctx.has_shared(key) or not json_equal(ctx.shared(key), expected):
                ctx.log(stage=self.name, level="INFO", message="condition not met: when_shared_data", key=key)
                return False

        return True

    # ------------------------------------------------------------------
    # Fases
    # ------------------------------------------------------------------

    def extract(self, ctx: PipelineContext) -> List[Record]:
        records = self.caller.fetch(ctx)
        processed = apply_data_processing(records, self.definition.extract.data_processing)
        ctx.log(stage=self.name, level="INFO", message="extract completed",
                fetched=len(records), records=len(processed))
        return processed

    def transform(self, records: List[Record], ctx: PipelineContext) -> TransformResult:
        processed, intermediate = transform_records(
            records, self.definition.transform, ctx, stage_name=self.name
        )
        return TransformResult(
            processed_records=processed,
            csv_output=render_csv(processed),
            tsv_output=render_tsv(processed),
            intermediate_records=intermediate,
        )

    def load(self, result: TransformResult, ctx: PipelineContext) -> str:
        load = self.definition.load
        return package_output(
            result,
            load.output_formats,
            stage_name=self.name,
            ctx=ctx,
            storage=self.storage,
            output_path=load.output_path,
            filename_pattern=load.filename_pattern,
            include_metadata=load.compression.include_metadata,
            now=self._now(),
        )
