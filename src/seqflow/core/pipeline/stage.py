# src/seqflow/core/pipeline/stage.py
"""
Contrato canônico de Stage do SeqFlow.

Um Stage é uma unidade nomeada de trabalho extract → transform → load
dentro de uma run. O executor conhece apenas este protocolo; variações
de comportamento vivem em implementações concretas.

Princípios fundamentais:
    - Stages não conhecem o executor
    - Stages não controlam a ordem de execução
    - Comunicação entre Stages é mediada pelo PipelineContext
    - Conformidade é garantida por duck typing (@runtime_checkable)

Invariantes:
    - `name` é único dentro de uma run
    - Cada fase é chamada no máximo uma vez por execução
    - Stages leem o contexto; apenas o pool compartilhado pode ser escrito
      por um Stage durante o transform

Este módulo existe para garantir desacoplamento e testabilidade.
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import PipelineContext
from .types import Record, TransformResult


@runtime_checkable
class Stage(Protocol):
    """
    Contrato canônico de um Stage.

    Atributos obrigatórios:
        - name: identificador único do Stage na run

    Métodos:
        - should_execute(ctx): decide entre executar e pular
        - extract(ctx): obtém registros (rede e/ou stages anteriores)
        - transform(records, ctx): aplica regras e renderiza saídas
        - load(result, ctx): persiste e devolve o local de saída

    Limites explícitos:
        - Não define retry
        - Não decide políticas de fail-fast (responsabilidade do executor)
    """
    name: str

    def should_execute(self, ctx: PipelineContext) -> bool:
        ...

    def extract(self, ctx: PipelineContext) -> List[Record]:
        ...

    def transform(self, records: List[Record], ctx: PipelineContext) -> TransformResult:
        ...

    def load(self, result: TransformResult, ctx: PipelineContext) -> str:
        ...
