# src/seqflow/core/pipeline/types.py
"""
Tipos canônicos do pipeline do SeqFlow.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Stages, Executor e camadas de rastreabilidade.

Componentes principais:
    - JsonValue       → alias para valores JSON arbitrários
    - Record          → mapeamento campo → JsonValue
    - StageStatus     → enum de estados finais (SUCCESS, SKIPPED, FAILED)
    - StageResult     → resultado imutável de um stage concluído
    - TransformResult → saída do transform consumida pelo load
    - json_equal      → igualdade entre valores JSON (bool nunca iguala número)

Princípios fundamentais:
    - Tipos são estáveis e serializáveis
    - Nenhuma lógica de execução vive neste módulo

Invariantes:
    - StageResult é criado uma única vez por stage concluído
    - StageResult nunca é mutado após criado
    - Registros de um StageResult são armazenados como tupla

Limites explícitos:
    - Não executa stages
    - Não decide políticas de execução

Este módulo existe para garantir consistência e clareza semântica
na troca de dados entre stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple, Union


JsonValue = Union[str, int, float, bool, None, List[Any], Dict[str, Any]]
Record = Dict[str, JsonValue]


def json_equal(left: Any, right: Any) -> bool:
    """
    Compara dois valores JSON respeitando o tipo.

    `True`, `1` e `1.0` são iguais em Python, mas não em JSON: booleanos
    só igualam booleanos. Listas e objetos são comparados recursivamente.
    """
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        return left.keys() == right.keys() and all(json_equal(left[k], right[k]) for k in left)
    if isinstance(left, list) and isinstance(right, list):
        return len(left) == len(right) and all(json_equal(a, b) for a, b in zip(left, right))
    return left == right


class StageStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Stage.

    Estados definidos:
        - SUCCESS: extract → transform → load concluídos
        - SKIPPED: pulado por `enabled`, condições ou `skip_if_empty`
        - FAILED: interrompido por erro (aborta a run)

    Os valores são strings para facilitar serialização em JSON
    e exportação de métricas.
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StageResult:
    """
    Resultado imutável de um Stage concluído com sucesso.

    Campos:
        - stage_name: nome único do stage na run
        - records: registros produzidos (ordem preservada)
        - output_path: local do artefato persistido pelo load
        - duration_ms: duração total extract → load
        - metadata: dados livres (ex.: contagens, formatos)

    Invariantes:
        - Uma instância nunca é alterada após criada
        - `records` é uma tupla (append-only no contexto, nunca reescrito)

    Este objeto existe para servir como insumo confiável para os
    stages seguintes e para o resumo da execução.
    """
    stage_name: str
    records: Tuple[Record, ...] = ()
    output_path: str = ""
    duration_ms: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def record_count(self) -> int:
        return len(self.records)


@dataclass(frozen=True)
class TransformResult:
    """Saída do transform: registros processados, CSV/TSV renderizados e intermediários."""
    processed_records: List[Record] = field(default_factory=list)
    csv_output: str = ""
    tsv_output: str = ""
    intermediate_records: List[Record] = field(default_factory=list)
