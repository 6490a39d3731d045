# src/seqflow/core/pipeline/context.py
"""
Contexto de execução compartilhado da sequência.

Este módulo define o `PipelineContext`, a estrutura canônica utilizada para
compartilhar estado explícito entre Stages durante uma run do SeqFlow.

O PipelineContext atua como o único meio permitido de:
    - leitura dos resultados de Stages anteriores (histórico ordenado)
    - acesso por nome aos registros de um Stage já concluído
    - troca de valores via pool compartilhado (shared pool)
    - registro de logs estruturados de execução
    - coleta de warnings não fatais associados a Stages

Princípios fundamentais:
    - Isolamento por execução (cada run possui seu próprio contexto)
    - Ausência de estado global compartilhado
    - Histórico append-only

Invariantes:
    - `add_result` nunca remove nem reordena entradas anteriores
    - O índice por nome é atualizado junto com cada append
    - "Resultado anterior" é sempre a última entrada anexada,
      independentemente de `dependencies` declaradas
    - `set_shared` sobrescreve incondicionalmente (last-writer-wins)
    - Logs sempre incluem `execution_id` e `stage`

Limites explícitos:
    - Não executa Stages
    - Não persiste dados
    - Não é thread-safe (propriedade exclusiva do executor)

Este módulo existe para garantir isolamento,
clareza e rastreabilidade na execução de sequências.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .types import JsonValue, Record, StageResult, json_equal


@dataclass
class PipelineContext:
    """
    Contexto de execução de uma run da sequência.

    O PipelineContext consolida:
        - identidade da execução (execution_id, created_at)
        - histórico ordenado de StageResult
        - índice nome → registros
        - pool compartilhado chave → valor
        - logs estruturados e warnings por Stage

    Decisões arquiteturais:
        - O executor é o único dono e mutador do contexto
        - Stages recebem o contexto explicitamente
        - O pool compartilhado nunca é promovido a estado de processo

    Este contexto existe para que o Stage N enxergue exatamente
    a saída concluída dos Stages 1..N-1.
    """
    execution_id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    meta: Dict[str, Any] = field(default_factory=dict)

    results: List[StageResult] = field(default_factory=list, init=False)
    stage_data: Dict[str, List[Record]] = field(default_factory=dict, init=False, repr=False)
    _shared: Dict[str, JsonValue] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Histórico de resultados
    # -----------------------------
    def add_result(self, result: StageResult) -> None:
        if result.stage_name not in self.stage_data:
            self.stage_data[result.stage_name] = list(result.records)
        self.results.append(result)

    def previous_result(self) -> Optional[StageResult]:
        if not self.results:
            return None
        return self.results[-1]

    def result_by_name(self, name: str) -> Optional[StageResult]:
        for result in self.results:
            if result.stage_name == name:
                return result
        return None

    def records_of(self, name: str) -> List[Record]:
        return list(self.stage_data.get(name, []))

    def all_previous_records(self) -> List[Record]:
        records: List[Record] = []
        for result in self.results:
            records.extend(result.records)
        return records

    def merge_with_previous(self, name: str, incoming: Sequence[Record]) -> List[Record]:
        """
        Completa registros recebidos com campos do Stage `name`, casando por `id`.

        Para cada registro recebido com campo `id`, procura o primeiro registro
        do Stage `name` com o mesmo `id` e copia apenas os campos ausentes
        no registro recebido. Campos do registro recebido sempre prevalecem.

        Registros sem `id` ou sem correspondência passam inalterados.
        Se `name` não possui registros, `incoming` é devolvido como está.

        Args:
            name (str): Nome do Stage cujos registros servem de base.
            incoming (Sequence[Record]): Registros a completar.

        Returns:
            List[Record]: Novos dicionários, na mesma ordem de `incoming`.
        """
        previous = self.stage_data.get(name)
        if not previous:
            return list(incoming)

        merged: List[Record] = []
        for record in incoming:
            out = dict(record)
            if "id" in record:
                for candidate in previous:
                    if "id" in candidate and json_equal(candidate["id"], record["id"]):
                        for key, value in candidate.items():
                            if key not in out:
                                out[key] = value
                        break
            merged.append(out)
        return merged

    # -----------------------------
    # Shared pool
    # -----------------------------
    def shared(self, key: str, default: Any = None) -> Any:
        return self._shared.get(key, default)

    def has_shared(self, key: str) -> bool:
        return key in self._shared

    def set_shared(self, key: str, value: JsonValue) -> None:
        self._shared[key] = value

    @property
    def shared_pool(self) -> Dict[str, JsonValue]:
        """Visão somente-leitura (cópia rasa) do pool compartilhado."""
        return dict(self._shared)

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, stage: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "execution_id": self.execution_id,
            "stage": stage,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, stage: str, message: str) -> None:
        if stage not in self.warnings:
            self.warnings[stage] = []
        self.warnings[stage].append(message)
