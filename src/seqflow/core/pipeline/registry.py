# src/seqflow/core/pipeline/registry.py
"""
Registro estrutural de Stages da sequência.

Este módulo define o `StageRegistry`, responsável por registrar Stages
e garantir a unicidade de nomes antes de qualquer execução.

Invariantes:
    - Cada `stage.name` aparece no máximo uma vez
    - A ordem de registro é preservada

Limites explícitos:
    - Não valida dependências (ver planner)
    - Não executa Stages

Este módulo existe para garantir integridade estrutural
na montagem da sequência.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .stage import Stage


class DuplicateStageNameError(ValueError):
    """
    Exceção levantada quando dois Stages compartilham o mesmo nome.

    Nomes de Stage identificam resultados no PipelineContext
    (`result_by_name`); duplicidade tornaria essa leitura ambígua.
    """


@dataclass
class StageRegistry:
    """Registro canônico de Stages, em ordem de inserção."""

    _stages: Dict[str, Stage] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, stage: Stage) -> None:
        name = getattr(stage, "name", None)
        if not isinstance(name, str) or not name.strip():
            raise ValueError("stage.name must be a non-empty string")
        if name in self._stages:
            raise DuplicateStageNameError(f"Duplicate stage name: {name}")
        self._stages[name] = stage
        self._order.append(name)

    def get(self, name: str) -> Stage:
        return self._stages[name]

    def __contains__(self, name: object) -> bool:
        return name in self._stages

    def __len__(self) -> int:
        return len(self._order)

    def list(self) -> List[Stage]:
        return [self._stages[n] for n in self._order]
