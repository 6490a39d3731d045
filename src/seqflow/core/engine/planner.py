# src/seqflow/core/engine/planner.py
"""
Validação estrutural e planejamento da sequência.

Este módulo valida a estrutura declarada de uma sequência antes da
execução e produz a lista linear de Stages a executar.

O planner opera exclusivamente em nível estrutural, analisando:
    - unicidade de nomes de Stage
    - nomes referenciados por `execution_order`
    - nomes referenciados por `dependencies`
    - formação de ciclos no grafo de dependências

Decisões arquiteturais:
    - A ordem de execução é a de `execution_order`, e nada mais
    - `dependencies` são validadas (existência e aciclicidade), mas
      NÃO reordenam nem condicionam a execução; quem condiciona é
      `conditions`. Este comportamento é intencional e coberto por testes.
    - Ciclos são detectados por DFS com os conjuntos "visited" e "in_path"

Invariantes:
    - Uma sequência válida não possui nomes desconhecidos nem ciclos
    - A mesma definição sempre produz o mesmo plano

Limites explícitos:
    - Não executa Stages
    - Não interage com PipelineContext
    - Não tenta resolver ou quebrar ciclos

Este módulo existe para garantir correção estrutural
antes de qualquer chamada de rede.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from seqflow.core.pipeline.registry import DuplicateStageNameError


class UnknownStageError(ValueError):
    """
    Exceção levantada quando `execution_order` ou `dependencies`
    referenciam um Stage não declarado.

    Decisões arquiteturais:
        - Toda referência por nome deve ser resolvível
        - A validação ocorre antes de qualquer execução
    """


class CircularDependencyError(ValueError):
    """
    Exceção levantada quando o grafo de `dependencies` contém um ciclo.

    A mensagem informa apenas que um ciclo existe e o Stage em que foi
    detectado; não enumera todos os membros do ciclo.
    """


def _stage_name(stage: Any) -> str:
    name = getattr(stage, "name", None)
    if not isinstance(name, str) or not name.strip():
        raise ValueError("stage.name must be a non-empty string")
    return name


def validate_dependencies(stages: Iterable[Any], execution_order: Sequence[str]) -> None:
    """
    Valida nomes referenciados e aciclicidade do grafo de dependências.

    Cada item de `stages` deve expor `name` e, opcionalmente,
    `dependencies` (lista de nomes).

    Args:
        stages (Iterable[Any]): Definições de Stage declaradas.
        execution_order (Sequence[str]): Ordem de execução declarada.

    Raises:
        DuplicateStageNameError: Se dois Stages possuem o mesmo nome.
        UnknownStageError: Se um nome referenciado não foi declarado.
        CircularDependencyError: Se o grafo de dependências contém ciclo.
    """
    edges: Dict[str, List[str]] = {}
    for stage in stages:
        name = _stage_name(stage)
        if name in edges:
            raise DuplicateStageNameError(f"Duplicate stage name: {name}")
        edges[name] = list(getattr(stage, "dependencies", None) or [])

    for name in execution_order:
        if name not in edges:
            raise UnknownStageError(
                f"Pipeline '{name}' in execution order not found in pipelines definition"
            )

    for name, deps in edges.items():
        for dep in deps:
            if dep not in edges:
                raise UnknownStageError(
                    f"Pipeline '{name}' depends on unknown pipeline '{dep}'"
                )

    visited: Set[str] = set()
    in_path: Set[str] = set()

    def visit(node: str) -> None:
        visited.add(node)
        in_path.add(node)
        for dep in edges[node]:
            if dep in in_path:
                raise CircularDependencyError(
                    f"Circular dependency detected involving pipeline '{dep}'"
                )
            if dep not in visited:
                visit(dep)
        in_path.discard(node)

    for name in edges:
        if name not in visited:
            visit(name)


def plan_execution(
    stages: Iterable[Any],
    execution_order: Sequence[str],
    *,
    only: Optional[Iterable[str]] = None,
    skip: Optional[Iterable[str]] = None,
) -> List[Any]:
    """
    Valida a sequência e devolve os Stages na ordem de `execution_order`.

    Filtros opcionais (uso operacional, ex.: CLI):
        - only: mantém apenas os nomes listados
        - skip: remove os nomes listados

    Stages desabilitados NÃO são removidos aqui; o executor os registra
    como SKIPPED ao avaliar `should_execute`.

    Raises:
        DuplicateStageNameError, UnknownStageError, CircularDependencyError
    """
    stage_list = list(stages)
    validate_dependencies(stage_list, execution_order)

    by_name = {_stage_name(s): s for s in stage_list}
    only_set = {n.strip() for n in only} if only is not None else None
    skip_set = {n.strip() for n in skip} if skip is not None else set()

    planned: List[Any] = []
    for name in execution_order:
        if only_set is not None and name not in only_set:
            continue
        if name in skip_set:
            continue
        planned.append(by_name[name])
    return planned
