# src/seqflow/core/engine/__init__.py
"""
Engine do SeqFlow.

Componentes principais:
    - planner → validação de nomes/ciclos e plano linear de execução
    - engine  → SequenceExecutor (sequencial, fail-fast) e resumo da run

Invariantes:
    - A ordem de execução é exatamente `execution_order`
    - Cada Stage é executado no máximo uma vez por run
    - A primeira falha aborta a run; resultados anteriores permanecem
"""
