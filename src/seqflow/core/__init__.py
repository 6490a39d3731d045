# src/seqflow/core/__init__.py
"""
Core do SeqFlow.

Reúne as responsabilidades independentes de adapters (HTTP, storage, CLI):
    - config       → definição de sequência (loader, merge, modelo, validação)
    - pipeline     → contrato de Stage, PipelineContext e tipos canônicos
    - engine       → validação estrutural e execução sequencial fail-fast
    - traceability → documento de métricas da run

Princípios fundamentais:
    - Nenhuma decisão silenciosa: todo comportamento é explícito e testado
    - Estado de execução vive apenas no PipelineContext
"""
