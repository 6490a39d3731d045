# src/seqflow/core/pipeline/__init__.py
"""
# Pipeline Core — SeqFlow

Contratos canônicos e estruturas fundamentais de uma sequência.

## Componentes

- **types**: `StageStatus`, `StageResult`, `TransformResult`, `Record`
- **stage**: `Stage` (Protocol)
- **context**: `PipelineContext` (histórico, pool compartilhado, logs)
- **registry**: `StageRegistry` (unicidade de `name`)

## Limites Explícitos

- Não planeja nem executa a sequência
"""
