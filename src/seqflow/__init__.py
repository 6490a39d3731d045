# src/seqflow/__init__.py
"""
SeqFlow — motor de sequências ETL dirigido por configuração.

Uma sequência é uma lista ordenada de stages nomeados. Cada stage obtém
registros (de uma API HTTP, de um stage anterior ou de ambos), aplica
regras de transformação, empacota a saída e entrega seus registros ao
próximo stage através de um contexto de execução.

Arquitetura em alto nível:
    - core.config       → carregamento, interpolação, merge, modelo tipado
    - core.pipeline     → contrato de Stage, contexto, tipos, registry
    - core.engine       → validação de dependências e executor sequencial
    - core.traceability → métricas exportadas da run
    - extract           → paths, templates, transporte HTTP, caller
    - transform / load  → regras por registro, CSV/TSV, ZIP
    - storage           → backends local, memória e S3
    - stages            → SequenceStage (implementação concreta)

Limites explícitos:
    - Sem retry e sem refresh de autenticação
    - Sem persistência entre runs
"""

__version__ = "0.1.0"
