# src/seqflow/extract/__init__.py
"""
Fase de extração do SeqFlow.

    - paths      → PathResolver (`resolve_path`, `MISSING`)
    - templating → substituição de placeholders em headers, payloads e URLs
    - http       → porta de transporte HTTP e adapter urllib
    - caller     → ParameterizedCaller (pull, direct call, fan-out, merge)
    - processing → deduplicação e ordenação pós-extração
"""
