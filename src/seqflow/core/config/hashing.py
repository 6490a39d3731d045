# src/seqflow/core/config/hashing.py
"""
Hash canônico da definição de sequência.

O hash identifica a definição efetiva (após interpolação e merge) e é
anexado às métricas exportadas de cada run, permitindo associar uma
execução à definição exata que a produziu.

Política (v1):
    - JSON canônico: chaves ordenadas, separadores compactos, UTF-8
    - SHA-256, 64 caracteres hexadecimais
    - Valores não serializáveis em JSON puro (ex.: datetime de TOML)
      são convertidos via `str`
"""

import hashlib
import json
from typing import Any, Dict


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera o hash determinístico de uma definição de sequência.

    Raises:
        TypeError: Se `config` não for um dicionário.
    """
    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    canonical_json = json.dumps(
        config,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()
