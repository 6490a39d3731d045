# src/seqflow/core/config/interpolation.py
"""
Interpolação de `${NOME}` na definição de sequência.

Duas passadas, em momentos distintos do carregamento:

1. `substitute_env_vars` atua sobre o TEXTO bruto do arquivo, antes do
   parse, usando variáveis de ambiente. Variáveis desconhecidas
   permanecem literais (`${NOME}`).
2. `substitute_variables` atua sobre a estrutura já interpretada,
   trocando `${NOME}` remanescentes pelos valores de
   `global.shared_variables`.

Placeholders `{{chave}}` (templates de runtime) nunca são tocados aqui.
"""

from __future__ import annotations

import os
import re
from typing import Any, Mapping, Optional

_VAR_RE = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str, environ: Optional[Mapping[str, str]] = None) -> str:
    env = os.environ if environ is None else environ

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if name in env:
            return env[name]
        return match.group(0)

    return _VAR_RE.sub(_replace, text)


def substitute_variables(value: Any, variables: Mapping[str, Any]) -> Any:
    """Aplica `${NOME}` → `variables[NOME]` recursivamente em todas as strings."""
    if not variables:
        return value

    if isinstance(value, str):
        return _VAR_RE.sub(
            lambda m: str(variables[m.group(1)]) if m.group(1) in variables else m.group(0),
            value,
        )
    if isinstance(value, dict):
        return {k: substitute_variables(v, variables) for k, v in value.items()}
    if isinstance(value, list):
        return [substitute_variables(v, variables) for v in value]
    return value
