# src/seqflow/extract/paths.py
"""
Resolução de expressões de caminho sobre árvores JSON.

Gramática (informal):

    path    := segment ('.' segment)*
    segment := identifier index*
    index   := '[' (inteiro | '-' inteiro | '*') ']'

Semântica:
    - identifier exige que o nó corrente seja um mapeamento
    - índice não-negativo exige lista e posição existente
    - índice `-k` endereça o k-ésimo elemento a partir do fim (`-1` = último)
    - `*` sem sufixo devolve a lista inteira; com sufixo, resolve o sufixo
      em cada elemento e coleta apenas os sucessos, em ordem

Decisões arquiteturais:
    - "Não encontrado" é um valor (`MISSING`), nunca uma exceção
    - Caminhos malformados (vazio, `..`, `.` inicial/final, colchete
      inválido) também resolvem para `MISSING`; configurações externas
      não derrubam a execução por erro de sintaxe de caminho
    - `MISSING` é distinto de `None` (JSON null é um valor encontrado)

Este módulo existe para que field mappings possam alcançar valores
aninhados em respostas arbitrárias.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional, Tuple


class _Missing:
    """Sentinela de "não encontrado"."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()

_INDEX_RE = re.compile(r"^-?\d+$")

# ("key", nome) | ("index", int) | ("wild", None)
Token = Tuple[str, Any]


def parse_path(path: str) -> Optional[List[Token]]:
    """
    Converte uma expressão de caminho em tokens, numa única passada.

    Returns:
        Optional[List[Token]]: tokens, ou None se a expressão for malformada.
    """
    if not isinstance(path, str) or not path:
        return None

    tokens: List[Token] = []
    i = 0
    n = len(path)
    while i < n:
        j = i
        while j < n and path[j] not in ".[]":
            j += 1
        identifier = path[i:j]
        if not identifier:
            return None
        tokens.append(("key", identifier))
        i = j

        while i < n and path[i] == "[":
            close = path.find("]", i)
            if close == -1:
                return None
            inner = path[i + 1:close]
            if inner == "*":
                tokens.append(("wild", None))
            elif _INDEX_RE.match(inner):
                tokens.append(("index", int(inner)))
            else:
                return None
            i = close + 1

        if i < n:
            if path[i] != ".":
                return None
            i += 1
            if i == n:
                return None

    return tokens


def _walk(node: Any, tokens: List[Token], pos: int) -> Any:
    while pos < len(tokens):
        kind, arg = tokens[pos]

        if kind == "key":
            if not isinstance(node, dict) or arg not in node:
                return MISSING
            node = node[arg]

        elif kind == "index":
            if not isinstance(node, list):
                return MISSING
            idx = arg if arg >= 0 else len(node) + arg
            if idx < 0 or idx >= len(node):
                return MISSING
            node = node[idx]

        else:
            if not isinstance(node, list):
                return MISSING
            rest = pos + 1
            if rest == len(tokens):
                return node
            collected = []
            for element in node:
                value = _walk(element, tokens, rest)
                if value is not MISSING:
                    collected.append(value)
            return collected

        pos += 1

    return node


def resolve_path(value: Any, path: str) -> Any:
    """
    Resolve `path` contra `value`.

    Args:
        value: Árvore JSON (dict/list/escalares).
        path (str): Expressão de caminho.

    Returns:
        Any: O valor encontrado (listas/dicts devolvidos como estão)
        ou `MISSING`.
    """
    tokens = parse_path(path)
    if tokens is None:
        return MISSING
    return _walk(value, tokens, 0)


def is_simple_key(path: str) -> bool:
    """True quando o caminho é um único identificador de topo (sem `.` nem `[`)."""
    return bool(path) and not any(ch in path for ch in ".[]")
