# src/seqflow/core/config/merge.py
"""
Deep-merge da definição de sequência com overrides locais.

Política de merge (v1):
    - dict + dict → merge recursivo por chave
    - lista de tabelas nomeadas (todas dict com "name") + idem →
      merge por nome: entradas do override são mescladas na entrada
      homônima da base; nomes novos são anexados ao final
    - demais listas (lista + lista) → sobrescrita total
    - escalar → sobrescrita direta
    - conflito de tipos → ConfigTypeConflictError

O merge por nome existe porque `pipelines` é um array de tabelas:
um override local precisa ajustar um único stage (ex.: `enabled`,
`load.output_path`) sem redeclarar a sequência inteira.

Invariantes:
    - Nenhum input é mutado
    - A mesma entrada sempre produz a mesma saída
    - A ordem dos stages da base é preservada
"""

from copy import deepcopy
from typing import Any, Dict, List

from .errors import ConfigTypeConflictError


def _is_named_table_list(value: Any) -> bool:
    return (
        isinstance(value, list)
        and bool(value)
        and all(isinstance(item, dict) and isinstance(item.get("name"), str) for item in value)
    )


def _merge_named_tables(base: List[Dict[str, Any]], override: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    merged: List[Dict[str, Any]] = [deepcopy(item) for item in base]
    index = {item["name"]: pos for pos, item in enumerate(merged)}
    for item in override:
        pos = index.get(item["name"])
        if pos is None:
            index[item["name"]] = len(merged)
            merged.append(deepcopy(item))
        else:
            merged[pos] = deep_merge(merged[pos], item)
    return merged


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Mescla `override` sobre `base`, devolvendo um novo dicionário.

    Raises:
        ConfigTypeConflictError: Se uma chave possuir tipos incompatíveis.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )

    result: Dict[str, Any] = deepcopy(base)

    for key, override_value in override.items():
        if key not in result:
            result[key] = deepcopy(override_value)
            continue

        base_value = result[key]

        if isinstance(base_value, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(base_value, override_value)
            continue

        if _is_named_table_list(base_value) and _is_named_table_list(override_value):
            result[key] = _merge_named_tables(base_value, override_value)
            continue

        if isinstance(base_value, list) and isinstance(override_value, list):
            result[key] = deepcopy(override_value)
            continue

        # int/float são intercambiáveis em TOML/YAML; bool não
        numeric = (int, float)
        if (
            isinstance(base_value, numeric) and isinstance(override_value, numeric)
            and not isinstance(base_value, bool) and not isinstance(override_value, bool)
        ):
            result[key] = override_value
            continue

        if type(base_value) is not type(override_value):
            raise ConfigTypeConflictError(
                f"Conflito de tipo na chave '{key}': "
                f"{type(base_value).__name__} vs {type(override_value).__name__}"
            )

        result[key] = deepcopy(override_value)

    return result
