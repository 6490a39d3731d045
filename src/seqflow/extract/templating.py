# src/seqflow/extract/templating.py
"""
Substituição de placeholders em headers, payloads e URLs.

Dois modos:

1. Header/payload (`{{key}}`):
    - procura `key` primeiro no pool compartilhado, depois no registro corrente
    - placeholder sem valor em nenhum escopo permanece intacto (sem erro)

2. URL/endpoint (`{key}` ou `{{key}}`):
    - usa APENAS os campos do registro corrente
    - qualquer `{...}` remanescente é erro (`UnresolvedPlaceholderError`),
      pois uma URL incompleta não pode ser chamada

Stringificação (ambos os modos):
    - str → texto literal
    - número → texto decimal
    - bool → "true" / "false"
    - None → "null"
    - list/dict → JSON compacto, sem aspas nas extremidades
"""

from __future__ import annotations

import json
import re
from typing import Any, List, Mapping, Optional

from seqflow.core.errors import unresolved_placeholder
from seqflow.core.exceptions import UnresolvedPlaceholderError

_DOUBLE_BRACE_RE = re.compile(r"\{\{([^{}]+)\}\}")
_ANY_BRACE_RE = re.compile(r"\{\{?([^{}]*)\}?\}")


def stringify_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if value is None:
        return "null"
    return json.dumps(value, ensure_ascii=False, separators=(",", ":")).strip('"')


def render_template(
    template: str,
    *,
    shared: Optional[Mapping[str, Any]] = None,
    record: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Substitui `{{key}}` usando o pool compartilhado e depois o registro.

    Args:
        template (str): Texto com placeholders.
        shared: Pool compartilhado (tem precedência).
        record: Registro corrente (campos de topo).

    Returns:
        str: Texto renderizado; placeholders sem valor são preservados.
    """
    shared = shared or {}
    record = record or {}

    def _replace(match: "re.Match[str]") -> str:
        key = match.group(1).strip()
        if key in shared:
            return stringify_value(shared[key])
        if key in record:
            return stringify_value(record[key])
        return match.group(0)

    return _DOUBLE_BRACE_RE.sub(_replace, template)


def render_headers(
    headers: Mapping[str, str],
    *,
    shared: Optional[Mapping[str, Any]] = None,
    record: Optional[Mapping[str, Any]] = None,
) -> dict:
    return {name: render_template(value, shared=shared, record=record) for name, value in headers.items()}


def render_payload(
    body: str,
    *,
    param_mapping: Optional[Mapping[str, str]] = None,
    use_record_fields: bool = False,
    shared: Optional[Mapping[str, Any]] = None,
    record: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Renderiza o corpo de uma requisição.

    Ordem:
        1. `param_mapping` (placeholder → campo do registro com outro nome)
        2. `use_record_fields`: cada campo de topo do registro substitui
           `{{campo}}` diretamente (antes do pool compartilhado)
        3. substituição genérica `{{key}}` (pool, depois registro)
    """
    rendered = body
    if record:
        for placeholder, field_name in (param_mapping or {}).items():
            if field_name in record:
                rendered = rendered.replace("{{" + placeholder + "}}", stringify_value(record[field_name]))

        if use_record_fields:
            for key, value in record.items():
                rendered = rendered.replace("{{" + key + "}}", stringify_value(value))

    return render_template(rendered, shared=shared, record=record)


def has_url_placeholder(template: str) -> bool:
    return "{" in template


def build_endpoint(template: str, record: Mapping[str, Any]) -> str:
    """
    Constrói uma URL a partir de um template e de UM registro upstream.

    Raises:
        UnresolvedPlaceholderError: se restar qualquer `{...}` após a substituição.
            A mensagem nomeia os placeholders e os campos disponíveis.
    """
    endpoint = template
    for key, value in record.items():
        text = stringify_value(value)
        endpoint = endpoint.replace("{{" + key + "}}", text)
        endpoint = endpoint.replace("{" + key + "}", text)

    if "{" in endpoint and "}" in endpoint:
        unresolved: List[str] = [name for name in _ANY_BRACE_RE.findall(endpoint)] or [endpoint]
        payload = unresolved_placeholder(
            endpoint=endpoint,
            unresolved=unresolved,
            available_fields=sorted(record.keys()),
        )
        raise UnresolvedPlaceholderError(
            message=payload.message,
            details=payload.details,
            hint=payload.hint,
        )

    return endpoint
