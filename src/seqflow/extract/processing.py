# src/seqflow/extract/processing.py
"""
Processamento pós-extração: deduplicação e ordenação.

Ordem fixa:
    1. deduplicação (se `deduplicate`)
    2. ordenação (se `sort_by`)

Política de deduplicação (v1):
    - chave = valores dos `deduplicate_fields` (JSON compacto; campo
      ausente conta como string vazia) ou o registro inteiro
    - mantém a primeira ocorrência (keep="first") e preserva a ordem

Política de ordenação (v1):
    - compara o texto JSON do valor (strings comparam com aspas)
    - registros sem o campo vão para o final, em ambas as direções
    - ordenação estável
"""

from __future__ import annotations

import json
from typing import Any, List, Optional, Sequence, Tuple

import pandas as pd

from seqflow.core.config.model import DataProcessingSpec
from seqflow.core.pipeline.types import Record


def _json_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, sort_keys=True, separators=(",", ":"))


def _dedup_key(record: Record, fields: Optional[Sequence[str]]) -> Tuple[str, ...]:
    if not fields:
        return (_json_text(record),)
    return tuple(_json_text(record[f]) if f in record else "" for f in fields)


def deduplicate_records(records: List[Record], fields: Optional[Sequence[str]] = None) -> List[Record]:
    if not records:
        return []
    keys = pd.Series([_dedup_key(r, fields) for r in records], dtype="object")
    duplicated = keys.duplicated(keep="first")
    return [r for r, dup in zip(records, duplicated.tolist()) if not dup]


def sort_records(records: List[Record], sort_by: str, order: str = "asc") -> List[Record]:
    present = [r for r in records if sort_by in r]
    missing = [r for r in records if sort_by not in r]
    present.sort(key=lambda r: _json_text(r[sort_by]), reverse=(order == "desc"))
    return present + missing


def apply_data_processing(records: List[Record], spec: DataProcessingSpec) -> List[Record]:
    """
    Aplica deduplicação e ordenação conforme `extract.data_processing`.

    Returns:
        List[Record]: nova lista; os dicionários não são copiados.
    """
    out = list(records)
    if spec.deduplicate:
        out = deduplicate_records(out, spec.deduplicate_fields)
    if spec.sort_by:
        out = sort_records(out, spec.sort_by, spec.sort_order)
    return out
