# src/seqflow/transform/tabular.py
"""
Renderização tabular (CSV/TSV) dos registros processados.

Política (v1):
    - cabeçalho = nomes de campo do PRIMEIRO registro, em ordem alfabética
    - campos ausentes e JSON null renderizam vazio
    - listas/objetos renderizam como JSON compacto
    - CSV: aspas apenas quando o valor contém vírgula, aspas ou quebra de linha
    - TSV: tabs e quebras de linha viram espaço (sem aspas)
    - linhas separadas por "\n", sem quebra final
    - lista vazia (ou primeiro registro sem campos) → string vazia
"""

from __future__ import annotations

from typing import Any, List

import pandas as pd

from seqflow.core.pipeline.types import Record
from seqflow.extract.templating import stringify_value


def _cell(value: Any) -> str:
    if value is None:
        return ""
    return stringify_value(value)


def header_for(records: List[Record]) -> List[str]:
    if not records:
        return []
    return sorted(records[0].keys())


def _frame(records: List[Record]) -> pd.DataFrame:
    columns = header_for(records)
    rows = [[_cell(r[c]) if c in r else "" for c in columns] for r in records]
    return pd.DataFrame(rows, columns=columns, dtype="object")


def render_csv(records: List[Record]) -> str:
    if not header_for(records):
        return ""
    text = _frame(records).to_csv(index=False, lineterminator="\n")
    return text.rstrip("\n")


def render_tsv(records: List[Record]) -> str:
    if not header_for(records):
        return ""
    df = _frame(records)
    sanitized = df.apply(lambda col: col.map(lambda v: v.replace("\t", " ").replace("\r", " ").replace("\n", " ")))
    lines = ["\t".join(df.columns)]
    lines.extend("\t".join(row) for row in sanitized.itertuples(index=False, name=None))
    return "\n".join(lines)
