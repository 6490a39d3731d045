# src/seqflow/transform/records.py
"""
Regras de transformação por registro.

Ordem fixa, aplicada a cada registro:
    1. limpeza de texto (clean_text / trim_whitespace / remove_html_tags)
    2. normalize_fields (lowercase)
    3. keep_only_fields OU exclude_fields (allow-list prevalece)
    4. enriquecimento (lookup_data, computed_fields)
    5. marcação `processed` / `processed_by`

Após o laço:
    - validação declarada (`transform.validation`)
    - seleção de intermediários e exportação para o pool compartilhado

Decisões arquiteturais:
    - Registros de entrada nunca são mutados; cada etapa trabalha sobre cópia
    - Apenas valores string de topo são afetados pelas operações de texto
    - Falhas de validação levantam DataValidationError (abortam a run)
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from seqflow.core.config.model import (
    EnrichmentSpec,
    IntermediateSpec,
    OperationsSpec,
    TransformSpec,
    ValidationSpec,
)
from seqflow.core.errors import DATA_VALIDATION_FAILED
from seqflow.core.exceptions import DataValidationError
from seqflow.core.pipeline.context import PipelineContext
from seqflow.core.pipeline.types import Record, json_equal
from seqflow.extract.templating import stringify_value

_HTML_TAG_RE = re.compile(r"<[^>]*>")

TOKEN_FIELD = "token"


# ---------------------------------------------------------------------------
# Operações de texto e projeção
# ---------------------------------------------------------------------------

def _clean_strings(record: Record, ops: OperationsSpec) -> Record:
    out: Record = {}
    for key, value in record.items():
        if isinstance(value, str):
            if ops.remove_html_tags:
                value = _HTML_TAG_RE.sub("", value)
            if ops.clean_text:
                value = value.strip().replace("\n", " ")
            elif ops.trim_whitespace:
                value = value.strip()
        out[key] = value
    return out


def apply_operations(record: Record, ops: OperationsSpec) -> Record:
    out = _clean_strings(record, ops)

    for name in ops.normalize_fields:
        value = out.get(name)
        if isinstance(value, str):
            out[name] = value.lower()

    if ops.keep_only_fields is not None:
        allowed = set(ops.keep_only_fields)
        out = {k: v for k, v in out.items() if k in allowed}
    elif ops.exclude_fields:
        excluded = set(ops.exclude_fields)
        out = {k: v for k, v in out.items() if k not in excluded}

    return out


# ---------------------------------------------------------------------------
# Enriquecimento
# ---------------------------------------------------------------------------

def compute_field(expression: str, *, index: int, stage_name: str, execution_id: str) -> Any:
    if expression == "record_index":
        return index
    if expression == "pipeline_name":
        return stage_name
    if expression == "execution_id":
        return execution_id
    return expression


def enrich(record: Record, spec: EnrichmentSpec, *, index: int, stage_name: str, execution_id: str) -> Record:
    out = dict(record)
    for lookup_field, target in spec.lookup_data.items():
        if lookup_field in out:
            out[target] = "enriched_" + stringify_value(out[lookup_field])
    for field_name, expression in spec.computed_fields.items():
        out[field_name] = compute_field(
            expression, index=index, stage_name=stage_name, execution_id=execution_id
        )
    return out


# ---------------------------------------------------------------------------
# Validação
# ---------------------------------------------------------------------------

_TYPE_CHECKS = {
    "string": lambda v: isinstance(v, str),
    "number": lambda v: isinstance(v, (int, float)) and not isinstance(v, bool),
    "integer": lambda v: isinstance(v, int) and not isinstance(v, bool),
    "boolean": lambda v: isinstance(v, bool),
    "array": lambda v: isinstance(v, list),
    "object": lambda v: isinstance(v, dict),
    "null": lambda v: v is None,
}


def _raise_validation(stage_name: str, message: str, **details: Any) -> None:
    raise DataValidationError(
        message=message,
        details={"type": DATA_VALIDATION_FAILED, "stage": stage_name, **details},
        hint="Ajuste transform.validation ou o field_mapping do stage",
    )


def validate_records(records: List[Record], spec: ValidationSpec, *, stage_name: str) -> None:
    """
    Aplica `transform.validation` aos registros já transformados.

    Raises:
        DataValidationError: na primeira violação encontrada.
    """
    count = len(records)
    if spec.min_records is not None and count < spec.min_records:
        _raise_validation(stage_name, f"Expected at least {spec.min_records} records, got {count}",
                          record_count=count)
    if spec.max_records is not None and count > spec.max_records:
        _raise_validation(stage_name, f"Expected at most {spec.max_records} records, got {count}",
                          record_count=count)

    for index, record in enumerate(records):
        for name in spec.required_fields:
            if name not in record:
                _raise_validation(stage_name, f"Record {index} is missing required field '{name}'",
                                  record_index=index, field=name)

        for name, type_name in spec.field_types.items():
            check = _TYPE_CHECKS.get(type_name.lower())
            if check is None:
                _raise_validation(stage_name, f"Unknown field type '{type_name}' for field '{name}'",
                                  field=name)
            if name in record and not check(record[name]):
                _raise_validation(
                    stage_name,
                    f"Record {index} field '{name}' is not of type {type_name}",
                    record_index=index,
                    field=name,
                    expected=type_name,
                )


# ---------------------------------------------------------------------------
# Intermediários
# ---------------------------------------------------------------------------

def matches_conditions(record: Record, conditions: Dict[str, Any]) -> bool:
    return all(key in record and json_equal(record[key], expected) for key, expected in conditions.items())


def shared_key_for(shared_key: str, field_name: str) -> str:
    if field_name == TOKEN_FIELD:
        return TOKEN_FIELD
    if not shared_key:
        return field_name
    return f"{shared_key}_{field_name}"


def select_intermediate(
    records: List[Record],
    spec: Optional[IntermediateSpec],
    ctx: PipelineContext,
    *,
    stage_name: str,
) -> List[Record]:
    """
    Seleciona registros intermediários e, se configurado, exporta seus
    campos para o pool compartilhado (last-writer-wins).
    """
    if spec is None:
        return []

    selected = [r for r in records if matches_conditions(r, spec.conditions)]
    if spec.export_to_shared:
        for record in selected:
            for field_name, value in record.items():
                key = shared_key_for(spec.shared_key, field_name)
                ctx.set_shared(key, value)
        if selected:
            ctx.log(stage=stage_name, level="INFO", message="exported intermediate data to shared pool",
                    shared_key=spec.shared_key, records=len(selected))
    return selected


# ---------------------------------------------------------------------------
# Orquestração
# ---------------------------------------------------------------------------

def transform_records(
    records: List[Record],
    spec: TransformSpec,
    ctx: PipelineContext,
    *,
    stage_name: str,
) -> Tuple[List[Record], List[Record]]:
    """
    Executa todas as regras de transform na ordem fixa.

    Returns:
        Tuple[List[Record], List[Record]]: (processados, intermediários)

    Raises:
        DataValidationError: se `transform.validation` for violada.
    """
    processed: List[Record] = []
    for index, record in enumerate(records):
        out = apply_operations(record, spec.operations)
        out = enrich(out, spec.data_enrichment, index=index, stage_name=stage_name,
                     execution_id=ctx.execution_id)
        out["processed"] = True
        out["processed_by"] = stage_name
        processed.append(out)

    validate_records(processed, spec.validation, stage_name=stage_name)
    intermediate = select_intermediate(processed, spec.intermediate, ctx, stage_name=stage_name)
    return processed, intermediate
