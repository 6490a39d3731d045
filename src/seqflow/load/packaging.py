# src/seqflow/load/packaging.py
"""
Empacotamento da saída de um stage em um arquivo ZIP.

Conteúdo do ZIP (v1):
    - output.csv           → formato "csv"
    - output.tsv           → formato "tsv"
    - processed_data.json  → formato "json" (JSON indentado)
    - intermediate.json    → quando há registros intermediários
    - metadata.json        → quando `compression.include_metadata`

Formatos desconhecidos geram warning no contexto e são ignorados.

Decisões arquiteturais:
    - O ZIP é montado em memória e gravado via `Storage.write_file`
    - O local devolvido é `"{output_path}/{filename}"`
"""

from __future__ import annotations

import io
import json
import zipfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from seqflow.core.pipeline.context import PipelineContext
from seqflow.core.pipeline.types import TransformResult
from seqflow.storage.base import Storage

SUPPORTED_FORMATS = ("csv", "tsv", "json")


def build_output_filename(
    pattern: Optional[str],
    stage_name: str,
    execution_id: str,
    now: Optional[datetime] = None,
) -> str:
    if not pattern:
        return f"{stage_name}_output.zip"
    now = now or datetime.now(timezone.utc)
    return (
        pattern.replace("{pipeline_name}", stage_name)
        .replace("{execution_id}", execution_id)
        .replace("{timestamp}", now.strftime("%Y%m%d_%H%M%S"))
    )


def _pretty_json(value: Any) -> bytes:
    return json.dumps(value, indent=2, ensure_ascii=False).encode("utf-8")


def build_zip(
    result: TransformResult,
    formats: Sequence[str],
    *,
    stage_name: str,
    ctx: PipelineContext,
    include_metadata: bool = False,
    now: Optional[datetime] = None,
) -> bytes:
    """Monta o ZIP em memória e devolve seus bytes."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for fmt in formats:
            if fmt == "csv":
                zf.writestr("output.csv", result.csv_output)
            elif fmt == "tsv":
                zf.writestr("output.tsv", result.tsv_output)
            elif fmt == "json":
                zf.writestr("processed_data.json", _pretty_json(result.processed_records))
            else:
                ctx.add_warning(stage=stage_name, message=f"Unsupported output format: {fmt}")
                ctx.log(stage=stage_name, level="WARNING", message="unsupported output format", format=fmt)

        if result.intermediate_records:
            zf.writestr("intermediate.json", _pretty_json(result.intermediate_records))

        if include_metadata:
            metadata: Dict[str, Any] = {
                "pipeline_name": stage_name,
                "execution_id": ctx.execution_id,
                "timestamp": (now or datetime.now(timezone.utc)).isoformat(),
            }
            zf.writestr("metadata.json", _pretty_json(metadata))

    return buffer.getvalue()


def package_output(
    result: TransformResult,
    formats: Sequence[str],
    *,
    stage_name: str,
    ctx: PipelineContext,
    storage: Storage,
    output_path: str,
    filename_pattern: Optional[str] = None,
    include_metadata: bool = False,
    now: Optional[datetime] = None,
) -> str:
    """
    Empacota e persiste a saída de um stage.

    Returns:
        str: `"{output_path}/{filename}"`.

    Raises:
        StorageError: se o backend falhar ao gravar.
    """
    now = now or datetime.now(timezone.utc)
    filename = build_output_filename(filename_pattern, stage_name, ctx.execution_id, now)
    data = build_zip(result, formats, stage_name=stage_name, ctx=ctx, include_metadata=include_metadata, now=now)
    storage.write_file(filename, data)
    location = f"{output_path.rstrip('/')}/{filename}"
    ctx.log(stage=stage_name, level="INFO", message="output packaged", path=location, size_bytes=len(data))
    return location

