# tests/core/load/test_packaging.py
"""
Testes do empacotamento ZIP da saída de um stage.

Os testes asseguram que:
- cada formato pedido gera o membro correspondente
- intermediários e metadados entram apenas quando existem/pedidos
- formatos desconhecidos geram warning e não abortam
- o nome do arquivo segue o padrão configurado
- o local devolvido é "{output_path}/{filename}"
"""

import io
import json
import zipfile
from datetime import datetime, timezone

from seqflow.core.pipeline.types import TransformResult
from seqflow.load.packaging import build_output_filename, build_zip, package_output

NOW = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def _result(**overrides):
    base = dict(
        processed_records=[{"id": 1}],
        csv_output="id\n1",
        tsv_output="id\n1",
        intermediate_records=[],
    )
    base.update(overrides)
    return TransformResult(**base)


def _members(data: bytes):
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {name: zf.read(name) for name in zf.namelist()}


def test_filename_default_and_pattern():
    assert build_output_filename(None, "users", "exec_1") == "users_output.zip"
    pattern = "{pipeline_name}_{execution_id}_{timestamp}.zip"
    assert build_output_filename(pattern, "users", "exec_1", NOW) == "users_exec_1_20240102_030405.zip"


def test_zip_members_per_format(ctx):
    data = build_zip(_result(), ["csv", "tsv", "json"], stage_name="users", ctx=ctx)
    members = _members(data)

    assert set(members) == {"output.csv", "output.tsv", "processed_data.json"}
    assert members["output.csv"] == b"id\n1"
    assert json.loads(members["processed_data.json"]) == [{"id": 1}]


def test_zip_intermediate_and_metadata(ctx):
    result = _result(intermediate_records=[{"token": "t"}])

    members = _members(build_zip(result, ["json"], stage_name="auth", ctx=ctx, include_metadata=True, now=NOW))

    assert json.loads(members["intermediate.json"]) == [{"token": "t"}]
    metadata = json.loads(members["metadata.json"])
    assert metadata == {
        "pipeline_name": "auth",
        "execution_id": "exec_test",
        "timestamp": NOW.isoformat(),
    }


def test_unknown_format_warns(ctx):
    members = _members(build_zip(_result(), ["xml", "csv"], stage_name="users", ctx=ctx))

    assert set(members) == {"output.csv"}
    assert ctx.warnings == {"users": ["Unsupported output format: xml"]}
    assert any(e["level"] == "WARNING" for e in ctx.events)


def test_package_output_writes_and_returns_location(ctx, storage):
    location = package_output(
        _result(),
        ["json"],
        stage_name="users",
        ctx=ctx,
        storage=storage,
        output_path="out/",
    )

    assert location == "out/users_output.zip"
    assert storage.names() == ["users_output.zip"]
    assert "processed_data.json" in _members(storage.read_file("users_output.zip"))
