# tests/core/stages/test_sequence_stage_conditions.py
"""
Testes das condições de execução e das fases do SequenceStage.

Os testes asseguram que:
- `enabled=false` impede a execução
- when_previous_succeeded exige resultado anterior
- when_records_count usa o stage nomeado (ausente conta como 0)
- when_shared_data compara chave e valor no pool
- as fases extract → transform → load compõem a saída esperada
"""

import io
import json
import zipfile
from datetime import datetime, timezone

from seqflow.core.pipeline.stage import Stage
from seqflow.core.pipeline.types import StageResult
from seqflow.stages import SequenceStage


def _stage(make_definition, transport, storage, sleeper, name="s", **overrides):
    return SequenceStage(
        make_definition(name, **overrides),
        transport=transport,
        storage=storage,
        sleep=sleeper,
        now=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


def test_satisfies_stage_protocol(make_definition, transport, storage, sleeper):
    assert isinstance(_stage(make_definition, transport, storage, sleeper), Stage)


def test_disabled_stage_does_not_execute(make_definition, transport, storage, sleeper, ctx):
    stage = _stage(make_definition, transport, storage, sleeper, enabled=False)
    assert stage.should_execute(ctx) is False


def test_when_previous_succeeded(make_definition, transport, storage, sleeper, ctx):
    stage = _stage(make_definition, transport, storage, sleeper, conditions={"when_previous_succeeded": True})

    assert stage.should_execute(ctx) is False
    ctx.add_result(StageResult(stage_name="prev"))
    assert stage.should_execute(ctx) is True


def test_when_records_count_named_stage(make_definition, transport, storage, sleeper, ctx):
    stage = _stage(
        make_definition, transport, storage, sleeper,
        conditions={"when_records_count": {"min": 2, "max": 3, "from_pipeline": "users"}},
    )

    assert stage.should_execute(ctx) is False

    ctx.add_result(StageResult(stage_name="users", records=({"id": 1}, {"id": 2})))
    assert stage.should_execute(ctx) is True


def test_when_records_count_above_max(make_definition, transport, storage, sleeper, ctx):
    stage = _stage(make_definition, transport, storage, sleeper, conditions={"when_records_count": {"max": 1}})
    ctx.add_result(StageResult(stage_name="prev", records=({"a": 1}, {"a": 2})))

    assert stage.should_execute(ctx) is False


def test_when_shared_data(make_definition, transport, storage, sleeper, ctx):
    stage = _stage(make_definition, transport, storage, sleeper, conditions={"when_shared_data": {"mode": "full"}})

    assert stage.should_execute(ctx) is False
    ctx.set_shared("mode", "partial")
    assert stage.should_execute(ctx) is False
    ctx.set_shared("mode", "full")
    assert stage.should_execute(ctx) is True


def test_when_shared_data_keeps_booleans_distinct(make_definition, transport, storage, sleeper, ctx):
    stage = _stage(make_definition, transport, storage, sleeper, conditions={"when_shared_data": {"ready": True}})

    ctx.set_shared("ready", 1)
    assert stage.should_execute(ctx) is False
    ctx.set_shared("ready", True)
    assert stage.should_execute(ctx) is True


def test_phases_produce_zip(make_definition, transport, storage, sleeper, ctx):
    transport.add("https://api.example.com/users", [{"id": 2, "name": " Bob "}, {"id": 1, "name": "Ann"}])
    stage = _stage(
        make_definition, transport, storage, sleeper, name="users",
        source={"endpoint": "https://api.example.com/users"},
        extract={"data_processing": {"sort_by": "id"}},
        transform={"operations": {"trim_whitespace": True}},
        load={"output_path": "out", "output_formats": ["csv", "json"]},
    )

    records = stage.extract(ctx)
    assert [r["id"] for r in records] == [1, 2]

    result = stage.transform(records, ctx)
    assert result.csv_output == "id,name,processed,processed_by\n1,Ann,true,users\n2,Bob,true,users"

    location = stage.load(result, ctx)
    assert location == "out/users_output.zip"

    with zipfile.ZipFile(io.BytesIO(storage.read_file("users_output.zip"))) as zf:
        assert sorted(zf.namelist()) == ["output.csv", "processed_data.json"]
        assert json.loads(zf.read("processed_data.json"))[0]["name"] == "Ann"
