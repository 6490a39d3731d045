# tests/core/config/test_model.py
"""
Testes do modelo tipado (SequenceConfig) e de `validate()`.

Os testes asseguram que:
- defaults explícitos são aplicados
- tipos inválidos levantam InvalidConfigValueError com o caminho do campo
- `validate()` rejeita nomes desconhecidos, ciclos, URLs e paths inválidos
- stages pull-only podem omitir o endpoint
"""

import pytest

from seqflow.core.config.errors import InvalidConfigValueError, MissingConfigError
from seqflow.core.config.model import SequenceConfig, StageDefinition
from seqflow.core.engine.planner import CircularDependencyError, UnknownStageError


def test_defaults_are_explicit(make_definition):
    d = make_definition("users")

    assert d.enabled is True
    assert d.source.method == "GET"
    assert d.source.payload is None
    assert d.load.output_formats == ["json"]
    assert d.extract.data_processing.sort_order == "asc"
    assert d.transform.intermediate is None
    assert d.conditions.when_records_count is None
    assert d.dependencies == []


def test_method_is_uppercased(make_definition):
    d = make_definition("users", source={"method": "post"})
    assert d.source.method == "POST"


def test_invalid_type_reports_field_path(stage_dict):
    data = stage_dict("users", extract={"max_records": "ten"})

    with pytest.raises(InvalidConfigValueError) as exc:
        StageDefinition.from_dict(data, path="pipelines[0]")

    assert exc.value.field == "pipelines[0].extract.max_records"


def test_bool_is_not_accepted_as_int(stage_dict):
    with pytest.raises(InvalidConfigValueError):
        StageDefinition.from_dict(stage_dict("users", extract={"max_records": True}))


def test_invalid_sort_order_rejected(stage_dict):
    data = stage_dict("users", extract={"data_processing": {"sort_by": "id", "sort_order": "up"}})
    with pytest.raises(InvalidConfigValueError):
        StageDefinition.from_dict(data)


def test_missing_sequence_section_raises():
    with pytest.raises(MissingConfigError):
        SequenceConfig.from_dict({"pipelines": []})


def test_invalid_failure_policy_rejected(make_config, stage_dict):
    with pytest.raises(InvalidConfigValueError):
        make_config([stage_dict("a")], error_handling={"on_pipeline_failure": "ignore"})


def test_validate_accepts_valid_sequence(make_config, stage_dict):
    config = make_config([stage_dict("a"), stage_dict("b", dependencies=["a"])])
    config.validate()


def test_validate_unknown_name_in_order(make_config, stage_dict):
    config = make_config([stage_dict("a")], order=["a", "ghost"])

    with pytest.raises(UnknownStageError, match="ghost"):
        config.validate()


def test_validate_detects_cycle(make_config, stage_dict):
    config = make_config([
        stage_dict("a", dependencies=["c"]),
        stage_dict("b", dependencies=["a"]),
        stage_dict("c", dependencies=["b"]),
    ])

    with pytest.raises(CircularDependencyError):
        config.validate()


def test_validate_rejects_bad_endpoint(make_config, stage_dict):
    config = make_config([stage_dict("a", source={"endpoint": "ftp://files.example.com"})])

    with pytest.raises(InvalidConfigValueError, match="Unsupported URL scheme"):
        config.validate()


def test_validate_rejects_empty_output_path(make_config, stage_dict):
    config = make_config([stage_dict("a", load={"output_path": ""})])

    with pytest.raises(InvalidConfigValueError, match="Path cannot be empty"):
        config.validate()


def test_validate_rejects_zero_concurrency(make_config, stage_dict):
    config = make_config([stage_dict("a", extract={"concurrent_requests": 0})])

    with pytest.raises(InvalidConfigValueError, match="at least 1"):
        config.validate()


def test_pull_only_stage_may_omit_endpoint(make_config, stage_dict):
    config = make_config([
        stage_dict("a"),
        stage_dict("b", source={"endpoint": "", "data_source": {"use_previous_output": True}}),
    ])

    config.validate()


def test_get_enabled_pipelines_follows_execution_order(make_config, stage_dict):
    config = make_config(
        [stage_dict("a"), stage_dict("b", enabled=False), stage_dict("c")],
        order=["c", "b", "a"],
    )

    assert [p.name for p in config.get_enabled_pipelines()] == ["c", "a"]


def test_global_fan_out_delay_default(make_config, stage_dict):
    config = make_config([stage_dict("a")])
    assert config.global_settings.fan_out_delay_ms == 100

    config = make_config([stage_dict("a")], **{"global": {"fan_out_delay_ms": 0}})
    assert config.global_settings.fan_out_delay_ms == 0
