# tests/core/config/test_loader.py
"""
Testes do loader da definição de sequência (load_sequence_config).

Os testes asseguram que:
- TOML, YAML e JSON são aceitos
- `${VAR}` é resolvido com o ambiente antes do parse
- `${CHAVE}` remanescente é resolvido com global.shared_variables
- o override local é opcional e mesclado por nome de stage
- formatos e estruturas inválidas são rejeitados com erros tipados

Limites explícitos:
    - Não valida execução de stages
"""

from pathlib import Path

import pytest

from seqflow.core.config.errors import (
    ConfigFileNotFoundError,
    ConfigParseError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from seqflow.core.config.loader import load_raw_config, load_sequence_config


SEQUENCE_TOML = """
[sequence]
name = "user_posts"
execution_order = ["users", "posts"]

[global.shared_variables]
API_BASE = "https://api.example.com"

[[pipelines]]
name = "users"
[pipelines.source]
endpoint = "${API_BASE}/users"
headers = { Authorization = "Bearer ${API_TOKEN}" }
[pipelines.extract]
max_records = 2
[pipelines.load]
output_path = "${OUT_DIR}"
output_formats = ["csv", "json"]

[[pipelines]]
name = "posts"
dependencies = ["users"]
[pipelines.source]
endpoint = "${API_BASE}/users/{id}/posts"
[pipelines.source.data_source]
use_previous_output = true
[pipelines.load]
output_path = "${OUT_DIR}"
"""


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(ConfigFileNotFoundError):
        load_sequence_config(path=str(tmp_path / "missing.toml"))


def test_unsupported_format_raises(tmp_path: Path):
    cfg = _write(tmp_path / "sequence.ini", "[sequence]\nname = x\n")
    with pytest.raises(UnsupportedConfigFormatError):
        load_sequence_config(path=str(cfg))


def test_invalid_root_type_raises(tmp_path: Path):
    cfg = _write(tmp_path / "sequence.yaml", "- a\n- b\n")
    with pytest.raises(InvalidConfigRootTypeError):
        load_raw_config(path=str(cfg))


def test_malformed_toml_raises_parse_error(tmp_path: Path):
    cfg = _write(tmp_path / "sequence.toml", "[sequence\nname = 'x'\n")
    with pytest.raises(ConfigParseError):
        load_raw_config(path=str(cfg))


def test_toml_is_loaded_and_typed(tmp_path: Path):
    cfg = _write(tmp_path / "sequence.toml", SEQUENCE_TOML)
    env = {"API_TOKEN": "secret", "OUT_DIR": str(tmp_path / "out")}

    config = load_sequence_config(path=str(cfg), environ=env)

    assert config.sequence.name == "user_posts"
    assert config.sequence.execution_order == ["users", "posts"]
    users, posts = config.pipelines
    assert users.source.endpoint == "https://api.example.com/users"
    assert users.source.headers == {"Authorization": "Bearer secret"}
    assert users.extract.max_records == 2
    assert users.load.output_formats == ["csv", "json"]
    assert posts.source.endpoint == "https://api.example.com/users/{id}/posts"
    assert posts.source.data_source.use_previous_output is True
    assert posts.dependencies == ["users"]
    assert len(config.config_hash) == 64


def test_unknown_env_var_is_left_verbatim(tmp_path: Path):
    cfg = _write(tmp_path / "sequence.toml", SEQUENCE_TOML)

    config = load_sequence_config(path=str(cfg), environ={"OUT_DIR": "out"})

    assert config.pipelines[0].source.headers["Authorization"] == "Bearer ${API_TOKEN}"


def test_yaml_and_json_are_equivalent(tmp_path: Path):
    yaml_cfg = _write(
        tmp_path / "sequence.yaml",
        "sequence:\n"
        "  name: s\n"
        "  execution_order: [a]\n"
        "pipelines:\n"
        "  - name: a\n"
        "    source: {endpoint: 'https://x.example.com/a'}\n"
        "    load: {output_path: out}\n",
    )
    json_cfg = _write(
        tmp_path / "sequence.json",
        '{"sequence": {"name": "s", "execution_order": ["a"]},'
        ' "pipelines": [{"name": "a", "source": {"endpoint": "https://x.example.com/a"},'
        ' "load": {"output_path": "out"}}]}',
    )

    from_yaml = load_sequence_config(path=str(yaml_cfg), environ={})
    from_json = load_sequence_config(path=str(json_cfg), environ={})

    assert from_yaml.pipelines == from_json.pipelines
    assert from_yaml.config_hash == from_json.config_hash


def test_local_override_merges_stage_by_name(tmp_path: Path):
    cfg = _write(tmp_path / "sequence.toml", SEQUENCE_TOML)
    local = _write(
        tmp_path / "local.toml",
        '[[pipelines]]\nname = "posts"\nenabled = false\n',
    )

    config = load_sequence_config(path=str(cfg), local_path=str(local), environ={"OUT_DIR": "out"})

    assert [p.name for p in config.pipelines] == ["users", "posts"]
    assert config.get_pipeline("posts").enabled is False
    assert config.get_pipeline("posts").source.data_source.use_previous_output is True
    assert [p.name for p in config.get_enabled_pipelines()] == ["users"]


def test_missing_local_is_ok(tmp_path: Path):
    cfg = _write(tmp_path / "sequence.toml", SEQUENCE_TOML)

    config = load_sequence_config(
        path=str(cfg), local_path=str(tmp_path / "absent.toml"), environ={"OUT_DIR": "out"}
    )

    assert len(config.pipelines) == 2
