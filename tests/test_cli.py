# tests/test_cli.py
"""
Testes da CLI `seqflow`.

A execução real é redirecionada para `run_sequence` com transporte
falso e storage em memória (sem rede, sem escrita em disco).

Verifica:
- definição inválida → código 2
- --dry-run imprime o plano e não executa
- run bem-sucedida → código 0 e resumo em JSON
- falha de stage → código 1 (ou 0 com on_pipeline_failure = "continue")
"""

import json

import pytest

import seqflow.cli as cli
from seqflow.runner import run_sequence

BASE = "https://api.example.com"

CONFIG = """
[sequence]
name = "cli_sequence"
execution_order = ["users", "posts"]

[error_handling]
on_pipeline_failure = "{policy}"

[[pipelines]]
name = "users"
[pipelines.source]
endpoint = "{base}/users"
[pipelines.load]
output_path = "out"

[[pipelines]]
name = "posts"
dependencies = ["users"]
[pipelines.source]
endpoint = "{base}/users/{{id}}/posts"
[pipelines.source.data_source]
use_previous_output = true
[pipelines.load]
output_path = "out"
"""


def _write(tmp_path, policy="stop"):
    path = tmp_path / "sequence.toml"
    path.write_text(CONFIG.replace("{policy}", policy).replace("{base}", BASE), encoding="utf-8")
    return str(path)


@pytest.fixture
def offline(monkeypatch, transport, storage):
    def _run(config, **kwargs):
        return run_sequence(config, transport=transport, storage=storage, sleep=lambda s: None, **kwargs)

    monkeypatch.setattr(cli, "run_sequence", _run)
    return transport


def test_missing_config_file_exit_2(tmp_path, capsys):
    assert cli.main(["--config", str(tmp_path / "nope.toml")]) == 2
    assert "Configuration error" in capsys.readouterr().err


def test_unknown_stage_exit_2(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({
        "sequence": {"name": "s", "execution_order": ["ghost"]},
        "pipelines": [],
    }), encoding="utf-8")

    assert cli.main(["-c", str(path)]) == 2


def test_dry_run_prints_plan(tmp_path, capsys, offline):
    assert cli.main(["-c", _write(tmp_path), "--dry-run", "--skip", "posts"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["sequence"] == "cli_sequence"
    assert [p["name"] for p in out["plan"]] == ["users"]
    assert offline.requests == []


def test_successful_run(tmp_path, capsys, offline):
    offline.add(f"{BASE}/users", [{"id": 1}])
    offline.add(f"{BASE}/users/1/posts", [{"id": 10}, {"id": 11}])

    code = cli.main(["-c", _write(tmp_path), "--execution-id", "exec_cli"])

    assert code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["execution_id"] == "exec_cli"
    assert summary["executed_pipelines"] == ["users", "posts"]
    assert summary["total_records"] == 3
    assert summary["skipped_pipelines"] == []


@pytest.mark.parametrize("policy, expected", [("stop", 1), ("continue", 0)])
def test_stage_failure_exit_code(tmp_path, capsys, offline, policy, expected):
    offline.add(f"{BASE}/users", {"error": "down"}, status=503)

    assert cli.main(["-c", _write(tmp_path, policy)]) == expected

    err = json.loads(capsys.readouterr().err)
    assert err["error"] == "Pipeline 'users' failed: API request failed with status: 503"
    assert err["details"]["stage"] == "users"
