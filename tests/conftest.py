# tests/conftest.py
"""
Fixtures compartilhados para testes do SeqFlow.

Este módulo define fixtures reutilizáveis que fornecem:
- contexto de execução controlado (PipelineContext)
- transporte HTTP falso, com rotas fixas e registro das requisições
- storage em memória
- construtores de StageDefinition e SequenceConfig a partir de dicts

O objetivo destas fixtures é permitir testes do core e dos stages
sem depender de:
- rede
- sleeps reais
- filesystem (exceto quando `tmp_path` é pedido explicitamente)

Invariantes:
    - Nenhuma fixture realiza chamadas de rede
    - Dados retornados são determinísticos e isolados por teste
"""

from copy import deepcopy
from typing import Any, Dict, List, Optional

import pytest

from seqflow.core.config.model import SequenceConfig, StageDefinition
from seqflow.core.pipeline.context import PipelineContext
from seqflow.extract.http import HttpRequest, HttpResponse
from seqflow.storage.memory import MemoryStorage


class FakeTransport:
    """
    Transporte HTTP em memória.

    - `routes` mapeia URL exata → HttpResponse
    - URLs sem rota respondem 404
    - toda requisição recebida é anexada a `requests`, em ordem
    """

    def __init__(self, routes: Optional[Dict[str, HttpResponse]] = None):
        self.routes: Dict[str, HttpResponse] = dict(routes or {})
        self.requests: List[HttpRequest] = []

    def add(self, url: str, body: Any, status: int = 200) -> "FakeTransport":
        self.routes[url] = HttpResponse(status=status, body=body)
        return self

    def send(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        return self.routes.get(request.url, HttpResponse(status=404, body={"error": "not found"}))

    @property
    def urls(self) -> List[str]:
        return [r.url for r in self.requests]


class SleepRecorder:
    """Substituto de `time.sleep` que apenas registra as durações pedidas."""

    def __init__(self) -> None:
        self.calls: List[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _stage_dict(name: str, **overrides: Any) -> Dict[str, Any]:
    base: Dict[str, Any] = {
        "name": name,
        "source": {"endpoint": f"https://api.example.com/{name}"},
        "load": {"output_path": "out", "output_formats": ["json"]},
    }
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            merged = dict(base[key])
            merged.update(value)
            base[key] = merged
        else:
            base[key] = value
    return base


@pytest.fixture
def ctx() -> PipelineContext:
    return PipelineContext(execution_id="exec_test")


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def stage_dict():
    """Fábrica de dicts de stage com endpoint e output_path válidos por padrão."""
    return _stage_dict


@pytest.fixture
def make_definition():
    """Fábrica de StageDefinition (mesma semântica de `stage_dict`)."""
    def _make(name: str = "stage", **overrides: Any) -> StageDefinition:
        return StageDefinition.from_dict(_stage_dict(name, **overrides), path=f"pipelines.{name}")
    return _make


@pytest.fixture
def make_config():
    """Fábrica de SequenceConfig a partir de uma lista de dicts de stage."""
    def _make(stages: List[Dict[str, Any]], order: Optional[List[str]] = None, **sections: Any) -> SequenceConfig:
        data: Dict[str, Any] = {
            "sequence": {
                "name": "test_sequence",
                "execution_order": order if order is not None else [s["name"] for s in stages],
            },
            "pipelines": deepcopy(stages),
        }
        data.update(deepcopy(sections))
        return SequenceConfig.from_dict(data, config_hash="test-hash")
    return _make
