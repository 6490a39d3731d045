# tests/core/pipeline/test_registry_unique_stage_name.py
"""
Testes do StageRegistry: unicidade de `name` e ordem de inserção.
"""

import pytest

from seqflow.core.pipeline.registry import DuplicateStageNameError, StageRegistry
from tests.fixtures.stages.dummy_stages import DummyStage


def test_registry_preserves_insertion_order():
    reg = StageRegistry()
    reg.add(DummyStage("users"))
    reg.add(DummyStage("posts"))

    assert [s.name for s in reg.list()] == ["users", "posts"]
    assert "users" in reg
    assert len(reg) == 2
    assert reg.get("posts").name == "posts"


def test_duplicate_name_rejected():
    reg = StageRegistry()
    reg.add(DummyStage("users"))

    with pytest.raises(DuplicateStageNameError):
        reg.add(DummyStage("users"))


def test_blank_name_rejected():
    with pytest.raises(ValueError):
        StageRegistry().add(DummyStage("  "))
