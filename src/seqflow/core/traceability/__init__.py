# src/seqflow/core/traceability/__init__.py
"""Rastreabilidade do SeqFlow: documento de métricas por run."""

from .metrics import build_run_metrics, default_metrics_path, save_metrics

__all__ = ["build_run_metrics", "default_metrics_path", "save_metrics"]
