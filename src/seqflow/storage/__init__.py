# src/seqflow/storage/__init__.py
"""
Backends de persistência dos artefatos de saída do SeqFlow.

Backends disponíveis:
    - LocalStorage: sistema de arquivos
    - MemoryStorage: em memória
    - S3Storage: bucket S3 (boto3)

`storage_for_output_path` escolhe o backend a partir de `load.output_path`
(`s3://bucket/prefixo` → S3Storage; demais → LocalStorage).
"""

from __future__ import annotations

from .base import Storage
from .local import LocalStorage
from .memory import MemoryStorage


def storage_for_output_path(output_path: str) -> Storage:
    if output_path.startswith("s3://"):
        from .s3 import S3Storage

        bucket, _, prefix = output_path[len("s3://"):].partition("/")
        return S3Storage(bucket=bucket, prefix=prefix)
    return LocalStorage(output_path)


__all__ = ["Storage", "LocalStorage", "MemoryStorage", "storage_for_output_path"]
