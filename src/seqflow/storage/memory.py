# src/seqflow/storage/memory.py
"""Backend de storage em memória (testes e dry-runs)."""

from __future__ import annotations

from typing import Dict, List

from seqflow.core.errors import STORAGE_IO_ERROR
from seqflow.core.exceptions import StorageError


class MemoryStorage:
    def __init__(self) -> None:
        self.files: Dict[str, bytes] = {}

    def write_file(self, name: str, data: bytes) -> None:
        self.files[name] = bytes(data)

    def read_file(self, name: str) -> bytes:
        if name not in self.files:
            raise StorageError(
                message=f"File not found: {name}",
                details={"type": STORAGE_IO_ERROR, "name": name},
            )
        return self.files[name]

    def names(self) -> List[str]:
        return sorted(self.files)
