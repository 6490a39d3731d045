# src/seqflow/storage/base.py
"""
Porta de persistência dos artefatos de saída.

Contrato mínimo:
    - write_file(name, data) grava bytes sob `name` (sobrescreve)
    - read_file(name) devolve os bytes gravados

`name` é sempre relativo ao destino configurado do backend
(diretório base, prefixo S3 etc.).

Falhas de I/O levantam `StorageError`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Storage(Protocol):
    def write_file(self, name: str, data: bytes) -> None:
        ...

    def read_file(self, name: str) -> bytes:
        ...
