# src/seqflow/storage/local.py
"""Backend de storage em sistema de arquivos local."""

from __future__ import annotations

from pathlib import Path
from typing import Union

from seqflow.core.errors import STORAGE_IO_ERROR
from seqflow.core.exceptions import StorageError


class LocalStorage:
    """
    Grava artefatos sob `base_dir`, criando diretórios intermediários.

    Invariantes:
        - Nomes absolutos ou com `..` que escapem de `base_dir` são rejeitados
    """

    def __init__(self, base_dir: Union[str, Path]):
        self.base_dir = Path(base_dir)

    def _resolve(self, name: str) -> Path:
        base = self.base_dir.resolve()
        target = (base / name).resolve()
        if target != base and base not in target.parents:
            raise StorageError(
                message=f"Path escapes storage directory: {name}",
                details={"type": STORAGE_IO_ERROR, "name": name, "base_dir": str(self.base_dir)},
                hint="Use nomes relativos ao output_path",
            )
        return target

    def write_file(self, name: str, data: bytes) -> None:
        target = self._resolve(name)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(
                message=f"Failed to write file: {target}",
                details={"type": STORAGE_IO_ERROR, "path": str(target), "reason": str(exc)},
                hint="Verifique permissões de escrita em load.output_path",
            ) from exc

    def read_file(self, name: str) -> bytes:
        target = self._resolve(name)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise StorageError(
                message=f"Failed to read file: {target}",
                details={"type": STORAGE_IO_ERROR, "path": str(target), "reason": str(exc)},
            ) from exc
