# src/seqflow/load/__init__.py
"""Fase de load: nome do arquivo de saída, montagem do ZIP e persistência."""

from .packaging import build_output_filename, build_zip, package_output

__all__ = ["build_output_filename", "build_zip", "package_output"]
