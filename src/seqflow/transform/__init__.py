# src/seqflow/transform/__init__.py
"""Fase de transform: regras por registro e renderização CSV/TSV."""
