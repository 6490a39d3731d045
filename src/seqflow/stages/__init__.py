# src/seqflow/stages/__init__.py
"""Stages concretos do SeqFlow."""

from .sequence_stage import SequenceStage

__all__ = ["SequenceStage"]
