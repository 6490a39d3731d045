# src/seqflow/core/config/__init__.py
"""
Camada de configuração do SeqFlow.

Responsabilidades do pacote:
    - Carregamento de arquivos TOML/YAML/JSON (principal + override local)
    - Interpolação `${VAR}` (ambiente) e `${CHAVE}` (shared_variables)
    - Deep-merge determinístico com merge de stages por nome
    - Modelo tipado imutável (`SequenceConfig`) e validação estrutural
    - Hash canônico para rastreabilidade

Invariantes:
    - A mesma entrada sempre produz a mesma definição
    - Conflitos estruturais são tratados como erro
"""

from .errors import ConfigError
from .loader import load_sequence_config
from .model import SequenceConfig, StageDefinition

__all__ = ["ConfigError", "load_sequence_config", "SequenceConfig", "StageDefinition"]
