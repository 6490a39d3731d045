# src/seqflow/core/config/errors.py
"""
Exceções canônicas da camada de configuração do SeqFlow.

As exceções aqui definidas representam violações estruturais da
definição de sequência detectadas durante carregamento, merge,
interpretação tipada ou validação. Não representam falhas de execução
de Stage.

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Erros de valor carregam o campo, o valor recebido e o motivo

Este módulo existe para garantir mensagens claras e captura
uniforme de erros de configuração (ex.: código de saída da CLI).
"""

from __future__ import annotations

from typing import Any


class ConfigError(Exception):
    """
    Exceção base para erros de configuração do SeqFlow.

    Permite captura genérica de erros de configuração e distinção
    clara entre falhas estruturais e falhas de execução.
    """


class ConfigFileNotFoundError(ConfigError):
    """Arquivo de definição da sequência não encontrado."""


class UnsupportedConfigFormatError(ConfigError):
    """
    Extensão de arquivo não suportada pelo loader.

    Formatos suportados (v1):
        - TOML (.toml)
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """O conteúdo raiz do arquivo não é um mapeamento."""


class ConfigParseError(ConfigError):
    """O arquivo existe mas não pôde ser interpretado no formato declarado."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"global": {"timeout_minutes": 10}}
        - override: {"global": "fast"}
    """


class InvalidConfigValueError(ConfigError):
    """Valor inválido (tipo ou faixa) em um campo da definição."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value for '{field}': {value!r} ({reason})")


class MissingConfigError(ConfigError):
    """Campo obrigatório ausente na definição."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required configuration field: '{field}'")
