# src/seqflow/core/exceptions.py
"""
SeqFlow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do SeqFlow.

Objetivo:
- Permitir que Stages/Executor levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para FlowErrorPayload
- Separar erros de configuração, rede, dados e execução

Categorias:
- Configuração: endpoint inválido, placeholder de URL não resolvido
- Rede: status HTTP não-sucesso, falha de transporte
- Dados: validação configurada do transform
- Persistência: falha de escrita/leitura no storage
- Execução: abort de stage (envolve a causa original)

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- "Não encontrado" em paths/templates de header NÃO é exceção.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class FlowException(Exception):
    """Base class para exceções internas do SeqFlow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConfigurationError(FlowException):
    """Definição de stage inválida ou incompleta para execução."""


@dataclass(frozen=True)
class UnresolvedPlaceholderError(ConfigurationError):
    """Template de URL ainda contém placeholders após a substituição."""


# ---------------------------------------------------------------------------
# Rede
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class NetworkError(FlowException):
    """Falha na chamada remota (status ou transporte)."""


@dataclass(frozen=True)
class HttpStatusError(NetworkError):
    """Resposta HTTP com status fora da faixa 2xx."""


@dataclass(frozen=True)
class TransportError(NetworkError):
    """Falha de transporte (conexão, timeout, corpo não-JSON)."""


# ---------------------------------------------------------------------------
# Dados
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DataValidationError(FlowException):
    """Registros violam a validação declarada em `transform.validation`."""


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StageExecutionError(FlowException):
    """Falha de um stage que abortou a run inteira."""


# ---------------------------------------------------------------------------
# Persistência
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StorageError(FlowException):
    """Falha ao gravar ou ler um artefato no backend de storage."""
