"""
SeqFlow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros do SeqFlow.
Erros são artefatos do contrato operacional e devem ser:

- explícitos
- serializáveis
- acionáveis

O payload aqui definido é o que chega ao operador (CLI, métricas exportadas)
quando uma run é abortada.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FlowErrorPayload:
    """
    Payload canônico de erro do SeqFlow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica que a run só pode prosseguir após decisão humana
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Configuração
CONFIG_INVALID = "CONFIG_INVALID"
CONFIG_UNRESOLVED_PLACEHOLDER = "CONFIG_UNRESOLVED_PLACEHOLDER"

# Rede
NETWORK_HTTP_STATUS = "NETWORK_HTTP_STATUS"
NETWORK_TRANSPORT = "NETWORK_TRANSPORT"

# Dados
DATA_VALIDATION_FAILED = "DATA_VALIDATION_FAILED"

# Persistência
STORAGE_IO_ERROR = "STORAGE_IO_ERROR"

# Executor / Execução
STAGE_EXECUTION_FAILED = "STAGE_EXECUTION_FAILED"
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def http_status_error(
    *,
    status: int,
    url: str,
    method: str = "GET",
    hint: str = "Verifique o endpoint, headers de autenticação e o payload enviado.",
) -> FlowErrorPayload:
    return FlowErrorPayload(
        type=NETWORK_HTTP_STATUS,
        message=f"API request failed with status: {status}",
        details={
            "status": status,
            "url": url,
            "method": method,
        },
        hint=hint,
    )


def unresolved_placeholder(
    *,
    endpoint: str,
    unresolved: List[str],
    available_fields: List[str],
    hint: str = "Ajuste o template do endpoint ou o field_mapping do stage de origem.",
) -> FlowErrorPayload:
    return FlowErrorPayload(
        type=CONFIG_UNRESOLVED_PLACEHOLDER,
        message=(
            f"Unresolved parameters in endpoint: {endpoint}. "
            f"Available fields: {available_fields}"
        ),
        details={
            "endpoint": endpoint,
            "unresolved": list(unresolved),
            "available_fields": list(available_fields),
        },
        hint=hint,
    )


def stage_execution_failed(
    *,
    stage: str,
    cause: FlowErrorPayload,
    hint: Optional[str] = None,
) -> FlowErrorPayload:
    return FlowErrorPayload(
        type=STAGE_EXECUTION_FAILED,
        message=f"Pipeline '{stage}' failed: {cause.message}",
        details={
            "stage": stage,
            "error": cause.to_dict(),
        },
        hint=hint or cause.hint,
        decision_required=cause.decision_required,
    )
