# src/seqflow/extract/http.py
"""
Porta de transporte HTTP e adapter padrão baseado em urllib.

O core depende apenas do protocolo `HttpTransport`:

    send(HttpRequest) -> HttpResponse   (status + corpo JSON já decodificado)

Falhas de conexão, timeout ou corpo não-JSON levantam `TransportError`.
Status não-2xx NÃO levantam aqui: o chamador decide (ver caller).

Limites explícitos:
    - Sem retry
    - Sem refresh de autenticação
"""

from __future__ import annotations

import json
import socket
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from seqflow.core.errors import NETWORK_TRANSPORT
from seqflow.core.exceptions import TransportError


@dataclass(frozen=True)
class HttpRequest:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, str] = field(default_factory=dict)
    body: Optional[str] = None
    timeout: Optional[float] = None


@dataclass(frozen=True)
class HttpResponse:
    status: int
    body: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


@runtime_checkable
class HttpTransport(Protocol):
    def send(self, request: HttpRequest) -> HttpResponse:
        ...


def _with_query(url: str, params: Dict[str, str]) -> str:
    if not params:
        return url
    sep = "&" if urllib.parse.urlsplit(url).query else "?"
    return f"{url}{sep}{urllib.parse.urlencode(params)}"


def _decode_json(raw: bytes, url: str) -> Any:
    if not raw.strip():
        return None
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise TransportError(
            message=f"Invalid JSON response from {url}",
            details={"type": NETWORK_TRANSPORT, "url": url, "reason": str(exc)},
            hint="O endpoint deve responder JSON",
        ) from exc


class UrllibTransport:
    """Adapter HTTP padrão (urllib.request), bloqueante."""

    def __init__(self, *, default_timeout: float = 30.0, user_agent: str = "seqflow/0.1"):
        self.default_timeout = default_timeout
        self.user_agent = user_agent

    def send(self, request: HttpRequest) -> HttpResponse:
        url = _with_query(request.url, request.params)
        headers = {"User-Agent": self.user_agent}
        headers.update(request.headers)
        data = request.body.encode("utf-8") if request.body is not None else None

        req = urllib.request.Request(url, data=data, headers=headers, method=request.method.upper())
        timeout = request.timeout if request.timeout is not None else self.default_timeout

        try:
            with urllib.request.urlopen(req, timeout=timeout) as r:
                status = r.status
                raw = r.read()
        except urllib.error.HTTPError as exc:
            # status não-2xx: corpo é best-effort, o chamador decide o erro
            raw = exc.read() or b""
            try:
                body = json.loads(raw.decode("utf-8")) if raw.strip() else None
            except (UnicodeDecodeError, json.JSONDecodeError):
                body = raw.decode("utf-8", errors="replace")
            return HttpResponse(status=exc.code, body=body)
        except (urllib.error.URLError, socket.timeout, OSError) as exc:
            raise TransportError(
                message=f"API request failed: {exc}",
                details={"type": NETWORK_TRANSPORT, "url": url, "method": request.method},
                hint="Verifique conectividade, DNS e timeout_seconds do stage",
            ) from exc

        return HttpResponse(status=status, body=_decode_json(raw, url))
