# src/seqflow/extract/caller.py
"""
ParameterizedCaller: obtenção de registros de um stage.

Modos de origem (decididos por `source.data_source` e pelo endpoint):

    pull-only   → registros do stage anterior (ou `from_pipeline`), sem rede
    direct call → uma chamada ao endpoint
    fan-out     → endpoint com `{...}`: uma chamada por registro upstream,
                  em sequência, com atraso fixo entre chamadas
    merge       → registros puxados seguidos dos registros da chamada direta
                  ou do fan-out

Decisões arquiteturais:
    - Chamadas são estritamente sequenciais (sem concorrência)
    - O atraso do fan-out é injetável (`sleep`, `delay_s`) para testes
    - Status não-2xx levanta HttpStatusError imediatamente (fail-fast)
    - `field_mapping` usa o PathResolver; caminhos não resolvidos são ignorados

Limites explícitos:
    - Sem retry
    - Sem paginação
"""

from __future__ import annotations

import time
from typing import Any, Callable, Dict, List, Mapping, Optional

from seqflow.core.config.model import StageDefinition
from seqflow.core.errors import http_status_error
from seqflow.core.exceptions import HttpStatusError
from seqflow.core.pipeline.context import PipelineContext
from seqflow.core.pipeline.types import Record, json_equal

from .http import HttpRequest, HttpTransport
from .paths import MISSING, is_simple_key, resolve_path
from .templating import build_endpoint, has_url_placeholder, render_headers, render_payload


def response_to_records(body: Any, max_records: Optional[int] = None) -> List[Record]:
    """
    Converte um corpo JSON em registros.

    - lista → um registro por elemento objeto (limitado a `max_records`)
    - objeto → um registro
    - demais valores → `{"response": valor}`
    """
    if isinstance(body, list):
        records = [dict(item) for item in body if isinstance(item, dict)]
        if max_records is not None:
            records = records[:max_records]
        return records
    if isinstance(body, dict):
        return [dict(body)]
    return [{"response": body}]


def apply_field_mapping(records: List[Record], field_mapping: Mapping[str, str]) -> List[Record]:
    """
    Aplica `origem → destino` em cada registro.

    Origem simples (chave de topo) é renomeada; origem aninhada adiciona
    o destino e preserva os campos originais.

    Todas as origens são lidas do registro original, de modo que
    mapeamentos encadeados ou trocados (`a → b`, `b → a`) não perdem valores.
    """
    if not field_mapping:
        return records

    mapped: List[Record] = []
    for record in records:
        targets: Record = {}
        renamed: List[str] = []
        for source, target in field_mapping.items():
            value = resolve_path(record, source)
            if value is MISSING:
                continue
            if is_simple_key(source) and source != target:
                renamed.append(source)
            targets[target] = value

        out = {k: v for k, v in record.items() if k not in renamed}
        out.update(targets)
        mapped.append(out)
    return mapped


def apply_filters(records: List[Record], filters: Mapping[str, Any]) -> List[Record]:
    """Mantém apenas registros cujos campos listados são iguais ao valor esperado."""
    if not filters:
        return records
    return [
        r for r in records
        if all(key in r and json_equal(r[key], expected) for key, expected in filters.items())
    ]


class ParameterizedCaller:
    """Executa a fase de obtenção de dados de um único stage."""

    def __init__(
        self,
        definition: StageDefinition,
        *,
        transport: HttpTransport,
        delay_s: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.definition = definition
        self.transport = transport
        self.delay_s = delay_s
        self._sleep = sleep

    @property
    def name(self) -> str:
        return self.definition.name

    # ------------------------------------------------------------------
    # Origem
    # ------------------------------------------------------------------

    def _pulled_records(self, ctx: PipelineContext) -> List[Record]:
        data_source = self.definition.source.data_source
        if data_source.from_pipeline:
            return ctx.records_of(data_source.from_pipeline)
        previous = ctx.previous_result()
        return [dict(r) for r in previous.records] if previous is not None else []

    def fetch(self, ctx: PipelineContext) -> List[Record]:
        """
        Obtém os registros do stage conforme o modo de origem.

        Raises:
            HttpStatusError: resposta fora da faixa 2xx.
            TransportError: falha de conexão/timeout/JSON.
            UnresolvedPlaceholderError: template de URL não resolvido.
        """
        source = self.definition.source
        data_source = source.data_source

        pulled: List[Record] = []
        if data_source.use_previous_output:
            pulled = self._pulled_records(ctx)
            ctx.log(stage=self.name, level="INFO", message="pulled upstream records", records=len(pulled))

        if has_url_placeholder(source.endpoint):
            fanned = self.fan_out(pulled, ctx)
            if data_source.use_previous_output and data_source.merge_with_api:
                return pulled + fanned
            return fanned

        if data_source.use_previous_output and not data_source.merge_with_api:
            return pulled

        direct = self.call(source.endpoint, ctx, record=pulled[0] if pulled else None)
        return pulled + direct

    def fan_out(self, upstream: List[Record], ctx: PipelineContext) -> List[Record]:
        """Uma chamada por registro upstream, na ordem, com atraso entre chamadas."""
        ctx.log(stage=self.name, level="INFO", message="fan-out started", calls=len(upstream))
        collected: List[Record] = []
        for position, record in enumerate(upstream):
            url = build_endpoint(self.definition.source.endpoint, record)
            collected.extend(self.call(url, ctx, record=record))
            if position < len(upstream) - 1 and self.delay_s > 0:
                self._sleep(self.delay_s)
        return collected

    # ------------------------------------------------------------------
    # Chamada
    # ------------------------------------------------------------------

    def build_request(self, url: str, ctx: PipelineContext, record: Optional[Record] = None) -> HttpRequest:
        source = self.definition.source
        shared = ctx.shared_pool
        headers: Dict[str, str] = render_headers(source.headers, shared=shared, record=record)

        body: Optional[str] = None
        if source.payload is not None and source.payload.body:
            payload = source.payload
            body = render_payload(
                payload.body,
                param_mapping=payload.param_mapping,
                use_record_fields=payload.use_previous_data_as_params,
                shared=shared,
                record=record,
            )
            headers.setdefault("Content-Type", payload.content_type)

        return HttpRequest(
            method=source.method or "GET",
            url=url,
            headers=headers,
            params=dict(source.parameters),
            body=body,
            timeout=source.timeout_seconds,
        )

    def call(self, url: str, ctx: PipelineContext, record: Optional[Record] = None) -> List[Record]:
        request = self.build_request(url, ctx, record)
        ctx.log(stage=self.name, level="DEBUG", message="http request", method=request.method, url=url)

        response = self.transport.send(request)
        if not response.ok:
            payload = http_status_error(status=response.status, url=url, method=request.method)
            raise HttpStatusError(
                message=payload.message,
                details=payload.details,
                hint=payload.hint,
            )

        extract = self.definition.extract
        records = response_to_records(response.body, extract.max_records)
        records = apply_field_mapping(records, extract.field_mapping)
        records = apply_filters(records, extract.filters)
        ctx.log(stage=self.name, level="DEBUG", message="http response", status=response.status, records=len(records))
        return records

