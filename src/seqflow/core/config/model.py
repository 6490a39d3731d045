# src/seqflow/core/config/model.py
"""
Modelo tipado da definição de sequência.

Este módulo converte o dicionário resolvido pelo loader (após
interpolação e merge) em uma árvore de dataclasses imutáveis.

Estrutura:

    SequenceConfig
    ├── sequence: SequenceInfo (name, description, version, execution_order)
    ├── pipelines: StageDefinition[]
    │   ├── source: SourceSpec (endpoint, method, headers, parameters,
    │   │                       data_source, payload, timeouts, retry*)
    │   ├── extract: ExtractSpec (max_records, field_mapping, filters,
    │   │                         data_processing)
    │   ├── transform: TransformSpec (operations, validation,
    │   │                             intermediate, data_enrichment)
    │   ├── load: LoadSpec (output_path, output_formats, filename_pattern,
    │   │                   compression)
    │   ├── dependencies: nomes
    │   └── conditions: ExecutionConditions
    ├── global_settings: GlobalSpec
    ├── monitoring: MonitoringSpec
    └── error_handling: ErrorHandlingSpec

Decisões arquiteturais:
    - Campos opcionais recebem defaults explícitos aqui, não nos Stages
    - Tipos inválidos levantam InvalidConfigValueError com o caminho
      completo do campo (ex.: `pipelines[1].extract.max_records`)
    - `retry_attempts`/`retry_delay_seconds` são apenas preservados;
      nenhum componente do core os consome

Limites explícitos:
    - Não lê arquivos (ver loader)
    - Não executa stages
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from seqflow.core.engine.planner import validate_dependencies

from .errors import InvalidConfigValueError, MissingConfigError
from .validation import (
    validate_non_empty_string,
    validate_path,
    validate_positive_number,
    validate_range,
    validate_url,
)

SUPPORTED_FAILURE_POLICIES = ("stop", "continue", "retry")
SUPPORTED_SORT_ORDERS = ("asc", "desc")


# ---------------------------------------------------------------------------
# Helpers de leitura tipada
# ---------------------------------------------------------------------------

def _type_name(types: Tuple[type, ...]) -> str:
    return "|".join(t.__name__ for t in types)


def _get(data: Dict[str, Any], key: str, path: str, types: Tuple[type, ...], default: Any = None) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if isinstance(value, bool) and bool not in types:
        raise InvalidConfigValueError(f"{path}.{key}", value, f"expected {_type_name(types)}")
    if not isinstance(value, types):
        raise InvalidConfigValueError(f"{path}.{key}", value, f"expected {_type_name(types)}")
    return value


def _section(data: Dict[str, Any], key: str, path: str) -> Dict[str, Any]:
    return _get(data, key, path, (dict,), default={})


def _str_list(data: Dict[str, Any], key: str, path: str) -> Optional[List[str]]:
    value = _get(data, key, path, (list,))
    if value is None:
        return None
    for item in value:
        if not isinstance(item, str):
            raise InvalidConfigValueError(f"{path}.{key}", value, "expected list of strings")
    return list(value)


def _str_map(data: Dict[str, Any], key: str, path: str) -> Dict[str, str]:
    value = _section(data, key, path)
    out: Dict[str, str] = {}
    for k, v in value.items():
        if isinstance(v, bool):
            out[str(k)] = "true" if v else "false"
        elif isinstance(v, (str, int, float)):
            out[str(k)] = str(v)
        else:
            raise InvalidConfigValueError(f"{path}.{key}.{k}", v, "expected scalar value")
    return out


def _non_negative(data: Dict[str, Any], key: str, path: str, types: Tuple[type, ...] = (int,)) -> Any:
    value = _get(data, key, path, types)
    if value is not None and value < 0:
        raise InvalidConfigValueError(f"{path}.{key}", value, "must be >= 0")
    return value


# ---------------------------------------------------------------------------
# source
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DataSourceSpec:
    use_previous_output: bool = False
    from_pipeline: Optional[str] = None
    merge_with_api: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "DataSourceSpec":
        return cls(
            use_previous_output=_get(data, "use_previous_output", path, (bool,), False),
            from_pipeline=_get(data, "from_pipeline", path, (str,)),
            merge_with_api=_get(data, "merge_with_api", path, (bool,), False),
        )


@dataclass(frozen=True)
class PayloadSpec:
    body: str = ""
    content_type: str = "application/json"
    use_previous_data_as_params: bool = False
    param_mapping: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "PayloadSpec":
        return cls(
            body=_get(data, "body", path, (str,), ""),
            content_type=_get(data, "content_type", path, (str,), "application/json"),
            use_previous_data_as_params=_get(data, "use_previous_data_as_params", path, (bool,), False),
            param_mapping=_str_map(data, "param_mapping", path),
        )


@dataclass(frozen=True)
class SourceSpec:
    type: str = "api"
    endpoint: str = ""
    method: str = "GET"
    timeout_seconds: Optional[float] = None
    retry_attempts: Optional[int] = None
    retry_delay_seconds: Optional[float] = None
    headers: Dict[str, str] = field(default_factory=dict)
    parameters: Dict[str, str] = field(default_factory=dict)
    data_source: DataSourceSpec = field(default_factory=DataSourceSpec)
    payload: Optional[PayloadSpec] = None

    @property
    def is_pull_only(self) -> bool:
        ds = self.data_source
        return ds.use_previous_output and not ds.merge_with_api and "{" not in self.endpoint

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "SourceSpec":
        payload = _get(data, "payload", path, (dict,))
        return cls(
            type=_get(data, "type", path, (str,), "api"),
            endpoint=_get(data, "endpoint", path, (str,), ""),
            method=_get(data, "method", path, (str,), "GET").upper(),
            timeout_seconds=_non_negative(data, "timeout_seconds", path, (int, float)),
            retry_attempts=_non_negative(data, "retry_attempts", path),
            retry_delay_seconds=_non_negative(data, "retry_delay_seconds", path, (int, float)),
            headers=_str_map(data, "headers", path),
            parameters=_str_map(data, "parameters", path),
            data_source=DataSourceSpec.from_dict(_section(data, "data_source", path), f"{path}.data_source"),
            payload=PayloadSpec.from_dict(payload, f"{path}.payload") if payload is not None else None,
        )


# ---------------------------------------------------------------------------
# extract
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DataProcessingSpec:
    deduplicate: bool = False
    deduplicate_fields: Optional[List[str]] = None
    sort_by: Optional[str] = None
    sort_order: str = "asc"

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "DataProcessingSpec":
        order = _get(data, "sort_order", path, (str,), "asc").lower()
        if order not in SUPPORTED_SORT_ORDERS:
            raise InvalidConfigValueError(f"{path}.sort_order", order, "expected 'asc' or 'desc'")
        return cls(
            deduplicate=_get(data, "deduplicate", path, (bool,), False),
            deduplicate_fields=_str_list(data, "deduplicate_fields", path),
            sort_by=_get(data, "sort_by", path, (str,)),
            sort_order=order,
        )


@dataclass(frozen=True)
class ExtractSpec:
    max_records: Optional[int] = None
    concurrent_requests: Optional[int] = None
    field_mapping: Dict[str, str] = field(default_factory=dict)
    filters: Dict[str, Any] = field(default_factory=dict)
    data_processing: DataProcessingSpec = field(default_factory=DataProcessingSpec)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "ExtractSpec":
        return cls(
            max_records=_non_negative(data, "max_records", path),
            concurrent_requests=_get(data, "concurrent_requests", path, (int,)),
            field_mapping=_str_map(data, "field_mapping", path),
            filters=dict(_section(data, "filters", path)),
            data_processing=DataProcessingSpec.from_dict(
                _section(data, "data_processing", path), f"{path}.data_processing"
            ),
        )


# ---------------------------------------------------------------------------
# transform
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OperationsSpec:
    clean_text: bool = False
    trim_whitespace: bool = False
    remove_html_tags: bool = False
    normalize_fields: List[str] = field(default_factory=list)
    keep_only_fields: Optional[List[str]] = None
    exclude_fields: Optional[List[str]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "OperationsSpec":
        return cls(
            clean_text=_get(data, "clean_text", path, (bool,), False),
            trim_whitespace=_get(data, "trim_whitespace", path, (bool,), False),
            remove_html_tags=_get(data, "remove_html_tags", path, (bool,), False),
            normalize_fields=_str_list(data, "normalize_fields", path) or [],
            keep_only_fields=_str_list(data, "keep_only_fields", path),
            exclude_fields=_str_list(data, "exclude_fields", path),
        )


@dataclass(frozen=True)
class ValidationSpec:
    required_fields: List[str] = field(default_factory=list)
    field_types: Dict[str, str] = field(default_factory=dict)
    min_records: Optional[int] = None
    max_records: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "ValidationSpec":
        return cls(
            required_fields=_str_list(data, "required_fields", path) or [],
            field_types=_str_map(data, "field_types", path),
            min_records=_non_negative(data, "min_records", path),
            max_records=_non_negative(data, "max_records", path),
        )


@dataclass(frozen=True)
class IntermediateSpec:
    conditions: Dict[str, Any] = field(default_factory=dict)
    export_to_shared: bool = False
    shared_key: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "IntermediateSpec":
        return cls(
            conditions=dict(_section(data, "conditions", path)),
            export_to_shared=_get(data, "export_to_shared", path, (bool,), False),
            shared_key=_get(data, "shared_key", path, (str,), ""),
        )


@dataclass(frozen=True)
class EnrichmentSpec:
    lookup_data: Dict[str, str] = field(default_factory=dict)
    computed_fields: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "EnrichmentSpec":
        return cls(
            lookup_data=_str_map(data, "lookup_data", path),
            computed_fields=_str_map(data, "computed_fields", path),
        )


@dataclass(frozen=True)
class TransformSpec:
    operations: OperationsSpec = field(default_factory=OperationsSpec)
    validation: ValidationSpec = field(default_factory=ValidationSpec)
    intermediate: Optional[IntermediateSpec] = None
    data_enrichment: EnrichmentSpec = field(default_factory=EnrichmentSpec)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "TransformSpec":
        intermediate = _get(data, "intermediate", path, (dict,))
        return cls(
            operations=OperationsSpec.from_dict(_section(data, "operations", path), f"{path}.operations"),
            validation=ValidationSpec.from_dict(_section(data, "validation", path), f"{path}.validation"),
            intermediate=(
                IntermediateSpec.from_dict(intermediate, f"{path}.intermediate")
                if intermediate is not None else None
            ),
            data_enrichment=EnrichmentSpec.from_dict(
                _section(data, "data_enrichment", path), f"{path}.data_enrichment"
            ),
        )


# ---------------------------------------------------------------------------
# load
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CompressionSpec:
    enabled: bool = False
    filename: str = ""
    include_metadata: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "CompressionSpec":
        return cls(
            enabled=_get(data, "enabled", path, (bool,), False),
            filename=_get(data, "filename", path, (str,), ""),
            include_metadata=_get(data, "include_metadata", path, (bool,), False),
        )


@dataclass(frozen=True)
class LoadSpec:
    output_path: str = ""
    output_formats: List[str] = field(default_factory=lambda: ["json"])
    filename_pattern: Optional[str] = None
    compression: CompressionSpec = field(default_factory=CompressionSpec)
    append_to_sequence: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "LoadSpec":
        formats = _str_list(data, "output_formats", path)
        return cls(
            output_path=_get(data, "output_path", path, (str,), ""),
            output_formats=[f.lower() for f in formats] if formats is not None else ["json"],
            filename_pattern=_get(data, "filename_pattern", path, (str,)),
            compression=CompressionSpec.from_dict(_section(data, "compression", path), f"{path}.compression"),
            append_to_sequence=_get(data, "append_to_sequence", path, (bool,), False),
        )


# ---------------------------------------------------------------------------
# conditions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RecordCountCondition:
    min: Optional[int] = None
    max: Optional[int] = None
    from_pipeline: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "RecordCountCondition":
        return cls(
            min=_non_negative(data, "min", path),
            max=_non_negative(data, "max", path),
            from_pipeline=_get(data, "from_pipeline", path, (str,)),
        )


@dataclass(frozen=True)
class ExecutionConditions:
    when_previous_succeeded: bool = False
    when_records_count: Optional[RecordCountCondition] = None
    when_shared_data: Dict[str, Any] = field(default_factory=dict)
    skip_if_empty: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str) -> "ExecutionConditions":
        count = _get(data, "when_records_count", path, (dict,))
        return cls(
            when_previous_succeeded=_get(data, "when_previous_succeeded", path, (bool,), False),
            when_records_count=(
                RecordCountCondition.from_dict(count, f"{path}.when_records_count")
                if count is not None else None
            ),
            when_shared_data=dict(_section(data, "when_shared_data", path)),
            skip_if_empty=_get(data, "skip_if_empty", path, (bool,), False),
        )


# ---------------------------------------------------------------------------
# stage
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StageDefinition:
    name: str
    description: str = ""
    enabled: bool = True
    source: SourceSpec = field(default_factory=SourceSpec)
    extract: ExtractSpec = field(default_factory=ExtractSpec)
    transform: TransformSpec = field(default_factory=TransformSpec)
    load: LoadSpec = field(default_factory=LoadSpec)
    dependencies: List[str] = field(default_factory=list)
    conditions: ExecutionConditions = field(default_factory=ExecutionConditions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "pipeline") -> "StageDefinition":
        if not isinstance(data, dict):
            raise InvalidConfigValueError(path, data, "expected table")
        name = _get(data, "name", path, (str,))
        if name is None:
            raise MissingConfigError(f"{path}.name")
        validate_non_empty_string(f"{path}.name", name)
        return cls(
            name=name,
            description=_get(data, "description", path, (str,), ""),
            enabled=_get(data, "enabled", path, (bool,), True),
            source=SourceSpec.from_dict(_section(data, "source", path), f"{path}.source"),
            extract=ExtractSpec.from_dict(_section(data, "extract", path), f"{path}.extract"),
            transform=TransformSpec.from_dict(_section(data, "transform", path), f"{path}.transform"),
            load=LoadSpec.from_dict(_section(data, "load", path), f"{path}.load"),
            dependencies=_str_list(data, "dependencies", path) or [],
            conditions=ExecutionConditions.from_dict(_section(data, "conditions", path), f"{path}.conditions"),
        )

    def validate(self) -> None:
        prefix = f"pipelines.{self.name}"
        if not self.source.is_pull_only or self.source.endpoint:
            validate_url(f"{prefix}.source.endpoint", self.source.endpoint)
        validate_path(f"{prefix}.load.output_path", self.load.output_path)
        if self.extract.concurrent_requests is not None:
            validate_positive_number(f"{prefix}.extract.concurrent_requests", self.extract.concurrent_requests, 1)
            validate_range(f"{prefix}.extract.concurrent_requests", self.extract.concurrent_requests, 1, 100)


# ---------------------------------------------------------------------------
# sequence
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SequenceInfo:
    name: str
    description: str = ""
    version: str = ""
    execution_order: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "sequence") -> "SequenceInfo":
        name = _get(data, "name", path, (str,))
        if name is None:
            raise MissingConfigError(f"{path}.name")
        return cls(
            name=name,
            description=_get(data, "description", path, (str,), ""),
            version=str(_get(data, "version", path, (str, int, float), "")),
            execution_order=_str_list(data, "execution_order", path) or [],
        )


@dataclass(frozen=True)
class GlobalSpec:
    working_directory: Optional[str] = None
    shared_variables: Dict[str, Any] = field(default_factory=dict)
    timeout_minutes: Optional[int] = None
    fan_out_delay_ms: int = 100

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "global") -> "GlobalSpec":
        delay = _non_negative(data, "fan_out_delay_ms", path)
        return cls(
            working_directory=_get(data, "working_directory", path, (str,)),
            shared_variables=dict(_section(data, "shared_variables", path)),
            timeout_minutes=_non_negative(data, "timeout_minutes", path),
            fan_out_delay_ms=100 if delay is None else delay,
        )


@dataclass(frozen=True)
class MonitoringSpec:
    enabled: bool = False
    log_level: Optional[str] = None
    export_metrics: bool = False
    metrics_file: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "monitoring") -> "MonitoringSpec":
        return cls(
            enabled=_get(data, "enabled", path, (bool,), False),
            log_level=_get(data, "log_level", path, (str,)),
            export_metrics=_get(data, "export_metrics", path, (bool,), False),
            metrics_file=_get(data, "metrics_file", path, (str,)),
        )


@dataclass(frozen=True)
class ErrorHandlingSpec:
    on_pipeline_failure: str = "stop"
    retry_attempts: Optional[int] = None
    retry_delay_seconds: Optional[float] = None
    fallback_pipeline: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], path: str = "error_handling") -> "ErrorHandlingSpec":
        policy = _get(data, "on_pipeline_failure", path, (str,), "stop").lower()
        if policy not in SUPPORTED_FAILURE_POLICIES:
            raise InvalidConfigValueError(
                f"{path}.on_pipeline_failure", policy, f"expected one of {', '.join(SUPPORTED_FAILURE_POLICIES)}"
            )
        return cls(
            on_pipeline_failure=policy,
            retry_attempts=_non_negative(data, "retry_attempts", path),
            retry_delay_seconds=_non_negative(data, "retry_delay_seconds", path, (int, float)),
            fallback_pipeline=_get(data, "fallback_pipeline", path, (str,)),
        )


@dataclass(frozen=True)
class SequenceConfig:
    """
    Definição tipada e completa de uma sequência.

    Invariantes (após `validate()`):
        - nomes de stage são únicos
        - `execution_order` referencia apenas nomes declarados
        - o grafo de `dependencies` é acíclico
    """
    sequence: SequenceInfo
    pipelines: Tuple[StageDefinition, ...] = ()
    global_settings: GlobalSpec = field(default_factory=GlobalSpec)
    monitoring: MonitoringSpec = field(default_factory=MonitoringSpec)
    error_handling: ErrorHandlingSpec = field(default_factory=ErrorHandlingSpec)
    config_hash: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, config_hash: str = "") -> "SequenceConfig":
        sequence = _get(data, "sequence", "config", (dict,))
        if sequence is None:
            raise MissingConfigError("sequence")
        raw_pipelines = _get(data, "pipelines", "config", (list,), [])
        return cls(
            sequence=SequenceInfo.from_dict(sequence),
            pipelines=tuple(
                StageDefinition.from_dict(p, f"pipelines[{i}]") for i, p in enumerate(raw_pipelines)
            ),
            global_settings=GlobalSpec.from_dict(_section(data, "global", "config")),
            monitoring=MonitoringSpec.from_dict(_section(data, "monitoring", "config")),
            error_handling=ErrorHandlingSpec.from_dict(_section(data, "error_handling", "config")),
            config_hash=config_hash,
        )

    def validate(self) -> None:
        """
        Valida a definição completa.

        Raises:
            UnknownStageError: nome desconhecido em execution_order/dependencies.
            CircularDependencyError: ciclo no grafo de dependencies.
            DuplicateStageNameError: nomes de stage repetidos.
            InvalidConfigValueError: endpoint, output_path ou concorrência inválidos.
        """
        validate_non_empty_string("sequence.name", self.sequence.name)
        validate_dependencies(self.pipelines, self.sequence.execution_order)
        for pipeline in self.pipelines:
            pipeline.validate()

    def get_pipeline(self, name: str) -> Optional[StageDefinition]:
        for pipeline in self.pipelines:
            if pipeline.name == name:
                return pipeline
        return None

    def get_enabled_pipelines(self) -> List[StageDefinition]:
        enabled: List[StageDefinition] = []
        for name in self.sequence.execution_order:
            pipeline = self.get_pipeline(name)
            if pipeline is not None and pipeline.enabled:
                enabled.append(pipeline)
        return enabled
