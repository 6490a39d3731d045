# src/seqflow/core/config/loader.py
"""
Loader canônico da definição de sequência do SeqFlow.

A definição é resolvida a partir de:
    - um arquivo principal (obrigatório)
    - um arquivo local de overrides (opcional)

Etapas de resolução:
    1. Leitura do texto bruto e interpolação `${VAR}` com o ambiente
    2. Parse no formato declarado pela extensão (TOML, YAML ou JSON)
    3. Deep-merge determinístico do override local
    4. Interpolação `${CHAVE}` remanescente com `global.shared_variables`
    5. Cálculo do hash canônico e conversão para `SequenceConfig`

Princípios fundamentais:
    - Configuração é declarativa e explícita
    - Erros estruturais são tratados como falhas fatais
    - A mesma entrada (arquivos + ambiente) sempre produz a mesma definição

Limites explícitos:
    - Não chama `SequenceConfig.validate()` (responsabilidade do chamador)
    - Não executa stages
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml  # PyYAML

from .errors import (
    ConfigFileNotFoundError,
    ConfigParseError,
    InvalidConfigRootTypeError,
    UnsupportedConfigFormatError,
)
from .hashing import compute_config_hash
from .interpolation import substitute_env_vars, substitute_variables
from .merge import deep_merge
from .model import SequenceConfig

SUPPORTED_SUFFIXES = (".toml", ".yaml", ".yml", ".json")


def _load_file(path: Path, environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Carrega um arquivo de definição e valida sua estrutura básica.

    Decisões arquiteturais:
        - Variáveis de ambiente são aplicadas ao texto antes do parse,
          de modo que `${PORT}` pode produzir um número em TOML/YAML
        - Arquivos vazios são interpretados como dicionários vazios

    Raises:
        ConfigFileNotFoundError: Se o arquivo não existir.
        UnsupportedConfigFormatError: Se a extensão não for suportada.
        ConfigParseError: Se o conteúdo não puder ser interpretado.
        InvalidConfigRootTypeError: Se a raiz não for um mapeamento.
    """
    if not path.exists():
        raise ConfigFileNotFoundError(f"Arquivo de configuração não encontrado: {path}")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise UnsupportedConfigFormatError(f"Formato não suportado: {path.suffix}")

    text = substitute_env_vars(path.read_text(encoding="utf-8"), environ)

    try:
        if suffix == ".toml":
            data: Any = tomllib.loads(text)
        elif suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text) if text.strip() else None
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigParseError(f"Falha ao interpretar {path}: {exc}") from exc

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise InvalidConfigRootTypeError(
            f"Config root deve ser dict, recebido: {type(data).__name__}"
        )

    return data


def load_raw_config(
    *,
    path: str,
    local_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Dict[str, Any]:
    """
    Resolve a definição efetiva como dicionário puro (antes da tipagem).

    O override local é opcional: quando informado mas inexistente,
    é ignorado silenciosamente.
    """
    effective = _load_file(Path(path), environ)

    if local_path is not None:
        local_file = Path(local_path)
        if local_file.exists():
            effective = deep_merge(effective, _load_file(local_file, environ))

    global_section = effective.get("global")
    shared_variables = global_section.get("shared_variables") if isinstance(global_section, dict) else None
    if isinstance(shared_variables, dict) and shared_variables:
        effective = substitute_variables(effective, shared_variables)

    return effective


def load_sequence_config(
    *,
    path: str,
    local_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> SequenceConfig:
    """
    Carrega, resolve e tipa a definição de sequência.

    Args:
        path (str): Arquivo principal (.toml, .yaml, .yml, .json).
        local_path (Optional[str]): Override local opcional.
        environ (Optional[Mapping[str, str]]): Ambiente para `${VAR}`;
            `os.environ` quando omitido.

    Returns:
        SequenceConfig: Definição tipada, com `config_hash` preenchido.

    Raises:
        ConfigError: Qualquer subclasse, em falhas de leitura, merge ou tipagem.
    """
    raw = load_raw_config(path=path, local_path=local_path, environ=environ)
    return SequenceConfig.from_dict(raw, config_hash=compute_config_hash(raw))
