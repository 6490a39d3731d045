# src/seqflow/core/config/validation.py
"""
Validadores de campos da definição de sequência.

Cada função valida um único valor e levanta `InvalidConfigValueError`
(com campo, valor e motivo) em caso de violação.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse

from .errors import InvalidConfigValueError


def validate_url(field_name: str, url: str) -> None:
    if not url:
        raise InvalidConfigValueError(field_name, url, "URL cannot be empty")

    parsed = urlparse(url)
    if not parsed.scheme:
        raise InvalidConfigValueError(field_name, url, "Invalid URL format: missing scheme")
    if parsed.scheme not in ("http", "https"):
        raise InvalidConfigValueError(field_name, url, f"Unsupported URL scheme: {parsed.scheme}")
    if not parsed.netloc:
        raise InvalidConfigValueError(field_name, url, "Invalid URL format: missing host")


def validate_path(field_name: str, path: str) -> None:
    if not path:
        raise InvalidConfigValueError(field_name, path, "Path cannot be empty")
    if "\0" in path:
        raise InvalidConfigValueError(field_name, path, "Path contains null bytes")


def validate_positive_number(field_name: str, value: int, min_value: int) -> None:
    if value < min_value:
        raise InvalidConfigValueError(field_name, value, f"Value must be at least {min_value}")


def validate_range(field_name: str, value: Any, minimum: Any, maximum: Any) -> None:
    if value < minimum or value > maximum:
        raise InvalidConfigValueError(field_name, value, f"Value must be between {minimum} and {maximum}")


def validate_non_empty_string(field_name: str, value: str) -> None:
    if not value.strip():
        raise InvalidConfigValueError(field_name, value, "Value cannot be empty or whitespace-only")

