# src/seqflow/storage/s3.py
"""
Backend de storage em S3 (boto3).

Chaves são montadas como `{prefix}/{name}` (sem barra duplicada).
`endpoint_url` permite apontar para serviços compatíveis com S3.
"""

from __future__ import annotations

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from seqflow.core.errors import STORAGE_IO_ERROR
from seqflow.core.exceptions import StorageError


class S3Storage:
    """Storage de artefatos em um bucket S3."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
    ) -> None:
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def key_for(self, name: str) -> str:
        name = name.lstrip("/")
        return f"{self.prefix}/{name}" if self.prefix else name

    def write_file(self, name: str, data: bytes) -> None:
        key = self.key_for(name)
        try:
            self._client.put_object(
                Bucket=self.bucket, Key=key, Body=data, ContentType="application/zip",
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(
                message=f"S3 write failed for {key!r}",
                details={"type": STORAGE_IO_ERROR, "bucket": self.bucket, "key": key, "reason": str(exc)},
                hint="Verifique bucket, credenciais AWS e região",
            ) from exc

    def read_file(self, name: str) -> bytes:
        key = self.key_for(name)
        try:
            resp = self._client.get_object(Bucket=self.bucket, Key=key)
            return resp["Body"].read()
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(
                message=f"S3 read failed for {key!r}",
                details={"type": STORAGE_IO_ERROR, "bucket": self.bucket, "key": key, "reason": str(exc)},
            ) from exc
