"""Azure Blob storage adapter."""

from __future__ import annotations

from dataclasses import dataclass

from azure.core.exceptions import (
    AzureError,
    HttpResponseError,
    ResourceNotFoundError,
)
from azure.storage.blob import BlobServiceClient, ContentSettings


class StorageError(RuntimeError):
    """Raised when the blob service rejects or cannot complete a request."""


@dataclass(frozen=True, slots=True)
class AzureBlobConfig:
    connection_string: str
    container: str
    request_timeout_seconds: float = 30.0


@dataclass(frozen=True, slots=True)
class StoredBlob:
    blob_name: str
    url: str
    etag: str | None


class AzureBlobStorage:
    """Write whole files into one container of a storage account."""

    def __init__(self, config: AzureBlobConfig) -> None:
        self._config = config
        try:
            self._service = BlobServiceClient.from_connection_string(
                conn_str=config.connection_string,
            )
        except ValueError as exc:
            raise StorageError("Azure Storage connection string is invalid") from exc
        self._container_client = self._service.get_container_client(config.container)

    @property
    def config(self) -> AzureBlobConfig:
        return self._config

    def check_connection(self) -> None:
        try:
            self._container_client.get_container_properties()
        except ResourceNotFoundError as exc:
            raise StorageError("Blob container does not exist or is not accessible.") from exc
        except AzureError as exc:
            raise StorageError("Failed to access blob container.") from exc

    def write(self, blob_name: str, data: bytes, *, content_type: str | None = None) -> StoredBlob:
        """Upload ``data`` to ``blob_name``, replacing any existing blob."""

        blob = self._container_client.get_blob_client(blob_name)
        content_settings = ContentSettings(content_type=content_type) if content_type else None
        try:
            result = blob.upload_blob(
                data,
                overwrite=True,
                content_settings=content_settings,
                timeout=self._config.request_timeout_seconds,
            )
        except HttpResponseError as exc:
            raise StorageError(f"Failed to upload blob: {exc.reason or exc.message}") from exc
        except AzureError as exc:
            raise StorageError(f"Failed to upload blob: {exc.message}") from exc

        etag = result.get("etag") if isinstance(result, dict) else None
        return StoredBlob(blob_name=blob_name, url=blob.url, etag=etag)


__all__ = ["AzureBlobConfig", "AzureBlobStorage", "StorageError", "StoredBlob"]
