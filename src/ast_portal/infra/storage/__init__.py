from .azure_blob import AzureBlobConfig, AzureBlobStorage, StorageError, StoredBlob

__all__ = ["AzureBlobConfig", "AzureBlobStorage", "StorageError", "StoredBlob"]
