"""Image storage providers."""

from .local_storage import FileSystemImageStorage
from .storage_base import ImageStorageProvider, StorageResult

__all__ = ["FileSystemImageStorage", "ImageStorageProvider", "StorageResult"]
