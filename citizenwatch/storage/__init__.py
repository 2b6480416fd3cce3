"""
CitizenWatch - Photo Storage Module
"""

from citizenwatch.storage.blob_store import (
    BlobStore,
    LocalBlobStore,
    GCSBlobStore,
    temporary_upload,
    photo_object_name,
)

__all__ = [
    "BlobStore",
    "LocalBlobStore",
    "GCSBlobStore",
    "temporary_upload",
    "photo_object_name",
]
