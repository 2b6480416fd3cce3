"""
Blob Store - durable storage for report photos

Backends:
- LocalBlobStore: files under a directory served by the API at /uploads
- GCSBlobStore: Google Cloud Storage bucket via the Firebase Admin SDK

Every `put` removes the local source file whether the upload succeeds
or fails.
"""

import logging
import mimetypes
import os
import shutil
import tempfile
import time
import uuid
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from citizenwatch.core.constants import PHOTO_CACHE_CONTROL, PHOTO_NAME_PREFIX
from citizenwatch.core.exceptions import UpstreamStorageError

logger = logging.getLogger(__name__)


def photo_object_name(filename: Optional[str] = None, mime_type: Optional[str] = None) -> str:
    """
    Build a unique object name: report-<epoch-ms>-<random><ext>.

    The extension comes from the uploaded filename, else from the MIME type.
    """
    ext = Path(filename).suffix.lower() if filename else ""
    if not ext and mime_type:
        ext = mimetypes.guess_extension(mime_type) or ""
    stamp = int(time.time() * 1000)
    return f"{PHOTO_NAME_PREFIX}-{stamp}-{uuid.uuid4().hex[:10]}{ext}"


def _remove_quietly(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove temporary file {path}: {e}")


@contextmanager
def temporary_upload(
    data: bytes,
    suffix: str = "",
    directory: Optional[str] = None
) -> Generator[str, None, None]:
    """
    Write photo bytes to a temporary file and yield its path.

    The file is removed on exit unless a Blob Store already consumed it.
    """
    fd, path = tempfile.mkstemp(prefix="upload-", suffix=suffix, dir=directory)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
        yield path
    finally:
        _remove_quietly(path)


class BlobStore(ABC):
    """Contract: put(local_path, desired_name) -> public URL."""

    name: str = "abstract"

    def put(self, local_path: str, desired_name: str, content_type: Optional[str] = None) -> str:
        """
        Upload a local file and return its durable public URL.

        Raises:
            UpstreamStorageError: the backend rejected or failed the write
        """
        try:
            url = self._upload(local_path, desired_name, content_type)
            logger.info(f"Stored photo {desired_name} -> {url}")
            return url
        except UpstreamStorageError:
            raise
        except Exception as e:
            logger.error(f"Photo upload failed for {desired_name}: {e}")
            raise UpstreamStorageError() from e
        finally:
            _remove_quietly(local_path)

    @abstractmethod
    def _upload(self, local_path: str, desired_name: str, content_type: Optional[str]) -> str:
        """Backend-specific write; may raise any backend error."""


class LocalBlobStore(BlobStore):
    """Stores photos in a local directory served as static files."""

    name = "local"

    def __init__(self, directory: str, url_path: str = "/uploads"):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)
        self.url_path = url_path.rstrip("/")

    def _upload(self, local_path: str, desired_name: str, content_type: Optional[str]) -> str:
        target = self.directory / Path(desired_name).name
        shutil.copyfile(local_path, target)
        return f"{self.url_path}/{target.name}"


class GCSBlobStore(BlobStore):
    """
    Google Cloud Storage through the Firebase Admin SDK.

    The bucket must allow public reads for the returned URL to resolve.
    """

    name = "gcs"

    PUBLIC_URL = "https://storage.googleapis.com/{bucket}/{name}"

    def __init__(
        self,
        bucket_name: str,
        credentials_path: Optional[str] = None,
        bucket=None
    ):
        """
        Args:
            bucket_name: GCS bucket holding the photos
            credentials_path: Service account JSON, else application default credentials
            bucket: Pre-built bucket object (skips Firebase initialization)
        """
        if not bucket_name:
            raise ValueError("bucket_name is required for GCS photo storage")
        self.bucket_name = bucket_name
        self.credentials_path = credentials_path
        self._bucket = bucket

    def _get_bucket(self):
        if self._bucket is None:
            import firebase_admin
            from firebase_admin import credentials, storage

            try:
                app = firebase_admin.get_app()
            except ValueError:
                cred = (
                    credentials.Certificate(self.credentials_path)
                    if self.credentials_path
                    else credentials.ApplicationDefault()
                )
                app = firebase_admin.initialize_app(cred, {"storageBucket": self.bucket_name})
                logger.info("Firebase Admin SDK initialized for photo storage")

            self._bucket = storage.bucket(self.bucket_name, app=app)
        return self._bucket

    def _upload(self, local_path: str, desired_name: str, content_type: Optional[str]) -> str:
        blob = self._get_bucket().blob(desired_name)
        blob.cache_control = PHOTO_CACHE_CONTROL
        blob.upload_from_filename(local_path, content_type=content_type)
        return self.PUBLIC_URL.format(bucket=self.bucket_name, name=desired_name)
