# app/core/storage.py
"""
Object storage for profile pictures (Google Cloud Storage).

The google-cloud-storage client is blocking, so uploads run in a worker thread
to keep the event loop free. The client is created lazily on first upload;
a missing bucket configuration surfaces as UploadError on the request that
needed it rather than as a startup crash.
"""
import asyncio
import json
import logging
import re
import time

from google.cloud import storage

from app.config import Settings
from app.core.errors import UploadError

logger = logging.getLogger("uvicorn.error")

PUBLIC_URL_BASE = "https://storage.googleapis.com"
PROFILE_PICTURE_PREFIX = "profilePictures"


def _safe_filename(name: str | None) -> str:
    # Keep object names URL-friendly
    base = (name or "upload").rsplit("/", 1)[-1]
    return re.sub(r"[^A-Za-z0-9._-]", "_", base) or "upload"


class GCSStorage:
    def __init__(self, bucket_name: str | None, credentials_json: str | None = None):
        self.bucket_name = bucket_name
        self._credentials_json = credentials_json
        self._bucket = None

    @classmethod
    def from_settings(cls, s: Settings) -> "GCSStorage":
        return cls(s.gcs_bucket, s.gcs_credentials_json)

    def _get_bucket(self):
        if self._bucket is None:
            if self._credentials_json:
                info = json.loads(self._credentials_json)
                client = storage.Client.from_service_account_info(info)
            else:
                # Application Default Credentials
                client = storage.Client()
            self._bucket = client.bucket(self.bucket_name)
        return self._bucket

    def _upload_blocking(self, object_name: str, data: bytes, content_type: str) -> str:
        blob = self._get_bucket().blob(object_name)
        blob.upload_from_string(data, content_type=content_type)
        return f"{PUBLIC_URL_BASE}/{self.bucket_name}/{object_name}"

    async def upload_profile_picture(self, data: bytes, filename: str | None, content_type: str) -> str:
        """
        Upload an image and return its public URL.

        Raises:
            UploadError: storage not configured, bad credentials, or the upload failed
        """
        if not self.bucket_name:
            logger.error("[storage] GCLOUD_STORAGE_BUCKET is not set, cannot upload")
            raise UploadError("Object storage is not configured")
        object_name = f"{PROFILE_PICTURE_PREFIX}/{int(time.time() * 1000)}_{_safe_filename(filename)}"
        try:
            url = await asyncio.to_thread(self._upload_blocking, object_name, data, content_type)
        except Exception as e:
            logger.exception("[storage] upload of %s failed", object_name)
            raise UploadError() from e
        logger.info("[storage] uploaded %s (%d bytes)", object_name, len(data))
        return url
