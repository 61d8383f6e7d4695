"""
Object storage backends for product images.

LocalObjectStorage writes under UPLOAD_DIR and serves files through the
/uploads static mount. SupabaseObjectStorage talks to the Supabase Storage
REST API over httpx.
"""
import os
import time
import uuid
import logging
import mimetypes
from typing import Optional

import httpx

from precast.config import get_settings
from precast.services.errors import UploadError

logger = logging.getLogger(__name__)

OBJECT_PREFIX = "products"


def generate_object_path(filename: str, content_type: Optional[str] = None) -> str:
    """Unique object path: products/<epoch millis>-<random>.<ext>"""
    ext = file_extension(filename, content_type)
    return f"{OBJECT_PREFIX}/{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}.{ext}"


def file_extension(filename: str, content_type: Optional[str] = None) -> str:
    """Extension taken from the filename, falling back to the MIME type"""
    _, ext = os.path.splitext(filename or "")
    if ext:
        return ext[1:].lower()
    if content_type:
        guessed = mimetypes.guess_extension(content_type)
        if guessed:
            return guessed[1:].lower()
    return "bin"


class ObjectStorage:
    """Path-addressed binary storage returning public URLs"""

    bucket: str

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        raise NotImplementedError

    def public_url(self, path: str) -> str:
        raise NotImplementedError


class LocalObjectStorage(ObjectStorage):
    def __init__(self, root_dir: str, base_url: str, bucket: str = "images"):
        self.root_dir = root_dir
        self.base_url = base_url.rstrip("/")
        self.bucket = bucket

    def _file_path(self, path: str) -> str:
        bucket_dir = os.path.realpath(os.path.join(self.root_dir, self.bucket))
        file_path = os.path.realpath(os.path.join(bucket_dir, path))
        # Prevent path traversal outside the bucket directory
        if not file_path.startswith(bucket_dir + os.sep):
            raise UploadError(path, "Invalid storage path")
        return file_path

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        file_path = self._file_path(path)
        if os.path.exists(file_path):
            raise UploadError(path, "The resource already exists")

        try:
            os.makedirs(os.path.dirname(file_path), exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise UploadError(path, f"Could not write file: {e.strerror or e}") from e

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/uploads/{self.bucket}/{path}"


class SupabaseObjectStorage(ObjectStorage):
    def __init__(
        self,
        project_url: str,
        service_key: str,
        bucket: str = "images",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.project_url = project_url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self._transport = transport

    def _headers(self, content_type: Optional[str]) -> dict:
        return {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
            "Content-Type": content_type or "application/octet-stream",
            "x-upsert": "false",
        }

    async def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        url = f"{self.project_url}/storage/v1/object/{self.bucket}/{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, content=content, headers=self._headers(content_type))
        except httpx.HTTPError as e:
            raise UploadError(path, f"Storage unreachable: {e}") from e

        if response.status_code >= 400:
            raise UploadError(path, _error_message(response))

    def public_url(self, path: str) -> str:
        return f"{self.project_url}/storage/v1/object/public/{self.bucket}/{path}"


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"Storage returned HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or f"Storage returned HTTP {response.status_code}")
    return f"Storage returned HTTP {response.status_code}"


def build_storage() -> ObjectStorage:
    """Storage backend selected by STORAGE_BACKEND"""
    settings = get_settings()
    if settings.STORAGE_BACKEND == "supabase":
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
            raise RuntimeError("Supabase storage not configured: SUPABASE_URL and SUPABASE_SERVICE_KEY are required")
        return SupabaseObjectStorage(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_KEY,
            bucket=settings.STORAGE_BUCKET,
            timeout=settings.STORAGE_TIMEOUT_SECONDS,
        )
    if settings.STORAGE_BACKEND != "local":
        raise RuntimeError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
    return LocalObjectStorage(settings.UPLOAD_DIR, settings.PUBLIC_BASE_URL, bucket=settings.STORAGE_BUCKET)
