"""
Image uploader - stores product images one at a time and collects their
public URLs. A failed file is recorded and the batch carries on.
"""
import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from precast.config import get_settings
from precast.services.errors import UploadError
from precast.services.storage import ObjectStorage, build_storage, file_extension, generate_object_path

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "avif", "svg", "bmp"}


@dataclass
class ImageFile:
    filename: str
    content: bytes
    content_type: Optional[str] = None


@dataclass
class UploadFailure:
    filename: str
    message: str


@dataclass
class UploadBatchResult:
    urls: List[str] = field(default_factory=list)
    failures: List[UploadFailure] = field(default_factory=list)


class ImageUploader:
    def __init__(self, storage: ObjectStorage, max_size: int):
        self.storage = storage
        self.max_size = max_size

    def _validate(self, image: ImageFile) -> None:
        if image.content_type and not image.content_type.startswith("image/"):
            raise UploadError(image.filename, f"'{image.filename}' is not an image")
        ext = file_extension(image.filename, image.content_type)
        if ext not in ALLOWED_EXTENSIONS:
            raise UploadError(image.filename, f"File type '.{ext}' not allowed")
        if not image.content:
            raise UploadError(image.filename, f"'{image.filename}' is empty")
        if len(image.content) > self.max_size:
            raise UploadError(
                image.filename,
                f"'{image.filename}' is too large. Maximum size: {self.max_size // (1024 * 1024)}MB",
            )

    async def upload_one(self, image: ImageFile) -> str:
        """Store a single image and return its public URL"""
        self._validate(image)
        path = generate_object_path(image.filename, image.content_type)
        await self.storage.upload(path, image.content, image.content_type)
        logger.info(f"Uploaded '{image.filename}' to {self.storage.bucket}/{path} ({len(image.content)} bytes)")
        return self.storage.public_url(path)

    async def upload_batch(self, images: Iterable[ImageFile]) -> UploadBatchResult:
        """Upload files sequentially, folding each outcome into the result"""
        result = UploadBatchResult()
        for image in images:
            try:
                url = await self.upload_one(image)
            except UploadError as e:
                logger.warning(f"Upload failed for '{image.filename}': {e.message}")
                result.failures.append(UploadFailure(filename=image.filename, message=e.message))
                continue
            result.urls.append(url)
        return result


def get_uploader() -> ImageUploader:
    """Dependency building an uploader for the configured storage backend"""
    settings = get_settings()
    return ImageUploader(build_storage(), max_size=settings.MAX_IMAGE_SIZE)
