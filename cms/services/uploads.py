"""Image uploads: type/size checks and persistence under the public directory.

Nothing touches the disk until the upload has passed every check.
"""

import logging
import re
import secrets
import time
from dataclasses import dataclass
from pathlib import Path

from fastapi import UploadFile

from cms.config import get_settings
from cms.services.errors import StorageError, UploadRejected

logger = logging.getLogger(__name__)

BLOG_IMAGES = "blog-images"
CASE_STUDY_IMAGES = "case-study-images"
IMAGE_DIRS = (BLOG_IMAGES, CASE_STUDY_IMAGES)

ALLOWED_EXTENSIONS = frozenset({".jpeg", ".jpg", ".png", ".gif", ".webp"})
ALLOWED_CONTENT_TYPES = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)

_CHUNK_SIZE = 64 * 1024
_SAFE_PATH_SEGMENT_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9._-]*$")


@dataclass
class StoredImage:
    """A persisted upload and the public URL it is served from."""

    filename: str
    url: str
    size: int


def validate_path_segment(segment: str) -> str:
    """Validate a user-supplied path segment.

    Rejects inputs containing path traversal sequences (..), slashes,
    backslashes, or other unsafe characters. Returns the segment unchanged
    if valid; raises ValueError otherwise.
    """
    if not segment or ".." in segment or not _SAFE_PATH_SEGMENT_RE.match(segment):
        raise ValueError(f"Invalid path segment: {segment!r}")
    return segment


def upload_dir(kind: str) -> Path:
    if kind not in IMAGE_DIRS:
        raise ValueError(f"Unknown image directory: {kind!r}")
    return Path(get_settings().public_dir) / kind


def ensure_upload_dirs() -> list[Path]:
    """Create every upload directory that does not exist yet."""
    created = []
    for kind in IMAGE_DIRS:
        directory = upload_dir(kind)
        if not directory.is_dir():
            directory.mkdir(parents=True, exist_ok=True)
            created.append(directory)
    return created


def check_image_type(filename: str, content_type: str | None) -> str:
    """Both the extension and the declared MIME type must name an image.

    Returns the lower-cased extension.
    """
    ext = Path(filename).suffix.lower()
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if ext not in ALLOWED_EXTENSIONS or mime not in ALLOWED_CONTENT_TYPES:
        raise UploadRejected("Only image files are allowed")
    return ext


def generate_filename(ext: str) -> str:
    """``<epoch ms>-<random 0..1e9><ext>``."""
    return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{ext}"


async def read_limited(upload: UploadFile, limit: int) -> bytes:
    """Read the whole upload, refusing as soon as it grows past *limit* bytes."""
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await upload.read(_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise UploadRejected(
                f"Image exceeds the {limit / (1024 * 1024):g} MB limit"
            )
        chunks.append(chunk)
    if total == 0:
        raise UploadRejected("Uploaded file is empty")
    return b"".join(chunks)


async def save_image(upload: UploadFile | None, kind: str) -> StoredImage:
    """Validate and persist an uploaded image under ``{public_dir}/{kind}``."""
    if upload is None or not upload.filename:
        raise UploadRejected("No image file provided")

    ext = check_image_type(upload.filename, upload.content_type)
    data = await read_limited(upload, get_settings().max_upload_bytes)

    directory = upload_dir(kind)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        while True:
            filename = generate_filename(ext)
            try:
                # "xb" fails instead of overwriting if the name is already taken
                with open(directory / filename, "xb") as f:
                    f.write(data)
                break
            except FileExistsError:
                continue
    except OSError as exc:
        logger.error("Failed to write %s upload to %s: %s", kind, directory, exc)
        raise StorageError("Failed to upload image") from exc

    logger.info(
        "Stored %s upload %s (%d bytes) as %s", kind, upload.filename, len(data), filename
    )
    return StoredImage(filename=filename, url=f"/{kind}/{filename}", size=len(data))


def resolve_image(kind: str, filename: str) -> Path | None:
    """Path of a stored image, or None if the name is unsafe or missing."""
    try:
        validate_path_segment(filename)
    except ValueError:
        return None
    path = upload_dir(kind) / filename
    if not path.is_file():
        return None
    return path
