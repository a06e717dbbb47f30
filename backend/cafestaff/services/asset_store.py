"""
CafeStaff Backend — Logo Asset Store
======================================

What:  Stores, serves and deletes cafe logo images on local disk.
Why:   Keeps binary assets out of the database; rows only hold a reference.
How:   Validates extension, size and MIME type, writes the bytes under a
       date-organized directory with a UUID filename, and hands back the
       relative path as the asset reference.
Who:   Used by CafeService (store/delete/discard) and the logo route (stream).

Contract:
    store(filename, content)  -> asset_ref      raises ValidationError / AssetError
    stream(asset_ref)         -> async byte chunks   raises NotFoundError
    delete(asset_ref)         -> None           raises AssetError
    discard(asset_ref)        -> None           best-effort, never raises

The store is not transactional. CafeService calls delete() only after the
database transaction that dropped the reference has committed, and
discard() to roll back a freshly stored file when that transaction fails.

Directory Structure:
    storage/
    └── 2024/
        └── 01/
            └── 15/
                ├── a1b2c3d4-5678.jpg
                └── e5f6g7h8-9012.png
"""

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator, Optional, Tuple

import aiofiles

from cafestaff.config import settings
from cafestaff.exceptions import AssetError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# ── Allowed File Types ────────────────────────────────────────────────────
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
}

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}

MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
}

STREAM_CHUNK_SIZE = 64 * 1024


class AssetStore:
    """
    Local-disk binary store for cafe logos.

    Lifecycle of an uploaded logo:
        1. CafeService passes the upload → store()
        2. Extension check (fast, rejects obviously wrong files)
        3. Size check against max_file_size (empty files rejected too)
        4. MIME type check via magic bytes (catches renamed files)
        5. File written to YYYY/MM/DD/<uuid>.<ext>
        6. Relative path returned and saved on the cafe row
    """

    def __init__(self, storage_root: Optional[str] = None, max_file_size: Optional[int] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
            max_file_size: Override settings.max_file_size (bytes).
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.max_file_size = max_file_size or settings.max_file_size
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("AssetStore initialized with storage_root=%s", self.storage_root)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns the normalized extension (lowercase with dot).

        Raises:  ValidationError if the extension is not an allowed image type.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"Logo type '{ext or 'none'}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="logo",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Checks the declared size first, then the bytes actually received.

        Raises:
            ValidationError for empty or oversized uploads.
        """
        max_mb = self.max_file_size / (1024 * 1024)

        if actual_size == 0:
            raise ValidationError(
                message="The uploaded logo is empty.",
                field="logo",
            )

        if content_length and content_length > self.max_file_size:
            raise ValidationError(
                message=f"Logo is too large. Maximum size is {max_mb:.0f}MB.",
                field="logo",
                context={"max_size_mb": max_mb, "reported_size": content_length},
            )

        if actual_size > self.max_file_size:
            raise ValidationError(
                message=(
                    f"Logo is too large ({actual_size / (1024 * 1024):.1f}MB). "
                    f"Maximum size is {max_mb:.0f}MB."
                ),
                field="logo",
                context={"max_size_mb": max_mb, "actual_size": actual_size},
            )

    def validate_mime_type(self, file_content: bytes, filename: str) -> str:
        """
        Determine the real type from the file's magic bytes.

        Returns:
            Detected MIME type string (e.g., "image/jpeg")

        Raises:
            ValidationError if the content is not a PNG or JPEG image
        """
        try:
            import magic
            mime_type = magic.from_buffer(file_content, mime=True)
        except ImportError:
            # python-magic present without libmagic (e.g., slim CI images)
            logger.warning(
                "python-magic not available, falling back to extension-based type detection. "
                "Install libmagic for production deployments."
            )
            mime_type = MEDIA_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")
        except Exception as e:
            logger.error("MIME type detection failed: %s", str(e))
            raise AssetError(
                message="Could not verify the logo file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message=(
                    f"Logo content type '{mime_type}' is not supported. "
                    f"The file must be a valid PNG or JPEG image."
                ),
                field="logo",
                context={"detected_mime": mime_type, "allowed": list(ALLOWED_MIME_TYPES.keys())},
            )

        return mime_type

    # ── Paths ─────────────────────────────────────────────────────────────

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, asset_ref) for a new YYYY/MM/DD/<uuid><ext> file."""
        now = datetime.now(timezone.utc)
        asset_ref = f"{now.strftime('%Y/%m/%d')}/{uuid.uuid4()}{extension}"
        return self.storage_root / asset_ref, asset_ref

    def resolve(self, asset_ref: str) -> Path:
        """
        Map an asset reference to its file, refusing anything outside the root.

        Raises:
            ValidationError: The reference escapes the storage root (../..)
        """
        full_path = (self.storage_root / asset_ref).resolve()
        if full_path != self.storage_root and self.storage_root not in full_path.parents:
            raise ValidationError(message="Invalid logo reference", field="asset_ref")
        return full_path

    def media_type(self, asset_ref: str) -> str:
        return MEDIA_TYPES.get(Path(asset_ref).suffix.lower(), "application/octet-stream")

    # ── Operations ────────────────────────────────────────────────────────

    async def store(
        self,
        filename: str,
        content: bytes,
        content_length: Optional[int] = None,
    ) -> str:
        """
        Validate an uploaded logo and write it to disk.

        Validation order (cheapest first):
            extension → size → MIME type → write

        Returns:
            The asset reference to save on the cafe row.

        Raises:
            ValidationError: Wrong type, empty, or too large
            AssetError: Directory creation or write failed
        """
        ext = self.validate_extension(filename)
        self.validate_size(content_length, len(content))
        self.validate_mime_type(content, filename)

        absolute_path, asset_ref = self._generate_storage_path(ext)
        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store logo at %s: %s", absolute_path, str(e))
            raise AssetError(
                message="Failed to save the uploaded logo. Please try again.",
                context={"asset_ref": asset_ref, "os_error": str(e)},
            )

        logger.info("Logo stored: %s (%d bytes)", asset_ref, len(content))
        return asset_ref

    async def stream(self, asset_ref: str) -> AsyncIterator[bytes]:
        """
        Yield the logo's bytes in chunks.

        The existence check happens before the first chunk, so callers get
        NotFoundError from open_stream() rather than mid-response.
        """
        path = self.resolve(asset_ref)
        async with aiofiles.open(path, "rb") as f:
            while True:
                chunk = await f.read(STREAM_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk

    def open_stream(self, asset_ref: str) -> AsyncIterator[bytes]:
        """
        Check that the logo exists and return its chunk iterator.

        Raises:
            NotFoundError: No file for this reference
        """
        path = self.resolve(asset_ref)
        if not path.is_file():
            raise NotFoundError(resource="logo", resource_id=asset_ref)
        return self.stream(asset_ref)

    async def delete(self, asset_ref: str) -> None:
        """
        Remove a logo that is no longer referenced.

        A file that is already gone counts as deleted.

        Raises:
            AssetError: The file exists but could not be removed
        """
        path = self.resolve(asset_ref)
        try:
            os.remove(path)
        except FileNotFoundError:
            logger.debug("Logo already gone: %s", asset_ref)
            return
        except OSError as e:
            raise AssetError(
                message=f"Could not delete logo '{asset_ref}'",
                context={"asset_ref": asset_ref, "os_error": str(e)},
            )
        logger.info("Logo deleted: %s", asset_ref)

    async def discard(self, asset_ref: str) -> None:
        """
        Best-effort removal of a logo stored for a write that then failed.

        Failure is logged, not raised: the caller is already propagating the
        original error, which matters more than a stray file.
        """
        try:
            await self.delete(asset_ref)
        except (AssetError, ValidationError) as e:
            logger.warning("Failed to discard logo %s: %s", asset_ref, e.message)
