"""
Master image storage for FlexImage.

Uploads are decoded and normalized to a lossless PNG image when they are
assigned, held in memory as a PendingUpload, and written to the resolved
master path only when the host record's save hook fires.

Supported upload sources:
- ``bytes`` / ``bytearray``
- Any object with a ``read()`` method (uploaded file, BytesIO, open file)
- An ``os.PathLike`` pointing at a local file
- An ``http://`` or ``https://`` URL string, fetched with requests

Classes:
    PendingUpload: Decoded upload awaiting a save trigger
    MasterImageStore: Assign, persist and delete master images
"""

import io
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import requests
from PIL import Image, UnidentifiedImageError

from FI_Libs.constants import (
    HTTP_FETCH_TIMEOUT,
    MASTER_IMAGE_FORMAT,
    PNG_WRITABLE_MODES,
    URL_SCHEMES,
)
from FI_Libs.errors import InvalidUploadError, NotFoundError
from FI_Libs.StorageLib.path_resolver import MasterImagePath

logger = logging.getLogger(__name__)


def is_url(source: Any) -> bool:
    """Check whether an upload source is an http(s) URL string."""
    return isinstance(source, str) and source.lower().startswith(URL_SCHEMES)


@dataclass
class PendingUpload:
    """An upload that has been decoded but not yet written.

    Attributes:
        image: PNG-normalized PIL Image owned by this upload
        source_format: Format the upload arrived in (e.g. "JPEG"), if known
    """
    image: Any
    source_format: Optional[str] = None

    def release(self) -> None:
        """Close the held image. The upload is unusable afterwards."""
        if self.image is not None:
            self.image.close()
            self.image = None


class MasterImageStore:
    """Reads uploads and writes or deletes master image files."""

    def __init__(self, fetch_timeout: float = HTTP_FETCH_TIMEOUT):
        self.fetch_timeout = fetch_timeout

    def assign(self, source: Any) -> PendingUpload:
        """
        Decode an upload source and stage it as a lossless master image.

        Args:
            source: Bytes, readable stream, local path, or http(s) URL

        Returns:
            PendingUpload holding the normalized image

        Raises:
            InvalidUploadError: If the source is empty, unreadable, or not an image
        """
        data = self._read_source(source)
        if not data:
            raise InvalidUploadError("No file! The upload source is empty.")

        try:
            with Image.open(io.BytesIO(data)) as uploaded:
                uploaded.load()
                source_format = uploaded.format
                image = _normalize_for_master(uploaded)
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise InvalidUploadError(f"Upload is not a readable image: {str(e)}") from e

        image.format = MASTER_IMAGE_FORMAT
        logger.debug(f"Staged {source_format} upload ({image.width}x{image.height}) as {MASTER_IMAGE_FORMAT}")
        return PendingUpload(image=image, source_format=source_format)

    def persist(self, path: MasterImagePath, pending: Optional[PendingUpload]) -> None:
        """
        Write a pending upload to the master image path.

        Does nothing when there is no pending upload, so saving a record
        without a new upload leaves the existing master untouched. The
        pending image is released once the write succeeds; after a failed
        write it is kept so the save can be retried.

        Raises:
            OSError: If the directory cannot be created or the file written
        """
        if pending is None or pending.image is None:
            return

        Path(path.directory).mkdir(parents=True, exist_ok=True)
        pending.image.save(path.file, format=MASTER_IMAGE_FORMAT)
        pending.release()

        logger.debug(f"Wrote master image to {path.file}")

    def delete(self, path: MasterImagePath) -> None:
        """
        Remove the master image file.

        Raises:
            NotFoundError: If there is no file at the path
        """
        try:
            os.remove(path.file)
        except FileNotFoundError as e:
            raise NotFoundError(path.file) from e

        logger.debug(f"Deleted master image {path.file}")

    def _read_source(self, source: Any) -> bytes:
        if source is None:
            raise InvalidUploadError("No file! The upload source is missing.")

        if is_url(source):
            return self._fetch(source)

        if isinstance(source, (bytes, bytearray)):
            return bytes(source)

        if isinstance(source, os.PathLike):
            try:
                return Path(source).read_bytes()
            except OSError as e:
                raise InvalidUploadError(f"Cannot read upload file {source}: {str(e)}") from e

        if hasattr(source, "read"):
            try:
                data = source.read()
            except (OSError, ValueError) as e:
                raise InvalidUploadError(f"Cannot read upload stream: {str(e)}") from e
            if isinstance(data, str):
                raise InvalidUploadError("Upload stream must be opened in binary mode")
            return data or b""

        raise InvalidUploadError(
            f"No file! Expected bytes, a readable stream, a path or an http(s) URL, got {type(source).__name__}"
        )

    def _fetch(self, url: str) -> bytes:
        logger.debug(f"Fetching upload from {url}")
        try:
            response = requests.get(url, timeout=self.fetch_timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise InvalidUploadError(f"Failed to fetch upload from {url}: {str(e)}") from e
        return response.content


def _normalize_for_master(image: Any) -> Any:
    """Return an owned copy of ``image`` in a mode PNG can store losslessly."""
    if image.mode in PNG_WRITABLE_MODES:
        return image.copy()

    has_alpha = "A" in image.getbands() or "transparency" in image.info
    return image.convert("RGBA" if has_alpha else "RGB")
