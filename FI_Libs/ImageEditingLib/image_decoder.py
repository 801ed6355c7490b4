"""
Master image decoding for FlexImage.

Decoding is kept separate from pipeline sessions: the decoder always reads
the file and hands back an image the caller owns. Sessions decide when to
call it and cache the result for their lifetime.

Classes:
    ImageDecoder: Load a master image into memory
"""

import logging
from typing import Any, Union

from PIL import Image, UnidentifiedImageError

from FI_Libs.errors import DecodeError, MasterImageNotFoundError
from FI_Libs.StorageLib.path_resolver import MasterImagePath

logger = logging.getLogger(__name__)


class ImageDecoder:
    """Decodes master image files into PIL Images."""

    def load(self, path: Union[MasterImagePath, str]) -> Any:
        """
        Decode the master image at ``path``.

        The file handle is closed before returning; the returned image is
        fully decoded and owned by the caller, who must ``close()`` it.

        Args:
            path: MasterImagePath or file path string

        Returns:
            Decoded PIL Image

        Raises:
            MasterImageNotFoundError: If no file exists at the path
            DecodeError: If the file exists but cannot be decoded
        """
        file_path = path.file if isinstance(path, MasterImagePath) else str(path)

        try:
            with Image.open(file_path) as master:
                master.load()
                image = master.copy()
        except FileNotFoundError as e:
            raise MasterImageNotFoundError(file_path) from e
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(file_path, f"Failed to decode master image at {file_path}: {str(e)}") from e

        logger.debug(f"Decoded master image {file_path} ({image.mode} {image.width}x{image.height})")
        return image
