"""
Delivery output rendering for FlexImage.

Converts the final image of a pipeline session into a delivery format
(JPEG by default) and returns the encoded bytes, e.g. for a web response.

Classes:
    OutputRenderConfig: Delivery format settings
    OutputRenderer: Encode an image to bytes
"""

import io
import logging
from dataclasses import dataclass, asdict
from typing import Any, Dict

from FI_Libs.constants import DEFAULT_OUTPUT_FORMAT, DEFAULT_OUTPUT_QUALITY, JPEG_WRITABLE_MODES
from FI_Libs.errors import RenderError

logger = logging.getLogger(__name__)


@dataclass
class OutputRenderConfig:
    """Configuration for rendered output.

    Attributes:
        output_format: Pillow format name to encode as (default: JPEG)
        quality: JPEG quality 1-100 (default: 85)
    """
    output_format: str = DEFAULT_OUTPUT_FORMAT
    quality: int = DEFAULT_OUTPUT_QUALITY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputRenderConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)

    def get_save_kwargs(self) -> Dict[str, Any]:
        """Get PIL Image.save() kwargs based on format."""
        # PIL uses "JPEG" not "JPG"
        save_format = self.output_format.upper()
        if save_format == "JPG":
            save_format = "JPEG"

        kwargs = {"format": save_format}

        if save_format == "JPEG":
            kwargs["quality"] = max(1, min(100, int(self.quality)))

        return kwargs


class OutputRenderer:
    """Encodes images into the delivery format."""

    def __init__(self, config: OutputRenderConfig = None):
        self.config = config or OutputRenderConfig()

    def render(self, image: Any) -> bytes:
        """
        Encode ``image`` to delivery-format bytes.

        Any intermediate converted image and the in-memory stream are
        released before returning, on success or failure. The input image
        itself stays owned by the caller.

        Raises:
            RenderError: If there is no image to render or encoding fails
        """
        if image is None:
            raise RenderError("No image to render: no pipeline produced an output image")

        kwargs = self.config.get_save_kwargs()
        converted = _to_delivery_mode(image, kwargs["format"])
        buffer = io.BytesIO()
        try:
            converted.save(buffer, **kwargs)
            data = buffer.getvalue()
        except (OSError, ValueError, KeyError) as e:
            raise RenderError(f"Failed to encode image as {kwargs['format']}: {str(e)}") from e
        finally:
            buffer.close()
            if converted is not image:
                converted.close()

        logger.debug(f"Rendered {image.width}x{image.height} image to {len(data)} bytes of {kwargs['format']}")
        return data


def _to_delivery_mode(image: Any, save_format: str) -> Any:
    if save_format != "JPEG" or image.mode in JPEG_WRITABLE_MODES:
        return image
    # JPEG has no alpha channel
    if image.mode in ("LA", "1", "I", "I;16"):
        return image.convert("L")
    return image.convert("RGB")
