"""
ImageEditingLib - Decoding and rendering

This module loads master images into memory and renders pipeline
output to the delivery format.
"""

from FI_Libs.ImageEditingLib.image_decoder import ImageDecoder
from FI_Libs.ImageEditingLib.output_renderer import OutputRenderConfig, OutputRenderer

__all__ = [
    "ImageDecoder",
    "OutputRenderConfig",
    "OutputRenderer",
]
