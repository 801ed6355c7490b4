"""
ModelLib - Host record wiring

This module attaches master image storage, operators and rendering to a
host record through composition.
"""

from FI_Libs.ModelLib.image_attachment import (
    ImageAttachmentConfig,
    OperatorProxy,
    ImageAttachment,
    acts_as_fleximage,
)

__all__ = [
    "ImageAttachmentConfig",
    "OperatorProxy",
    "ImageAttachment",
    "acts_as_fleximage",
]
