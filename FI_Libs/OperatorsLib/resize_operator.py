"""
Resize operator.

Scales the image to the largest size that fits inside the requested box
while keeping its aspect ratio:

    >>> image.resize("320x240")
    >>> image.resize((320, 240))
"""

from typing import Any

from PIL import ImageOps

from FI_Libs.OperatorsLib.base_operator import BaseOperator, parse_size, require_arg_count


class Resize(BaseOperator):

    def execute(self, image: Any, *args: Any) -> Any:
        require_arg_count(self, args, 1, 1)
        size = parse_size(self, args[0])
        return ImageOps.contain(image, size)
