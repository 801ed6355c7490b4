"""
Grayscale operator.

Converts the image to luminance only. Transparency is preserved.
"""

from typing import Any

from PIL import ImageOps

from FI_Libs.OperatorsLib.base_operator import BaseOperator, require_arg_count


class Grayscale(BaseOperator):
    """Convert the image to grayscale. Takes no arguments."""

    def execute(self, image: Any, *args: Any) -> Any:
        require_arg_count(self, args, 0, 0)

        if image.mode == "P":
            return image.convert("LA" if "transparency" in image.info else "L")
        if "A" in image.getbands():
            return image.convert("LA")
        return ImageOps.grayscale(image)
