"""
Border operator.

Adds a solid border of ``width`` pixels on every side:

    >>> image.border(4)            # black
    >>> image.border(4, "white")
    >>> image.border(2, "#ff8800")
"""

from typing import Any

from PIL import ImageOps

from FI_Libs.OperatorsLib.base_operator import BaseOperator, require_arg_count


class Border(BaseOperator):

    def execute(self, image: Any, *args: Any) -> Any:
        require_arg_count(self, args, 1, 2)

        try:
            width = int(args[0])
        except (TypeError, ValueError, OverflowError):
            raise self.error(f"width must be an integer, got {args[0]!r}")
        if width <= 0:
            raise self.error(f"width must be positive, got {width}")

        color = args[1] if len(args) > 1 else "black"
        try:
            return ImageOps.expand(image, border=width, fill=color)
        except ValueError as e:
            raise self.error(f"invalid border color {color!r}: {str(e)}") from e
