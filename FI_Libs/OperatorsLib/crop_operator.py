"""
Crop operator.

Cuts a WIDTHxHEIGHT region out of the image, starting at an optional
(x, y) origin (default: top-left corner). The region must lie entirely
inside the image.
"""

from typing import Any, Tuple

from FI_Libs.OperatorsLib.base_operator import BaseOperator, parse_size, require_arg_count


class Crop(BaseOperator):

    def execute(self, image: Any, *args: Any) -> Any:
        require_arg_count(self, args, 1, 2)
        width, height = parse_size(self, args[0])
        left, top = self._parse_origin(args[1] if len(args) > 1 else (0, 0))

        right = left + width
        bottom = top + height
        if right > image.width or bottom > image.height:
            raise self.error(
                f"crop box ({left},{top},{right},{bottom}) exceeds image bounds "
                f"{image.width}x{image.height}"
            )

        return image.crop((left, top, right, bottom))

    def _parse_origin(self, value: Any) -> Tuple[int, int]:
        if not isinstance(value, (tuple, list)) or len(value) != 2:
            raise self.error(f"origin must be an (x, y) pair, got {value!r}")
        try:
            left, top = int(value[0]), int(value[1])
        except (TypeError, ValueError, OverflowError):
            raise self.error(f"origin must contain two integers, got {value!r}")
        if left < 0 or top < 0:
            raise self.error(f"origin must not be negative, got ({left}, {top})")
        return left, top
