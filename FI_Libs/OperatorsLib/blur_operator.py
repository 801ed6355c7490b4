"""
Blur operator.

Supports the Gaussian and box blur algorithms:

    >>> image.blur()               # Gaussian, radius 5
    >>> image.blur(12)             # Gaussian, radius 12
    >>> image.blur(5, "box")       # Box blur with a 5px kernel

Gaussian radius must be 0 < r <= 100. Box kernel size must be 1-101 and is
rounded up to the next odd number.
"""

import math
from typing import Any

from PIL import ImageFilter

from FI_Libs.OperatorsLib.base_operator import BaseOperator, require_arg_count

BLUR_TYPES = ("gaussian", "box")
DEFAULT_BLUR_RADIUS = 5.0


class Blur(BaseOperator):

    def execute(self, image: Any, *args: Any) -> Any:
        require_arg_count(self, args, 0, 2)

        try:
            amount = float(args[0]) if args else DEFAULT_BLUR_RADIUS
        except (TypeError, ValueError):
            raise self.error(f"radius must be a number, got {args[0]!r}")
        if not math.isfinite(amount):
            raise self.error(f"radius must be finite, got {amount}")

        blur_type = str(args[1]).lower() if len(args) > 1 else "gaussian"
        if blur_type not in BLUR_TYPES:
            raise self.error(
                f"Unknown blur_type: {blur_type}. Valid types: {', '.join(BLUR_TYPES)}"
            )

        if blur_type == "gaussian":
            if not (0 < amount <= 100):
                raise self.error(f"radius must be 0 < r <= 100, got {amount}")
            blur_filter = ImageFilter.GaussianBlur(radius=amount)
        else:
            kernel_size = int(amount)
            if kernel_size % 2 == 0:
                kernel_size += 1
            if kernel_size < 1 or kernel_size > 101:
                raise self.error(f"kernel_size must be 1-101 and odd, got {kernel_size}")
            blur_filter = ImageFilter.BoxBlur(kernel_size // 2)  # PIL uses radius

        # Blur filters do not support palette images
        if image.mode != "P":
            return image.filter(blur_filter)

        converted = image.convert("RGB")
        try:
            return converted.filter(blur_filter)
        finally:
            converted.close()
