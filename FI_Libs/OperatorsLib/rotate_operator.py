"""
Rotate operator.

Rotates counter-clockwise by the given number of degrees. The canvas grows
to fit the rotated image.
"""

import math
from typing import Any

from FI_Libs.OperatorsLib.base_operator import BaseOperator, require_arg_count


class Rotate(BaseOperator):

    def execute(self, image: Any, *args: Any) -> Any:
        require_arg_count(self, args, 1, 1)
        try:
            degrees = float(args[0])
        except (TypeError, ValueError):
            raise self.error(f"degrees must be a number, got {args[0]!r}")
        if not math.isfinite(degrees):
            raise self.error(f"degrees must be finite, got {degrees}")
        return image.rotate(degrees, expand=True)
