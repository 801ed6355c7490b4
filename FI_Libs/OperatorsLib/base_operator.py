"""
Operator contract for FlexImage.

An operator is a named transform applied to the current image of a
pipeline session. Operators receive the image plus the positional
arguments of the call and return the resulting image:

    >>> with photo.operate() as image:
    ...     image.resize("320x240")
    ...     image.border(4, "white")

Classes:
    BaseOperator: Base class every operator derives from

Functions:
    parse_size: Parse "WxH" strings or (w, h) pairs
    require_arg_count: Validate the number of positional arguments
"""

import re
from typing import Any, Sequence, Tuple

from FI_Libs.errors import OperatorError

SIZE_PATTERN = re.compile(r"^\s*(\d+)\s*[xX]\s*(\d+)\s*$")


class BaseOperator:
    """Base class for operators.

    Subclasses implement ``execute``. ``name`` is filled in by the registry
    when the operator is resolved, so error messages can name the operator.
    """

    name: str = ""

    def execute(self, image: Any, *args: Any) -> Any:
        """Transform ``image`` and return the result.

        Raises:
            OperatorError: If the arguments are invalid
        """
        raise NotImplementedError

    def error(self, message: str) -> OperatorError:
        label = self.name or type(self).__name__
        return OperatorError(f"{label}: {message}", operator=self.name or None)


def require_arg_count(operator: BaseOperator, args: Sequence[Any], minimum: int, maximum: int) -> None:
    if not (minimum <= len(args) <= maximum):
        if minimum == maximum:
            expected = str(minimum)
        else:
            expected = f"{minimum} to {maximum}"
        raise operator.error(f"expected {expected} argument(s), got {len(args)}")


def parse_size(operator: BaseOperator, value: Any) -> Tuple[int, int]:
    """
    Parse a size argument.

    Accepts ``"320x240"`` strings and ``(320, 240)`` pairs. Both dimensions
    must be positive.
    """
    if isinstance(value, str):
        match = SIZE_PATTERN.match(value)
        if not match:
            raise operator.error(f"size must look like 'WIDTHxHEIGHT', got {value!r}")
        width, height = int(match.group(1)), int(match.group(2))
    elif isinstance(value, (tuple, list)) and len(value) == 2:
        try:
            width, height = int(value[0]), int(value[1])
        except (TypeError, ValueError, OverflowError):
            raise operator.error(f"size must contain two integers, got {value!r}")
    else:
        raise operator.error(f"size must be 'WIDTHxHEIGHT' or (width, height), got {value!r}")

    if width <= 0 or height <= 0:
        raise operator.error(f"size must be positive, got {width}x{height}")

    return width, height
