"""
FlexImage Operators Library.

Operators are named transforms applied to a record's image inside a
pipeline session. Each operator is a BaseOperator subclass registered under
the snake_case form of its class name.

Modules:
    base_operator: Operator contract and argument helpers
    operator_registry: Name to operator registry
    grayscale_operator: Grayscale conversion
    resize_operator: Aspect-preserving resize
    crop_operator: Rectangular crop
    blur_operator: Gaussian and box blur
    border_operator: Solid border
    rotate_operator: Rotation
"""

from FI_Libs.OperatorsLib.base_operator import (
    BaseOperator,
    parse_size,
    require_arg_count,
)
from FI_Libs.OperatorsLib.operator_registry import (
    UNRESOLVED,
    OperatorRegistry,
    operator_name_for,
    validate_operator_name,
    get_default_registry,
    register_default_operators,
    register_operator,
)
from FI_Libs.OperatorsLib.grayscale_operator import Grayscale
from FI_Libs.OperatorsLib.resize_operator import Resize
from FI_Libs.OperatorsLib.crop_operator import Crop
from FI_Libs.OperatorsLib.blur_operator import Blur
from FI_Libs.OperatorsLib.border_operator import Border
from FI_Libs.OperatorsLib.rotate_operator import Rotate

__all__ = [
    "BaseOperator",
    "parse_size",
    "require_arg_count",
    "UNRESOLVED",
    "OperatorRegistry",
    "operator_name_for",
    "validate_operator_name",
    "get_default_registry",
    "register_default_operators",
    "register_operator",
    "Grayscale",
    "Resize",
    "Crop",
    "Blur",
    "Border",
    "Rotate",
]
