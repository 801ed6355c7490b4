"""
Operator Registry.

This module provides a centralized registry that maps operator names to
operator factories. Names follow a fixed convention: the snake_case name of
the operator class (``UnsharpMask`` is registered as ``unsharp_mask``).

Resolving a well-formed name that nobody registered is not an error: it
returns the UNRESOLVED sentinel so callers can try other interpretations
of the call. A malformed name raises ValueError.

Classes:
    OperatorRegistry: Registry for operator factories

Functions:
    operator_name_for: Derive the registry name of an operator class
    get_default_registry: Get the global default registry (singleton)
    register_default_operators: Register all built-in operators
    register_operator: Class decorator registering into the default registry
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional

from FI_Libs.constants import OPERATOR_NAME_PATTERN
from FI_Libs.OperatorsLib.base_operator import BaseOperator

logger = logging.getLogger(__name__)

# Type alias for operator factories (usually the operator class itself)
OperatorFactory = Callable[[], BaseOperator]

_NAME_RE = re.compile(OPERATOR_NAME_PATTERN)
_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


class _Unresolved:
    """Sentinel returned when no operator is registered under a name."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNRESOLVED"

    def __bool__(self) -> bool:
        return False


UNRESOLVED = _Unresolved()


def operator_name_for(operator_class: type) -> str:
    """
    Derive the registry name for an operator class.

    Example:
        >>> operator_name_for(UnsharpMask)
        'unsharp_mask'
    """
    return _CAMEL_BOUNDARY_RE.sub("_", operator_class.__name__).lower()


def validate_operator_name(name: Any) -> str:
    """
    Normalize and validate an operator name.

    Raises:
        ValueError: If the name is not a lowercase snake_case identifier
    """
    name = str(name).strip()
    if not _NAME_RE.match(name):
        raise ValueError(
            f"Malformed operator name {name!r}: expected lowercase snake_case such as 'unsharp_mask'"
        )
    return name


class OperatorRegistry:
    """
    Registry for operator factories.

    Example:
        >>> registry = OperatorRegistry()
        >>> registry.register("grayscale", Grayscale)
        >>> operator = registry.resolve("grayscale")
        >>> result = operator.execute(image)
    """

    def __init__(self):
        """Initialize an empty registry."""
        self._factories: Dict[str, OperatorFactory] = {}
        self._descriptions: Dict[str, str] = {}

    def register(
        self,
        name: str,
        factory: OperatorFactory,
        description: str = "",
    ) -> None:
        """
        Register an operator factory.

        Args:
            name: Operator name (lowercase snake_case, e.g. "unsharp_mask")
            factory: Callable returning a new operator instance
            description: Human-readable description of the operator

        Raises:
            ValueError: If name is malformed or factory is not callable
            RuntimeError: If name is already registered
        """
        name = validate_operator_name(name)

        if not callable(factory):
            raise ValueError(f"factory must be callable, got {type(factory)}")

        if name in self._factories:
            raise RuntimeError(
                f"Operator '{name}' is already registered. "
                f"Use unregister() first to replace it."
            )

        self._factories[name] = factory
        self._descriptions[name] = str(description)

        logger.debug(f"Registered operator: {name}")

    def unregister(self, name: str) -> bool:
        """
        Unregister an operator.

        Returns:
            True if unregistered, False if name was not registered
        """
        name = str(name).strip()

        if name in self._factories:
            del self._factories[name]
            del self._descriptions[name]
            logger.debug(f"Unregistered operator: {name}")
            return True

        return False

    def resolve(self, name: str) -> Any:
        """
        Resolve an operator name to a fresh operator instance.

        Args:
            name: The operator name

        Returns:
            A new operator instance, or UNRESOLVED if no operator is
            registered under the name

        Raises:
            ValueError: If the name is malformed
            Exception: Anything the factory raises
        """
        name = validate_operator_name(name)

        factory = self._factories.get(name)
        if factory is None:
            return UNRESOLVED

        operator = factory()
        operator.name = name
        return operator

    def has_operator(self, name: str) -> bool:
        """Check if an operator is registered under ``name``."""
        return str(name).strip() in self._factories

    def list_operators(self) -> List[str]:
        """
        Get list of all registered operator names.

        Returns:
            Sorted list of operator names
        """
        return sorted(self._factories.keys())

    def get_description(self, name: str) -> str:
        """
        Get the description an operator was registered with.

        Raises:
            KeyError: If name is not registered
        """
        name = str(name).strip()

        if name not in self._descriptions:
            raise KeyError(f"No operator registered under: {name}")

        return self._descriptions[name]

    def describe_operators(self) -> List[str]:
        """
        Get one "name: description" line per operator, sorted by name.

        Operators registered without a description are listed by name only.
        """
        return [
            f"{name}: {self._descriptions[name]}" if self._descriptions[name] else name
            for name in self.list_operators()
        ]

    def clear(self) -> None:
        """Clear all registered operators. Use with caution."""
        self._factories.clear()
        self._descriptions.clear()
        logger.warning("Operator registry cleared")


# Global singleton registry
_default_registry: Optional[OperatorRegistry] = None


def get_default_registry() -> OperatorRegistry:
    """
    Get the global default registry (singleton).

    Creates the registry on first call and registers the built-in operators.
    """
    global _default_registry

    if _default_registry is None:
        _default_registry = OperatorRegistry()
        register_default_operators(_default_registry)

    return _default_registry


def register_default_operators(registry: OperatorRegistry) -> None:
    """
    Register all built-in operators.

    Args:
        registry: The registry to register operators with
    """
    from FI_Libs.OperatorsLib.grayscale_operator import Grayscale
    from FI_Libs.OperatorsLib.resize_operator import Resize
    from FI_Libs.OperatorsLib.crop_operator import Crop
    from FI_Libs.OperatorsLib.blur_operator import Blur
    from FI_Libs.OperatorsLib.border_operator import Border
    from FI_Libs.OperatorsLib.rotate_operator import Rotate

    builtins = [
        (Grayscale, "Convert the image to grayscale"),
        (Resize, "Scale the image to fit within WIDTHxHEIGHT"),
        (Crop, "Cut a WIDTHxHEIGHT region out of the image"),
        (Blur, "Apply a Gaussian or box blur"),
        (Border, "Add a solid border around the image"),
        (Rotate, "Rotate the image counter-clockwise by degrees"),
    ]

    for operator_class, description in builtins:
        registry.register(operator_name_for(operator_class), operator_class, description=description)

    logger.info("Registered default operators")


def register_operator(
    description: str = "",
    registry: Optional[OperatorRegistry] = None,
) -> Callable[[type], type]:
    """
    Class decorator registering an operator under its conventional name.

    Usage:
        >>> @register_operator(description="Flip left to right")
        ... class Mirror(BaseOperator):
        ...     def execute(self, image, *args):
        ...         return image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    """
    def decorator(operator_class: type) -> type:
        target = registry if registry is not None else get_default_registry()
        name = operator_name_for(operator_class)

        try:
            target.register(name, operator_class, description=description)
        except RuntimeError:
            # Operator already registered, just use the class
            logger.debug(f"Operator '{name}' already registered, skipping")

        return operator_class

    return decorator
