"""
Validation decorators for vectormaths.

Provides reusable argument checking for matrix element access and the
scene graph API.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeAlias

# Python 3.12+ type alias for callables
F: TypeAlias = Callable[..., Any]


def validate_index(size_attr: str = "SIZE") -> Callable[[F], F]:
    """
    Decorator for bounds-checking a (row, column) pair against a square size.

    The wrapped method must take ``(self, row, col, ...)``. The size is read
    from ``size_attr`` on ``self`` so one decorator serves both Mat3 and Mat4.

    Args:
        size_attr: Name of the attribute holding the matrix dimension

    Returns:
        Decorated method that raises IndexError for indices outside [0, N)

    Example:
        >>> @validate_index()
        ... def at(self, row: int, col: int) -> float:
        ...     return float(self._m[col * self.SIZE + row])
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(self: Any, row: int, col: int, *args: Any, **kwargs: Any) -> Any:
            size = getattr(self, size_attr)
            for name, value in (("row", row), ("col", col)):
                if not isinstance(value, int) or isinstance(value, bool):
                    raise TypeError(
                        f"{name} must be an int, got {type(value).__name__}. "
                        f"Use an integer index in [0, {size})."
                    )
                if not 0 <= value < size:
                    raise IndexError(
                        f"{name}={value} is out of range for a {size}x{size} matrix. "
                        f"Valid indices are 0..{size - 1}."
                    )
            return func(self, row, col, *args, **kwargs)

        return wrapper  # type: ignore

    return decorator


def validate_type(
    expected_type: type | tuple[type, ...],
    param_name: str = "value",
    param_index: int = 1,
    allow_none: bool = False,
) -> Callable[[F], F]:
    """
    Decorator for checking the type of one argument.

    The argument is looked up by position first, then by keyword. A missing
    argument is left for the wrapped function to report.

    Args:
        expected_type: Accepted type or tuple of types
        param_name: Parameter name, used for keyword lookup and in messages
        param_index: Positional index of the parameter (``self`` is 0)
        allow_none: Also accept None

    Returns:
        Decorated function that raises TypeError for any other type

    Example:
        >>> @validate_type(TransformNode, "parent", 2, allow_none=True)
        ... def set_parent(self, node, parent):
        ...     ...
    """
    accepted = expected_type if isinstance(expected_type, tuple) else (expected_type,)
    names = ", ".join(t.__name__ for t in accepted)
    expected = f"one of ({names})" if len(accepted) > 1 else names
    hint = f"Pass a {names}" if len(accepted) == 1 else f"Pass an instance of ({names})"
    if allow_none:
        hint += " or None"

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if len(args) > param_index:
                value = args[param_index]
            elif param_name in kwargs:
                value = kwargs[param_name]
            else:
                return func(*args, **kwargs)

            if not (value is None and allow_none) and not isinstance(value, accepted):
                raise TypeError(
                    f"{param_name} must be {expected}, got {type(value).__name__}. {hint}."
                )
            return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
