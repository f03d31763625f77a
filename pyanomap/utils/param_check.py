"""Small parameter validation helpers used by config dataclasses."""

from __future__ import annotations

from numbers import Number


def check_parameter(
    param: Number,
    low: Number | None = None,
    high: Number | None = None,
    *,
    param_name: str = "parameter",
    include_left: bool = True,
    include_right: bool = True,
) -> None:
    """Validate a numeric parameter is within a given range.

    Parameters
    ----------
    param:
        The numeric value to validate.
    low / high:
        Optional bounds. When `None`, the bound is not checked.
    include_left / include_right:
        Whether the comparison is inclusive.
    param_name:
        Used in error messages.
    """

    if not isinstance(param, Number) or isinstance(param, bool):
        raise TypeError(f"{param_name} must be a number, got {type(param).__name__}")
    if param != param:
        raise ValueError(f"{param_name} must not be NaN")

    if low is not None:
        if include_left and param < low:
            raise ValueError(f"{param_name} must be >= {low}, got {param}")
        if not include_left and param <= low:
            raise ValueError(f"{param_name} must be > {low}, got {param}")

    if high is not None:
        if include_right and param > high:
            raise ValueError(f"{param_name} must be <= {high}, got {param}")
        if not include_right and param >= high:
            raise ValueError(f"{param_name} must be < {high}, got {param}")


def check_int(param: object, low: int | None = None, *, param_name: str = "parameter") -> int:
    """Validate an integer (bools rejected) with an optional lower bound."""

    if isinstance(param, bool) or not isinstance(param, int):
        raise TypeError(f"{param_name} must be an int, got {type(param).__name__}")
    check_parameter(param, low, None, param_name=param_name)
    return int(param)
