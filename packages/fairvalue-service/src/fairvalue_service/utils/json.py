import math
import numbers
from collections.abc import Mapping
from typing import Any


def sanitize_for_json(obj: Any) -> Any:
    """
    Make a response payload strict-JSON safe.

    Engine dataclasses (anything with ``to_dict``) are expanded to their
    camelCase dicts, tuples become lists, and non-finite reals (NaN, +/-inf,
    numpy scalars included) become ``None``. Integers, strings and ``None``
    pass through.
    """
    if isinstance(obj, (bool, numbers.Integral, str)) or obj is None:
        return obj
    if isinstance(obj, numbers.Real):
        value = float(obj)
        return value if math.isfinite(value) else None
    if isinstance(obj, Mapping):
        return {key: sanitize_for_json(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_for_json(item) for item in obj]
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return sanitize_for_json(to_dict())
    return obj
