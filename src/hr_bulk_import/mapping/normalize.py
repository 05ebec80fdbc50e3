from __future__ import annotations

import math
import re
from typing import Any

__all__ = [
    "normalize_header",
    "cell_to_text",
]

_NON_ALNUM = re.compile(r"[^a-z0-9]")


def normalize_header(header: Any) -> str:
    """Lowercase and drop every character outside ``[a-z0-9]``.

    >>> normalize_header("Employee Name")
    'employeename'
    >>> normalize_header(" E-Mail_ID ")
    'emailid'
    """
    if header is None:
        return ""
    return _NON_ALNUM.sub("", str(header).lower())


def cell_to_text(value: Any) -> str:
    """Render a spreadsheet cell as trimmed text.

    Integral floats lose their ``.0`` (Excel stores 9876543210 as a float);
    None and NaN become the empty string.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value).strip()
