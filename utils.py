"""
utils.py

Numeric helpers shared by the transform model, shape handlers and clipboard.
"""

from __future__ import annotations

import math
import re
from typing import List, Optional

# Signed decimal with optional fraction and exponent, e.g. "-1.5e3", ".5", "10."
NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def format_number(value: float) -> str:
    """
    Format a number for an SVG attribute value.

    Integral values are written without a decimal point ("15" rather than
    "15.0"); everything else uses Python's shortest round-trip repr, so
    parsing the result yields exactly the same float.

    Args:
        value: The number to format

    Returns:
        String representation suitable for an attribute value
    """
    v = float(value)
    if not math.isfinite(v):
        return "0"
    if v.is_integer():
        return str(int(v))
    return repr(v)


def parse_number(s: Optional[str], default: float = 0.0) -> float:
    """
    Parse a single numeric attribute value.

    Trailing units ("10px") are tolerated; anything unparseable yields
    *default*.

    Args:
        s: Attribute text (may be None)
        default: Value returned when nothing numeric is found

    Returns:
        The parsed float or default
    """
    if s is None:
        return default
    match = NUMBER_RE.match(s.strip())
    if not match:
        return default
    try:
        v = float(match.group(0))
    except ValueError:
        return default
    return v if math.isfinite(v) else default


def parse_numbers(s: Optional[str]) -> List[float]:
    """Extract every number in a comma/whitespace separated list."""
    if not s:
        return []
    out = []
    for token in NUMBER_RE.findall(s):
        try:
            v = float(token)
        except ValueError:
            continue
        if math.isfinite(v):
            out.append(v)
    return out
