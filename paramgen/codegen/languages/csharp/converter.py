"""
Conversion of raw parameter values into C# literals.

The converter never validates its input: a value that is not a number
is forwarded into the generated source and reported by the C# compiler.
"""

import math
import re
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from ...core.schema import TypeTag

FLOAT_SUFFIX = "f"
DECIMAL_TOKEN = re.compile(r"(\d+\.\d+)")

VECTOR_CONSTRUCTORS = {
    TypeTag.VECTOR3: "new Vector3",
    TypeTag.VECTOR2: "new Vector2",
}

VECTOR_SIZES = {
    TypeTag.VECTOR3: 3,
    TypeTag.VECTOR2: 2,
}


def suffix_decimals(raw: str) -> str:
    """Append the float suffix to every ``digits.digits`` token."""
    return DECIMAL_TOKEN.sub(r"\g<1>" + FLOAT_SUFFIX, raw)


def convert_value(type_name: str, raw: str) -> str:
    """
    Turn a declared type and raw text into a C# literal.

    Args:
        type_name: Declared type as written in the parameter document
        raw: Raw value text

    Returns:
        Literal text to place after ``=`` in a field declaration
    """
    tag = TypeTag.parse(type_name)

    if tag == TypeTag.FLOAT:
        return raw + FLOAT_SUFFIX
    elif tag == TypeTag.INT:
        return raw
    elif tag == TypeTag.STRING:
        # Embedded quotes are not escaped
        return f'"{raw}"'
    elif tag in VECTOR_CONSTRUCTORS:
        return VECTOR_CONSTRUCTORS[tag] + suffix_decimals(raw)

    return raw


def parse_vector(raw: str, size: int) -> Optional[Tuple[float, ...]]:
    """
    Parse ``(x, y[, z])`` text into floats.

    Returns None when the component count is wrong or a component
    is not a finite number.
    """
    parts = raw.strip().strip("()").split(",")
    if len(parts) != size:
        return None

    try:
        values = tuple(float(part.strip()) for part in parts)
    except ValueError:
        return None
    return values if all(math.isfinite(v) for v in values) else None


def _decimal_text(value: float) -> str:
    # Positional notation only; exponent forms would never get the f suffix
    text = format(Decimal(repr(float(value))), "f")
    return text if "." in text else text + ".0"


def format_vector(values: Sequence[float]) -> str:
    """Render vector components the way the document stores them."""
    return "(" + ", ".join(_decimal_text(v) for v in values) + ")"


def is_number(raw: str, integral: bool = False) -> bool:
    """True if raw parses as an int (``integral``) or a float."""
    try:
        if integral:
            int(raw)
        else:
            float(raw)
        return True
    except ValueError:
        return False


def vector_size(type_name: str) -> Optional[int]:
    """Component count for a vector type name, or None."""
    return VECTOR_SIZES.get(TypeTag.parse(type_name))
