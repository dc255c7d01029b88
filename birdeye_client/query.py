import math
from decimal import Decimal
from typing import Mapping, Optional, Union
from urllib.parse import quote

QueryValue = Optional[Union[str, int, float]]

# characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~"
_URI_COMPONENT_SAFE = "!*'()"


def _format_float(value: float) -> str:
    """
    Render a float the way JavaScript's Number#toString does.

    Plain notation for 1e-6 <= |value| < 1e21, "1e-7"/"1e+21" style outside it,
    and NaN/Infinity spelled out.
    """

    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value == 0:
        return "0"

    sign, digit_tuple, exponent = Decimal(repr(value)).normalize().as_tuple()
    digits = "".join(map(str, digit_tuple))
    k = len(digits)
    n = exponent + k  # position of the decimal point relative to the digits
    prefix = "-" if sign else ""

    if k <= n <= 21:
        return prefix + digits + "0" * (n - k)
    if 0 < n <= 21:
        return prefix + digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return prefix + "0." + "0" * -n + digits

    e = n - 1
    mantissa = digits[0] + ("." + digits[1:] if k > 1 else "")
    return f"{prefix}{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"


def _format_number(value: Union[int, float]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return _format_float(value)
    return str(value)


def encode_query(params: Mapping[str, QueryValue]) -> str:
    """
    Encode parameters into a query string (no leading "?").

    Keys whose value is None or a blank string are omitted. Strings are trimmed,
    percent-encoded as a URI component and have "%20" replaced with "+".
    Numbers are encoded as-is, so 0 is kept.

    Args:
        params: Parameter names to values, in the order they should appear.

    Returns:
        The "key=value" pairs joined with "&", or "" when nothing is left.
    """

    pairs = []
    for key, value in params.items():
        if value is None:
            continue

        if isinstance(value, (int, float)):
            pairs.append(f"{key}={quote(_format_number(value), safe=_URI_COMPONENT_SAFE)}")
            continue

        trimmed = value.strip()
        if not trimmed:
            continue
        encoded = quote(trimmed, safe=_URI_COMPONENT_SAFE).replace("%20", "+")
        pairs.append(f"{key}={encoded}")

    return "&".join(pairs)
