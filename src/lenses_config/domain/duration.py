"""Parse the duration strings stored in a context's ``timeout`` field.

The accepted grammar is a signed sequence of decimal numbers, each followed by
a unit: ``"300ms"``, ``"-1.5h"``, ``"2h45m"``. Valid units are ``ns``, ``us``
(or ``µs``), ``ms``, ``s``, ``m`` and ``h``. A bare ``"0"`` is accepted.
"""

from __future__ import annotations

import re
from typing import Final

from .errors import ValidationError

_UNITS: Final[dict[str, float]] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")


def parse_duration(value: str) -> float | None:
    """Return *value* in seconds, or ``None`` when it is empty (no timeout).

    Examples
    --------
    >>> parse_duration("2h45m")
    9900.0
    >>> parse_duration("300ms")
    0.3
    >>> parse_duration("") is None
    True
    >>> parse_duration("5 minutes")
    Traceback (most recent call last):
    ...
    lenses_config.domain.errors.ValidationError: Invalid duration '5 minutes'
    """

    text = value.strip()
    if not text:
        return None

    sign = 1.0
    body = text
    if body[0] in "+-":
        sign = -1.0 if body[0] == "-" else 1.0
        body = body[1:]
    if body == "0":
        return 0.0
    if not body:
        raise ValidationError(f"Invalid duration {value!r}")

    total = 0.0
    position = 0
    while position < len(body):
        match = _COMPONENT.match(body, position)
        if match is None:
            raise ValidationError(f"Invalid duration {value!r}")
        total += float(match.group(1)) * _UNITS[match.group(2)]
        position = match.end()
    return round(sign * total, 9)


__all__ = ["parse_duration"]
