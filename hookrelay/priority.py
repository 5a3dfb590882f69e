"""
Priority bands for handler ordering.

Lower values run earlier. Any integer is a valid order; the bands below are
the conventional anchor points plugins use so they can slot in relative to
each other:

    CORE     -2000   engine internals and bootstrap
    HIGHEST  -1000
    HIGH      -500
    NEUTRAL      0   default
    LOW        500
    LOWEST    1000
"""

from enum import IntEnum
from typing import Dict, Union


class Priority(IntEnum):
    CORE = -2000
    HIGHEST = -1000
    HIGH = -500
    NEUTRAL = 0
    LOW = 500
    LOWEST = 1000


# "normal" is what most plugin code reaches for when it means neutral.
BAND_ALIASES: Dict[str, Priority] = {
    "normal": Priority.NEUTRAL,
}

OrderLike = Union[int, str, Priority]


def resolve_order(value: OrderLike) -> int:
    """
    Turn an order value into a plain int.

    Accepts ints (including ``Priority`` members) and band names such as
    ``"high"`` or ``"LOWEST"``.

    Raises:
        TypeError: for bools, floats and other non-integer values
        ValueError: for unknown band names
    """
    if isinstance(value, bool):
        raise TypeError("Handler order must be an int or a priority name, got bool")

    if isinstance(value, int):
        return int(value)

    if isinstance(value, str):
        key = value.strip().lower()
        if key in BAND_ALIASES:
            return int(BAND_ALIASES[key])
        try:
            return int(Priority[key.upper()])
        except KeyError:
            valid = ", ".join(p.name.lower() for p in Priority)
            raise ValueError(
                f"Unknown priority '{value}'. Valid names: {valid}"
            ) from None

    raise TypeError(
        f"Handler order must be an int or a priority name, got {type(value).__name__}"
    )


def band_for(order: int) -> str:
    """Name of the band an order falls in, e.g. ``-700 -> 'highest'``.

    Orders are bucketed to the nearest band at or below them; anything
    earlier than CORE is still reported as ``core``.
    """
    bands = sorted(Priority, key=int)
    name = bands[0].name
    for band in bands:
        if order >= band:
            name = band.name
    return name.lower()
