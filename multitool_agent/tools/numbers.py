"""
Rounding shared by the tools.

Tool results round halves upwards (2.5 -> 3, -2.5 -> -2), not to even as
the builtin ``round`` does.
"""

import math


def round_half_up(value: float, digits: int = 0):
    """
    Round to ``digits`` decimal places with halves going up.

    Returns an int when ``digits`` is 0, otherwise a float.
    """
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5)
    if digits == 0:
        return rounded
    return rounded / scale
