# -*- coding: utf-8 -*-
"""
Prism: Colour-space conversion for picker widgets
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: prism_formatting.py — Diagnostic formatting and exact equality helpers.

Formatting follows the ``0.##`` convention: at most two decimals, rounded half
away from zero, trailing zeros trimmed, independent of the process locale.
Equality is exact IEEE-754 comparison per component; there is deliberately no
tolerance here, approximate comparison belongs to the tests.
"""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Final, Hashable, Iterable, Sequence, Tuple

__all__ = [
    "format_component",
    "format_color",
    "components_equal",
    "components_hash",
]

_TWO_PLACES: Final[Decimal] = Decimal("0.01")
# Wide enough to quantize the largest finite double without InvalidOperation.
_CONTEXT: Final[Context] = Context(prec=400)


def format_component(value: float) -> str:
    """
    Format a single component with at most two decimals.

    >>> format_component(50.126), format_component(-10.004), format_component(20.499)
    ('50.13', '-10', '20.5')
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"

    # repr() gives the shortest round-tripping decimal, so 2.675 rounds to
    # 2.68 as written rather than following its binary expansion.
    quantized = Decimal(repr(value)).quantize(
        _TWO_PLACES, rounding=ROUND_HALF_UP, context=_CONTEXT
    )
    if quantized.is_zero():
        return "0"
    text = f"{quantized:f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_color(label: str, pairs: Iterable[Tuple[str, float]]) -> str:
    """Build ``"<label> [name=value, ...]"``."""
    body = ", ".join(f"{name}={format_component(val)}" for name, val in pairs)
    return f"{label} [{body}]"


def components_equal(a: Sequence[float], b: Sequence[float]) -> bool:
    """Exact element-wise equality (``0.0 == -0.0``, ``nan != nan``)."""
    if len(a) != len(b):
        return False
    return all(x == y for x, y in zip(a, b))


def components_hash(*parts: Hashable) -> int:
    """Hash consistent with :func:`components_equal` on the float parts."""
    # hash(-0.0) == hash(0.0), so IEEE-equal components always collide.
    return hash(parts)
