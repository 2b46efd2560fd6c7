# -*- coding: utf-8 -*-
"""
Prism: Colour-space conversion for picker widgets
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: prism_illuminants.py — Standard reference whites.

All table entries are CIE 1931 2° observer tristimulus values taken from
ASTM E308-01 and normalised so that Y == 1.0. This normalisation is checked
once at import (``_validate_table``); a broken table makes the module fail to
import rather than producing wrong colours later.

Custom white points may be built with ``Illuminant.from_xyz`` or
``Illuminant.from_chromaticity``. A custom white whose Y is not 1.0 is
accepted but warns, because L* of Lab/Luv is relative to Y_n.
"""

from __future__ import annotations

import math
import types
import warnings
from dataclasses import dataclass, field
from typing import Dict, Final, Mapping, Tuple

from prism_chromaticity import ChromaticityCoordinates
from prism_errors import UnknownIlluminant
from prism_formatting import format_color

__all__ = [
    "Illuminant",
    "A", "B", "C", "D50", "D55", "D65", "D75", "E", "F2", "F7", "F11",
    "ILLUMINANTS",
    "DEFAULT_WHITE_POINT",
    "get_illuminant",
]


@dataclass(frozen=True)
class Illuminant:
    """
    Reference white expressed as XYZ tristimulus values.

    Equality and hashing use the tristimulus triple only; ``name`` is a label,
    so a custom white with D65's values compares equal to :data:`D65`.
    """
    X: float
    Y: float
    Z: float
    name: str = field(default="custom", compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "X", float(self.X))
        object.__setattr__(self, "Y", float(self.Y))
        object.__setattr__(self, "Z", float(self.Z))

    @classmethod
    def from_xyz(cls, X: float, Y: float, Z: float, name: str = "custom") -> "Illuminant":
        if Y != 1.0:
            warnings.warn(
                f"White point '{name}' has Y={Y!r}; Lab/Luv lightness is "
                "relative to Y_n, tabulated whites use Y=1.0.",
                UserWarning,
                stacklevel=2,
            )
        return cls(X, Y, Z, name)

    @classmethod
    def from_chromaticity(cls, x: float, y: float, Y: float = 1.0,
                          name: str = "custom") -> "Illuminant":
        """White point from its (x, y) chromaticity and luminance."""
        if y == 0.0:
            raise ValueError("A white point needs a non-zero y chromaticity.")
        factor = Y / y
        return cls.from_xyz(x * factor, Y, (1.0 - x - y) * factor, name)

    @property
    def vector(self) -> Tuple[float, float, float]:
        return (self.X, self.Y, self.Z)

    @property
    def chromaticity(self) -> ChromaticityCoordinates:
        return ChromaticityCoordinates.from_xyz(self.X, self.Y, self.Z)

    def __str__(self) -> str:
        return format_color(f"Illuminant {self.name}", zip("XYZ", self.vector))


# --- Standard table (ASTM E308-01, 2° observer, Y = 1) ---
A: Final[Illuminant] = Illuminant(1.09850, 1.0, 0.35585, "A")
B: Final[Illuminant] = Illuminant(0.99072, 1.0, 0.85223, "B")
C: Final[Illuminant] = Illuminant(0.98074, 1.0, 1.18232, "C")
D50: Final[Illuminant] = Illuminant(0.96422, 1.0, 0.82521, "D50")
D55: Final[Illuminant] = Illuminant(0.95682, 1.0, 0.92149, "D55")
D65: Final[Illuminant] = Illuminant(0.95047, 1.0, 1.08883, "D65")
D75: Final[Illuminant] = Illuminant(0.94972, 1.0, 1.22638, "D75")
E: Final[Illuminant] = Illuminant(1.0, 1.0, 1.0, "E")
F2: Final[Illuminant] = Illuminant(0.99186, 1.0, 0.67393, "F2")
F7: Final[Illuminant] = Illuminant(0.95041, 1.0, 1.08747, "F7")
F11: Final[Illuminant] = Illuminant(1.00962, 1.0, 0.64350, "F11")

_TABLE: Dict[str, Illuminant] = {
    ill.name: ill for ill in (A, B, C, D50, D55, D65, D75, E, F2, F7, F11)
}
ILLUMINANTS: Final[Mapping[str, Illuminant]] = types.MappingProxyType(_TABLE)

# Used by every white-point-bearing model when none is given.
DEFAULT_WHITE_POINT: Final[Illuminant] = D65


def get_illuminant(name: str) -> Illuminant:
    """Case-insensitive table lookup."""
    key = name.strip().upper()
    try:
        return ILLUMINANTS[key]
    except KeyError:
        raise UnknownIlluminant(
            f"Illuminant '{name}' not found. Known: {', '.join(ILLUMINANTS)}."
        ) from None


def _validate_table(table: Mapping[str, Illuminant]) -> None:
    """Import-time invariant: finite, positive, Y-normalised entries."""
    for key, ill in table.items():
        if key != ill.name:
            raise ValueError(f"Illuminant table key '{key}' does not match '{ill.name}'.")
        if not all(math.isfinite(v) and v > 0.0 for v in ill.vector):
            raise ValueError(f"Illuminant {ill.name} has non-positive or non-finite XYZ {ill.vector}.")
        if ill.Y != 1.0:
            raise ValueError(f"Illuminant {ill.name} is not normalised to Y=1.0 (Y={ill.Y}).")


_validate_table(ILLUMINANTS)
