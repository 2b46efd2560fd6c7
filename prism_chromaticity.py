# -*- coding: utf-8 -*-
"""
Prism: Colour-space conversion for picker widgets
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: prism_chromaticity.py — CIE 1931 (x, y) chromaticity coordinates.

Degenerate inputs never produce NaN:
  - ``from_xyz`` returns the origin (0, 0) when X + Y + Z == 0.
  - ``to_uv_prime`` returns (0, 0) when -2x + 12y + 3 == 0.
  - ``from_uv_prime`` returns the origin when 6u' - 16v' + 12 == 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Sequence, Tuple

from prism_errors import InvalidDimension
from prism_formatting import components_equal, components_hash, format_color

__all__ = ["ChromaticityCoordinates"]

_DENOM_EPS: Final[float] = 1e-12


@dataclass(frozen=True, eq=False)
class ChromaticityCoordinates:
    """
    Chromaticity pair (x, y) of the CIE 1931 colour space.

    Both coordinates range usually from 0 to 1; values outside are kept as-is.
    """
    x: float
    y: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    @classmethod
    def from_vector(cls, vector: Sequence[float]) -> "ChromaticityCoordinates":
        if len(vector) < 2:
            raise InvalidDimension(2, len(vector), cls.__name__)
        return cls(vector[0], vector[1])

    @classmethod
    def from_xyz(cls, X: float, Y: float, Z: float) -> "ChromaticityCoordinates":
        """Project tristimulus values onto the unit plane."""
        total = X + Y + Z
        if total == 0.0:
            return cls(0.0, 0.0)
        return cls(X / total, Y / total)

    @classmethod
    def from_uv_prime(cls, u_prime: float, v_prime: float) -> "ChromaticityCoordinates":
        """CIE 1976 UCS (u', v') -> (x, y)."""
        denom = 6.0 * u_prime - 16.0 * v_prime + 12.0
        if abs(denom) < _DENOM_EPS:
            return cls(0.0, 0.0)
        return cls(9.0 * u_prime / denom, 4.0 * v_prime / denom)

    def to_uv_prime(self) -> Tuple[float, float]:
        """(x, y) -> CIE 1976 UCS (u', v')."""
        denom = -2.0 * self.x + 12.0 * self.y + 3.0
        if abs(denom) < _DENOM_EPS:
            return 0.0, 0.0
        return 4.0 * self.x / denom, 9.0 * self.y / denom

    @property
    def vector(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ChromaticityCoordinates):
            return NotImplemented
        return components_equal(self.vector, other.vector)

    def __hash__(self) -> int:
        return components_hash(type(self).__name__, *self.vector)

    def __str__(self) -> str:
        return format_color("xy", zip(("x", "y"), self.vector))
