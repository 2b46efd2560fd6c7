# -*- coding: utf-8 -*-
"""
Prism: Colour-space conversion for picker widgets
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: prism_colormodels.py — Immutable colour values, one class per model.

Conventions shared by every model:
  1.  Components are stored as floats and never clamped. Out-of-range values
      describe out-of-gamut colours and survive conversions unchanged.
  2.  ``vector`` is the read-only component tuple in a fixed, documented
      order; ``from_vector`` builds a value from any ordered sequence and
      raises InvalidDimension when it is too short (extra items are ignored).
  3.  ``==`` is exact IEEE-754 comparison of the components of two values of
      the same model; the white point does not take part. ``hash`` agrees.
  4.  ``str()`` is the diagnostic form ``"Luv [L=50.13, u=-10, v=20.5]"``,
      ``repr()`` the constructor form.
  5.  White-point-bearing models (XYZ, xyY, Lab, LChab, Luv, LChuv) resolve a
      missing white point to DEFAULT_WHITE_POINT (D65) in the constructor.
      An XYZColor is accepted wherever a white point is expected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    ClassVar,
    Protocol,
    Sequence,
    Tuple,
    Type,
    Union,
    cast,
    runtime_checkable,
)

from prism_chromaticity import ChromaticityCoordinates
from prism_errors import InvalidDimension
from prism_formatting import components_equal, components_hash, format_color
from prism_illuminants import DEFAULT_WHITE_POINT, Illuminant

__all__ = [
    "ColorVector",
    "WhitePointLike",
    "RGBColor",
    "XYZColor",
    "xyYColor",
    "LabColor",
    "LChabColor",
    "LuvColor",
    "LChuvColor",
    "LMSColor",
    "HSVColor",
    "HSLColor",
    "CMYKColor",
    "MODELS",
    "as_white_point",
]

WhitePointLike = Union[Illuminant, "XYZColor", None]


@runtime_checkable
class ColorVector(Protocol):
    """
    Uniform component view shared by all colour models.

    Generic geometry (e.g. mapping Luv u*, v* onto a colour wheel) only needs
    this capability, never the concrete model.
    """
    @property
    def vector(self) -> Tuple[float, ...]: ...


def as_white_point(white_point: WhitePointLike) -> Illuminant:
    """Resolve a white point argument; ``None`` means the default illuminant."""
    if white_point is None:
        return DEFAULT_WHITE_POINT
    if isinstance(white_point, Illuminant):
        return white_point
    if isinstance(white_point, XYZColor):
        return Illuminant.from_xyz(white_point.X, white_point.Y, white_point.Z)
    raise TypeError(
        f"White point must be an Illuminant or XYZColor, got {type(white_point).__name__}."
    )


class _ColorModel:
    """Shared machinery; concrete models are frozen dataclasses."""
    __slots__ = ()

    _LABEL: ClassVar[str]
    _FIELDS: ClassVar[Tuple[str, ...]]
    _NAMES: ClassVar[Tuple[str, ...]]
    HAS_WHITE_POINT: ClassVar[bool] = False

    def __post_init__(self) -> None:
        for name in self._FIELDS:
            object.__setattr__(self, name, float(getattr(self, name)))
        if self.HAS_WHITE_POINT:
            object.__setattr__(self, "white_point", as_white_point(getattr(self, "white_point")))

    @classmethod
    def from_vector(cls, vector: Sequence[float], white_point: WhitePointLike = None) -> Any:
        n = len(cls._FIELDS)
        values = tuple(vector)
        if len(values) < n:
            raise InvalidDimension(n, len(values), cls.__name__)
        if cls.HAS_WHITE_POINT:
            return cls(*values[:n], white_point=white_point)  # type: ignore[call-arg]
        if white_point is not None:
            raise TypeError(f"{cls.__name__} does not carry a white point.")
        return cls(*values[:n])

    @property
    def vector(self) -> Tuple[float, ...]:
        return tuple(getattr(self, name) for name in self._FIELDS)

    def __eq__(self, other: object) -> bool:
        # Components only; the white point is metadata, not part of identity.
        if type(other) is not type(self):
            return NotImplemented
        return components_equal(self.vector, cast(_ColorModel, other).vector)

    def __hash__(self) -> int:
        return components_hash(type(self).__name__, *self.vector)

    def __str__(self) -> str:
        return format_color(self._LABEL, zip(self._NAMES, self.vector))


# ═══════════════════════════════════════════════════════════════════════════════
# Device-dependent models (no white point; sRGB native white is D65)
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class RGBColor(_ColorModel):
    """
    Companded sRGB (IEC 61966-2-1). Vector: (R, G, B), usually 0 to 1.
    """
    r: float
    g: float
    b: float

    _LABEL: ClassVar[str] = "RGB"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("r", "g", "b")
    _NAMES: ClassVar[Tuple[str, ...]] = ("R", "G", "B")


@dataclass(frozen=True, eq=False)
class HSVColor(_ColorModel):
    """
    Hexcone HSV over sRGB. Vector: (H, S, V); H in degrees 0..360,
    S and V usually 0 to 1.
    """
    h: float
    s: float
    v: float

    _LABEL: ClassVar[str] = "HSV"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("h", "s", "v")
    _NAMES: ClassVar[Tuple[str, ...]] = ("H", "S", "V")


@dataclass(frozen=True, eq=False)
class HSLColor(_ColorModel):
    """
    Bi-hexcone HSL over sRGB. Vector: (H, S, L); H in degrees 0..360,
    S and L usually 0 to 1.
    """
    h: float
    s: float
    l: float

    _LABEL: ClassVar[str] = "HSL"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("h", "s", "l")
    _NAMES: ClassVar[Tuple[str, ...]] = ("H", "S", "L")


@dataclass(frozen=True, eq=False)
class CMYKColor(_ColorModel):
    """
    Naive (profile-free) CMYK derived from sRGB. Vector: (C, M, Y, K),
    usually 0 to 1. This is the only four-component model.
    """
    c: float
    m: float
    y: float
    k: float

    _LABEL: ClassVar[str] = "CMYK"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("c", "m", "y", "k")
    _NAMES: ClassVar[Tuple[str, ...]] = ("C", "M", "Y", "K")


@dataclass(frozen=True, eq=False)
class LMSColor(_ColorModel):
    """
    Cone response of the long, medium and short wavelength receptors
    (rho, gamma, beta) in Bradford cone space. Vector: (L, M, S), usually
    -1 to 1.
    """
    L: float
    M: float
    S: float

    _LABEL: ClassVar[str] = "LMS"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("L", "M", "S")
    _NAMES: ClassVar[Tuple[str, ...]] = ("L", "M", "S")


# ═══════════════════════════════════════════════════════════════════════════════
# White-point-bearing models
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True, eq=False)
class XYZColor(_ColorModel):
    """
    CIE 1931 XYZ tristimulus values on the Y = 1 scale.
    Vector: (X, Y, Z), usually 0 to ~1.1.
    """
    X: float
    Y: float
    Z: float
    white_point: Illuminant = DEFAULT_WHITE_POINT

    _LABEL: ClassVar[str] = "XYZ"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("X", "Y", "Z")
    _NAMES: ClassVar[Tuple[str, ...]] = ("X", "Y", "Z")
    HAS_WHITE_POINT: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class xyYColor(_ColorModel):
    """
    CIE xyY: chromaticity (x, y) plus luminance Y. Vector: (x, y, Y),
    usually 0 to 1.
    """
    x: float
    y: float
    Y: float
    white_point: Illuminant = DEFAULT_WHITE_POINT

    _LABEL: ClassVar[str] = "xyY"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("x", "y", "Y")
    _NAMES: ClassVar[Tuple[str, ...]] = ("x", "y", "Y")
    HAS_WHITE_POINT: ClassVar[bool] = True

    @classmethod
    def from_chromaticity(cls, chromaticity: ChromaticityCoordinates, Y: float,
                          white_point: WhitePointLike = None) -> "xyYColor":
        return cls(chromaticity.x, chromaticity.y, Y, white_point)

    @property
    def chromaticity(self) -> ChromaticityCoordinates:
        return ChromaticityCoordinates(self.x, self.y)

    @property
    def luminance(self) -> float:
        return self.Y


@dataclass(frozen=True, eq=False)
class LabColor(_ColorModel):
    """
    CIE L*a*b* (1976). Vector: (L, a, b); L 0 to 100, a and b usually
    -128 to 128.
    """
    L: float
    a: float
    b: float
    white_point: Illuminant = DEFAULT_WHITE_POINT

    _LABEL: ClassVar[str] = "Lab"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("L", "a", "b")
    _NAMES: ClassVar[Tuple[str, ...]] = ("L", "a", "b")
    HAS_WHITE_POINT: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class LChabColor(_ColorModel):
    """
    Cylindrical CIE L*a*b*. Vector: (L, C, h); h in degrees 0..360.
    """
    L: float
    C: float
    h: float
    white_point: Illuminant = DEFAULT_WHITE_POINT

    _LABEL: ClassVar[str] = "LChab"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("L", "C", "h")
    _NAMES: ClassVar[Tuple[str, ...]] = ("L", "C", "h")
    HAS_WHITE_POINT: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class LuvColor(_ColorModel):
    """
    CIE L*u*v* (1976). Vector: (L, u, v); L 0 to 100, u and v usually
    -100 to 100.
    """
    L: float
    u: float
    v: float
    white_point: Illuminant = DEFAULT_WHITE_POINT

    _LABEL: ClassVar[str] = "Luv"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("L", "u", "v")
    _NAMES: ClassVar[Tuple[str, ...]] = ("L", "u", "v")
    HAS_WHITE_POINT: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class LChuvColor(_ColorModel):
    """
    Cylindrical CIE L*u*v*. Vector: (L, C, h); h in degrees 0..360.
    The hue angle is what a Luv colour wheel plots.
    """
    L: float
    C: float
    h: float
    white_point: Illuminant = DEFAULT_WHITE_POINT

    _LABEL: ClassVar[str] = "LChuv"
    _FIELDS: ClassVar[Tuple[str, ...]] = ("L", "C", "h")
    _NAMES: ClassVar[Tuple[str, ...]] = ("L", "C", "h")
    HAS_WHITE_POINT: ClassVar[bool] = True


MODELS: Tuple[Type[_ColorModel], ...] = (
    RGBColor, HSVColor, HSLColor, CMYKColor, LMSColor,
    XYZColor, xyYColor, LabColor, LChabColor, LuvColor, LChuvColor,
)
