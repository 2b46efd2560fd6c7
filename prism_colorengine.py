# -*- coding: utf-8 -*-
"""
Prism: Colour-space conversion for picker widgets
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Array Color Engine
==================
Batch colour-space transforms on float64 arrays of shape (3,) or (N, 3)
(CMYK: (4,) or (N, 4)). The value types in ``prism_colormodels`` and the
router in ``prism_convert`` are built on top of these functions.

Design points:
1. Exactness: rational CIE constants (delta = 6/29) and sRGB matrices derived
   from the IEC 61966-2-1 primaries and the tabulated D65, with the reverse
   matrix computed as the numerical inverse of the forward one.
2. No clipping: out-of-gamut inputs (negative RGB, RGB > 1, negative XYZ)
   pass through every transform and come back on the inverse path.
3. Numba kernels for every piecewise transfer function and per-pixel loop,
   with strict IEEE 754 twins selectable at runtime (``set_strict_ieee``).

Degenerate inputs have defined outputs instead of NaN:
  - XYZ with X + Y + Z == 0 -> xyY (0, 0, 0).
  - xyY with y == 0 -> XYZ (0, 0, 0).
  - XYZ with Y == 0 -> Luv (0, 0, 0); Luv with L == 0 -> XYZ (0, 0, 0).
  - Achromatic RGB -> hue 0, saturation 0; black RGB -> CMYK (0, 0, 0, 1).

References:
    - CIE 15:2004 "Colorimetry"
    - IEC 61966-2-1:1999 (sRGB Standard)
    - ASTM E308-01 (tabulated illuminants)
    - Lindbloom, B. "RGB/XYZ Matrices", "Chromatic Adaptation".
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Dict, Final, Sequence, Tuple, TypeAlias, Union

import numpy as np
import numpy.typing as npt
from numba import njit

from prism_errors import InvalidDimension
from prism_illuminants import D65

__all__ = [
    # --- Type Aliases ---
    "ArrayFloat",
    "WhiteLike",

    # --- Constants ---
    "REF_WHITE_D65",
    "LAB_EPSILON",
    "LAB_KAPPA",
    "DEG2RAD",
    "RAD2DEG",
    "SRGB_PRIMARIES",
    "ADAPTATION_METHODS",
    "DEFAULT_ADAPTATION",

    # --- Configuration ---
    "set_strict_ieee",

    # --- Matrices ---
    "rgb_to_xyz_matrix",
    "M_SRGB_TO_XYZ_T",
    "M_XYZ_TO_SRGB_T",
    "M_BRADFORD_T",
    "M_BRADFORD_INV_T",
    "M_VON_KRIES_T",
    "M_VON_KRIES_INV_T",
    "M_XYZ_TO_LMS_T",
    "M_LMS_TO_XYZ_T",

    # --- Decorators ---
    "handle_shapes",
    "handle_shapes_cmyk",

    # --- Classes ---
    "ColorSpaceEngine",
    "ChromaticAdaptation",
]

# --- Type Aliases ---
ArrayFloat: TypeAlias = npt.NDArray[np.floating]
# Anything carrying an XYZ white: an array, a 3-sequence, or an object with a
# ``vector`` attribute (Illuminant, XYZColor).
WhiteLike: TypeAlias = Union[ArrayFloat, Sequence[float], Any]


# =============================================================================
# CONSTANTS & MATRICES
# =============================================================================

REF_WHITE_D65: Final[ArrayFloat] = np.array(D65.vector, dtype=np.float64)

# CIE 1976 rational constants shared by Lab and Luv.
# delta = 6/29 is where the lightness function switches from cubic to linear.
_LAB_DELTA: Final[float] = 6.0 / 29.0
LAB_EPSILON: Final[float] = _LAB_DELTA * _LAB_DELTA * _LAB_DELTA  # ~0.008856
LAB_KAPPA: Final[float] = (29.0 * 29.0 * 29.0) / (3.0 * 3.0 * 3.0)  # ~903.296
# L* at the switch point, kappa * epsilon == 8 exactly.
_LAB_KE: Final[float] = 8.0

DEG2RAD: Final[float] = np.pi / 180.0
RAD2DEG: Final[float] = 180.0 / np.pi

# sRGB (IEC 61966-2-1) primary chromaticities, native white D65.
SRGB_PRIMARIES: Final[Tuple[Tuple[float, float], ...]] = (
    (0.64, 0.33),
    (0.30, 0.60),
    (0.15, 0.06),
)


def _as_white(white: WhiteLike) -> ArrayFloat:
    """Normalise a white point argument to a float64 (3,) array."""
    vec = getattr(white, "vector", white)
    arr = np.asarray(vec, dtype=np.float64).ravel()
    if arr.shape[0] != 3:
        raise InvalidDimension(3, arr.shape[0], "white point")
    return arr


def rgb_to_xyz_matrix(primaries: Sequence[Sequence[float]], white: WhiteLike) -> ArrayFloat:
    """
    Derives the linear RGB -> XYZ matrix of an RGB working space.

    Each primary is lifted to XYZ at Y = 1 and the columns are scaled so that
    RGB (1, 1, 1) maps exactly onto ``white``.

    Args:
        primaries: (x, y) chromaticities of the red, green and blue primaries.
        white: Reference white of the working space.

    Returns:
        3x3 matrix for column vectors (XYZ = M @ RGB).
    """
    prim = np.asarray(primaries, dtype=np.float64)
    if prim.shape != (3, 2):
        raise InvalidDimension(6, prim.size, "RGB primaries")
    x, y = prim[:, 0], prim[:, 1]
    P = np.stack((x / y, np.ones(3), (1.0 - x - y) / y))
    S = np.linalg.solve(P, _as_white(white))
    return P * S


# We pre-transpose every matrix because all arrays here are row vectors:
# (N, 3) @ M.T applies M to each pixel.
_M_SRGB_TO_XYZ_BASE = rgb_to_xyz_matrix(SRGB_PRIMARIES, REF_WHITE_D65)
M_SRGB_TO_XYZ_T: Final[ArrayFloat] = _M_SRGB_TO_XYZ_BASE.T.copy()
M_XYZ_TO_SRGB_T: Final[ArrayFloat] = np.linalg.inv(_M_SRGB_TO_XYZ_BASE).T.copy()

# Bradford cone-response matrix ("sharpened" rho, gamma, beta).
_M_BRADFORD = np.array([
    [ 0.8951000,  0.2664000, -0.1614000],
    [-0.7502000,  1.7135000,  0.0367000],
    [ 0.0389000, -0.0685000,  1.0296000]
], dtype=np.float64)
M_BRADFORD_T: Final[ArrayFloat] = _M_BRADFORD.T.copy()
M_BRADFORD_INV_T: Final[ArrayFloat] = np.linalg.inv(_M_BRADFORD).T.copy()

# Hunt-Pointer-Estevez, normalised to D65 (classic von Kries adaptation).
_M_VON_KRIES = np.array([
    [ 0.4002400,  0.7076000, -0.0808100],
    [-0.2263000,  1.1653200,  0.0457000],
    [ 0.0000000,  0.0000000,  0.9182200]
], dtype=np.float64)
M_VON_KRIES_T: Final[ArrayFloat] = _M_VON_KRIES.T.copy()
M_VON_KRIES_INV_T: Final[ArrayFloat] = np.linalg.inv(_M_VON_KRIES).T.copy()

# The LMS colour model is expressed in Bradford cone space.
M_XYZ_TO_LMS_T: Final[ArrayFloat] = M_BRADFORD_T
M_LMS_TO_XYZ_T: Final[ArrayFloat] = M_BRADFORD_INV_T

_IDENTITY: Final[ArrayFloat] = np.eye(3, dtype=np.float64)

# method -> (forward, inverse), both pre-transposed
_CONE_MATRICES: Final[Dict[str, Tuple[ArrayFloat, ArrayFloat]]] = {
    "bradford": (M_BRADFORD_T, M_BRADFORD_INV_T),
    "von_kries": (M_VON_KRIES_T, M_VON_KRIES_INV_T),
    "xyz_scaling": (_IDENTITY, _IDENTITY),
}
ADAPTATION_METHODS: Final[Tuple[str, ...]] = tuple(_CONE_MATRICES)
DEFAULT_ADAPTATION: Final[str] = "bradford"


# --- Runtime Configuration ---
# When True, Numba kernels use fastmath=False variants that preserve strict
# IEEE 754 semantics (inf / NaN propagation, no FP reassociation).
#
# Toggle once at start-up via:
#     import prism_colorengine as ce
#     ce.set_strict_ieee(True)
_STRICT_IEEE: bool = False

def set_strict_ieee(enabled: bool = True) -> None:
    """
    Toggle between fast (default) and strict IEEE 754 Numba kernels.

    Args:
        enabled: If True, use strict IEEE mode.
    """
    global _STRICT_IEEE
    _STRICT_IEEE = bool(enabled)


# =============================================================================
# 1. SHAPE GUARDS
# =============================================================================

def _shape_guard(width: int) -> Callable[[Callable[..., ArrayFloat]], Callable[..., ArrayFloat]]:
    """
    Builds a decorator normalising inputs to contiguous float64 (N, width).

    The wrapped function always sees a 2-D batch; the result is reshaped back
    to the caller's leading dimensions.
        - (width,)        -> (out,)
        - (N, width)      -> (N, out)
        - (..., width)    -> (..., out)
    """
    def decorator(func: Callable[..., ArrayFloat]) -> Callable[..., ArrayFloat]:
        @functools.wraps(func)
        def wrapper(arr: ArrayFloat, *args: Any, **kwargs: Any) -> ArrayFloat:
            arr_np = np.asarray(arr, dtype=np.float64)
            if arr_np.ndim == 0 or arr_np.shape[-1] != width:
                actual = 0 if arr_np.ndim == 0 else arr_np.shape[-1]
                raise InvalidDimension(width, actual, func.__name__)

            lead = arr_np.shape[:-1]
            arr_in = np.ascontiguousarray(arr_np.reshape(-1, width))
            res = func(arr_in, *args, **kwargs)
            return res.reshape(lead + res.shape[-1:])
        return wrapper
    return decorator


handle_shapes = _shape_guard(3)
handle_shapes_cmyk = _shape_guard(4)


# =============================================================================
# 2. LOW-LEVEL MATH KERNELS (Numba Optimized)
# =============================================================================
# NOTE: fastmath=True allows reassociation and relaxed IEEE compliance.
# Results may differ from the strict variants in the last ulp.

@njit(cache=True, fastmath=True)
def _fast_gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """
    sRGB OETF (companding), IEC 61966-2-1.

    Values below the threshold, negatives included, use the linear segment,
    which keeps out-of-gamut values invertible.
    """
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()

    for i in range(linear.size):
        v = linear_flat[i]
        if v <= 0.0031308:
            out_flat[i] = 12.92 * v
        else:
            out_flat[i] = 1.055 * (v ** (1.0/2.4)) - 0.055
    return out

@njit(cache=True, fastmath=True)
def _fast_inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """sRGB EOTF (linearisation), IEC 61966-2-1."""
    out = np.empty_like(srgb)
    srgb_flat = srgb.ravel()
    out_flat = out.ravel()

    for i in range(srgb.size):
        v = srgb_flat[i]
        if v <= 0.04045:
            out_flat[i] = v / 12.92
        else:
            out_flat[i] = ((v + 0.055) / 1.055) ** 2.4
    return out

@njit(cache=True, fastmath=True)
def _xyz_to_lab_f(t: ArrayFloat) -> ArrayFloat:
    """
    Non-linear transfer function f(t) for CIELAB.

    Cube root above epsilon, linear slope below it to avoid the infinite
    derivative at zero.
    """
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()

    for i in range(t.size):
        v = t_flat[i]
        if v > LAB_EPSILON:
            out_flat[i] = v ** (1.0/3.0)
        else:
            out_flat[i] = (LAB_KAPPA * v + 16.0) / 116.0
    return out

@njit(cache=True, fastmath=True)
def _lab_to_xyz_f_inv(t: ArrayFloat) -> ArrayFloat:
    """Inverse of f(t); (116*t - 16)/kappa form on the linear segment."""
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()

    for i in range(t.size):
        v = t_flat[i]
        if v > _LAB_DELTA:
            out_flat[i] = v ** 3.0
        else:
            out_flat[i] = (116.0 * v - 16.0) / LAB_KAPPA
    return out

@njit(cache=True, fastmath=True)
def _fast_lightness(y_rel: ArrayFloat) -> ArrayFloat:
    """
    CIE 1976 lightness L* from relative luminance Y/Yn.

    Computed directly rather than as 116*f - 16 so that Y == 0 yields
    exactly L* == 0.
    """
    out = np.empty_like(y_rel)
    for i in range(y_rel.size):
        v = y_rel[i]
        if v > LAB_EPSILON:
            out[i] = 116.0 * (v ** (1.0/3.0)) - 16.0
        else:
            out[i] = LAB_KAPPA * v
    return out

@njit(cache=True, fastmath=True)
def _fast_lightness_inv(L: ArrayFloat) -> ArrayFloat:
    """Relative luminance Y/Yn from L*."""
    out = np.empty_like(L)
    for i in range(L.size):
        v = L[i]
        if v > _LAB_KE:
            f = (v + 16.0) / 116.0
            out[i] = f * f * f
        else:
            out[i] = v / LAB_KAPPA
    return out


# --- Strict IEEE 754 kernel variants (fastmath=False) ---

@njit(cache=True, fastmath=False)
def _fast_gamma_srgb_strict(linear: ArrayFloat) -> ArrayFloat:
    """sRGB OETF — strict IEEE 754 variant."""
    out = np.empty_like(linear)
    linear_flat = linear.ravel()
    out_flat = out.ravel()
    for i in range(linear.size):
        v = linear_flat[i]
        if v <= 0.0031308:
            out_flat[i] = 12.92 * v
        else:
            out_flat[i] = 1.055 * (v ** (1.0/2.4)) - 0.055
    return out

@njit(cache=True, fastmath=False)
def _fast_inverse_gamma_srgb_strict(srgb: ArrayFloat) -> ArrayFloat:
    """sRGB EOTF — strict IEEE 754 variant."""
    out = np.empty_like(srgb)
    srgb_flat = srgb.ravel()
    out_flat = out.ravel()
    for i in range(srgb.size):
        v = srgb_flat[i]
        if v <= 0.04045:
            out_flat[i] = v / 12.92
        else:
            out_flat[i] = ((v + 0.055) / 1.055) ** 2.4
    return out

@njit(cache=True, fastmath=False)
def _xyz_to_lab_f_strict(t: ArrayFloat) -> ArrayFloat:
    """Lab f(t) — strict IEEE 754 variant."""
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()
    for i in range(t.size):
        v = t_flat[i]
        if v > LAB_EPSILON:
            out_flat[i] = v ** (1.0/3.0)
        else:
            out_flat[i] = (LAB_KAPPA * v + 16.0) / 116.0
    return out

@njit(cache=True, fastmath=False)
def _lab_to_xyz_f_inv_strict(t: ArrayFloat) -> ArrayFloat:
    """Lab f_inv(t) — strict IEEE 754 variant."""
    out = np.empty_like(t)
    t_flat = t.ravel()
    out_flat = out.ravel()
    for i in range(t.size):
        v = t_flat[i]
        if v > _LAB_DELTA:
            out_flat[i] = v ** 3.0
        else:
            out_flat[i] = (116.0 * v - 16.0) / LAB_KAPPA
    return out

@njit(cache=True, fastmath=False)
def _fast_lightness_strict(y_rel: ArrayFloat) -> ArrayFloat:
    """L* from Y/Yn — strict IEEE 754 variant."""
    out = np.empty_like(y_rel)
    for i in range(y_rel.size):
        v = y_rel[i]
        if v > LAB_EPSILON:
            out[i] = 116.0 * (v ** (1.0/3.0)) - 16.0
        else:
            out[i] = LAB_KAPPA * v
    return out

@njit(cache=True, fastmath=False)
def _fast_lightness_inv_strict(L: ArrayFloat) -> ArrayFloat:
    """Y/Yn from L* — strict IEEE 754 variant."""
    out = np.empty_like(L)
    for i in range(L.size):
        v = L[i]
        if v > _LAB_KE:
            f = (v + 16.0) / 116.0
            out[i] = f * f * f
        else:
            out[i] = v / LAB_KAPPA
    return out


# --- Kernel dispatchers ---

def _gamma_srgb(linear: ArrayFloat) -> ArrayFloat:
    """Dispatch sRGB OETF to fast or strict kernel."""
    if _STRICT_IEEE:
        return _fast_gamma_srgb_strict(linear)
    return _fast_gamma_srgb(linear)

def _inverse_gamma_srgb(srgb: ArrayFloat) -> ArrayFloat:
    """Dispatch sRGB EOTF to fast or strict kernel."""
    if _STRICT_IEEE:
        return _fast_inverse_gamma_srgb_strict(srgb)
    return _fast_inverse_gamma_srgb(srgb)

def _lab_f(t: ArrayFloat) -> ArrayFloat:
    """Dispatch Lab f(t) to fast or strict kernel."""
    if _STRICT_IEEE:
        return _xyz_to_lab_f_strict(t)
    return _xyz_to_lab_f(t)

def _lab_f_inv(t: ArrayFloat) -> ArrayFloat:
    """Dispatch Lab f_inv(t) to fast or strict kernel."""
    if _STRICT_IEEE:
        return _lab_to_xyz_f_inv_strict(t)
    return _lab_to_xyz_f_inv(t)

def _lightness(y_rel: ArrayFloat) -> ArrayFloat:
    """Dispatch L*(Y/Yn) to fast or strict kernel (1-D input)."""
    y_rel = np.ascontiguousarray(y_rel)
    if _STRICT_IEEE:
        return _fast_lightness_strict(y_rel)
    return _fast_lightness(y_rel)

def _lightness_inv(L: ArrayFloat) -> ArrayFloat:
    """Dispatch Y/Yn(L*) to fast or strict kernel (1-D input)."""
    L = np.ascontiguousarray(L)
    if _STRICT_IEEE:
        return _fast_lightness_inv_strict(L)
    return _fast_lightness_inv(L)


@njit(cache=True, fastmath=True)
def _xyz_to_uv_prime(xyz_arr: ArrayFloat) -> ArrayFloat:
    """
    CIE 1976 u', v' chromaticity coordinates from XYZ.

    Formulas:
        u' = 4X / (X + 15Y + 3Z)
        v' = 9Y / (X + 15Y + 3Z)
    A zero denominator (black) returns (0, 0).
    """
    out = np.zeros((xyz_arr.shape[0], 2), dtype=np.float64)
    X = xyz_arr[:, 0]
    Y = xyz_arr[:, 1]
    Z = xyz_arr[:, 2]

    denom = X + 15.0 * Y + 3.0 * Z

    for i in range(denom.shape[0]):
        d = denom[i]
        if d != 0.0:
            inv_d = 1.0 / d
            out[i, 0] = 4.0 * X[i] * inv_d
            out[i, 1] = 9.0 * Y[i] * inv_d
    return out

@njit(cache=True, fastmath=True)
def _lab_to_lch_kernel(lab: ArrayFloat) -> ArrayFloat:
    """
    Cartesian (L, a, b) -> cylindrical (L, C, h°), hue in [0, 360).
    Shared by Lab -> LChab and Luv -> LChuv.
    """
    n = lab.shape[0]
    lch = np.empty_like(lab)

    for i in range(n):
        L, a, b = lab[i, 0], lab[i, 1], lab[i, 2]
        C = np.hypot(a, b)
        h_deg = np.arctan2(b, a) * RAD2DEG
        if h_deg < 0: h_deg += 360.0
        lch[i, 0], lch[i, 1], lch[i, 2] = L, C, h_deg
    return lch

@njit(cache=True, fastmath=True)
def _lch_to_lab_kernel(lch: ArrayFloat) -> ArrayFloat:
    """Cylindrical (L, C, h°) -> cartesian (L, a, b)."""
    n = lch.shape[0]
    lab = np.empty_like(lch)

    for i in range(n):
        L, C, h_deg = lch[i, 0], lch[i, 1], lch[i, 2]
        h_rad = h_deg * DEG2RAD
        lab[i, 0] = L
        lab[i, 1] = C * np.cos(h_rad)
        lab[i, 2] = C * np.sin(h_rad)
    return lab

@njit(cache=True, fastmath=True)
def _hue_sector(r: float, g: float, b: float, mx: float, delta: float) -> float:
    """Hexcone hue in degrees [0, 360); 0 for achromatic input."""
    if delta == 0.0:
        return 0.0
    if mx == r:
        h = 60.0 * ((g - b) / delta)
    elif mx == g:
        h = 60.0 * ((b - r) / delta + 2.0)
    else:
        h = 60.0 * ((r - g) / delta + 4.0)
    h = h - 360.0 * np.floor(h / 360.0)
    if h >= 360.0:
        h = 0.0
    return h

@njit(cache=True, fastmath=True)
def _hexcone_rgb(h: float, chroma: float, m: float) -> Tuple[float, float, float]:
    """Shared HSV/HSL tail: hue + chroma + offset -> RGB."""
    h = h - 360.0 * np.floor(h / 360.0)
    hp = h / 60.0
    sector = int(np.floor(hp))
    if sector > 5:
        sector = 5
    x = chroma * (1.0 - abs((hp - 2.0 * np.floor(hp / 2.0)) - 1.0))
    if sector == 0:
        r, g, b = chroma, x, 0.0
    elif sector == 1:
        r, g, b = x, chroma, 0.0
    elif sector == 2:
        r, g, b = 0.0, chroma, x
    elif sector == 3:
        r, g, b = 0.0, x, chroma
    elif sector == 4:
        r, g, b = x, 0.0, chroma
    else:
        r, g, b = chroma, 0.0, x
    return r + m, g + m, b + m

@njit(cache=True, fastmath=True)
def _rgb_to_hsv_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """(R, G, B) -> (H°, S, V). Black yields S == 0."""
    n = rgb.shape[0]
    out = np.empty_like(rgb)
    for i in range(n):
        r, g, b = rgb[i, 0], rgb[i, 1], rgb[i, 2]
        mx = max(r, g, b)
        mn = min(r, g, b)
        delta = mx - mn
        out[i, 0] = _hue_sector(r, g, b, mx, delta)
        out[i, 1] = delta / mx if mx != 0.0 else 0.0
        out[i, 2] = mx
    return out

@njit(cache=True, fastmath=True)
def _hsv_to_rgb_kernel(hsv: ArrayFloat) -> ArrayFloat:
    """(H°, S, V) -> (R, G, B)."""
    n = hsv.shape[0]
    out = np.empty_like(hsv)
    for i in range(n):
        h, s, v = hsv[i, 0], hsv[i, 1], hsv[i, 2]
        chroma = v * s
        out[i, 0], out[i, 1], out[i, 2] = _hexcone_rgb(h, chroma, v - chroma)
    return out

@njit(cache=True, fastmath=True)
def _rgb_to_hsl_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """(R, G, B) -> (H°, S, L). Saturation is 0 when its denominator vanishes."""
    n = rgb.shape[0]
    out = np.empty_like(rgb)
    for i in range(n):
        r, g, b = rgb[i, 0], rgb[i, 1], rgb[i, 2]
        mx = max(r, g, b)
        mn = min(r, g, b)
        delta = mx - mn
        light = (mx + mn) * 0.5
        denom = 1.0 - abs(2.0 * light - 1.0)
        out[i, 0] = _hue_sector(r, g, b, mx, delta)
        out[i, 1] = delta / denom if (delta != 0.0 and denom != 0.0) else 0.0
        out[i, 2] = light
    return out

@njit(cache=True, fastmath=True)
def _hsl_to_rgb_kernel(hsl: ArrayFloat) -> ArrayFloat:
    """(H°, S, L) -> (R, G, B)."""
    n = hsl.shape[0]
    out = np.empty_like(hsl)
    for i in range(n):
        h, s, light = hsl[i, 0], hsl[i, 1], hsl[i, 2]
        chroma = (1.0 - abs(2.0 * light - 1.0)) * s
        out[i, 0], out[i, 1], out[i, 2] = _hexcone_rgb(h, chroma, light - 0.5 * chroma)
    return out

@njit(cache=True, fastmath=True)
def _rgb_to_cmyk_kernel(rgb: ArrayFloat) -> ArrayFloat:
    """(R, G, B) -> (C, M, Y, K). Black yields (0, 0, 0, 1)."""
    n = rgb.shape[0]
    out = np.empty((n, 4), dtype=np.float64)
    for i in range(n):
        r, g, b = rgb[i, 0], rgb[i, 1], rgb[i, 2]
        k = 1.0 - max(r, g, b)
        denom = 1.0 - k
        if denom == 0.0:
            out[i, 0], out[i, 1], out[i, 2] = 0.0, 0.0, 0.0
        else:
            out[i, 0] = (1.0 - r - k) / denom
            out[i, 1] = (1.0 - g - k) / denom
            out[i, 2] = (1.0 - b - k) / denom
        out[i, 3] = k
    return out

@njit(cache=True, fastmath=True)
def _cmyk_to_rgb_kernel(cmyk: ArrayFloat) -> ArrayFloat:
    """(C, M, Y, K) -> (R, G, B)."""
    n = cmyk.shape[0]
    out = np.empty((n, 3), dtype=np.float64)
    for i in range(n):
        inv_k = 1.0 - cmyk[i, 3]
        out[i, 0] = (1.0 - cmyk[i, 0]) * inv_k
        out[i, 1] = (1.0 - cmyk[i, 1]) * inv_k
        out[i, 2] = (1.0 - cmyk[i, 2]) * inv_k
    return out


# =============================================================================
# 3. COLOR SPACE ENGINE
# =============================================================================

class ColorSpaceEngine:
    """Static utility class for colour space transformations on arrays.

    Core transforms provide both a public ``@handle_shapes`` decorated API and
    an internal ``_raw`` fast-path that assumes pre-validated (N, 3) float64
    input. The router in ``prism_convert`` chains the ``_raw`` variants.
    """

    # =====================================================================
    #  Internal _raw fast-path methods  (assume validated (N, 3) float64)
    # =====================================================================

    @staticmethod
    def _srgb_to_xyz_raw(rgb_array: ArrayFloat) -> ArrayFloat:
        """Raw sRGB → XYZ (D65)."""
        linear = _inverse_gamma_srgb(rgb_array)
        return np.dot(linear, M_SRGB_TO_XYZ_T)

    @staticmethod
    def _xyz_to_srgb_raw(xyz_array: ArrayFloat) -> ArrayFloat:
        """Raw XYZ (D65) → sRGB."""
        linear = np.ascontiguousarray(np.dot(xyz_array, M_XYZ_TO_SRGB_T))
        return _gamma_srgb(linear)

    @staticmethod
    def _xyz_to_xyY_raw(xyz_array: ArrayFloat) -> ArrayFloat:
        """Raw XYZ → xyY."""
        sum_xyz = np.sum(xyz_array, axis=-1)
        mask = sum_xyz != 0.0
        # Black maps to the origin (0, 0, 0), not to the white chromaticity.
        xyY = np.zeros_like(xyz_array)

        if np.any(mask):
            inv_sum = 1.0 / sum_xyz[mask]
            xyY[mask, 0] = xyz_array[mask, 0] * inv_sum
            xyY[mask, 1] = xyz_array[mask, 1] * inv_sum
        xyY[:, 2] = xyz_array[:, 1]
        return xyY

    @staticmethod
    def _xyY_to_xyz_raw(xyY_array: ArrayFloat) -> ArrayFloat:
        """Raw xyY → XYZ."""
        x, y, Y = xyY_array[:, 0], xyY_array[:, 1], xyY_array[:, 2]
        xyz = np.zeros_like(xyY_array)
        mask = y != 0.0
        if np.any(mask):
            factor = Y[mask] / y[mask]
            xyz[mask, 0] = x[mask] * factor
            xyz[mask, 1] = Y[mask]
            xyz[mask, 2] = (1.0 - x[mask] - y[mask]) * factor
        return xyz

    @staticmethod
    def _xyz_to_lab_raw(xyz_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """Raw XYZ → Lab."""
        xyz_norm = np.ascontiguousarray(xyz_array / _as_white(illuminant))
        f_xyz = _lab_f(xyz_norm)

        out = np.empty_like(xyz_array)
        out[:, 0] = 116.0 * f_xyz[:, 1] - 16.0
        out[:, 1] = 500.0 * (f_xyz[:, 0] - f_xyz[:, 1])
        out[:, 2] = 200.0 * (f_xyz[:, 1] - f_xyz[:, 2])
        return out

    @staticmethod
    def _lab_to_xyz_raw(lab_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """Raw Lab → XYZ."""
        L, a, b = lab_array[:, 0], lab_array[:, 1], lab_array[:, 2]

        fy = (L + 16.0) / 116.0
        f = np.empty_like(lab_array)
        f[:, 0] = a / 500.0 + fy
        f[:, 1] = fy
        f[:, 2] = fy - b / 200.0

        xyz = _lab_f_inv(f)
        xyz *= _as_white(illuminant)
        return xyz

    @staticmethod
    def _lab_to_lch_raw(lab_array: ArrayFloat) -> ArrayFloat:
        """Raw Lab/Luv → LCh."""
        return _lab_to_lch_kernel(lab_array)

    @staticmethod
    def _lch_to_lab_raw(lch_array: ArrayFloat) -> ArrayFloat:
        """Raw LCh → Lab/Luv."""
        return _lch_to_lab_kernel(lch_array)

    @staticmethod
    def _xyz_to_luv_raw(xyz_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """Raw XYZ → Luv."""
        white = _as_white(illuminant)
        uv_prime = _xyz_to_uv_prime(xyz_array)
        uv_prime_n = _xyz_to_uv_prime(np.ascontiguousarray(np.atleast_2d(white)))
        u_n, v_n = uv_prime_n[0, 0], uv_prime_n[0, 1]

        L = _lightness(xyz_array[:, 1] / white[1])
        # L == 0 pins u*, v* to 0 whatever the chromaticity (Y == 0 is black).
        dark = L == 0.0

        out = np.empty_like(xyz_array)
        out[:, 0] = L
        out[:, 1] = np.where(dark, 0.0, 13.0 * L * (uv_prime[:, 0] - u_n))
        out[:, 2] = np.where(dark, 0.0, 13.0 * L * (uv_prime[:, 1] - v_n))
        return out

    @staticmethod
    def _luv_to_xyz_raw(luv_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """Raw Luv → XYZ."""
        white = _as_white(illuminant)
        L, u, v = luv_array[:, 0], luv_array[:, 1], luv_array[:, 2]

        uv_prime_n = _xyz_to_uv_prime(np.ascontiguousarray(np.atleast_2d(white)))
        u_n, v_n = uv_prime_n[0, 0], uv_prime_n[0, 1]

        mask = L != 0.0
        u_prime = np.full_like(L, u_n)
        v_prime = np.full_like(L, v_n)
        if np.any(mask):
            inv_13L = 1.0 / (13.0 * L[mask])
            u_prime[mask] = (u[mask] * inv_13L) + u_n
            v_prime[mask] = (v[mask] * inv_13L) + v_n

        Y = _lightness_inv(L) * white[1]

        X = np.zeros_like(Y)
        Z = np.zeros_like(Y)

        mask_v = (v_prime != 0.0) & mask
        if np.any(mask_v):
            Y_valid = Y[mask_v]
            up, vp = u_prime[mask_v], v_prime[mask_v]
            inv_4vp = 1.0 / (4.0 * vp)
            X[mask_v] = Y_valid * 9.0 * up * inv_4vp
            Z[mask_v] = Y_valid * (12.0 - 3.0 * up - 20.0 * vp) * inv_4vp

        out = np.empty_like(luv_array)
        out[:, 0] = X
        out[:, 1] = Y
        out[:, 2] = Z
        return out

    @staticmethod
    def _xyz_to_lms_raw(xyz_array: ArrayFloat) -> ArrayFloat:
        """Raw XYZ → LMS (Bradford cone space)."""
        return np.dot(xyz_array, M_XYZ_TO_LMS_T)

    @staticmethod
    def _lms_to_xyz_raw(lms_array: ArrayFloat) -> ArrayFloat:
        """Raw LMS (Bradford cone space) → XYZ."""
        return np.dot(lms_array, M_LMS_TO_XYZ_T)

    @staticmethod
    def _srgb_to_hsv_raw(rgb_array: ArrayFloat) -> ArrayFloat:
        return _rgb_to_hsv_kernel(rgb_array)

    @staticmethod
    def _hsv_to_srgb_raw(hsv_array: ArrayFloat) -> ArrayFloat:
        return _hsv_to_rgb_kernel(hsv_array)

    @staticmethod
    def _srgb_to_hsl_raw(rgb_array: ArrayFloat) -> ArrayFloat:
        return _rgb_to_hsl_kernel(rgb_array)

    @staticmethod
    def _hsl_to_srgb_raw(hsl_array: ArrayFloat) -> ArrayFloat:
        return _hsl_to_rgb_kernel(hsl_array)

    @staticmethod
    def _srgb_to_cmyk_raw(rgb_array: ArrayFloat) -> ArrayFloat:
        return _rgb_to_cmyk_kernel(rgb_array)

    @staticmethod
    def _cmyk_to_srgb_raw(cmyk_array: ArrayFloat) -> ArrayFloat:
        return _cmyk_to_rgb_kernel(cmyk_array)

    # =====================================================================
    #  Public API  (shape-safe wrappers)
    # =====================================================================

    @staticmethod
    @handle_shapes
    def srgb_to_xyz(rgb_array: ArrayFloat) -> ArrayFloat:
        """
        Converts companded sRGB [0..1] to XYZ (D65, Y in [0..1]).

        Out-of-range input is not clipped; the linear segment of the EOTF
        extends below zero.
        """
        return ColorSpaceEngine._srgb_to_xyz_raw(rgb_array)

    @staticmethod
    @handle_shapes
    def xyz_to_srgb(xyz_array: ArrayFloat) -> ArrayFloat:
        """Converts XYZ (D65) to companded sRGB without clipping."""
        return ColorSpaceEngine._xyz_to_srgb_raw(xyz_array)

    @staticmethod
    @handle_shapes
    def xyz_to_xyY(xyz_array: ArrayFloat) -> ArrayFloat:
        """
        Converts XYZ to CIE xyY.

        NOTE: zero-sum input (black) maps to (0, 0, 0). No white-point
        chromaticity is substituted, so the result does not depend on an
        illuminant.
        """
        return ColorSpaceEngine._xyz_to_xyY_raw(xyz_array)

    @staticmethod
    @handle_shapes
    def xyY_to_xyz(xyY_array: ArrayFloat) -> ArrayFloat:
        """Converts CIE xyY to XYZ; y == 0 maps to (0, 0, 0)."""
        return ColorSpaceEngine._xyY_to_xyz_raw(xyY_array)

    @staticmethod
    @handle_shapes
    def xyz_to_lab(xyz_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """
        Converts XYZ to CIELAB relative to ``illuminant``.

        Args:
            xyz_array: XYZ data, shape (N, 3) or (3,).
            illuminant: Reference white XYZ (Y = 1 scale).
        """
        return ColorSpaceEngine._xyz_to_lab_raw(xyz_array, illuminant)

    @staticmethod
    @handle_shapes
    def lab_to_xyz(lab_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """Converts CIELAB to XYZ relative to ``illuminant``."""
        return ColorSpaceEngine._lab_to_xyz_raw(lab_array, illuminant)

    @staticmethod
    @handle_shapes
    def lab_to_lch(lab_array: ArrayFloat) -> ArrayFloat:
        """Converts (L, a, b) or (L, u, v) to (L, C, h°)."""
        return ColorSpaceEngine._lab_to_lch_raw(lab_array)

    @staticmethod
    @handle_shapes
    def lch_to_lab(lch_array: ArrayFloat) -> ArrayFloat:
        """Converts (L, C, h°) to (L, a, b) or (L, u, v)."""
        return ColorSpaceEngine._lch_to_lab_raw(lch_array)

    @staticmethod
    @handle_shapes
    def xyz_to_luv(xyz_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """
        Converts XYZ to CIELUV (1976) relative to ``illuminant``.

        Y == 0 returns exactly (0, 0, 0).
        """
        return ColorSpaceEngine._xyz_to_luv_raw(xyz_array, illuminant)

    @staticmethod
    @handle_shapes
    def luv_to_xyz(luv_array: ArrayFloat, illuminant: WhiteLike = REF_WHITE_D65) -> ArrayFloat:
        """Converts CIELUV to XYZ; L* == 0 returns (0, 0, 0)."""
        return ColorSpaceEngine._luv_to_xyz_raw(luv_array, illuminant)

    @staticmethod
    @handle_shapes
    def xyz_to_lms(xyz_array: ArrayFloat) -> ArrayFloat:
        """Converts XYZ to LMS cone response (Bradford matrix)."""
        return ColorSpaceEngine._xyz_to_lms_raw(xyz_array)

    @staticmethod
    @handle_shapes
    def lms_to_xyz(lms_array: ArrayFloat) -> ArrayFloat:
        """Converts LMS cone response (Bradford matrix) to XYZ."""
        return ColorSpaceEngine._lms_to_xyz_raw(lms_array)

    @staticmethod
    @handle_shapes
    def srgb_to_hsv(rgb_array: ArrayFloat) -> ArrayFloat:
        """Converts sRGB to HSV (hue in degrees)."""
        return ColorSpaceEngine._srgb_to_hsv_raw(rgb_array)

    @staticmethod
    @handle_shapes
    def hsv_to_srgb(hsv_array: ArrayFloat) -> ArrayFloat:
        """Converts HSV (hue in degrees) to sRGB."""
        return ColorSpaceEngine._hsv_to_srgb_raw(hsv_array)

    @staticmethod
    @handle_shapes
    def srgb_to_hsl(rgb_array: ArrayFloat) -> ArrayFloat:
        """Converts sRGB to HSL (hue in degrees)."""
        return ColorSpaceEngine._srgb_to_hsl_raw(rgb_array)

    @staticmethod
    @handle_shapes
    def hsl_to_srgb(hsl_array: ArrayFloat) -> ArrayFloat:
        """Converts HSL (hue in degrees) to sRGB."""
        return ColorSpaceEngine._hsl_to_srgb_raw(hsl_array)

    @staticmethod
    @handle_shapes
    def srgb_to_cmyk(rgb_array: ArrayFloat) -> ArrayFloat:
        """Converts sRGB (N, 3) to naive CMYK (N, 4)."""
        return ColorSpaceEngine._srgb_to_cmyk_raw(rgb_array)

    @staticmethod
    @handle_shapes_cmyk
    def cmyk_to_srgb(cmyk_array: ArrayFloat) -> ArrayFloat:
        """Converts naive CMYK (N, 4) to sRGB (N, 3)."""
        return ColorSpaceEngine._cmyk_to_srgb_raw(cmyk_array)


# =============================================================================
# 4. CHROMATIC ADAPTATION
# =============================================================================

@functools.lru_cache(maxsize=64)
def _get_cached_adaptation_matrix(src_white_tuple: Tuple[float, ...],
                                  dst_white_tuple: Tuple[float, ...],
                                  method: str) -> ArrayFloat:
    """
    Cached worker for the von Kries-style composite matrix.

    Derivation:
    M_composite = M_inv * Gain * M
    Since we operate on row vectors: M_comp = M.T @ Gain @ M_inv.T
    """
    M_T, M_INV_T = _CONE_MATRICES[method]
    src = np.array(src_white_tuple, dtype=np.float64)
    dst = np.array(dst_white_tuple, dtype=np.float64)

    # 1. Source / destination white in cone space
    src_lms = np.dot(src, M_T)
    dst_lms = np.dot(dst, M_T)

    # 2. Per-channel gains; guard against degenerate dark whites
    src_lms = np.where(np.abs(src_lms) < 1e-12, 1e-12, src_lms)
    M_gain = np.diag(dst_lms / src_lms)

    # 3. Composite for row vectors; read-only so cached copies stay intact
    composite = M_T @ M_gain @ M_INV_T
    composite.setflags(write=False)
    return composite


class ChromaticAdaptation:
    """White point adaptation (Bradford by default)."""

    @staticmethod
    def calc_transform_matrix(src_white: WhiteLike, dst_white: WhiteLike,
                              method: str = DEFAULT_ADAPTATION) -> ArrayFloat:
        """
        Computes the adaptation matrix between two white points.

        Args:
            src_white: Source white point (XYZ).
            dst_white: Destination white point (XYZ).
            method: One of ``ADAPTATION_METHODS``.

        Returns:
            3x3 read-only matrix for row-vector multiplication.
        """
        if method not in _CONE_MATRICES:
            raise ValueError(
                f"Unknown adaptation method '{method}'. "
                f"Choose from {', '.join(ADAPTATION_METHODS)}."
            )
        t_src = tuple(_as_white(src_white))
        t_dst = tuple(_as_white(dst_white))
        return _get_cached_adaptation_matrix(t_src, t_dst, method)

    @staticmethod
    @handle_shapes
    def adapt(xyz: ArrayFloat, src_white: WhiteLike, dst_white: WhiteLike,
              method: str = DEFAULT_ADAPTATION) -> ArrayFloat:
        """
        Adapts XYZ colour(s) from the source to the destination white point.

        Identical white points return the input values unchanged. Negative
        (out-of-gamut) values are preserved.
        """
        return ChromaticAdaptation._adapt_raw(xyz, src_white, dst_white, method)

    @staticmethod
    def _adapt_raw(xyz: ArrayFloat, src_white: WhiteLike, dst_white: WhiteLike,
                   method: str = DEFAULT_ADAPTATION) -> ArrayFloat:
        """Raw adaptation on validated (N, 3) float64 input."""
        M = ChromaticAdaptation.calc_transform_matrix(src_white, dst_white, method)
        if np.array_equal(_as_white(src_white), _as_white(dst_white)):
            # Skip the matrix: M is only identity up to rounding.
            return xyz.copy()
        return np.dot(xyz, M)
