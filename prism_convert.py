# -*- coding: utf-8 -*-
"""
Prism: Colour-space conversion for picker widgets
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: prism_convert.py — Conversion routing between colour models.

Transform tree
--------------
Every model is registered with a parent and a pair of array transforms to and
from that parent. CIE XYZ is the root::

    XYZ ─┬─ RGB ─┬─ HSV
         │       ├─ HSL
         │       └─ CMYK
         ├─ xyY
         ├─ Lab ── LChab
         ├─ Luv ── LChuv
         └─ LMS

A conversion climbs from the source to the lowest common ancestor and
descends to the target, so HSV -> CMYK never leaves RGB and the table stays
O(n) in the number of models.

White points
------------
* A source without a white point (RGB family, LMS) is in
  DEFAULT_WHITE_POINT, the native white of sRGB.
* The target white is the explicit ``white_point`` argument, else the
  source's white point.
* Chromatic adaptation runs in XYZ only when the caller asked for a white
  different from the source's. Without an explicit request no adaptation
  happens, so same-white round trips are exact up to rounding.
* A target without a white point is written in the target white. To show a
  D50 measurement on an sRGB display, request ``white_point=D65``.
"""

from __future__ import annotations

from typing import Callable, Dict, Final, List, NamedTuple, Optional, Tuple, Type, TypeVar

import numpy as np

from prism_chromaticity import ChromaticityCoordinates
from prism_colorengine import (
    ADAPTATION_METHODS,
    DEFAULT_ADAPTATION,
    ArrayFloat,
    ChromaticAdaptation,
    ColorSpaceEngine,
)
from prism_colormodels import (
    CMYKColor,
    HSLColor,
    HSVColor,
    LabColor,
    LChabColor,
    LChuvColor,
    LMSColor,
    LuvColor,
    RGBColor,
    WhitePointLike,
    XYZColor,
    as_white_point,
    xyYColor,
)
from prism_errors import InvalidDimension, UnsupportedConversion
from prism_illuminants import Illuminant

__all__ = [
    "convert",
    "convert_array",
    "conversion_path",
    "chromaticity",
    "registered_models",
]

# (array, white) -> array
EdgeFunc = Callable[[ArrayFloat, Illuminant], ArrayFloat]
T = TypeVar("T")

ROOT_MODEL: Final[type] = XYZColor


class _Edge(NamedTuple):
    parent: Optional[type]
    to_parent: Optional[EdgeFunc]
    from_parent: Optional[EdgeFunc]
    width: int


_REGISTRY: Dict[type, _Edge] = {
    ROOT_MODEL: _Edge(None, None, None, len(ROOT_MODEL._FIELDS)),
}


def _register_model(model: type, parent: type,
                    to_parent: EdgeFunc, from_parent: EdgeFunc) -> None:
    """
    Attach ``model`` to the transform tree below ``parent``.

    Only called while this module is imported; the tree is read-only after.

    Args:
        model: Colour model class (must expose ``_FIELDS``).
        parent: Already registered model one step closer to XYZ.
        to_parent: Array transform model -> parent.
        from_parent: Array transform parent -> model.
    """
    if model in _REGISTRY:
        raise ValueError(f"{model.__name__} is already registered.")
    if parent not in _REGISTRY:
        raise ValueError(f"Parent {parent.__name__} of {model.__name__} is not registered.")
    _REGISTRY[model] = _Edge(parent, to_parent, from_parent, len(model._FIELDS))


def registered_models() -> List[type]:
    return list(_REGISTRY)


def _lineage(model: type) -> List[type]:
    """Model, its parent, ..., XYZ."""
    chain = [model]
    edge = _REGISTRY[model]
    while edge.parent is not None:
        chain.append(edge.parent)
        edge = _REGISTRY[edge.parent]
    return chain


def _check_model(model: type) -> None:
    if not isinstance(model, type) or model not in _REGISTRY:
        name = getattr(model, "__name__", repr(model))
        raise UnsupportedConversion(f"{name} is not a registered colour model.")


def _route(source_model: type, target_model: type, pivot_at_root: bool) -> Tuple[List[type], List[type]]:
    """(ascent incl. pivot, descent excl. pivot) between two models."""
    up = _lineage(source_model)
    down = _lineage(target_model)
    if pivot_at_root:
        pivot = ROOT_MODEL
    else:
        down_set = set(down)
        pivot = next(m for m in up if m in down_set)
    ascent = up[: up.index(pivot) + 1]
    descent = list(reversed(down[: down.index(pivot)]))
    return ascent, descent


def _resolve_whites(source_white: WhitePointLike,
                    target_white: WhitePointLike) -> Tuple[Illuminant, Illuminant]:
    """(source, target) whites; a missing source white is the sRGB native D65."""
    src_white = as_white_point(source_white)
    if target_white is None:
        return src_white, src_white
    return src_white, as_white_point(target_white)


def conversion_path(source_model: type, target_model: type) -> List[type]:
    """Models visited when converting without a white-point change."""
    _check_model(source_model)
    _check_model(target_model)
    ascent, descent = _route(source_model, target_model, pivot_at_root=False)
    return ascent + descent


def convert_array(array: ArrayFloat, source_model: type, target_model: type,
                  source_white: WhitePointLike = None,
                  target_white: WhitePointLike = None,
                  adaptation: str = DEFAULT_ADAPTATION) -> ArrayFloat:
    """
    Converts a batch of component vectors between two models.

    Args:
        array: Shape (k,) or (N, k), k being the source model's width.
        source_model: Model class the components belong to.
        target_model: Model class to produce.
        source_white: White of the source data; ``None`` means
            DEFAULT_WHITE_POINT, which is also the native white of the
            models without a white point.
        target_white: White of the output; ``None`` keeps the source white.
        adaptation: One of ``ADAPTATION_METHODS``.

    Returns:
        Array of shape (m,) or (N, m), m being the target model's width.
    """
    _check_model(source_model)
    _check_model(target_model)
    if adaptation not in ADAPTATION_METHODS:
        raise ValueError(
            f"Unknown adaptation method '{adaptation}'. "
            f"Choose from {', '.join(ADAPTATION_METHODS)}."
        )

    width = _REGISTRY[source_model].width
    arr_np = np.asarray(array, dtype=np.float64)
    if arr_np.ndim == 0 or arr_np.shape[-1] != width:
        actual = 0 if arr_np.ndim == 0 else arr_np.shape[-1]
        raise InvalidDimension(width, actual, source_model.__name__)
    lead = arr_np.shape[:-1]
    data = np.ascontiguousarray(arr_np.reshape(-1, width))

    src_white, dst_white = _resolve_whites(source_white, target_white)
    needs_adaptation = src_white != dst_white
    ascent, descent = _route(source_model, target_model, pivot_at_root=needs_adaptation)

    for model in ascent[:-1]:
        edge = _REGISTRY[model]
        data = np.ascontiguousarray(edge.to_parent(data, src_white))
    if needs_adaptation:
        data = ChromaticAdaptation._adapt_raw(data, src_white, dst_white, adaptation)
    for model in descent:
        edge = _REGISTRY[model]
        data = np.ascontiguousarray(edge.from_parent(data, dst_white))

    return data.reshape(lead + data.shape[-1:])


def convert(source: object, target_model: Type[T],
            white_point: WhitePointLike = None,
            adaptation: str = DEFAULT_ADAPTATION) -> T:
    """
    Converts a colour value to another model.

    Args:
        source: Any registered colour value.
        target_model: Class of the value to produce, e.g. ``LuvColor``.
        white_point: Reference white of the result. Differing from the
            source's white point triggers chromatic adaptation.
        adaptation: ``"bradford"`` (default), ``"von_kries"`` or
            ``"xyz_scaling"``.

    Returns:
        A new ``target_model`` instance; white-point-bearing targets carry
        the effective target white.
    """
    source_model = type(source)
    _check_model(source_model)
    _check_model(target_model)

    src_white, dst_white = _resolve_whites(getattr(source, "white_point", None), white_point)

    vector = np.array(source.vector, dtype=np.float64)  # type: ignore[attr-defined]
    out = convert_array(vector, source_model, target_model,
                        source_white=src_white, target_white=dst_white,
                        adaptation=adaptation)
    components = [float(c) for c in out]
    if getattr(target_model, "HAS_WHITE_POINT", False):
        return target_model(*components, white_point=dst_white)  # type: ignore[call-arg]
    return target_model(*components)


def chromaticity(value: object) -> ChromaticityCoordinates:
    """(x, y) chromaticity of any colour value, taken in its own white."""
    if isinstance(value, xyYColor):
        return value.chromaticity
    xyz = convert(value, XYZColor)
    return ChromaticityCoordinates.from_xyz(xyz.X, xyz.Y, xyz.Z)


# ═══════════════════════════════════════════════════════════════════════════════
# Tree construction (import time, not mutated afterwards)
# ═══════════════════════════════════════════════════════════════════════════════

def _whiteless(func: Callable[[ArrayFloat], ArrayFloat]) -> EdgeFunc:
    """Adapt a white-independent raw transform to the edge signature."""
    def edge(arr: ArrayFloat, white: Illuminant) -> ArrayFloat:
        return func(arr)
    edge.__name__ = func.__name__
    return edge


_E = ColorSpaceEngine

_register_model(RGBColor, XYZColor,
                _whiteless(_E._srgb_to_xyz_raw), _whiteless(_E._xyz_to_srgb_raw))
_register_model(xyYColor, XYZColor,
                _whiteless(_E._xyY_to_xyz_raw), _whiteless(_E._xyz_to_xyY_raw))
_register_model(LabColor, XYZColor, _E._lab_to_xyz_raw, _E._xyz_to_lab_raw)
_register_model(LuvColor, XYZColor, _E._luv_to_xyz_raw, _E._xyz_to_luv_raw)
_register_model(LMSColor, XYZColor,
                _whiteless(_E._lms_to_xyz_raw), _whiteless(_E._xyz_to_lms_raw))
_register_model(HSVColor, RGBColor,
                _whiteless(_E._hsv_to_srgb_raw), _whiteless(_E._srgb_to_hsv_raw))
_register_model(HSLColor, RGBColor,
                _whiteless(_E._hsl_to_srgb_raw), _whiteless(_E._srgb_to_hsl_raw))
_register_model(CMYKColor, RGBColor,
                _whiteless(_E._cmyk_to_srgb_raw), _whiteless(_E._srgb_to_cmyk_raw))
_register_model(LChabColor, LabColor,
                _whiteless(_E._lch_to_lab_raw), _whiteless(_E._lab_to_lch_raw))
_register_model(LChuvColor, LuvColor,
                _whiteless(_E._lch_to_lab_raw), _whiteless(_E._lab_to_lch_raw))
