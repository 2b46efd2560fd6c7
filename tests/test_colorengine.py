# -*- coding: utf-8 -*-
# Prism: Colour-space conversion for picker widgets
#
# SPDX-License-Identifier: LGPL-3.0-or-later

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

import prism_colorengine as ce
from prism_colorengine import (
    ADAPTATION_METHODS,
    M_SRGB_TO_XYZ_T,
    M_XYZ_TO_SRGB_T,
    REF_WHITE_D65,
    ChromaticAdaptation,
    ColorSpaceEngine,
)
from prism_errors import InvalidDimension
from prism_illuminants import A, D50, D65

CSE = ColorSpaceEngine

# Published sRGB -> XYZ (D65) matrix, Lindbloom.
LINDBLOOM_SRGB = np.array([
    [0.4124564, 0.3575761, 0.1804375],
    [0.2126729, 0.7151522, 0.0721750],
    [0.0193339, 0.1191920, 0.9503041],
])


# --- Matrices -----------------------------------------------------------------

def test_srgb_matrix_matches_published_values():
    assert_allclose(M_SRGB_TO_XYZ_T.T, LINDBLOOM_SRGB, atol=1e-6)


def test_srgb_matrices_are_inverse():
    assert_allclose(M_SRGB_TO_XYZ_T @ M_XYZ_TO_SRGB_T, np.eye(3), atol=1e-14)


def test_srgb_white_maps_to_d65():
    assert_allclose(CSE.srgb_to_xyz([1.0, 1.0, 1.0]), REF_WHITE_D65, atol=1e-12)


def test_rgb_to_xyz_matrix_rejects_bad_primaries():
    with pytest.raises(InvalidDimension):
        ce.rgb_to_xyz_matrix([(0.64, 0.33), (0.30, 0.60)], D65)


# --- Shape handling -------------------------------------------------------------

@pytest.mark.parametrize("shape", [(3,), (5, 3), (2, 4, 3)])
def test_shapes_are_preserved(shape):
    rng = np.random.default_rng(7)
    rgb = rng.uniform(0.0, 1.0, size=shape)
    assert CSE.srgb_to_xyz(rgb).shape == shape
    assert CSE.xyz_to_luv(rgb).shape == shape
    assert CSE.srgb_to_cmyk(rgb).shape == shape[:-1] + (4,)


def test_list_input_is_accepted():
    out = CSE.srgb_to_hsv([[1.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    assert out.shape == (2, 3)


@pytest.mark.parametrize("bad", [np.zeros((2, 4)), np.zeros(2), np.float64(1.0)])
def test_wrong_width_raises(bad):
    with pytest.raises(InvalidDimension):
        CSE.srgb_to_xyz(bad)


def test_cmyk_input_width():
    with pytest.raises(InvalidDimension):
        CSE.cmyk_to_srgb(np.zeros(3))
    assert CSE.cmyk_to_srgb(np.zeros((6, 4))).shape == (6, 3)


# --- Reference values -----------------------------------------------------------

def test_srgb_red_xyz():
    assert_allclose(CSE.srgb_to_xyz([1.0, 0.0, 0.0]),
                    [0.4124564, 0.2126729, 0.0193339], atol=1e-6)


def test_srgb_red_lab_and_luv():
    xyz = CSE.srgb_to_xyz([1.0, 0.0, 0.0])
    assert_allclose(CSE.xyz_to_lab(xyz, D65), [53.2408, 80.0925, 67.2032], atol=0.05)
    assert_allclose(CSE.xyz_to_luv(xyz, D65), [53.2408, 175.015, 37.756], atol=0.05)


@pytest.mark.parametrize("white", [D65, D50, A], ids=lambda w: w.name)
def test_reference_white_is_neutral(white):
    xyz = np.array(white.vector)
    assert_allclose(CSE.xyz_to_lab(xyz, white), [100.0, 0.0, 0.0], atol=1e-10)
    assert_allclose(CSE.xyz_to_luv(xyz, white), [100.0, 0.0, 0.0], atol=1e-10)


def test_white_point_accepts_arrays_and_sequences():
    xyz = np.array([0.3, 0.4, 0.2])
    expected = CSE.xyz_to_lab(xyz, D50)
    assert_allclose(CSE.xyz_to_lab(xyz, np.array(D50.vector)), expected)
    assert_allclose(CSE.xyz_to_lab(xyz, list(D50.vector)), expected)
    with pytest.raises(InvalidDimension):
        CSE.xyz_to_lab(xyz, [0.9, 1.0])


# --- Degenerate inputs ----------------------------------------------------------

def test_black_luv_is_exact_zero():
    assert_array_equal(CSE.xyz_to_luv([0.0, 0.0, 0.0]), [0.0, 0.0, 0.0])
    # Y == 0 with non-zero X/Z still has no chroma.
    assert_array_equal(CSE.xyz_to_luv([0.2, 0.0, 0.1]), [0.0, 0.0, 0.0])


def test_zero_lightness_luv_is_black():
    assert_array_equal(CSE.luv_to_xyz([0.0, 12.0, -7.0]), [0.0, 0.0, 0.0])


def test_black_xyy_is_origin():
    assert_array_equal(CSE.xyz_to_xyY([0.0, 0.0, 0.0]), [0.0, 0.0, 0.0])
    assert_array_equal(CSE.xyY_to_xyz([0.3, 0.0, 0.5]), [0.0, 0.0, 0.0])


def test_xyy_keeps_luminance():
    xyz = np.array([0.25, 0.4, 0.35])
    xyY = CSE.xyz_to_xyY(xyz)
    assert_allclose(xyY, [0.25, 0.4, 0.4])
    assert_allclose(CSE.xyY_to_xyz(xyY), xyz, rtol=1e-12)


# --- Round trips ------------------------------------------------------------------

@pytest.fixture
def rgb_batch():
    rng = np.random.default_rng(2026)
    return rng.uniform(0.0, 1.0, size=(500, 3))


def test_srgb_round_trip(rgb_batch):
    back = CSE.xyz_to_srgb(CSE.srgb_to_xyz(rgb_batch))
    assert_allclose(back, rgb_batch, rtol=1e-9, atol=1e-12)


def test_out_of_gamut_survives(rgb_batch):
    rgb = rgb_batch * 1.6 - 0.3
    assert rgb.min() < 0.0 and rgb.max() > 1.0
    back = CSE.xyz_to_srgb(CSE.srgb_to_xyz(rgb))
    assert_allclose(back, rgb, rtol=1e-9, atol=1e-12)


@pytest.mark.parametrize("white", [D65, D50], ids=lambda w: w.name)
def test_lab_and_luv_round_trip(rgb_batch, white):
    xyz = CSE.srgb_to_xyz(rgb_batch)
    assert_allclose(CSE.lab_to_xyz(CSE.xyz_to_lab(xyz, white), white), xyz,
                    rtol=1e-9, atol=1e-12)
    assert_allclose(CSE.luv_to_xyz(CSE.xyz_to_luv(xyz, white), white), xyz,
                    rtol=1e-9, atol=1e-12)


def test_lch_round_trip(rgb_batch):
    lab = CSE.xyz_to_lab(CSE.srgb_to_xyz(rgb_batch))
    lch = CSE.lab_to_lch(lab)
    assert np.all((lch[:, 2] >= 0.0) & (lch[:, 2] < 360.0))
    assert_allclose(CSE.lch_to_lab(lch), lab, atol=1e-9)


def test_lms_round_trip(rgb_batch):
    xyz = CSE.srgb_to_xyz(rgb_batch)
    assert_allclose(CSE.lms_to_xyz(CSE.xyz_to_lms(xyz)), xyz, atol=1e-12)


def test_lms_of_white():
    lms = CSE.xyz_to_lms(REF_WHITE_D65)
    assert_allclose(lms, ce.M_BRADFORD_T.T @ REF_WHITE_D65)


# --- Cylindrical / device models --------------------------------------------------

@pytest.mark.parametrize(
    "rgb, hsv, hsl",
    [
        ((1.0, 0.0, 0.0), (0.0, 1.0, 1.0), (0.0, 1.0, 0.5)),
        ((0.0, 1.0, 0.0), (120.0, 1.0, 1.0), (120.0, 1.0, 0.5)),
        ((0.0, 0.0, 1.0), (240.0, 1.0, 1.0), (240.0, 1.0, 0.5)),
        ((1.0, 0.0, 1.0), (300.0, 1.0, 1.0), (300.0, 1.0, 0.5)),
        ((0.5, 0.5, 0.5), (0.0, 0.0, 0.5), (0.0, 0.0, 0.5)),
        ((1.0, 1.0, 1.0), (0.0, 0.0, 1.0), (0.0, 0.0, 1.0)),
        ((0.0, 0.0, 0.0), (0.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
    ],
)
def test_hsv_hsl_reference_values(rgb, hsv, hsl):
    assert_allclose(CSE.srgb_to_hsv(rgb), hsv, atol=1e-12)
    assert_allclose(CSE.srgb_to_hsl(rgb), hsl, atol=1e-12)
    assert_allclose(CSE.hsv_to_srgb(hsv), rgb, atol=1e-12)
    assert_allclose(CSE.hsl_to_srgb(hsl), rgb, atol=1e-12)


def test_hsv_hsl_round_trip(rgb_batch):
    assert_allclose(CSE.hsv_to_srgb(CSE.srgb_to_hsv(rgb_batch)), rgb_batch, atol=1e-12)
    assert_allclose(CSE.hsl_to_srgb(CSE.srgb_to_hsl(rgb_batch)), rgb_batch, atol=1e-12)


def test_cmyk_reference_values():
    assert_allclose(CSE.srgb_to_cmyk([1.0, 0.0, 0.0]), [0.0, 1.0, 1.0, 0.0])
    assert_array_equal(CSE.srgb_to_cmyk([0.0, 0.0, 0.0]), [0.0, 0.0, 0.0, 1.0])
    assert_allclose(CSE.cmyk_to_srgb([0.0, 0.0, 0.0, 1.0]), [0.0, 0.0, 0.0])
    assert_allclose(CSE.cmyk_to_srgb([0.0, 0.5, 1.0, 0.2]), [0.8, 0.4, 0.0])


def test_cmyk_round_trip(rgb_batch):
    assert_allclose(CSE.cmyk_to_srgb(CSE.srgb_to_cmyk(rgb_batch)), rgb_batch, atol=1e-12)


# --- Strict IEEE kernels ----------------------------------------------------------

def test_strict_kernels_agree_with_fast(rgb_batch):
    fast_xyz = CSE.srgb_to_xyz(rgb_batch)
    fast_lab = CSE.xyz_to_lab(fast_xyz)
    fast_luv = CSE.xyz_to_luv(fast_xyz)
    try:
        ce.set_strict_ieee(True)
        strict_xyz = CSE.srgb_to_xyz(rgb_batch)
        strict_lab = CSE.xyz_to_lab(strict_xyz)
        strict_luv = CSE.xyz_to_luv(strict_xyz)
    finally:
        ce.set_strict_ieee(False)
    assert_allclose(strict_xyz, fast_xyz, rtol=1e-12)
    assert_allclose(strict_lab, fast_lab, rtol=1e-10, atol=1e-10)
    assert_allclose(strict_luv, fast_luv, rtol=1e-10, atol=1e-10)


# --- Chromatic adaptation -----------------------------------------------------------

@pytest.mark.parametrize("method", ADAPTATION_METHODS)
def test_adaptation_maps_white_to_white(method):
    out = ChromaticAdaptation.adapt(np.array(D50.vector), D50, D65, method)
    assert_allclose(out, D65.vector, atol=1e-12)


@pytest.mark.parametrize("method", ADAPTATION_METHODS)
def test_adaptation_round_trip(method):
    xyz = np.array([[-0.1, 0.2, 0.3], [0.5, 0.4, 1.2]])
    there = ChromaticAdaptation.adapt(xyz, D50, A, method)
    assert_allclose(ChromaticAdaptation.adapt(there, A, D50, method), xyz, atol=1e-12)


def test_identical_whites_return_input_unchanged():
    xyz = np.array([[0.3, 0.4, 0.2], [-0.05, 0.01, 0.9]])
    out = ChromaticAdaptation.adapt(xyz, D65, D65)
    assert_array_equal(out, xyz)
    assert out is not xyz


def test_bradford_d50_to_d65_matrix():
    # Lindbloom, Bradford D50 -> D65 (column-vector form).
    expected = np.array([
        [ 0.9555766, -0.0230393,  0.0631636],
        [-0.0282895,  1.0099416,  0.0210077],
        [ 0.0122982, -0.0204830,  1.3299098],
    ])
    M = ChromaticAdaptation.calc_transform_matrix(D50, D65)
    assert_allclose(M.T, expected, atol=2e-4)


def test_adaptation_matrix_is_cached_and_read_only():
    M1 = ChromaticAdaptation.calc_transform_matrix(D50, D65, "bradford")
    M2 = ChromaticAdaptation.calc_transform_matrix(D50.vector, np.array(D65.vector), "bradford")
    assert M1 is M2
    assert not M1.flags.writeable
    with pytest.raises(ValueError):
        M1[0, 0] = 1.0


def test_unknown_adaptation_method():
    with pytest.raises(ValueError, match="cat02"):
        ChromaticAdaptation.calc_transform_matrix(D50, D65, "cat02")
