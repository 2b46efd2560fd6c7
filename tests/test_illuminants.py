# -*- coding: utf-8 -*-
# Prism: Colour-space conversion for picker widgets
#
# SPDX-License-Identifier: LGPL-3.0-or-later

import warnings

import pytest

import prism_illuminants as ill
from prism_errors import UnknownIlluminant
from prism_illuminants import (
    D50,
    D65,
    DEFAULT_WHITE_POINT,
    ILLUMINANTS,
    Illuminant,
    get_illuminant,
)


def test_table_is_normalised():
    assert set(ILLUMINANTS) == {"A", "B", "C", "D50", "D55", "D65", "D75", "E", "F2", "F7", "F11"}
    for name, white in ILLUMINANTS.items():
        assert white.name == name
        assert white.Y == 1.0


def test_reference_values():
    assert D65.vector == (0.95047, 1.0, 1.08883)
    assert D50.vector == (0.96422, 1.0, 0.82521)
    assert DEFAULT_WHITE_POINT is D65


def test_table_is_read_only():
    with pytest.raises(TypeError):
        ILLUMINANTS["D65"] = D50  # type: ignore[index]


def test_lookup_is_case_insensitive():
    assert get_illuminant("d65") is D65
    assert get_illuminant(" D50 ") is D50


def test_unknown_lookup():
    with pytest.raises(UnknownIlluminant) as err:
        get_illuminant("D93")
    assert isinstance(err.value, KeyError)
    assert "D93" in str(err.value)


def test_equality_ignores_name():
    twin = Illuminant(*D65.vector, name="monitor")
    assert twin == D65
    assert hash(twin) == hash(D65)
    assert Illuminant(*D50.vector) != D65


def test_chromaticity_of_d65():
    xy = D65.chromaticity
    assert xy.x == pytest.approx(0.31273, abs=1e-5)
    assert xy.y == pytest.approx(0.32902, abs=1e-5)


def test_from_chromaticity_roundtrip():
    xy = D50.chromaticity
    white = Illuminant.from_chromaticity(xy.x, xy.y, name="D50-ish")
    assert white.vector == pytest.approx(D50.vector, abs=1e-12)
    with pytest.raises(ValueError):
        Illuminant.from_chromaticity(0.3, 0.0)


def test_custom_white_warns_when_not_normalised():
    with pytest.warns(UserWarning, match="Y=100"):
        Illuminant.from_xyz(95.047, 100.0, 108.883, name="D65x100")

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        Illuminant.from_xyz(0.95, 1.0, 1.09)


@pytest.mark.parametrize(
    "bad",
    [
        {"Y": Illuminant(0.9, 0.5, 1.0, "Y")},
        {"Z": Illuminant(0.9, 1.0, -1.0, "Z")},
        {"N": Illuminant(float("nan"), 1.0, 1.0, "N")},
        {"K": Illuminant(0.9, 1.0, 1.0, "other")},
    ],
)
def test_validate_table_rejects_broken_entries(bad):
    with pytest.raises(ValueError):
        ill._validate_table(bad)


def test_validate_table_accepts_well_formed_entries():
    ill._validate_table(ILLUMINANTS)
    ill._validate_table({"X": Illuminant(0.9, 1.0, 1.0, "X")})
