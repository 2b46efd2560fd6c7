# -*- coding: utf-8 -*-
# Prism: Colour-space conversion for picker widgets
#
# SPDX-License-Identifier: LGPL-3.0-or-later

import dataclasses
import math

import pytest

from prism_chromaticity import ChromaticityCoordinates
from prism_errors import InvalidDimension


def test_from_xyz_projects_onto_unit_plane():
    xy = ChromaticityCoordinates.from_xyz(0.2, 0.3, 0.5)
    assert xy.x == pytest.approx(0.2)
    assert xy.y == pytest.approx(0.3)


def test_black_degenerates_to_origin():
    xy = ChromaticityCoordinates.from_xyz(0.0, 0.0, 0.0)
    assert xy == ChromaticityCoordinates(0.0, 0.0)
    assert not any(math.isnan(c) for c in xy.vector)


def test_from_vector_guards_dimension():
    with pytest.raises(InvalidDimension):
        ChromaticityCoordinates.from_vector([0.3])
    assert ChromaticityCoordinates.from_vector([0.3, 0.4, 99.0]) == ChromaticityCoordinates(0.3, 0.4)


def test_uv_prime_roundtrip():
    xy = ChromaticityCoordinates(0.3127, 0.3290)
    u, v = xy.to_uv_prime()
    assert u == pytest.approx(0.1978, abs=1e-4)
    assert v == pytest.approx(0.4683, abs=1e-4)
    back = ChromaticityCoordinates.from_uv_prime(u, v)
    assert back.vector == pytest.approx(xy.vector, abs=1e-14)


def test_uv_prime_degenerate_denominators():
    # -2x + 12y + 3 == 0
    assert ChromaticityCoordinates(1.5, 0.0).to_uv_prime() == (0.0, 0.0)
    # 6u' - 16v' + 12 == 0
    assert ChromaticityCoordinates.from_uv_prime(0.0, 0.75) == ChromaticityCoordinates(0.0, 0.0)


def test_value_semantics():
    a = ChromaticityCoordinates(0.3127, 0.329)
    assert a == ChromaticityCoordinates(0.3127, 0.329)
    assert hash(a) == hash(ChromaticityCoordinates(0.3127, 0.329))
    assert a != ChromaticityCoordinates(0.3127, 0.3291)
    assert str(a) == "xy [x=0.31, y=0.33]"
    with pytest.raises(dataclasses.FrozenInstanceError):
        a.x = 0.5  # type: ignore[misc]
