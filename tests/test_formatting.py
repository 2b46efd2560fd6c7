# -*- coding: utf-8 -*-
# Prism: Colour-space conversion for picker widgets
#
# SPDX-License-Identifier: LGPL-3.0-or-later

import math

import pytest

from prism_formatting import (
    components_equal,
    components_hash,
    format_color,
    format_component,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (50.126, "50.13"),
        (-10.004, "-10"),
        (20.499, "20.5"),
        (2.675, "2.68"),
        (0.005, "0.01"),
        (-0.005, "-0.01"),
        (100.0, "100"),
        (0.1, "0.1"),
        (-0.001, "0"),
        (0.0, "0"),
        (-0.0, "0"),
        (1e-5, "0"),
        (1e20, "100000000000000000000"),
        (1.5e300, "15" + "0" * 299),
    ],
)
def test_format_component(value, expected):
    assert format_component(value) == expected


def test_format_component_non_finite():
    assert format_component(math.nan) == "NaN"
    assert format_component(math.inf) == "Infinity"
    assert format_component(-math.inf) == "-Infinity"


def test_format_color_layout():
    text = format_color("Luv", [("L", 50.126), ("u", -10.004), ("v", 20.499)])
    assert text == "Luv [L=50.13, u=-10, v=20.5]"


def test_components_equal_is_exact():
    assert components_equal((1.0, 2.0, 3.0), (1.0, 2.0, 3.0))
    assert not components_equal((1.0, 2.0, 3.0), (1.0, 2.0, 3.0 + 1e-15))
    assert components_equal((0.0,), (-0.0,))
    assert not components_equal((math.nan,), (math.nan,))
    assert not components_equal((1.0, 2.0), (1.0, 2.0, 3.0))


def test_components_hash_matches_equality():
    assert components_hash("Luv", 0.0, 1.0) == components_hash("Luv", -0.0, 1.0)
    assert components_hash("Luv", 1.0, 2.0) != components_hash("Lab", 1.0, 2.0)
