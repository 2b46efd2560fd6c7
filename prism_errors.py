# -*- coding: utf-8 -*-
"""
Prism: Colour-space conversion for picker widgets
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: prism_errors.py — Exception taxonomy.

Every exception also derives from the builtin describing its category so that
callers catching ``ValueError`` / ``KeyError`` / ``TypeError`` keep working.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "PrismError",
    "InvalidDimension",
    "UnknownIlluminant",
    "UnsupportedConversion",
]


class PrismError(Exception):
    """Base class for all Prism errors."""


class InvalidDimension(PrismError, ValueError):
    """
    A vector-like input carries fewer components than the colour model needs,
    or an array's last axis has the wrong size.
    """

    def __init__(self, expected: int, actual: int, what: Optional[str] = None) -> None:
        self.expected = expected
        self.actual = actual
        target = f" for {what}" if what else ""
        super().__init__(
            f"Expected {expected} components{target}, got {actual}."
        )


class UnknownIlluminant(PrismError, KeyError):
    """Illuminant name not present in the table."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable.
        return str(self.args[0]) if self.args else ""


class UnsupportedConversion(PrismError, TypeError):
    """Conversion target is not a registered colour model."""
