"""Visibility package - derives node/edge display state from node statuses."""

from campaigntree.visibility.engine import render
from campaigntree.visibility.special_cases import SPECIAL_CASES, EdgeSelector, SpecialCase
from campaigntree.visibility.types import (
    ColorClass,
    EdgeAttributes,
    NodeAttributes,
    RenderAttributes,
)

__all__ = [
    "SPECIAL_CASES",
    "ColorClass",
    "EdgeAttributes",
    "EdgeSelector",
    "NodeAttributes",
    "RenderAttributes",
    "SpecialCase",
    "render",
]
