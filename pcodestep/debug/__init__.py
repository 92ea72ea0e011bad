"""Debug utilities for the p-code stepper."""

from .renderer import RowRenderer

__all__ = ["RowRenderer"]
