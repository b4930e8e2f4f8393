"""Postal lookup adapters - HTTP address auto-fill."""

from .http import HttpPostalLookup

__all__ = ["HttpPostalLookup"]
