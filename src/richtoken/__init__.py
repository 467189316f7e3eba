"""Placeholder and highlight token bridge for rich-text editing surfaces."""

__version__ = "0.1.0"
