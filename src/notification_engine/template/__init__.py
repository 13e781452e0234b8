"""Template rendering."""

from __future__ import annotations

from .renderer import RenderedContent, TemplateRenderer, normalise_markers, render

__all__ = ["RenderedContent", "TemplateRenderer", "normalise_markers", "render"]
