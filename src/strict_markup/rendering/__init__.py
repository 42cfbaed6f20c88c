"""Rendering of element trees to markup text with opaque placeholders."""

from .renderer import (
    DOCTYPE,
    Renderer,
    RenderOutput,
    attr_field,
    bind,
    coalesce,
    escape,
    render,
)

__all__ = [
    "DOCTYPE",
    "Renderer",
    "RenderOutput",
    "attr_field",
    "bind",
    "coalesce",
    "escape",
    "render",
]
