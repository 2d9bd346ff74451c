"""
CV rendering interfaces and implementations.

Renderers are registered by name; "docx-renderer" is available by default.
"""

from .base import CVRenderer
from .docx_renderer import DocxCVRenderer
from .renderer_registry import (
    get_renderer,
    list_renderers,
    register_renderer,
    unregister_renderer,
)

register_renderer("docx-renderer", DocxCVRenderer)

__all__ = [
    "CVRenderer",
    "DocxCVRenderer",
    "get_renderer",
    "list_renderers",
    "register_renderer",
    "unregister_renderer",
]
