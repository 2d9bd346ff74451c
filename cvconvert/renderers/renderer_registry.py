"""
Named renderers for document generation.

`AppConfig.renderer` (CVCONVERT_RENDERER) names the entry that
cli.build_services hands to DocumentService, built with the
strict_templates setting.
"""

from __future__ import annotations

from typing import Dict, List, Type, Optional

from .base import CVRenderer


_RENDERER_REGISTRY: Dict[str, Type[CVRenderer]] = {}


def register_renderer(name: str, renderer_class: Type[CVRenderer]) -> None:
    """Make renderer_class available as `name`; a later registration replaces an earlier one."""
    _RENDERER_REGISTRY[name] = renderer_class


def get_renderer(name: str, **kwargs) -> Optional[CVRenderer]:
    """
    Instantiate the renderer registered as `name`, passing kwargs (e.g. strict)
    to its constructor. Returns None for unknown names.
    """
    renderer_class = _RENDERER_REGISTRY.get(name)
    if renderer_class:
        return renderer_class(**kwargs)
    return None


def list_renderers() -> List[Dict[str, str]]:
    """Registered renderers as {'name', 'description'} dicts, sorted by name."""
    renderers = []
    for name, renderer_class in _RENDERER_REGISTRY.items():
        description = (renderer_class.__doc__ or "No description available").strip().split("\n")[0]
        renderers.append({"name": name, "description": description})
    return sorted(renderers, key=lambda x: x["name"])


def unregister_renderer(name: str) -> None:
    _RENDERER_REGISTRY.pop(name, None)


__all__ = [
    "register_renderer",
    "get_renderer",
    "list_renderers",
    "unregister_renderer",
]
