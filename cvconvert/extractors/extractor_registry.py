"""
Named extractors for CV ingestion.

`AppConfig.extractor` (CVCONVERT_EXTRACTOR) names the entry that
cli.build_services instantiates with the configured model.
"""

from __future__ import annotations

from typing import Dict, List, Type, Optional

from .base import CVExtractor


_EXTRACTOR_REGISTRY: Dict[str, Type[CVExtractor]] = {}


def register_extractor(name: str, extractor_class: Type[CVExtractor]) -> None:
    """Make extractor_class available as `name`; a later registration replaces an earlier one."""
    _EXTRACTOR_REGISTRY[name] = extractor_class


def get_extractor(name: str, **kwargs) -> Optional[CVExtractor]:
    """
    Instantiate the extractor registered as `name`.

    Keyword arguments (model, api_key, ...) go to its constructor.
    Returns None for unknown names so callers can report the configured value.
    """
    extractor_class = _EXTRACTOR_REGISTRY.get(name)
    if extractor_class:
        return extractor_class(**kwargs)
    return None


def list_extractors() -> List[Dict[str, str]]:
    """Registered extractors as {'name', 'description'} dicts, sorted by name."""
    extractors = []
    for name, extractor_class in _EXTRACTOR_REGISTRY.items():
        description = (extractor_class.__doc__ or "No description available").strip().split("\n")[0]
        extractors.append({"name": name, "description": description})
    return sorted(extractors, key=lambda x: x["name"])


def unregister_extractor(name: str) -> None:
    _EXTRACTOR_REGISTRY.pop(name, None)


__all__ = [
    "register_extractor",
    "get_extractor",
    "list_extractors",
    "unregister_extractor",
]
