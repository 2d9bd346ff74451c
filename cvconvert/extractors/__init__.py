"""
CV extraction interfaces and implementations.

Extractors are registered by name; "openai-extractor" is available by default.
"""

from .base import CVExtractor
from .openai_extractor import OpenAICVExtractor
from .extractor_registry import (
    get_extractor,
    list_extractors,
    register_extractor,
    unregister_extractor,
)

register_extractor("openai-extractor", OpenAICVExtractor)

__all__ = [
    "CVExtractor",
    "OpenAICVExtractor",
    "get_extractor",
    "list_extractors",
    "register_extractor",
    "unregister_extractor",
]
