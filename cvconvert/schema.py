"""
Extraction schema classification.

The extraction collaborator returns one of two JSON shapes. This module
fingerprints the shape once and wraps the raw dict in a tagged variant
(LegacyExtraction or CustomExtraction) that the mappers consume.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Union

from .errors import UnknownSchemaError
from .logging_utils import LOG, fmt_keys


class SchemaTag(str, Enum):
    LEGACY = "legacy"
    CUSTOM = "custom"


CUSTOM_FINGERPRINT = ("name", "headline", "years_experience")
LEGACY_FINGERPRINT = ("personalInfo", "workExperience", "extractedText")

UNRECOGNIZED_SCHEMA_NOTE = "Unrecognized extraction shape, processed as legacy schema"


def detect_schema(raw: Any) -> Optional[SchemaTag]:
    """Return the tag whose fingerprint keys are all present, or None."""
    if not isinstance(raw, dict):
        return None
    if all(key in raw for key in CUSTOM_FINGERPRINT):
        return SchemaTag.CUSTOM
    if all(key in raw for key in LEGACY_FINGERPRINT):
        return SchemaTag.LEGACY
    return None


def classify(raw: Any) -> SchemaTag:
    """Total classification: unrecognized shapes fall back to legacy."""
    return detect_schema(raw) or SchemaTag.LEGACY


@dataclass(frozen=True)
class LegacyExtraction:
    """Image-sourced extraction (personalInfo / workExperience / flat skills)."""

    data: Dict[str, Any] = field(default_factory=dict)
    # False when the shape was not recognized and legacy was assumed
    recognized: bool = True

    tag: ClassVar[SchemaTag] = SchemaTag.LEGACY


@dataclass(frozen=True)
class CustomExtraction:
    """PDF-sourced extraction (name / headline / years_experience / 13 skill categories)."""

    data: Dict[str, Any] = field(default_factory=dict)
    recognized: bool = True

    tag: ClassVar[SchemaTag] = SchemaTag.CUSTOM


Extraction = Union[LegacyExtraction, CustomExtraction]


def tag_extraction(
    raw: Any,
    tag: Union[SchemaTag, str, None] = None,
    *,
    strict: bool = False,
) -> Extraction:
    """
    Wrap a raw extraction result in its schema variant.

    Args:
        raw: The JSON object returned by the extraction collaborator
        tag: A tag persisted earlier; when given it is trusted as-is
        strict: Raise UnknownSchemaError for unrecognized shapes instead
            of falling back to legacy

    Raises:
        UnknownSchemaError: raw is not an object, tag is not a known schema,
            or strict and unrecognized
    """
    if not isinstance(raw, dict):
        raise UnknownSchemaError(
            f"Extraction result must be a JSON object, got {type(raw).__name__}"
        )

    if tag is not None:
        try:
            tag = SchemaTag(tag)
        except ValueError as e:
            raise UnknownSchemaError(f"Unknown stored schema tag: {tag!r}") from e
        if tag is SchemaTag.CUSTOM:
            return CustomExtraction(raw)
        return LegacyExtraction(raw)

    detected = detect_schema(raw)
    if detected is SchemaTag.CUSTOM:
        return CustomExtraction(raw)
    if detected is SchemaTag.LEGACY:
        return LegacyExtraction(raw)

    if strict:
        raise UnknownSchemaError(
            f"Unrecognized extraction shape (keys: {fmt_keys(raw)})"
        )
    LOG.warning("Unrecognized extraction shape, falling back to legacy (keys: %s)", fmt_keys(raw))
    return LegacyExtraction(raw, recognized=False)
