"""
Runtime configuration.

AppConfig is a plain dataclass; load_config() fills it from environment
variables so services and the CLI share one source of settings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024

ALLOWED_MIME_TYPES: Tuple[str, ...] = (
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "application/pdf",
)

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class AppConfig:
    """Settings shared by the ingestion and generation services."""

    database_url: str = "sqlite:///cvconvert.db"
    templates_dir: Path = Path("templates")
    openai_model: str = "gpt-4o"
    extractor: str = "openai-extractor"
    renderer: str = "docx-renderer"
    # Reject unrecognized extraction shapes instead of treating them as legacy
    strict_schema: bool = False
    # Fail rendering on placeholders the template data does not define
    strict_templates: bool = False
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_mime_types: Tuple[str, ...] = field(default=ALLOWED_MIME_TYPES)
    debug: bool = False
    log_file: Optional[str] = None


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def load_config(env: Optional[Mapping[str, str]] = None) -> AppConfig:
    """
    Build an AppConfig from CVCONVERT_* environment variables.

    Unset variables keep the dataclass defaults.
    """
    env = os.environ if env is None else env
    defaults = AppConfig()

    max_upload = env.get("CVCONVERT_MAX_UPLOAD_BYTES")
    try:
        max_upload_bytes = int(max_upload) if max_upload else defaults.max_upload_bytes
    except ValueError as e:
        raise ValueError(f"CVCONVERT_MAX_UPLOAD_BYTES must be an integer: {max_upload}") from e

    return AppConfig(
        database_url=env.get("CVCONVERT_DATABASE_URL", defaults.database_url),
        templates_dir=Path(env.get("CVCONVERT_TEMPLATES_DIR", str(defaults.templates_dir))),
        openai_model=env.get("CVCONVERT_OPENAI_MODEL", defaults.openai_model),
        extractor=env.get("CVCONVERT_EXTRACTOR", defaults.extractor),
        renderer=env.get("CVCONVERT_RENDERER", defaults.renderer),
        strict_schema=_flag(env.get("CVCONVERT_STRICT_SCHEMA"), defaults.strict_schema),
        strict_templates=_flag(env.get("CVCONVERT_STRICT_TEMPLATES"), defaults.strict_templates),
        max_upload_bytes=max_upload_bytes,
        debug=_flag(env.get("CVCONVERT_DEBUG"), defaults.debug),
        log_file=env.get("CVCONVERT_LOG_FILE") or None,
    )
