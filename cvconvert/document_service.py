"""
Document generation service.

Maps a stored extraction, hand-edited form data or ready-made template data
to a template and renders it into a downloadable document.
"""

from __future__ import annotations

import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import AppConfig
from .errors import (
    CVConvertError,
    CVNotFoundError,
    DocumentGenerationError,
    MissingCVDataError,
    TemplateNotFoundError,
)
from .logging_utils import LOG, fmt_keys
from .renderers.base import CVRenderer
from .schema import tag_extraction
from .storage import CVRepository, CVRow
from .template_data import form_from_cv, map_form_to_template, map_to_template

DOCUMENT_SUFFIX = ".docx"

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9_-]")


@dataclass
class GeneratedDocument:
    content: bytes
    filename: str


def build_filename(title: Optional[str], output_name: Optional[str] = None, now_ms: Optional[int] = None) -> str:
    """
    output_name, or CV_<title>_<epoch ms>, reduced to [A-Za-z0-9_-] with a .docx suffix.
    """
    if output_name:
        base = output_name[: -len(DOCUMENT_SUFFIX)] if output_name.lower().endswith(DOCUMENT_SUFFIX) else output_name
    else:
        now_ms = int(time.time() * 1000) if now_ms is None else now_ms
        base = f"CV_{(title or '').strip()}_{now_ms}"
    base = _UNSAFE_FILENAME_RE.sub("", re.sub(r"\s+", "_", base.strip()))
    return (base or "CV") + DOCUMENT_SUFFIX


class DocumentService:
    def __init__(self, repository: CVRepository, renderer: CVRenderer, config: Optional[AppConfig] = None):
        self.repository = repository
        self.renderer = renderer
        self.config = config or AppConfig()

    @property
    def templates_dir(self) -> Path:
        return Path(self.config.templates_dir)

    # ------------------------- Templates -------------------------

    def list_templates(self) -> List[str]:
        """File names of the .docx templates available for generation."""
        if not self.templates_dir.is_dir():
            LOG.warning("Templates directory does not exist: %s", self.templates_dir)
            return []
        return sorted(
            p.name for p in self.templates_dir.iterdir()
            if p.is_file() and p.suffix.lower() == DOCUMENT_SUFFIX
        )

    def resolve_template(self, template_name: str) -> Path:
        """
        Path of a template inside the templates directory.

        Only plain file names are accepted.

        Raises:
            TemplateNotFoundError: unknown name, or a name with path components
        """
        if not template_name or Path(template_name).name != template_name or template_name in (".", ".."):
            raise TemplateNotFoundError(template_name, self.list_templates())
        path = self.templates_dir / template_name
        if not path.is_file():
            LOG.error("Template file not found: %s", path)
            raise TemplateNotFoundError(template_name, self.list_templates())
        return path

    def _render(self, template_name: str, template_data: Dict[str, Any], filename: str) -> GeneratedDocument:
        template_path = self.resolve_template(template_name)
        LOG.info("Generating %s from template %s", filename, template_name)
        LOG.debug("Template data keys: %s", fmt_keys(template_data))
        try:
            content = self.renderer.render(template_data, template_path)
        except CVConvertError:
            raise
        except Exception as e:
            LOG.error("Error generating document with template %s: %s", template_name, e)
            raise DocumentGenerationError(f"Failed to generate document: {e}") from e
        return GeneratedDocument(content=content, filename=filename)

    # ------------------------- Generation -------------------------

    def _load_cv(self, cv_id: str, owner_id: str) -> CVRow:
        cv = self.repository.find_cv_by_id(cv_id, owner_id)
        if cv is None:
            raise CVNotFoundError(cv_id)
        return cv

    def generate_from_cv(
        self,
        cv_id: str,
        owner_id: str,
        template_name: str,
        output_name: Optional[str] = None,
    ) -> GeneratedDocument:
        """
        Render a stored CV's raw extraction.

        The schema tag persisted at ingestion is reused; rows stored without
        one are classified again.

        Raises:
            CVNotFoundError, MissingCVDataError, TemplateNotFoundError,
            TemplateRenderError, DocumentGenerationError
        """
        cv = self._load_cv(cv_id, owner_id)
        if not isinstance(cv.raw_data, dict) or not cv.raw_data:
            raise MissingCVDataError(cv_id)

        if cv.schema_type is None:
            LOG.warning("CV %s has no stored schema tag, classifying raw data", cv_id)
        extraction = tag_extraction(cv.raw_data, cv.schema_type, strict=self.config.strict_schema)
        template_data = map_to_template(extraction)
        return self._render(template_name, template_data, build_filename(cv.title, output_name))

    def generate_custom(
        self,
        template_name: str,
        data: Dict[str, Any],
        output_name: Optional[str] = None,
    ) -> GeneratedDocument:
        """Render caller-supplied template data as-is."""
        title = data.get("fullName") if isinstance(data, dict) else None
        return self._render(template_name, data, build_filename(title, output_name))

    def generate_from_form(
        self,
        template_name: str,
        form: Dict[str, Any],
        output_name: Optional[str] = None,
    ) -> GeneratedDocument:
        template_data = map_form_to_template(form)
        return self._render(template_name, template_data, build_filename(template_data["fullName"], output_name))

    def generate_from_records(
        self,
        cv_id: str,
        owner_id: str,
        template_name: str,
        output_name: Optional[str] = None,
    ) -> GeneratedDocument:
        """Render a stored CV through its structured records and the form vocabulary."""
        cv = self._load_cv(cv_id, owner_id)
        template_data = map_form_to_template(form_from_cv(cv))
        return self._render(template_name, template_data, build_filename(cv.title, output_name))
