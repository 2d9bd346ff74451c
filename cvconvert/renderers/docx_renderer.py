"""
DOCX-based CV renderer implementation.

Renders template data into Word .docx files using docxtpl templates.
"""

from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Any, Dict

from docxtpl import DocxTemplate
from jinja2 import Environment, StrictUndefined, TemplateError

from .base import CVRenderer
from ..errors import TemplateRenderError
from ..logging_utils import LOG, fmt_keys
from ..shared import sanitize_for_xml_in_obj


class DocxCVRenderer(CVRenderer):
    """
    CV renderer for Microsoft Word .docx files.

    This implementation:
    - Uses docxtpl for template rendering
    - Sanitizes content for XML safety before rendering
    - Auto-escapes values
    - In strict mode, fails on placeholders the data does not define
    """

    def __init__(self, strict: bool = False, **kwargs):
        self.strict = strict

    def _jinja_env(self) -> Environment:
        if self.strict:
            return Environment(undefined=StrictUndefined, autoescape=True)
        return Environment(autoescape=True)

    def render(self, template_data: Dict[str, Any], template_path: Path) -> bytes:
        """
        Render template data into a .docx template.

        Raises:
            FileNotFoundError: If the template file does not exist
            ValueError: If the template is not a .docx file
            TemplateRenderError: For Jinja syntax errors or undefined placeholders
        """
        if not template_path.exists():
            raise FileNotFoundError(f"Template file not found: {template_path}")

        if not template_path.is_file() or template_path.suffix.lower() != ".docx":
            raise ValueError(f"Template must be a .docx file: {template_path}")

        LOG.debug("Rendering %s with keys: %s", template_path.name, fmt_keys(template_data))

        sanitized_data = sanitize_for_xml_in_obj(template_data)

        tpl = DocxTemplate(str(template_path))
        try:
            tpl.render(sanitized_data, self._jinja_env(), autoescape=True)
        except TemplateError as e:
            LOG.error("Error rendering template %s: %s", template_path.name, e)
            raise TemplateRenderError(
                f"Template error: {e}. Please check your template syntax and data structure."
            ) from e

        buffer = BytesIO()
        tpl.save(buffer)
        content = buffer.getvalue()
        LOG.info("Document generated successfully. Size: %d bytes", len(content))
        return content
