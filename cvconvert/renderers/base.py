"""
Base interface for CV renderers.

Defines the contract for pluggable CV rendering implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict


class CVRenderer(ABC):
    """
    Abstract base class for CV renderers.

    Implementations merge a flat template-data dict into a document template
    and return the rendered document bytes.
    """

    @abstractmethod
    def render(self, template_data: Dict[str, Any], template_path: Path) -> bytes:
        """
        Render template data into the given template.

        Args:
            template_data: Flat dict whose keys match the template placeholders
                (fullName, email, experience[], skills{}, generatedDate, ...)
            template_path: Path to the template file to use for rendering

        Returns:
            The rendered document content

        Raises:
            FileNotFoundError: If the template file does not exist
            TemplateRenderError: For template syntax errors or unresolved placeholders
        """
        pass
