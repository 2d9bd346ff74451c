"""
Base interface for CV extractors.

Defines the contract for pluggable CV extraction implementations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class CVExtractor(ABC):
    """
    Abstract base class for CV extractors.

    An extractor turns an uploaded file into one of the two raw extraction
    shapes: the custom schema (name / headline / years_experience, nested
    contact, 13 skill categories) or the legacy schema (personalInfo /
    workExperience / extractedText). The caller classifies the result.
    """

    @abstractmethod
    def extract(self, payload: bytes, mime_type: str) -> Dict[str, Any]:
        """
        Extract structured CV data from an uploaded file.

        Args:
            payload: Raw file content
            mime_type: MIME type of the upload (application/pdf or image/*)

        Returns:
            The raw extraction result as a JSON object.

        Raises:
            ExtractionError: If the extraction service fails
        """
        pass
