"""
Exception types surfaced by cvconvert.

Every exception here carries a message that is safe to show to an end user.
Storage errors are not wrapped; they propagate as raised by SQLAlchemy.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable


class CVConvertError(Exception):
    """Base class for user-facing cvconvert errors."""


class UploadValidationError(CVConvertError):
    """Rejected upload (size or file type). Raised before any record exists."""


class ExtractionFailure(str, Enum):
    NOT_CONFIGURED = "not_configured"
    QUOTA_EXCEEDED = "quota_exceeded"
    INSUFFICIENT_QUOTA = "insufficient_quota"
    AUTH_FAILED = "auth_failed"
    FORBIDDEN = "forbidden"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NETWORK_UNREACHABLE = "network_unreachable"
    NO_RESPONSE = "no_response"
    UNKNOWN = "unknown"


class ExtractionError(CVConvertError):
    """The extraction collaborator failed."""

    def __init__(self, message: str, reason: ExtractionFailure = ExtractionFailure.UNKNOWN):
        super().__init__(message)
        self.reason = reason


class UnknownSchemaError(CVConvertError):
    """Extraction result matches neither the legacy nor the custom shape."""


class CVNotFoundError(CVConvertError):
    def __init__(self, cv_id: str):
        super().__init__("CV not found")
        self.cv_id = cv_id


class MissingCVDataError(CVConvertError):
    def __init__(self, cv_id: str):
        super().__init__("CV has no processed data available for document generation")
        self.cv_id = cv_id


class TemplateNotFoundError(CVConvertError):
    def __init__(self, template_name: str, available: Iterable[str]):
        available = list(available)
        super().__init__(
            f"Template not found: {template_name}. "
            f"Available templates: {', '.join(available) or 'none'}"
        )
        self.template_name = template_name
        self.available = available


class TemplateRenderError(CVConvertError):
    """Template syntax error or unresolved placeholder."""


class DocumentGenerationError(CVConvertError):
    """Any other failure while producing a document."""
