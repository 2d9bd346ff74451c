"""
OpenAI-based CV extractor implementation.

PDF uploads are converted to text with pdfplumber and sent to the chat
completions API with the custom-schema prompt. Image uploads are sent as
base64 data URLs with the legacy-schema prompt.

When the model answers with something that is not a JSON object, a fallback
document of the matching schema is returned with the raw text preserved.
API failures are translated into ExtractionError with a user-facing message.
"""

from __future__ import annotations

import base64
import json
import os
import re
from io import BytesIO
from typing import Any, Dict, List, Optional

import pdfplumber
from openai import APIConnectionError, OpenAI

from ..errors import ExtractionError, ExtractionFailure
from ..logging_utils import LOG
from ..shared import load_prompt
from .base import CVExtractor

PDF_MIME_TYPE = "application/pdf"

PDF_PLACEHOLDER_TEXT = "PDF content could not be extracted. Please try with a different PDF file."

PDF_USER_PROMPT = (
    "Please analyze this CV text and extract all information in the structured "
    "JSON format specified:\n\n{text}"
)
IMAGE_USER_PROMPT = (
    "Please analyze this CV/Resume and extract all information in the structured "
    "JSON format specified."
)

_FENCE_RE = re.compile(r"```json\n?|\n?```")

_CUSTOM_SKILL_KEYS = (
    "cloud", "platforms_os", "containers", "orchestration", "iac", "ci_cd",
    "version_control", "monitoring_logging", "databases_cache", "search",
    "security", "scripting", "other_tools",
)

_ERROR_MESSAGES = {
    ExtractionFailure.NOT_CONFIGURED: (
        "OpenAI API key not configured. Please add your OpenAI API key to the "
        "environment variables to enable CV processing."
    ),
    ExtractionFailure.INSUFFICIENT_QUOTA: (
        "Insufficient OpenAI API quota. Please add credits to your OpenAI account "
        "at https://platform.openai.com/billing to enable CV processing."
    ),
    ExtractionFailure.QUOTA_EXCEEDED: (
        "OpenAI API quota exceeded. Please check your OpenAI billing and add credits "
        "to continue processing CVs."
    ),
    ExtractionFailure.AUTH_FAILED: (
        "Invalid OpenAI API key. Please check your API key configuration and ensure it is valid."
    ),
    ExtractionFailure.FORBIDDEN: (
        "OpenAI API access forbidden. Please verify your API key has the necessary "
        "permissions for the configured model."
    ),
    ExtractionFailure.SERVICE_UNAVAILABLE: (
        "OpenAI service is currently unavailable. Please try again in a few minutes."
    ),
    ExtractionFailure.NETWORK_UNREACHABLE: (
        "Unable to connect to OpenAI API. Please check your internet connection and try again."
    ),
    ExtractionFailure.NO_RESPONSE: "No response from OpenAI API. Please try again later.",
}


def custom_fallback(text: str, error: Exception) -> Dict[str, Any]:
    """Empty custom-schema document carrying the start of the raw text in its summary."""
    return {
        "name": "",
        "headline": "",
        "years_experience": "",
        "contact": {
            "email": "",
            "phone": "",
            "location": "",
            "links": {"linkedin": "", "github": "", "website": ""},
        },
        "summary": text[:500] + "...",
        "experience": [],
        "education": [],
        "certifications": [],
        "skills": {key: [] for key in _CUSTOM_SKILL_KEYS},
        "languages": [],
        "projects": [],
        "affiliations": [],
        "awards": [],
        "notes": f"Failed to parse structured data. Raw text available in summary. Error: {error}",
    }


def legacy_fallback(content: str) -> Dict[str, Any]:
    """Empty legacy-schema document carrying the model output as extractedText."""
    return {
        "personalInfo": {},
        "workExperience": [],
        "education": [],
        "skills": {"technical": [], "languages": [], "soft": [], "tools": []},
        "certifications": [],
        "projects": [],
        "languages": [],
        "extractedText": content,
        "confidence": 50,
        "processingNotes": ["Failed to parse structured data, returning raw text"],
    }


class OpenAICVExtractor(CVExtractor):
    """
    CV extractor using the OpenAI chat completions API.

    PDFs go through text extraction first; images are sent to the vision model.
    """

    def __init__(
        self,
        model: str = "gpt-4o",
        *,
        api_key: Optional[str] = None,
        max_tokens: int = 4000,
        temperature: float = 0.1,
        **kwargs,
    ):
        """
        Initialize the OpenAI extractor.

        Args:
            model: OpenAI model to use (default: gpt-4o)
            api_key: API key; falls back to OPENAI_API_KEY
            max_tokens: Completion token limit
            temperature: Sampling temperature
            **kwargs: Additional arguments (reserved for future use)
        """
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._api_key = api_key
        self._client: Optional[OpenAI] = None

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            api_key = self._api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise ExtractionError(
                    _ERROR_MESSAGES[ExtractionFailure.NOT_CONFIGURED],
                    ExtractionFailure.NOT_CONFIGURED,
                )
            self._client = OpenAI(api_key=api_key)
        return self._client

    def extract(self, payload: bytes, mime_type: str) -> Dict[str, Any]:
        """
        Extract a raw CV document from the uploaded file.

        Raises:
            ExtractionError: API key missing, API failure, or empty response
        """
        try:
            if mime_type == PDF_MIME_TYPE:
                return self._process_pdf(payload)
            return self._process_image(payload, mime_type)
        except ExtractionError:
            raise
        except Exception as e:
            LOG.error("Error processing CV with OpenAI: %s", e)
            raise self._translate_error(e) from e

    # --------------------------
    # PDF / image flows
    # --------------------------

    def _pdf_text(self, payload: bytes) -> str:
        try:
            with pdfplumber.open(BytesIO(payload)) as pdf:
                parts = [page.extract_text() or "" for page in pdf.pages]
        except Exception as e:
            LOG.error("PDF parsing failed: %s", e)
            return PDF_PLACEHOLDER_TEXT
        return "\n\n".join(p for p in parts if p)

    def _process_pdf(self, payload: bytes) -> Dict[str, Any]:
        text = self._pdf_text(payload)
        LOG.info("Extracted %d characters from PDF", len(text))

        content = self._complete([
            {"role": "system", "content": self._system_prompt("cv_pdf_extraction_system")},
            {"role": "user", "content": PDF_USER_PROMPT.format(text=text)},
        ])

        try:
            return self._parse_json(content)
        except ValueError as e:
            LOG.error("Failed to parse OpenAI response as JSON: %s", e)
            return custom_fallback(text, e)

    def _process_image(self, payload: bytes, mime_type: str) -> Dict[str, Any]:
        encoded = base64.b64encode(payload).decode("ascii")

        content = self._complete([
            {"role": "system", "content": self._system_prompt("cv_image_extraction_system")},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": IMAGE_USER_PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
                ],
            },
        ])

        try:
            return self._parse_json(content)
        except ValueError as e:
            LOG.error("Failed to parse OpenAI response as JSON: %s", e)
            return legacy_fallback(content)

    # --------------------------
    # OpenAI operations
    # --------------------------

    def _system_prompt(self, name: str) -> str:
        prompt = load_prompt(name)
        if not prompt:
            raise RuntimeError(f"Failed to load prompt: {name}")
        return prompt

    def _complete(self, messages: List[Dict[str, Any]]) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        choices = getattr(response, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise ExtractionError(
                _ERROR_MESSAGES[ExtractionFailure.NO_RESPONSE],
                ExtractionFailure.NO_RESPONSE,
            )
        return content

    def _parse_json(self, content: str) -> Dict[str, Any]:
        data = json.loads(_FENCE_RE.sub("", content).strip())
        if not isinstance(data, dict):
            raise ValueError("Response must be a JSON object")
        return data

    # --------------------------
    # Error translation
    # --------------------------

    def _get_status_code(self, exc: Exception) -> Optional[int]:
        """
        Best-effort extraction of HTTP status from OpenAI SDK exceptions.
        """
        for attr in ("status_code", "status", "http_status"):
            val = getattr(exc, attr, None)
            if isinstance(val, int):
                return val

        resp = getattr(exc, "response", None)
        if resp is not None:
            sc = getattr(resp, "status_code", None)
            if isinstance(sc, int):
                return sc

        return None

    def _translate_error(self, exc: Exception) -> ExtractionError:
        status = self._get_status_code(exc)
        code = getattr(exc, "code", None)

        if code == "insufficient_quota":
            reason = ExtractionFailure.INSUFFICIENT_QUOTA
        elif status == 429:
            reason = ExtractionFailure.QUOTA_EXCEEDED
        elif status == 401:
            reason = ExtractionFailure.AUTH_FAILED
        elif status == 403:
            reason = ExtractionFailure.FORBIDDEN
        elif status is not None and status >= 500:
            reason = ExtractionFailure.SERVICE_UNAVAILABLE
        elif isinstance(exc, APIConnectionError) or code in ("ENOTFOUND", "ECONNREFUSED"):
            reason = ExtractionFailure.NETWORK_UNREACHABLE
        else:
            detail = str(exc) or "Unknown error occurred. Please try again."
            return ExtractionError(f"CV processing failed: {detail}", ExtractionFailure.UNKNOWN)

        return ExtractionError(_ERROR_MESSAGES[reason], reason)
