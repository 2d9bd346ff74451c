"""
CV ingestion service.

Drives one upload through PROCESSING to COMPLETED or FAILED: validate the
file, create the CV row, extract, classify, map to records and persist
everything in one transaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .config import AppConfig
from .errors import CVNotFoundError, UploadValidationError
from .extractors.base import CVExtractor
from .logging_utils import LOG, fmt_keys
from .records import RecordSet, map_to_records
from .schema import UNRECOGNIZED_SCHEMA_NOTE, CustomExtraction, Extraction, tag_extraction
from .shared import as_list, as_text
from .storage import CVRepository, CVRow

DEFAULT_CONFIDENCE = 95

INVALID_SIZE_MESSAGE = "File size must be less than {limit}MB"
INVALID_TYPE_MESSAGE = (
    "Invalid file type. Please upload an image file (JPEG, PNG, GIF, WebP) or PDF document."
)


@dataclass
class IngestionResult:
    cv: CVRow
    raw_data: Dict[str, Any]
    schema_type: str
    records: RecordSet


def summarize_extraction(extraction: Extraction) -> Tuple[str, float, List[str]]:
    """
    (extracted_text, confidence, processing_notes) for the COMPLETED update.

    Custom documents have no text, confidence or notes list of their own:
    the summary stands in for the text and the single notes string becomes
    a one-element list.
    """
    data = extraction.data
    if isinstance(extraction, CustomExtraction):
        notes = as_text(data.get("notes"))
        return as_text(data.get("summary")), DEFAULT_CONFIDENCE, [notes] if notes else []

    confidence = data.get("confidence")
    if isinstance(confidence, bool) or not isinstance(confidence, (int, float)) or not confidence:
        confidence = DEFAULT_CONFIDENCE
    notes = [note for note in as_list(data.get("processingNotes")) if isinstance(note, str)]
    if not extraction.recognized:
        notes.append(UNRECOGNIZED_SCHEMA_NOTE)
    return as_text(data.get("extractedText")), confidence, notes


class CVService:
    def __init__(self, repository: CVRepository, extractor: CVExtractor, config: Optional[AppConfig] = None):
        self.repository = repository
        self.extractor = extractor
        self.config = config or AppConfig()

    def validate_upload(self, file_size: int, mime_type: str) -> None:
        """
        Raises:
            UploadValidationError: file too large or MIME type not accepted
        """
        if file_size > self.config.max_upload_bytes:
            limit = self.config.max_upload_bytes // (1024 * 1024)
            raise UploadValidationError(INVALID_SIZE_MESSAGE.format(limit=limit))
        if mime_type not in self.config.allowed_mime_types:
            raise UploadValidationError(INVALID_TYPE_MESSAGE)

    def upload_and_process_cv(
        self,
        payload: bytes,
        file_name: str,
        mime_type: str,
        title: str,
        owner_id: str,
    ) -> IngestionResult:
        """
        Ingest one uploaded CV.

        Validation happens before any row exists. After the row is created,
        any failure marks it FAILED with a single note and is re-raised.
        """
        self.validate_upload(len(payload), mime_type)
        LOG.info("File validation passed: %s (%s)", file_name, mime_type)

        cv = self.repository.create_cv(
            owner_id=owner_id,
            title=title,
            file_name=file_name,
            file_size=len(payload),
            mime_type=mime_type,
        )

        try:
            raw = self.extractor.extract(payload, mime_type)
            extraction = tag_extraction(raw, strict=self.config.strict_schema)
            records = map_to_records(extraction)
            extracted_text, confidence, notes = summarize_extraction(extraction)

            try:
                cv = self.repository.complete_cv(
                    cv.id,
                    raw_data=raw,
                    schema_type=extraction.tag.value,
                    extracted_text=extracted_text,
                    confidence=confidence,
                    processing_notes=notes,
                    records=records,
                )
            except Exception:
                LOG.error(
                    "Error saving structured data (schema: %s, cv: %s, keys: %s)",
                    extraction.tag.value,
                    cv.id,
                    fmt_keys(raw),
                )
                raise
        except Exception as e:
            LOG.error("Error processing CV %s: %s", file_name, e)
            try:
                self.repository.fail_cv(cv.id, str(e))
            except Exception as update_error:
                LOG.error("Failed to update CV status for %s: %s", cv.id, update_error)
            raise

        LOG.info(
            "CV processing completed for %s with %s schema and structured data saved",
            file_name,
            extraction.tag.value,
        )
        return IngestionResult(cv=cv, raw_data=raw, schema_type=extraction.tag.value, records=records)

    def find_cv_by_id(self, cv_id: str, owner_id: str) -> CVRow:
        """
        Raises:
            CVNotFoundError: no CV with this id for this owner
        """
        cv = self.repository.find_cv_by_id(cv_id, owner_id)
        if cv is None:
            raise CVNotFoundError(cv_id)
        return cv

    def find_all_user_cvs(self, owner_id: str) -> List[CVRow]:
        return self.repository.find_all_user_cvs(owner_id)

    def delete_cv_by_id(self, cv_id: str, owner_id: str) -> None:
        if not self.repository.delete_cv(cv_id, owner_id):
            raise CVNotFoundError(cv_id)
        LOG.info("CV %s deleted", cv_id)
