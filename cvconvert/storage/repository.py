"""
CV persistence.

CVRepository owns the session lifecycle. Every public method runs in its own
session and commits once, so a CV's COMPLETED status and its structured
records are written together or not at all.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import asdict
from typing import Any, Dict, Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from ..logging_utils import LOG
from ..records import RecordSet
from .models import (
    CVRow,
    CVStatus,
    EducationRow,
    ExperienceRow,
    LanguageRow,
    PersonalInfoRow,
    ProfileRow,
    SkillRow,
)

PROCESSING_STARTED_NOTE = "Processing started"

_CHILDREN = (
    CVRow.personal_info,
    CVRow.profile,
    CVRow.experiences,
    CVRow.educations,
    CVRow.skills,
    CVRow.languages,
)


class CVRepository:
    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @contextmanager
    def session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _query(self, cv_id: str, owner_id: Optional[str] = None):
        stmt = select(CVRow).where(CVRow.id == cv_id)
        if owner_id is not None:
            stmt = stmt.where(CVRow.owner_id == owner_id)
        return stmt.options(*(selectinload(rel) for rel in _CHILDREN))

    def _get(self, session: Session, cv_id: str) -> CVRow:
        cv = session.get(CVRow, cv_id)
        if cv is None:
            raise LookupError(f"CV {cv_id} does not exist")
        return cv

    # ------------------------- Ingestion -------------------------

    def create_cv(
        self,
        *,
        owner_id: str,
        title: str,
        file_name: str,
        file_size: int,
        mime_type: str,
    ) -> CVRow:
        """Insert a new CV in PROCESSING with zero confidence and a seed note."""
        with self.session() as session:
            cv = CVRow(
                owner_id=owner_id,
                title=title,
                file_name=file_name,
                file_size=file_size,
                mime_type=mime_type,
                status=CVStatus.PROCESSING,
                confidence=0,
                processing_notes=[PROCESSING_STARTED_NOTE],
            )
            session.add(cv)
        LOG.debug("Created CV %s for owner %s", cv.id, owner_id)
        return cv

    def complete_cv(
        self,
        cv_id: str,
        *,
        raw_data: Dict[str, Any],
        schema_type: str,
        extracted_text: Optional[str],
        confidence: float,
        processing_notes: List[str],
        records: RecordSet,
    ) -> CVRow:
        """
        Mark a CV COMPLETED and replace its structured records, in one transaction.

        Existing child rows are deleted first, so reprocessing never duplicates.
        """
        with self.session() as session:
            cv = session.execute(self._query(cv_id)).scalar_one()

            cv.personal_info = None
            cv.profile = None
            cv.experiences = []
            cv.educations = []
            cv.skills = []
            cv.languages = []
            session.flush()

            cv.status = CVStatus.COMPLETED
            cv.raw_data = raw_data
            cv.schema_type = schema_type
            cv.extracted_text = extracted_text
            cv.confidence = confidence
            cv.processing_notes = list(processing_notes)

            if records.personal_info is not None:
                cv.personal_info = PersonalInfoRow(**asdict(records.personal_info))
            if records.profile is not None:
                cv.profile = ProfileRow(**asdict(records.profile))
            cv.experiences = [ExperienceRow(**asdict(r)) for r in records.experiences]
            cv.educations = [EducationRow(**asdict(r)) for r in records.educations]
            cv.skills = [SkillRow(**asdict(r)) for r in records.skills]
            cv.languages = [LanguageRow(**asdict(r)) for r in records.languages]

        LOG.debug("Completed CV %s: %s", cv_id, records.counts())
        return cv

    def fail_cv(self, cv_id: str, message: str) -> None:
        with self.session() as session:
            cv = self._get(session, cv_id)
            cv.status = CVStatus.FAILED
            cv.processing_notes = [f"Processing failed: {message}"]

    # ------------------------- Queries -------------------------

    def find_cv_by_id(self, cv_id: str, owner_id: Optional[str] = None) -> Optional[CVRow]:
        """CV with all child collections loaded, or None."""
        with self.session() as session:
            return session.execute(self._query(cv_id, owner_id)).scalar_one_or_none()

    def find_all_user_cvs(self, owner_id: str) -> List[CVRow]:
        """All CVs of an owner, newest first."""
        stmt = (
            select(CVRow)
            .where(CVRow.owner_id == owner_id)
            .order_by(CVRow.created_at.desc())
            .options(*(selectinload(rel) for rel in _CHILDREN))
        )
        with self.session() as session:
            return list(session.execute(stmt).scalars().all())

    def delete_cv(self, cv_id: str, owner_id: str) -> bool:
        with self.session() as session:
            cv = session.execute(
                select(CVRow).where(CVRow.id == cv_id, CVRow.owner_id == owner_id)
            ).scalar_one_or_none()
            if cv is None:
                return False
            session.delete(cv)
        LOG.debug("Deleted CV %s", cv_id)
        return True
