"""Tests for the SQLAlchemy CV repository."""

import pytest

from cvconvert.records import (
    EducationRecord,
    ExperienceRecord,
    LanguageRecord,
    RecordSet,
    SkillRecord,
    map_to_records,
)
from cvconvert.schema import CustomExtraction, LegacyExtraction
from cvconvert.storage import PROCESSING_STARTED_NOTE, CVStatus


def _create(repository, owner_id="owner-1", title="My CV"):
    return repository.create_cv(
        owner_id=owner_id,
        title=title,
        file_name="cv.pdf",
        file_size=1234,
        mime_type="application/pdf",
    )


def _complete(repository, cv_id, raw, extraction_cls=CustomExtraction):
    return repository.complete_cv(
        cv_id,
        raw_data=raw,
        schema_type=extraction_cls.tag.value,
        extracted_text="text",
        confidence=95,
        processing_notes=["note"],
        records=map_to_records(extraction_cls(raw)),
    )


class TestCreateCV:
    def test_new_cv_is_processing(self, repository):
        cv = _create(repository)
        assert cv.id
        assert cv.status == CVStatus.PROCESSING
        assert cv.confidence == 0
        assert cv.processing_notes == [PROCESSING_STARTED_NOTE]

    def test_ids_are_unique(self, repository):
        assert _create(repository).id != _create(repository).id


class TestCompleteCV:
    """Tests for the single-transaction completion update."""

    def test_completed_fields_and_records(self, repository, custom_cv):
        cv = _create(repository)
        _complete(repository, cv.id, custom_cv)

        stored = repository.find_cv_by_id(cv.id)
        assert stored.status == CVStatus.COMPLETED
        assert stored.schema_type == "custom"
        assert stored.raw_data == custom_cv
        assert stored.processing_notes == ["note"]
        assert stored.personal_info.first_name == "Jean"
        assert stored.personal_info.last_name == "Paul Dupont"
        assert stored.profile.years_of_experience == "8"
        assert [e.title for e in stored.experiences] == ["Senior DevOps Engineer", "Systems Administrator"]
        assert stored.experiences[0].current is True
        assert stored.experiences[0].technologies == ["Terraform", "EKS"]
        assert len(stored.skills) == 16
        assert [s.order for s in stored.skills] == list(range(16))
        assert [l.name for l in stored.languages] == ["Français", "English"]

    def test_legacy_records(self, repository, legacy_cv):
        cv = _create(repository)
        _complete(repository, cv.id, legacy_cv, LegacyExtraction)

        stored = repository.find_cv_by_id(cv.id)
        assert stored.schema_type == "legacy"
        assert stored.personal_info.address == "1 rue Pierre et Marie Curie"
        assert stored.experiences[0].start_year == "1906"
        assert stored.experiences[0].current is True
        assert stored.experiences[0].end_year is None
        assert stored.educations[0].start_year == "1893"
        assert stored.languages[0].name == "Polish"

    def test_reprocessing_replaces_records(self, repository, custom_cv):
        cv = _create(repository)
        _complete(repository, cv.id, custom_cv)
        custom_cv["experience"] = custom_cv["experience"][:1]
        _complete(repository, cv.id, custom_cv)

        stored = repository.find_cv_by_id(cv.id)
        assert len(stored.experiences) == 1
        assert len(stored.skills) == 16
        assert stored.personal_info is not None

    def test_collections_are_read_in_order(self, repository):
        """Child rows come back sorted by order, whatever the insertion order."""
        cv = _create(repository)
        records = RecordSet(
            experiences=[ExperienceRecord(title="Second", order=1), ExperienceRecord(title="First", order=0)],
            educations=[
                EducationRecord(degree="PhD", order=2),
                EducationRecord(degree="BSc", order=0),
                EducationRecord(degree="MSc", order=1),
            ],
            skills=[SkillRecord(category="Cloud", name="GCP", order=1), SkillRecord(category="Cloud", name="AWS", order=0)],
            languages=[LanguageRecord(name="English", order=1), LanguageRecord(name="Français", order=0)],
        )
        repository.complete_cv(
            cv.id,
            raw_data={"name": "x"},
            schema_type="custom",
            extracted_text="",
            confidence=95,
            processing_notes=[],
            records=records,
        )

        stored = repository.find_cv_by_id(cv.id, "owner-1")
        assert [e.title for e in stored.experiences] == ["First", "Second"]
        assert [e.degree for e in stored.educations] == ["BSc", "MSc", "PhD"]
        assert [s.name for s in stored.skills] == ["AWS", "GCP"]
        assert [l.name for l in stored.languages] == ["Français", "English"]

        (listed,) = repository.find_all_user_cvs("owner-1")
        assert [e.order for e in listed.experiences] == [0, 1]

    def test_failed_completion_leaves_cv_processing(self, repository, custom_cv):
        cv = _create(repository)
        records = map_to_records(CustomExtraction(custom_cv))
        records.experiences[0].title = None  # violates NOT NULL

        with pytest.raises(Exception):
            repository.complete_cv(
                cv.id,
                raw_data=custom_cv,
                schema_type="custom",
                extracted_text="",
                confidence=95,
                processing_notes=[],
                records=records,
            )

        stored = repository.find_cv_by_id(cv.id)
        assert stored.status == CVStatus.PROCESSING
        assert stored.raw_data is None
        assert stored.experiences == []
        assert stored.skills == []


class TestFailCV:
    def test_fail_replaces_notes(self, repository):
        cv = _create(repository)
        repository.fail_cv(cv.id, "boom")

        stored = repository.find_cv_by_id(cv.id)
        assert stored.status == CVStatus.FAILED
        assert stored.processing_notes == ["Processing failed: boom"]

    def test_fail_unknown_cv(self, repository):
        with pytest.raises(LookupError):
            repository.fail_cv("missing", "boom")


class TestQueries:
    def test_find_respects_owner(self, repository):
        cv = _create(repository, owner_id="alice")
        assert repository.find_cv_by_id(cv.id, "alice") is not None
        assert repository.find_cv_by_id(cv.id, "bob") is None
        assert repository.find_cv_by_id("missing") is None

    def test_find_all_newest_first(self, repository):
        first = _create(repository, owner_id="alice", title="first")
        second = _create(repository, owner_id="alice", title="second")
        _create(repository, owner_id="bob")

        cvs = repository.find_all_user_cvs("alice")
        assert [cv.id for cv in cvs] == [second.id, first.id]

    def test_find_all_for_unknown_owner(self, repository):
        assert repository.find_all_user_cvs("nobody") == []


class TestDeleteCV:
    def test_delete_cascades(self, repository, custom_cv, session_factory):
        from cvconvert.storage import SkillRow

        cv = _create(repository)
        _complete(repository, cv.id, custom_cv)
        assert repository.delete_cv(cv.id, "owner-1") is True
        assert repository.find_cv_by_id(cv.id) is None

        session = session_factory()
        try:
            assert session.query(SkillRow).count() == 0
        finally:
            session.close()

    def test_delete_wrong_owner(self, repository):
        cv = _create(repository, owner_id="alice")
        assert repository.delete_cv(cv.id, "bob") is False
        assert repository.find_cv_by_id(cv.id) is not None

    def test_delete_missing(self, repository):
        assert repository.delete_cv("missing", "alice") is False
