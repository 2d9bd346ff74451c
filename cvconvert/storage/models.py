"""
ORM models: one CV row with six ordered child collections.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CVStatus(str, Enum):
    """Processing status of an uploaded CV."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class CVRow(Base):
    """
    An uploaded CV, its raw extraction and the schema tag it was mapped with.
    Child collections are ordered by their `order` column.
    """
    __tablename__ = "cvs"

    id = Column(String(36), primary_key=True, default=_new_id)
    owner_id = Column(String(64), nullable=False, index=True)
    title = Column(String(255), nullable=False)

    # File info
    file_name = Column(String(255), nullable=False)
    file_size = Column(Integer, nullable=False, default=0)
    mime_type = Column(String(100), nullable=False)

    # Processing
    status = Column(SQLEnum(CVStatus), default=CVStatus.PENDING, nullable=False)
    confidence = Column(Float, default=0, nullable=False)
    processing_notes = Column(JSON, default=list, nullable=False)
    extracted_text = Column(Text, nullable=True)
    raw_data = Column(JSON, nullable=True)
    schema_type = Column(String(16), nullable=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    personal_info = relationship(
        "PersonalInfoRow", uselist=False, back_populates="cv", cascade="all, delete-orphan"
    )
    profile = relationship(
        "ProfileRow", uselist=False, back_populates="cv", cascade="all, delete-orphan"
    )
    experiences = relationship(
        "ExperienceRow", back_populates="cv", cascade="all, delete-orphan",
        order_by="ExperienceRow.order",
    )
    educations = relationship(
        "EducationRow", back_populates="cv", cascade="all, delete-orphan",
        order_by="EducationRow.order",
    )
    skills = relationship(
        "SkillRow", back_populates="cv", cascade="all, delete-orphan",
        order_by="SkillRow.order",
    )
    languages = relationship(
        "LanguageRow", back_populates="cv", cascade="all, delete-orphan",
        order_by="LanguageRow.order",
    )


class PersonalInfoRow(Base):
    __tablename__ = "cv_personal_info"

    id = Column(Integer, primary_key=True)
    cv_id = Column(String(36), ForeignKey("cvs.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    headline = Column(String(500), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(100), nullable=True)
    address = Column(String(500), nullable=True)
    postal_code = Column(String(50), nullable=True)
    city = Column(String(255), nullable=True)
    website = Column(String(500), nullable=True)
    linkedin = Column(String(500), nullable=True)
    github = Column(String(500), nullable=True)

    cv = relationship("CVRow", back_populates="personal_info")


class ProfileRow(Base):
    __tablename__ = "cv_profiles"

    id = Column(Integer, primary_key=True)
    cv_id = Column(String(36), ForeignKey("cvs.id", ondelete="CASCADE"), nullable=False, index=True)
    summary = Column(Text, nullable=True)
    years_of_experience = Column(String(50), nullable=True)

    cv = relationship("CVRow", back_populates="profile")


class ExperienceRow(Base):
    __tablename__ = "cv_experiences"

    id = Column(Integer, primary_key=True)
    cv_id = Column(String(36), ForeignKey("cvs.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    company = Column(String(500), nullable=True)
    location = Column(String(255), nullable=True)
    start_month = Column(String(2), nullable=True)
    start_year = Column(String(4), nullable=True)
    end_month = Column(String(2), nullable=True)
    end_year = Column(String(4), nullable=True)
    current = Column(Boolean, default=False, nullable=False)
    description = Column(Text, nullable=True)
    responsibilities = Column(JSON, default=list, nullable=False)
    achievements = Column(JSON, default=list, nullable=False)
    technologies = Column(JSON, default=list, nullable=False)
    order = Column(Integer, default=0, nullable=False)

    cv = relationship("CVRow", back_populates="experiences")


class EducationRow(Base):
    __tablename__ = "cv_educations"

    id = Column(Integer, primary_key=True)
    cv_id = Column(String(36), ForeignKey("cvs.id", ondelete="CASCADE"), nullable=False, index=True)
    degree = Column(String(500), nullable=False)
    institution = Column(String(500), nullable=True)
    location = Column(String(255), nullable=True)
    start_month = Column(String(2), nullable=True)
    start_year = Column(String(4), nullable=True)
    end_month = Column(String(2), nullable=True)
    end_year = Column(String(4), nullable=True)
    current = Column(Boolean, default=False, nullable=False)
    finished = Column(Boolean, default=True, nullable=False)
    description = Column(Text, nullable=True)
    gpa = Column(String(50), nullable=True)
    honors = Column(JSON, default=list, nullable=False)
    activities = Column(JSON, default=list, nullable=False)
    order = Column(Integer, default=0, nullable=False)

    cv = relationship("CVRow", back_populates="educations")


class SkillRow(Base):
    __tablename__ = "cv_skills"

    id = Column(Integer, primary_key=True)
    cv_id = Column(String(36), ForeignKey("cvs.id", ondelete="CASCADE"), nullable=False, index=True)
    category = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    level = Column(String(100), nullable=False)
    order = Column(Integer, default=0, nullable=False)

    cv = relationship("CVRow", back_populates="skills")


class LanguageRow(Base):
    __tablename__ = "cv_languages"

    id = Column(Integer, primary_key=True)
    cv_id = Column(String(36), ForeignKey("cvs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    level = Column(String(100), nullable=True)
    order = Column(Integer, default=0, nullable=False)

    cv = relationship("CVRow", back_populates="languages")
