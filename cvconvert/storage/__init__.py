"""
Relational storage for CVs and their structured records (SQLAlchemy ORM).
"""

from .database import Base, create_engine_for, init_db, make_session_factory
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
from .repository import PROCESSING_STARTED_NOTE, CVRepository

__all__ = [
    "Base",
    "CVRepository",
    "CVRow",
    "CVStatus",
    "EducationRow",
    "ExperienceRow",
    "LanguageRow",
    "PROCESSING_STARTED_NOTE",
    "PersonalInfoRow",
    "ProfileRow",
    "SkillRow",
    "create_engine_for",
    "init_db",
    "make_session_factory",
]
