"""
Schema-to-record mapping.

Turns a tagged extraction into the relational record set persisted for a CV:
personal info, profile, experiences, educations, skills and languages.
Each schema variant has its own exclusive mapping path; the two only share
the date parsers and the text coercion helpers.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .dates import parse_date_range, parse_duration_range
from .logging_utils import LOG
from .schema import CustomExtraction, Extraction, LegacyExtraction
from .shared import as_dict, as_list, clean_list, clean_str

DEFAULT_SKILL_LEVEL = "Intermédiaire"

# (label, source key) in persistence order
CUSTOM_SKILL_CATEGORIES: Sequence[Tuple[str, str]] = (
    ("Cloud", "cloud"),
    ("Platforms & OS", "platforms_os"),
    ("Containers", "containers"),
    ("Orchestration", "orchestration"),
    ("Infrastructure as Code (IaC)", "iac"),
    ("CI/CD & DevOps", "ci_cd"),
    ("Version Control", "version_control"),
    ("Monitoring & Logging", "monitoring_logging"),
    ("Bases de données", "databases_cache"),
    ("Search Engines", "search"),
    ("Security", "security"),
    ("Scripting", "scripting"),
    ("Tools & Others", "other_tools"),
)

LEGACY_SKILL_CATEGORIES: Sequence[Tuple[str, str]] = (
    ("Technique", "technical"),
    ("Langages de programmation", "languages"),
    ("Soft Skills", "soft"),
    ("Outils", "tools"),
)

# ------------------------- Records -------------------------

@dataclass
class PersonalInfoRecord:
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    headline: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    website: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None


@dataclass
class ProfileRecord:
    summary: Optional[str] = None
    years_of_experience: Optional[str] = None


@dataclass
class ExperienceRecord:
    title: str
    order: int
    company: Optional[str] = None
    location: Optional[str] = None
    start_month: Optional[str] = None
    start_year: Optional[str] = None
    end_month: Optional[str] = None
    end_year: Optional[str] = None
    current: bool = False
    description: Optional[str] = None
    responsibilities: List[str] = field(default_factory=list)
    achievements: List[str] = field(default_factory=list)
    technologies: List[str] = field(default_factory=list)


@dataclass
class EducationRecord:
    degree: str
    order: int
    institution: Optional[str] = None
    location: Optional[str] = None
    start_month: Optional[str] = None
    start_year: Optional[str] = None
    end_month: Optional[str] = None
    end_year: Optional[str] = None
    current: bool = False
    finished: bool = True
    description: Optional[str] = None
    gpa: Optional[str] = None
    honors: List[str] = field(default_factory=list)
    activities: List[str] = field(default_factory=list)


@dataclass
class SkillRecord:
    category: str
    name: str
    order: int
    level: str = DEFAULT_SKILL_LEVEL


@dataclass
class LanguageRecord:
    name: str
    order: int
    level: Optional[str] = None


@dataclass
class RecordSet:
    """All structured rows derived from one extraction."""

    personal_info: Optional[PersonalInfoRecord] = None
    profile: Optional[ProfileRecord] = None
    experiences: List[ExperienceRecord] = field(default_factory=list)
    educations: List[EducationRecord] = field(default_factory=list)
    skills: List[SkillRecord] = field(default_factory=list)
    languages: List[LanguageRecord] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def counts(self) -> Dict[str, int]:
        return {
            "personal_info": int(self.personal_info is not None),
            "profile": int(self.profile is not None),
            "experiences": len(self.experiences),
            "educations": len(self.educations),
            "skills": len(self.skills),
            "languages": len(self.languages),
        }

# ------------------------- Shared helpers -------------------------

def split_full_name(full_name: Any) -> Tuple[Optional[str], Optional[str]]:
    """
    "Jean Paul Dupont" -> ("Jean", "Paul Dupont").
    First token is the first name; the remainder is the last name.
    """
    name = clean_str(full_name)
    if name is None:
        return None, None
    first, _, rest = name.partition(" ")
    return first or None, rest.strip() or None


def split_location(location: Any) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Flatten a contact location into (address, postal_code, city).

    A plain string is the address. An object may carry address,
    postcode/postal_code and city; the city doubles as address when no
    street address is given.
    """
    if isinstance(location, str):
        return clean_str(location), None, None
    loc = as_dict(location)
    address = clean_str(loc.get("address"))
    postal_code = clean_str(loc.get("postcode")) or clean_str(loc.get("postal_code"))
    city = clean_str(loc.get("city"))
    if address is None and city is not None:
        address = city
    return address, postal_code, city


def _skills_from_table(skills: Dict[str, Any], table: Sequence[Tuple[str, str]]) -> List[SkillRecord]:
    # One counter across all categories
    records: List[SkillRecord] = []
    order = 0
    for category, key in table:
        for skill in as_list(skills.get(key)):
            name = clean_str(skill)
            if name is None:
                LOG.debug("Skipping empty skill in category %s", category)
                continue
            records.append(SkillRecord(category=category, name=name, order=order))
            order += 1
    return records


def _languages(entries: Any) -> List[LanguageRecord]:
    # Filter first so order is dense over the kept entries
    valid = []
    for index, entry in enumerate(as_list(entries)):
        entry = as_dict(entry)
        name = clean_str(entry.get("language"))
        if name is None:
            LOG.debug("Skipping language %d with empty name", index)
            continue
        valid.append((name, clean_str(entry.get("proficiency"))))
    return [LanguageRecord(name=name, level=level, order=i) for i, (name, level) in enumerate(valid)]


def _experience_title(entry: Dict[str, Any], title_key: str, index: int) -> str:
    title = clean_str(entry.get(title_key)) or clean_str(entry.get("company")) or f"Experience {index + 1}"
    if clean_str(entry.get(title_key)) is None:
        LOG.warning("Experience %d has no title, using fallback: %r", index, title)
    return title


def _education_degree(entry: Dict[str, Any], index: int) -> str:
    degree = clean_str(entry.get("degree")) or clean_str(entry.get("field")) or f"Education {index + 1}"
    if clean_str(entry.get("degree")) is None:
        LOG.warning("Education %d has no degree, using fallback: %r", index, degree)
    return degree

# ------------------------- Custom schema -------------------------

def _custom_records(data: Dict[str, Any]) -> RecordSet:
    records = RecordSet()
    contact = data.get("contact")

    if clean_str(data.get("name")) or clean_str(data.get("headline")) or contact is not None:
        contact = as_dict(contact)
        links = as_dict(contact.get("links"))
        first_name, last_name = split_full_name(data.get("name"))
        address, postal_code, city = split_location(contact.get("location"))
        records.personal_info = PersonalInfoRecord(
            first_name=first_name,
            last_name=last_name,
            headline=clean_str(data.get("headline")),
            email=clean_str(contact.get("email")),
            phone=clean_str(contact.get("phone")),
            address=address,
            postal_code=postal_code,
            city=city,
            website=clean_str(links.get("website")),
            linkedin=clean_str(links.get("linkedin")),
            github=clean_str(links.get("github")),
        )

    summary = clean_str(data.get("summary"))
    years = clean_str(data.get("years_experience"))
    if summary or years:
        records.profile = ProfileRecord(summary=summary, years_of_experience=years)

    for index, entry in enumerate(as_list(data.get("experience"))):
        entry = as_dict(entry)
        dates = parse_date_range(entry.get("start_date"), entry.get("end_date"))
        records.experiences.append(
            ExperienceRecord(
                title=_experience_title(entry, "title", index),
                company=clean_str(entry.get("company")),
                location=clean_str(entry.get("location")),
                start_month=dates.start_month,
                start_year=dates.start_year,
                end_month=dates.end_month,
                end_year=dates.end_year,
                current=dates.is_current,
                description=clean_str(entry.get("description")),
                responsibilities=clean_list(entry.get("responsibilities")),
                achievements=clean_list(entry.get("achievements")),
                technologies=clean_list(entry.get("technologies")),
                order=index,
            )
        )

    for index, entry in enumerate(as_list(data.get("education"))):
        entry = as_dict(entry)
        dates = parse_date_range(entry.get("start_date"), entry.get("end_date"))
        records.educations.append(
            EducationRecord(
                degree=_education_degree(entry, index),
                institution=clean_str(entry.get("institution")),
                location=clean_str(entry.get("location")),
                start_month=dates.start_month,
                start_year=dates.start_year,
                end_month=dates.end_month,
                end_year=dates.end_year,
                current=dates.is_current,
                finished=not dates.is_current,
                description=clean_str(entry.get("field")) or clean_str(entry.get("description")),
                honors=clean_list(entry.get("honors")),
                activities=clean_list(entry.get("activities")),
                order=index,
            )
        )

    records.skills = _skills_from_table(as_dict(data.get("skills")), CUSTOM_SKILL_CATEGORIES)
    records.languages = _languages(data.get("languages"))
    return records

# ------------------------- Legacy schema -------------------------

def _legacy_records(data: Dict[str, Any]) -> RecordSet:
    records = RecordSet()
    personal = data.get("personalInfo")

    if isinstance(personal, dict):
        first_name, last_name = split_full_name(personal.get("fullName"))
        address, postal_code, city = split_location(personal.get("location"))
        records.personal_info = PersonalInfoRecord(
            first_name=first_name,
            last_name=last_name,
            email=clean_str(personal.get("email")),
            phone=clean_str(personal.get("phone")),
            address=clean_str(personal.get("address")) or address,
            postal_code=postal_code,
            city=city,
            website=clean_str(personal.get("website")),
            linkedin=clean_str(personal.get("linkedin")),
            github=clean_str(personal.get("github")),
        )

    summary = clean_str(data.get("professionalSummary"))
    if summary:
        records.profile = ProfileRecord(summary=summary)

    for index, entry in enumerate(as_list(data.get("workExperience"))):
        entry = as_dict(entry)
        dates = parse_duration_range(entry.get("duration"))
        records.experiences.append(
            ExperienceRecord(
                title=_experience_title(entry, "jobTitle", index),
                company=clean_str(entry.get("company")),
                location=clean_str(entry.get("location")),
                start_month=dates.start_month,
                start_year=dates.start_year,
                end_month=dates.end_month,
                end_year=dates.end_year,
                current=dates.is_current,
                responsibilities=clean_list(entry.get("responsibilities")),
                achievements=clean_list(entry.get("achievements")),
                technologies=clean_list(entry.get("technologies")),
                order=index,
            )
        )

    for index, entry in enumerate(as_list(data.get("education"))):
        entry = as_dict(entry)
        dates = parse_duration_range(entry.get("year"))
        records.educations.append(
            EducationRecord(
                degree=_education_degree(entry, index),
                institution=clean_str(entry.get("institution")),
                location=clean_str(entry.get("location")),
                start_month=dates.start_month,
                start_year=dates.start_year,
                end_month=dates.end_month,
                end_year=dates.end_year,
                current=dates.is_current,
                finished=not dates.is_current,
                gpa=clean_str(entry.get("gpa")),
                honors=clean_list(entry.get("honors")),
                order=index,
            )
        )

    records.skills = _skills_from_table(as_dict(data.get("skills")), LEGACY_SKILL_CATEGORIES)
    records.languages = _languages(data.get("languages"))
    return records

# ------------------------- Entry point -------------------------

def map_to_records(extraction: Extraction) -> RecordSet:
    """
    Map a tagged extraction to its relational record set.

    Pure: no I/O. Never raises for a dict payload, whatever fields are
    missing or mistyped.
    """
    if isinstance(extraction, CustomExtraction):
        records = _custom_records(extraction.data)
    elif isinstance(extraction, LegacyExtraction):
        records = _legacy_records(extraction.data)
    else:
        raise TypeError(f"Unsupported extraction type: {type(extraction).__name__}")

    LOG.debug("Mapped %s extraction to records: %s", extraction.tag.value, records.counts())
    return records
