"""
Template-data mapping.

Builds the flat dict merged into a DOCX template, either from a tagged
extraction (map_to_template) or from hand-edited form data
(map_form_to_template). Source strings are passed through unchanged; any
missing value becomes "" or [].
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from .dates import format_month_year, format_period
from .logging_utils import LOG
from .schema import CustomExtraction, Extraction, LegacyExtraction
from .shared import as_dict, as_list, as_text, split_bullets, strip_html

CUSTOM_SKILL_KEYS = (
    "cloud",
    "platforms_os",
    "containers",
    "orchestration",
    "iac",
    "ci_cd",
    "version_control",
    "monitoring_logging",
    "databases_cache",
    "search",
    "security",
    "scripting",
    "other_tools",
)

LEGACY_SKILL_KEYS = ("technical", "languages", "soft", "tools")

CURRENT_EXPERIENCE_LABEL = "Présent"
CURRENT_EDUCATION_LABEL = "En cours"


def format_generated_date(today: Optional[date] = None) -> str:
    """M/D/YYYY, no zero padding."""
    today = today or date.today()
    return f"{today.month}/{today.day}/{today.year}"


def with_flags(items: Any) -> List[Dict[str, Any]]:
    """Wrap each item in {label, isFirst, isLast} for separator-aware loops."""
    items = as_list(items)
    last = len(items) - 1
    return [
        {"label": item, "isFirst": i == 0, "isLast": i == last}
        for i, item in enumerate(items)
    ]


def _single_marker(items: Any) -> List[Dict[str, Any]]:
    # ci_cd renders as one block; the skills ride along in "items"
    items = as_list(items)
    if not items:
        return []
    return [{"items": items, "isFirst": True, "isLast": True}]


def _first_text(*values: Any) -> str:
    for value in values:
        text = as_text(value)
        if text:
            return text
    return ""


def _location_fields(location: Any) -> Dict[str, str]:
    if isinstance(location, str):
        return {"address": location, "postalCode": "", "city": ""}
    loc = as_dict(location)
    city = as_text(loc.get("city"))
    return {
        "address": _first_text(loc.get("address"), city),
        "postalCode": _first_text(loc.get("postcode"), loc.get("postal_code")),
        "city": city,
    }

# ------------------------- Extraction -> template -------------------------

def _custom_template(data: Dict[str, Any], today: Optional[date]) -> Dict[str, Any]:
    contact = as_dict(data.get("contact"))
    links = as_dict(contact.get("links"))
    skills = as_dict(data.get("skills"))

    location = _location_fields(contact.get("location"))
    if not location["address"]:
        location["address"] = _first_text(data.get("address"), data.get("location"))

    skill_data: Dict[str, Any] = {key: as_list(skills.get(key)) for key in CUSTOM_SKILL_KEYS}
    skill_data["cloud"] = with_flags(skills.get("cloud"))
    skill_data["ci_cd"] = _single_marker(skills.get("ci_cd"))

    return {
        "fullName": _first_text(data.get("name"), data.get("fullName")),
        "email": _first_text(contact.get("email"), data.get("email")),
        "phone": _first_text(contact.get("phone"), data.get("phone")),
        **location,
        "linkedin": _first_text(links.get("linkedin"), data.get("linkedin")),
        "github": _first_text(links.get("github"), data.get("github")),
        "website": _first_text(links.get("website"), data.get("website")),
        "headline": as_text(data.get("headline")),
        "years_experience": as_text(data.get("years_experience")),
        "summary": as_text(data.get("summary")),
        "experience": [
            {
                "title": as_text(exp.get("title")),
                "company": as_text(exp.get("company")),
                "location": as_text(exp.get("location")),
                "start_date": as_text(exp.get("start_date")),
                "end_date": as_text(exp.get("end_date")),
                "description": as_text(exp.get("description")),
                "technologies": as_list(exp.get("technologies")),
                "responsibilities": as_list(exp.get("responsibilities")),
                "achievements": as_list(exp.get("achievements")),
            }
            for exp in map(as_dict, as_list(data.get("experience")))
        ],
        "education": [
            {
                "degree": as_text(edu.get("degree")),
                "field": as_text(edu.get("field")),
                "institution": as_text(edu.get("institution")),
                "start_date": as_text(edu.get("start_date")),
                "end_date": as_text(edu.get("end_date")),
                "location": as_text(edu.get("location")),
                "description": as_text(edu.get("description")),
                "honors": as_list(edu.get("honors")),
                "activities": as_list(edu.get("activities")),
            }
            for edu in map(as_dict, as_list(data.get("education")))
        ],
        "skills": skill_data,
        "certifications": as_list(data.get("certifications")),
        "projects": as_list(data.get("projects")),
        "languages": as_list(data.get("languages")),
        "awards": as_list(data.get("awards")),
        "affiliations": as_list(data.get("affiliations")),
        "notes": as_text(data.get("notes")),
        "generatedDate": format_generated_date(today),
    }


def _legacy_template(data: Dict[str, Any], today: Optional[date]) -> Dict[str, Any]:
    personal = as_dict(data.get("personalInfo"))
    skills = as_dict(data.get("skills"))

    location = _location_fields(personal.get("location"))
    address = as_text(personal.get("address"))
    if address:
        location["address"] = address

    return {
        "fullName": as_text(personal.get("fullName")),
        "email": as_text(personal.get("email")),
        "phone": as_text(personal.get("phone")),
        **location,
        "linkedin": as_text(personal.get("linkedin")),
        "github": as_text(personal.get("github")),
        "website": as_text(personal.get("website")),
        "summary": _first_text(data.get("professionalSummary"), data.get("extractedText")),
        "experience": [
            {
                "title": as_text(exp.get("jobTitle")),
                "company": as_text(exp.get("company")),
                "location": as_text(exp.get("location")),
                "start_date": "",
                "end_date": "",
                "description": as_text(exp.get("duration")),
                "responsibilities": as_list(exp.get("responsibilities")),
                "achievements": as_list(exp.get("achievements")),
            }
            for exp in map(as_dict, as_list(data.get("workExperience")))
        ],
        "education": [
            {
                "degree": as_text(edu.get("degree")),
                "institution": as_text(edu.get("institution")),
                "year": as_text(edu.get("year")),
                "location": as_text(edu.get("location")),
                "gpa": as_text(edu.get("gpa")),
                "honors": as_list(edu.get("honors")),
            }
            for edu in map(as_dict, as_list(data.get("education")))
        ],
        "skills": {key: as_list(skills.get(key)) for key in LEGACY_SKILL_KEYS},
        "certifications": as_list(data.get("certifications")),
        "projects": as_list(data.get("projects")),
        "languages": as_list(data.get("languages")),
        "awards": as_list(data.get("awards")),
        "affiliations": as_list(data.get("affiliations")),
        "generatedDate": format_generated_date(today),
    }


def map_to_template(extraction: Extraction, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Map a tagged extraction to the template vocabulary of its schema.

    generatedDate is stamped now (or from `today`), not at extraction time.
    """
    if isinstance(extraction, CustomExtraction):
        result = _custom_template(extraction.data, today)
    elif isinstance(extraction, LegacyExtraction):
        result = _legacy_template(extraction.data, today)
    else:
        raise TypeError(f"Unsupported extraction type: {type(extraction).__name__}")

    LOG.debug(
        "Template data (%s): fullName=%r, experience=%d, education=%d",
        extraction.tag.value,
        result["fullName"],
        len(result["experience"]),
        len(result["education"]),
    )
    return result

# ------------------------- Form -> template -------------------------

def map_form_to_template(form: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """
    Map hand-edited form data to the form template vocabulary.

    Experience descriptions become bullet lists, dates become French
    "mois année" strings, and skill groups and languages carry isLast flags.
    """
    form = as_dict(form)
    personal = as_dict(form.get("personalInfo"))
    first_name = as_text(personal.get("firstName"))
    last_name = as_text(personal.get("lastName"))

    experience = []
    for exp in map(as_dict, as_list(form.get("experience"))):
        current = bool(exp.get("current"))
        start_month, start_year = as_text(exp.get("startMonth")), as_text(exp.get("startYear"))
        end_month, end_year = as_text(exp.get("endMonth")), as_text(exp.get("endYear"))
        experience.append({
            "title": as_text(exp.get("title")),
            "company": as_text(exp.get("company")),
            "location": as_text(exp.get("location")),
            "description": split_bullets(exp.get("description")),
            "startDate": format_month_year(start_month, start_year),
            "endDate": CURRENT_EXPERIENCE_LABEL if current else format_month_year(end_month, end_year),
            "period": format_period(start_month, start_year, end_month, end_year, current),
            "technologies": as_list(exp.get("technologies")),
        })

    education = []
    for edu in map(as_dict, as_list(form.get("education"))):
        current = bool(edu.get("current"))
        start_month, start_year = as_text(edu.get("startMonth")), as_text(edu.get("startYear"))
        end_month, end_year = as_text(edu.get("endMonth")), as_text(edu.get("endYear"))
        education.append({
            "degree": as_text(edu.get("degree")),
            "institution": as_text(edu.get("institution")),
            "location": as_text(edu.get("location")),
            "description": strip_html(edu.get("description")),
            "startDate": start_year,
            "endDate": CURRENT_EDUCATION_LABEL if current else end_year,
            "period": format_period(start_month, start_year, end_month, end_year, current),
        })

    skills = []
    for group in map(as_dict, as_list(form.get("skills"))):
        entries = [as_dict(s) for s in as_list(group.get("skills"))]
        skills.append({
            "category": as_text(group.get("name")),
            "skills": [
                {
                    "name": as_text(s.get("name")),
                    "level": as_text(s.get("level")),
                    "isLast": i == len(entries) - 1,
                }
                for i, s in enumerate(entries)
            ],
        })

    languages = [as_dict(lang) for lang in as_list(form.get("languages"))]
    interests = [as_text(as_dict(i).get("name")) for i in as_list(form.get("interests"))]

    return {
        "fullName": " ".join(part for part in (first_name, last_name) if part),
        "firstName": first_name,
        "lastName": last_name,
        "headline": as_text(personal.get("headline")),
        "email": as_text(personal.get("email")),
        "phone": as_text(personal.get("phone")),
        "address": as_text(personal.get("address")),
        "postalCode": as_text(personal.get("postalCode")),
        "city": as_text(personal.get("city")),
        "linkedin": as_text(personal.get("linkedin")),
        "years_experience": as_text(form.get("yearsOfExperience")),
        "summary": strip_html(form.get("summary")),
        "experience": experience,
        "education": education,
        "skills": skills,
        "languages": [
            {
                "name": as_text(lang.get("name")),
                "level": as_text(lang.get("level")),
                "isLast": i == len(languages) - 1,
            }
            for i, lang in enumerate(languages)
        ],
        "interests": ", ".join(name for name in interests if name),
        "generatedDate": format_generated_date(today),
    }

# ------------------------- Stored CV -> form -------------------------

def _text_or_empty(value: Optional[str]) -> str:
    return value or ""


def form_from_cv(cv: Any) -> Dict[str, Any]:
    """
    Rebuild editable form data from a stored CV and its record collections.

    Skills are grouped by category in first-seen `order`.
    """
    personal = cv.personal_info
    profile = cv.profile

    form: Dict[str, Any] = {
        "personalInfo": {
            "firstName": _text_or_empty(personal.first_name if personal else None),
            "lastName": _text_or_empty(personal.last_name if personal else None),
            "headline": _text_or_empty(personal.headline if personal else None),
            "email": _text_or_empty(personal.email if personal else None),
            "phone": _text_or_empty(personal.phone if personal else None),
            "address": _text_or_empty(personal.address if personal else None),
            "postalCode": _text_or_empty(personal.postal_code if personal else None),
            "city": _text_or_empty(personal.city if personal else None),
            "website": _text_or_empty(personal.website if personal else None),
            "linkedin": _text_or_empty(personal.linkedin if personal else None),
        },
        "summary": _text_or_empty(profile.summary if profile else None),
        "yearsOfExperience": _text_or_empty(profile.years_of_experience if profile else None),
        "experience": [],
        "education": [],
        "skills": [],
        "languages": [],
        "interests": [],
    }

    for exp in sorted(cv.experiences, key=lambda r: r.order):
        description = exp.description or "\n".join(exp.responsibilities or [])
        form["experience"].append({
            "title": exp.title,
            "company": _text_or_empty(exp.company),
            "location": _text_or_empty(exp.location),
            "startMonth": _text_or_empty(exp.start_month),
            "startYear": _text_or_empty(exp.start_year),
            "endMonth": _text_or_empty(exp.end_month),
            "endYear": _text_or_empty(exp.end_year),
            "current": bool(exp.current),
            "finished": not exp.current,
            "description": description,
            "technologies": list(exp.technologies or []),
        })

    for edu in sorted(cv.educations, key=lambda r: r.order):
        form["education"].append({
            "degree": edu.degree,
            "institution": _text_or_empty(edu.institution),
            "location": _text_or_empty(edu.location),
            "startMonth": _text_or_empty(edu.start_month),
            "startYear": _text_or_empty(edu.start_year),
            "endMonth": _text_or_empty(edu.end_month),
            "endYear": _text_or_empty(edu.end_year),
            "current": bool(edu.current),
            "finished": bool(edu.finished),
            "description": _text_or_empty(edu.description),
        })

    groups: Dict[str, List[Dict[str, str]]] = {}
    for skill in sorted(cv.skills, key=lambda r: r.order):
        groups.setdefault(skill.category, []).append({"name": skill.name, "level": skill.level})
    form["skills"] = [{"name": category, "skills": entries} for category, entries in groups.items()]

    form["languages"] = [
        {"name": lang.name, "level": _text_or_empty(lang.level)}
        for lang in sorted(cv.languages, key=lambda r: r.order)
    ]

    raw = as_dict(cv.raw_data)
    form["interests"] = [
        {"name": item} for item in as_list(raw.get("affiliations")) if isinstance(item, str) and item.strip()
    ]
    return form
