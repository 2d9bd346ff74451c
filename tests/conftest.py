import copy
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cvconvert.config import AppConfig
from cvconvert.extractors.base import CVExtractor
from cvconvert.renderers.base import CVRenderer
from cvconvert.storage import CVRepository, create_engine_for, init_db, make_session_factory


CUSTOM_CV: Dict[str, Any] = {
    "name": "Jean Paul Dupont",
    "headline": "Ingénieur DevOps Cloud AWS",
    "years_experience": "8",
    "contact": {
        "email": "jean.dupont@example.com",
        "phone": "+33 6 12 34 56 78",
        "location": {"address": "12 rue de la Paix", "postcode": "75002", "city": "Paris"},
        "links": {
            "linkedin": "https://linkedin.com/in/jdupont",
            "github": "https://github.com/jdupont",
            "website": "https://jdupont.dev",
        },
    },
    "summary": "DevOps engineer focused on AWS and Kubernetes platforms.",
    "experience": [
        {
            "title": "Senior DevOps Engineer",
            "company": "Acme",
            "location": "Paris",
            "start_date": "03/2020",
            "end_date": "Present",
            "description": "- Built the EKS platform\n- Automated releases",
            "technologies": ["Terraform", "EKS"],
            "responsibilities": ["Platform ownership"],
            "achievements": ["Cut deploy time by half"],
        },
        {
            "title": "Systems Administrator",
            "company": "Globex",
            "location": "Lyon",
            "start_date": "2016",
            "end_date": "2020",
            "description": "- Ran the Linux fleet",
            "technologies": ["Ansible"],
        },
    ],
    "education": [
        {
            "degree": "Master Informatique",
            "field": "Systèmes distribués",
            "institution": "Université de Lyon",
            "start_date": "2014",
            "end_date": "2016",
            "location": "Lyon",
        }
    ],
    "certifications": [{"name": "AWS SAA", "issuer": "Amazon", "date": "2021"}],
    "skills": {
        "cloud": ["AWS", "GCP"],
        "platforms_os": ["Linux"],
        "containers": ["Docker"],
        "orchestration": ["Kubernetes"],
        "iac": ["Terraform"],
        "ci_cd": ["GitLab CI", "Jenkins"],
        "version_control": ["Git"],
        "monitoring_logging": ["Prometheus"],
        "databases_cache": ["PostgreSQL"],
        "search": ["Elasticsearch"],
        "security": ["Vault"],
        "scripting": ["Python", "Bash"],
        "other_tools": ["Jira"],
    },
    "languages": [
        {"language": "Français", "proficiency": "Natif"},
        {"language": "English", "proficiency": "C1"},
    ],
    "projects": [{"name": "Platform migration", "role": "Lead", "highlights": ["Zero downtime"]}],
    "affiliations": ["CNCF member"],
    "awards": ["Hackathon winner"],
    "notes": "Scanned from a two-page PDF",
}

LEGACY_CV: Dict[str, Any] = {
    "personalInfo": {
        "fullName": "Marie Curie",
        "email": "marie@example.com",
        "phone": "+33 1 00 00 00 00",
        "location": {"address": "1 rue Pierre et Marie Curie", "postcode": "75005", "city": "Paris"},
        "linkedin": "https://linkedin.com/in/mcurie",
    },
    "professionalSummary": "Physicist and chemist.",
    "workExperience": [
        {
            "jobTitle": "Professor",
            "company": "Sorbonne",
            "duration": "1906 - Present",
            "location": "Paris",
            "responsibilities": ["Teaching", "Research"],
            "achievements": ["Nobel Prize"],
        },
        {
            "jobTitle": "Researcher",
            "company": "ESPCI",
            "duration": "1895-1906",
            "responsibilities": ["Radioactivity studies"],
        },
    ],
    "education": [
        {
            "degree": "Licence ès sciences",
            "institution": "Sorbonne",
            "year": "1893",
            "location": "Paris",
            "honors": ["First in class"],
        }
    ],
    "skills": {
        "technical": ["Spectroscopy"],
        "languages": ["Fortran"],
        "soft": ["Perseverance"],
        "tools": ["Electrometer"],
    },
    "certifications": [],
    "projects": [],
    "languages": [{"language": "Polish", "proficiency": "Native"}],
    "awards": [{"name": "Nobel Prize", "issuer": "Nobel Foundation", "year": "1911"}],
    "extractedText": "Marie Curie, Physicist ...",
    "confidence": 88,
    "processingNotes": ["Low contrast scan"],
}


@pytest.fixture
def custom_cv() -> Dict[str, Any]:
    return copy.deepcopy(CUSTOM_CV)


@pytest.fixture
def legacy_cv() -> Dict[str, Any]:
    return copy.deepcopy(LEGACY_CV)


class FakeExtractor(CVExtractor):
    """Returns a canned extraction result, or raises a canned error."""

    def __init__(self, result: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.result = result
        self.error = error
        self.calls: List[tuple] = []

    def extract(self, payload: bytes, mime_type: str) -> Dict[str, Any]:
        self.calls.append((payload, mime_type))
        if self.error is not None:
            raise self.error
        return copy.deepcopy(self.result)


class FakeRenderer(CVRenderer):
    """Records render calls and returns fixed bytes."""

    def __init__(self, content: bytes = b"docx-bytes", error: Optional[Exception] = None):
        self.content = content
        self.error = error
        self.calls: List[tuple] = []

    def render(self, template_data: Dict[str, Any], template_path: Path) -> bytes:
        self.calls.append((template_data, template_path))
        if self.error is not None:
            raise self.error
        return self.content


@pytest.fixture
def session_factory():
    engine = create_engine_for("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory) -> CVRepository:
    return CVRepository(session_factory)


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    d = tmp_path / "templates"
    d.mkdir()
    (d / "cv-template.docx").write_bytes(b"placeholder")
    return d


@pytest.fixture
def app_config(templates_dir: Path) -> AppConfig:
    return AppConfig(database_url="sqlite://", templates_dir=templates_dir)


@pytest.fixture
def make_extractor():
    return FakeExtractor


@pytest.fixture
def make_renderer():
    return FakeRenderer
