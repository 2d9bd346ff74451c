# cvconvert/__init__.py

from .dates import parse_advanced_date_range, parse_date_range, parse_duration_range
from .schema import SchemaTag, classify, detect_schema, tag_extraction
from .records import map_to_records
from .template_data import form_from_cv, map_form_to_template, map_to_template

__all__ = [
    "parse_date_range",
    "parse_duration_range",
    "parse_advanced_date_range",
    "SchemaTag",
    "classify",
    "detect_schema",
    "tag_extraction",
    "map_to_records",
    "map_to_template",
    "map_form_to_template",
    "form_from_cv",
]
