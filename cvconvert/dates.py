"""
Free-text date parsing for CV timelines.

Three parsers turn the loose date strings produced by extraction into a
DateRange of 2-digit months and 4-digit years:

- parse_date_range: separate start/end strings (custom schema)
- parse_duration_range: one combined "2019 - 2022" string (legacy schema)
- parse_advanced_date_range: start/end strings with ISO, reversed and
  month-name formats; a missing end date means "current"

None of them raise. Whenever is_current is set, the end month/year are None.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class DateRange:
    start_month: Optional[str] = None
    start_year: Optional[str] = None
    end_month: Optional[str] = None
    end_year: Optional[str] = None
    is_current: bool = False

    def as_dict(self) -> dict:
        return {
            "start_month": self.start_month,
            "start_year": self.start_year,
            "end_month": self.end_month,
            "end_year": self.end_year,
            "is_current": self.is_current,
        }


_PRESENT_RE = re.compile(r"present|current|aujourd['’]hui|maintenant", re.IGNORECASE)
_YEAR_OR_MONTH_YEAR_RE = re.compile(r"(\d{4})|(\d{1,2})/(\d{4})")
_DURATION_RE = re.compile(r"(\d{4})\s*[-–]\s*(\d{4}|present|current)", re.IGNORECASE)
_BARE_YEAR_RE = re.compile(r"(\d{4})")

_ADVANCED_CURRENT_RE = re.compile(
    # Substring markers; "now" and "actuel" only as whole words ("unknown")
    r"present|current|aujourd['’]hui|ongoing|\b(?:now|actuel\w*)\b", re.IGNORECASE
)
_ISO_RE = re.compile(r"(\d{4})[-/](\d{1,2})(?!\d)")
_REVERSED_RE = re.compile(r"(?<!\d)(\d{1,2})[-/](\d{4})")
_CENTURY_YEAR_RE = re.compile(r"\b(?:19|20)\d{2}\b")

MONTHS = {
    # French
    "janvier": "01", "janv": "01",
    "février": "02", "fevrier": "02", "févr": "02", "fevr": "02",
    "mars": "03",
    "avril": "04", "avr": "04",
    "mai": "05",
    "juin": "06",
    "juillet": "07", "juil": "07",
    "août": "08", "aout": "08",
    "septembre": "09",
    "octobre": "10",
    "novembre": "11",
    "décembre": "12", "decembre": "12", "déc": "12",
    # English
    "january": "01", "jan": "01",
    "february": "02", "feb": "02",
    "march": "03", "mar": "03",
    "april": "04", "apr": "04",
    "may": "05",
    "june": "06", "jun": "06",
    "july": "07", "jul": "07",
    "august": "08", "aug": "08",
    "september": "09", "sept": "09", "sep": "09",
    "october": "10", "oct": "10",
    "november": "11", "nov": "11",
    "december": "12", "dec": "12",
}

# Longest names first so "mars" wins over "mar"
_MONTH_NAME_RE = re.compile(
    r"\b("
    + "|".join(re.escape(name) for name in sorted(MONTHS, key=len, reverse=True))
    + r")\.?\s+(\d{4})\b",
    re.IGNORECASE,
)

FRENCH_MONTH_NAMES = {
    "01": "janvier",
    "02": "février",
    "03": "mars",
    "04": "avril",
    "05": "mai",
    "06": "juin",
    "07": "juillet",
    "08": "août",
    "09": "septembre",
    "10": "octobre",
    "11": "novembre",
    "12": "décembre",
}


def _text(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return ""


def _month_year(text: str) -> Tuple[Optional[str], Optional[str]]:
    match = _YEAR_OR_MONTH_YEAR_RE.search(text)
    if not match:
        return None, None
    if match.group(1):
        return None, match.group(1)
    return match.group(2).zfill(2), match.group(3)


def parse_date_range(start: Any = None, end: Any = None) -> DateRange:
    """
    Parse separate start/end strings.

    Each side accepts a bare year ("2020") or "M/YYYY" ("3/2020"). An end
    containing present/current/aujourd'hui/maintenant marks the range current.
    """
    start_text = _text(start)
    end_text = _text(end)

    start_month, start_year = _month_year(start_text) if start_text else (None, None)

    if end_text and _PRESENT_RE.search(end_text):
        return DateRange(start_month, start_year, None, None, True)

    end_month, end_year = _month_year(end_text) if end_text else (None, None)
    return DateRange(start_month, start_year, end_month, end_year, False)


def parse_duration_range(duration: Any = None) -> DateRange:
    """
    Parse a single combined range such as "2019 - 2022" or "2018 – Present".

    Falls back to one bare year used as both start and end.
    """
    text = _text(duration)
    if not text:
        return DateRange()

    is_current = bool(_PRESENT_RE.search(text))

    match = _DURATION_RE.search(text)
    if match:
        end_year = match.group(2) if match.group(2).isdigit() else None
        result = DateRange(start_year=match.group(1), end_year=end_year, is_current=is_current)
    else:
        single = _BARE_YEAR_RE.search(text)
        if single:
            result = DateRange(start_year=single.group(1), end_year=single.group(1), is_current=is_current)
        else:
            result = DateRange(is_current=is_current)

    if result.is_current:
        result = replace(result, end_month=None, end_year=None)
    return result


def _valid_month(month: str) -> Optional[str]:
    return month.zfill(2) if 1 <= int(month) <= 12 else None


def _parse_advanced_point(text: str) -> Tuple[Optional[str], Optional[str], bool]:
    """Return (month, year, is_current) for one date string."""
    if _ADVANCED_CURRENT_RE.search(text):
        return None, None, True

    iso = _ISO_RE.search(text)
    if iso:
        return _valid_month(iso.group(2)), iso.group(1), False

    reversed_match = _REVERSED_RE.search(text)
    if reversed_match:
        return _valid_month(reversed_match.group(1)), reversed_match.group(2), False

    named = _MONTH_NAME_RE.search(text)
    if named:
        return MONTHS[named.group(1).lower()], named.group(2), False

    year = _CENTURY_YEAR_RE.search(text)
    if year:
        return None, year.group(0), False

    return None, None, False


def parse_advanced_date_range(start: Any = None, end: Any = None) -> DateRange:
    """
    Parse start/end strings in ISO (2020-03), reversed (03/2020), month-name
    (mars 2020, Jan 2020) or bare-year form.

    Unlike parse_date_range, an absent end date is treated as current.
    """
    start_text = _text(start)
    if not start_text.strip():
        return DateRange()

    end_text = _text(end)
    start_month, start_year, _ = _parse_advanced_point(start_text)

    if not end_text.strip():
        return DateRange(start_month, start_year, None, None, True)

    end_month, end_year, end_current = _parse_advanced_point(end_text)
    if end_current:
        return DateRange(start_month, start_year, None, None, True)
    return DateRange(start_month, start_year, end_month, end_year, False)


# ------------------------- Formatting -------------------------

def month_name(month: Optional[str]) -> str:
    """French month name for a 1- or 2-digit month string, "" when unknown."""
    if not month:
        return ""
    return FRENCH_MONTH_NAMES.get(month.zfill(2), "")


def format_month_year(month: Optional[str], year: Optional[str]) -> str:
    """Month and year as "mars 2020"; empty unless both parts are known."""
    name = month_name(month)
    if not name or not year:
        return ""
    return f"{name} {year}"


def format_period(
    start_month: Optional[str],
    start_year: Optional[str],
    end_month: Optional[str],
    end_year: Optional[str],
    current: bool,
) -> str:
    """Human-readable span such as "mars 2020 - Présent"."""
    start = format_month_year(start_month, start_year)
    end = "Présent" if current else format_month_year(end_month, end_year)
    return " - ".join(part for part in (start, end) if part)
