"""
Shared text utilities.

Coercion helpers for loosely-typed extraction data, text normalization,
XML sanitization for docxtpl, and prompt loading.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from lxml import html as lxml_html
from lxml.etree import ParserError

from .logging_utils import LOG

# ------------------------- Coercion helpers -------------------------

def as_dict(value: Any) -> Dict[str, Any]:
    """Return value when it is a dict, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: Any) -> List[Any]:
    """Return value when it is a list, else an empty list."""
    return value if isinstance(value, list) else []


def as_text(value: Any) -> str:
    """
    Return a string for template output without altering string content.
    Numbers are stringified; anything else becomes "".
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def clean_str(value: Any) -> Optional[str]:
    """Trimmed string, or None when missing, blank, or not text-like."""
    text = as_text(value).strip()
    return text or None


def clean_list(value: Any) -> List[str]:
    """
    Normalize a list of strings:
    - non-lists become []
    - items are trimmed, blanks and non-strings dropped
    - duplicates removed, first occurrence wins
    """
    out: List[str] = []
    seen = set()
    for item in as_list(value):
        text = clean_str(item)
        if text is None or text in seen:
            continue
        seen.add(text)
        out.append(text)
    return out

# ------------------------- Text normalization -------------------------

_BR_RE = re.compile(r"<br\s*/?>", re.IGNORECASE)

def _strip_invalid_xml_1_0_chars(s: str) -> str:
    """
    Remove characters invalid in XML 1.0.
    Valid:
      #x9 | #xA | #xD |
      [#x20-#xD7FF] |
      [#xE000-#xFFFD] |
      [#x10000-#x10FFFF]
    """
    out: List[str] = []
    for ch in s:
        cp = ord(ch)
        if (
            cp == 0x9
            or cp == 0xA
            or cp == 0xD
            or (0x20 <= cp <= 0xD7FF)
            or (0xE000 <= cp <= 0xFFFD)
            or (0x10000 <= cp <= 0x10FFFF)
        ):
            out.append(ch)
    return "".join(out)

def normalize_text_for_processing(s: str) -> str:
    """
    Normalize what we consider "text":
    - convert NBSP to normal space
    - replace soft hyphen with real hyphen
    - normalize newlines
    - strip invalid XML chars
    """
    s = s.replace("\u00A0", " ")
    s = s.replace("\u00AD", "-")  # preserve "high-quality"
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    s = _strip_invalid_xml_1_0_chars(s)
    return s

def sanitize_for_xml_in_obj(obj: Any) -> Any:
    """
    Sanitize strings for insertion into docxtpl (XML-safe):
    - normalize NBSP
    - strip invalid XML 1.0 chars
    """
    def _sanitize(x: Any) -> Any:
        if isinstance(x, str):
            return normalize_text_for_processing(x)
        if isinstance(x, list):
            return [_sanitize(i) for i in x]
        if isinstance(x, dict):
            return {k: _sanitize(v) for k, v in x.items()}
        return x
    return _sanitize(obj)

def strip_html(value: Any) -> str:
    """Text content of an HTML fragment coming from a rich-text form field."""
    text = as_text(value)
    if not text.strip():
        return ""
    if "<" not in text:
        return text
    try:
        return lxml_html.fragment_fromstring(text, create_parent="div").text_content()
    except ParserError:
        return text

def split_bullets(value: Any) -> List[str]:
    """Split a description on <br> tags and newlines into trimmed, non-empty lines."""
    parts: List[str] = []
    for chunk in _BR_RE.split(as_text(value)):
        for line in chunk.split("\n"):
            line = line.strip()
            if line:
                parts.append(line)
    return parts

# ---------------------- Prompt Loading ----------------------

_EXTRACTOR_PROMPTS_DIR = Path(__file__).parent / "extractors" / "prompts"


def load_prompt(prompt_name: str) -> Optional[str]:
    """
    Load a prompt template from cvconvert/extractors/prompts/{prompt_name}.md.

    Returns:
        The prompt text, or None if the file doesn't exist or can't be read
    """
    prompt_path = _EXTRACTOR_PROMPTS_DIR / f"{prompt_name}.md"
    try:
        return prompt_path.read_text(encoding="utf-8")
    except OSError as e:
        LOG.error("Failed to read prompt %s: %s", prompt_path, e)
        return None
