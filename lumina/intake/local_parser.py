"""
FILE: lumina/intake/local_parser.py
PURPOSE: Rule-based extraction of task fields from free text
EXPORTS:
  - parse(raw, today) -> ParsedTaskData
DEPENDENCIES:
  - re, datetime (stdlib)
  - lumina.core.models (ParsedTaskData, Priority)
NOTES:
  - Deterministic and total: never raises, same input gives same output
  - Keywords are matched case-insensitively, in English and French
  - Stages run in a fixed order (date, priority, category) and each
    stage strips every occurrence of the pattern it matched
  - Used directly when no model is configured, and as the fallback when
    the model call fails

Examples:
    >>> parse("Buy milk tomorrow urgent", today=date(2026, 3, 1))
    ParsedTaskData(title='Buy milk', priority=<Priority.HIGH: 'High'>,
                   category='Other', due_date='2026-03-02', notes='')

    >>> parse("dentist rdv dans 3 jours", today=date(2026, 3, 1))
    ParsedTaskData(title='dentist', priority=<Priority.MEDIUM: 'Medium'>,
                   category='Health', due_date='2026-03-04', notes='')
"""

import re
from datetime import date, timedelta
from typing import Optional, Tuple

from ..core.constants import DEFAULT_CATEGORY
from ..core.models import ParsedTaskData, Priority

# "in 3 days", "scheduled in 2 days", "prévu dans 5 jours"
RELATIVE_DAYS = re.compile(
    r"\b(?:(?:scheduled|prévu)\s+)?(?:in|dans)\s+(\d+)\s+(?:days?|jours?)\b",
    re.IGNORECASE,
)
TOMORROW = re.compile(r"\b(?:tomorrow|demain)\b", re.IGNORECASE)
TODAY = re.compile(r"\b(?:today|aujourd'hui)\b", re.IGNORECASE)

HIGH_PRIORITY = re.compile(r"\b(?:urgent|high|important|haute|fort)\b", re.IGNORECASE)
LOW_PRIORITY = re.compile(r"\b(?:low|trivial|basse|faible)\b", re.IGNORECASE)

# Checked in this order; first match wins
CATEGORY_PATTERNS = (
    ("Work", re.compile(r"\b(?:work|boulot|travail|job|meeting|reunion|projet)\b", re.IGNORECASE)),
    ("Personal", re.compile(r"\b(?:personal|perso|home|maison|achat|shopping)\b", re.IGNORECASE)),
    ("Health", re.compile(r"\b(?:health|santé|sante|sport|gym|doctor|medecin|rdv)\b", re.IGNORECASE)),
    ("Learning", re.compile(r"\b(?:learn|study|apprendre|cours|ecole|école|read|lire)\b", re.IGNORECASE)),
)

WHITESPACE = re.compile(r"\s+")


def _strip(pattern: re.Pattern, text: str) -> str:
    return pattern.sub(" ", text)


def _extract_due_date(title: str, today: date) -> Tuple[str, Optional[str]]:
    """Apply the first matching date rule; returns (title, YYYY-MM-DD or None)."""
    match = RELATIVE_DAYS.search(title)
    if match:
        try:
            due = today + timedelta(days=int(match.group(1)))
        except (OverflowError, ValueError):
            # Day count past the calendar's range; treat the phrase as plain text
            due = None
        if due is not None:
            return _strip(RELATIVE_DAYS, title), due.isoformat()

    if TOMORROW.search(title):
        return _strip(TOMORROW, title), (today + timedelta(days=1)).isoformat()

    if TODAY.search(title):
        return _strip(TODAY, title), today.isoformat()

    return title, None


def _extract_priority(title: str) -> Tuple[str, Priority]:
    if HIGH_PRIORITY.search(title):
        return _strip(HIGH_PRIORITY, title), Priority.HIGH
    if LOW_PRIORITY.search(title):
        return _strip(LOW_PRIORITY, title), Priority.LOW
    return title, Priority.MEDIUM


def _extract_category(title: str) -> Tuple[str, str]:
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(title):
            return _strip(pattern, title), category
    return title, DEFAULT_CATEGORY


def parse(raw: str, today: Optional[date] = None) -> ParsedTaskData:
    """
    Extract title, priority, category and due date from free text.

    Args:
        raw: Text as typed by the user
        today: Reference day for relative dates (defaults to the local date)

    Returns:
        ParsedTaskData with notes always empty. If stripping keywords leaves
        nothing, the original input becomes the title.
    """
    today = today or date.today()
    title = raw

    title, due_date = _extract_due_date(title, today)
    title, priority = _extract_priority(title)
    title, category = _extract_category(title)

    title = WHITESPACE.sub(" ", title).strip()
    if not title:
        title = raw.strip() or raw

    return ParsedTaskData(
        title=title,
        priority=priority,
        category=category,
        due_date=due_date,
        notes="",
    )
