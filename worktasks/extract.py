"""Find calendar dates in free-form prose.

Three literal date shapes are recognised, each by its own scanner so they
can be exercised in isolation:

- ``match_month_day_year``: 'March 3rd, 2025', 'Sept 5', 'jan. 12 24'
- ``match_day_of_month``:   '3rd of March', '21st of Dec 2025'
- ``match_numeric_mdy``:    '3/10/2025', '12/01/24' (month first)

Every match resolves to a canonical ``YYYY-MM-DD`` string. Matches whose
month token is unknown or whose fields don't form a real calendar date are
dropped silently; scanning text never raises. ``extract_dates`` runs the
scanners in that order, keeps the first hit for each date, attaches a short
label and a context snippet and returns the result sorted by date.
"""
from datetime import date
import logging
import re
from typing import NamedTuple

from .errors import InvalidCalendarDate, UnrecognizedToken
from .utils import collapse_whitespace, local_today

logger = logging.getLogger(__name__)

MONTHS = {
    'january': '01', 'jan': '01',
    'february': '02', 'feb': '02',
    'march': '03', 'mar': '03',
    'april': '04', 'apr': '04',
    'may': '05',
    'june': '06', 'jun': '06',
    'july': '07', 'jul': '07',
    'august': '08', 'aug': '08',
    'september': '09', 'sep': '09', 'sept': '09',
    'october': '10', 'oct': '10',
    'november': '11', 'nov': '11',
    'december': '12', 'dec': '12',
}

# Full names come before their abbreviations so 'march' isn't cut to 'mar'.
_MONTH = (
    r'(january|february|march|april|may|june|july|august|september|october|november|december'
    r'|jan\.?|feb\.?|mar\.?|apr\.?|jun\.?|jul\.?|aug\.?|sep\.?|sept\.?|oct\.?|nov\.?|dec\.?)'
)
# ASCII digits only; fullwidth and other-script numerals never form a date.
_YEAR = r'([0-9]{4}|[0-9]{2})'

# The year must be set off by a comma or whitespace, otherwise 'September
# 2025' would read as Sep 20, '25.
_MONTH_DAY_YEAR_RE = re.compile(
    r'\b' + _MONTH + r'\s+([0-9]{1,2})(?:st|nd|rd|th)?(?:(?:,\s*|\s+)' + _YEAR + r')?\b',
    flags=re.IGNORECASE,
)
_DAY_OF_MONTH_RE = re.compile(
    r'\b([0-9]{1,2})(?:st|nd|rd|th)\s+of\s+' + _MONTH + r'(?:\s+' + _YEAR + r')?\b',
    flags=re.IGNORECASE,
)
_NUMERIC_MDY_RE = re.compile(r'\b([0-9]{1,2})/([0-9]{1,2})/' + _YEAR + r'\b')

CONTEXT_RADIUS = 80
LABEL_LOOKBEHIND = 220
LABEL_LOOKAHEAD = 160
LABEL_MIN_LEN = 4
LABEL_MAX_LEN = 62
ELLIPSIS = '…'

_BEFORE_SPLIT_RE = re.compile(r'[.\n!?]+')
_AFTER_SPLIT_RE = re.compile(r'[.\n!?]')
_TRAILING_CONNECTIVE_RE = re.compile(r'\s+(by|on|is|are|of|in|the|a|an|for|at|to)\s*$', flags=re.IGNORECASE)
_TRAILING_PUNCT_RE = re.compile(r'\s*[:\-–—,]\s*$')
_LEADING_PUNCT_RE = re.compile(r'^[,\-–—:\s]+')
_LEADING_CONNECTIVE_RE = re.compile(r'^\s*(by|on|is|at)\s+', flags=re.IGNORECASE)


class RawMatch(NamedTuple):
    index: int
    length: int
    date: str


def month_number(token: str | None) -> str | None:
    """Return the two-digit month for a month name/abbreviation, or None."""
    if not token:
        return None
    key = token.strip().lower()
    if key.endswith('.'):
        key = key[:-1]
    return MONTHS.get(key)


def normalize_year(year: str) -> str:
    """Expand a two-digit year: '00'..'49' -> 20xx, '50'..'99' -> 19xx.

    The comparison is on the zero-padded string, not the number. Inputs of
    any other length are returned unchanged.
    """
    if len(year) == 2:
        return ('20' if year < '50' else '19') + year
    return year


def canonical_date(year, month, day) -> str:
    """Build a YYYY-MM-DD string, rejecting dates that don't exist."""
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except (TypeError, ValueError) as e:
        raise InvalidCalendarDate(f'{year}-{month}-{day}') from e


def parse_canonical_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string into a date."""
    if not isinstance(value, str) or not re.fullmatch(r'[0-9]{4}-[0-9]{2}-[0-9]{2}', value):
        raise InvalidCalendarDate(f'not a YYYY-MM-DD date: {value!r}')
    y, m, d = value.split('-')
    try:
        return date(int(y), int(m), int(d))
    except ValueError as e:
        raise InvalidCalendarDate(value) from e


def _resolve_month(token: str) -> str:
    mon = month_number(token)
    if mon is None:
        raise UnrecognizedToken(token)
    return mon


def _resolve_year(token: str | None, today: date) -> str:
    if token:
        return normalize_year(token)
    return str(today.year)


def match_month_day_year(text: str, today: date) -> list[RawMatch]:
    """Scan for '<Month> <Day>[st|nd|rd|th][,] [<Year>]'."""
    out: list[RawMatch] = []
    for m in _MONTH_DAY_YEAR_RE.finditer(text):
        try:
            iso = canonical_date(_resolve_year(m.group(3), today), _resolve_month(m.group(1)), m.group(2))
        except (UnrecognizedToken, InvalidCalendarDate):
            continue
        out.append(RawMatch(m.start(), len(m.group(0)), iso))
    return out


def match_day_of_month(text: str, today: date) -> list[RawMatch]:
    """Scan for '<Day>(st|nd|rd|th) of <Month> [<Year>]'."""
    out: list[RawMatch] = []
    for m in _DAY_OF_MONTH_RE.finditer(text):
        try:
            iso = canonical_date(_resolve_year(m.group(3), today), _resolve_month(m.group(2)), m.group(1))
        except (UnrecognizedToken, InvalidCalendarDate):
            continue
        out.append(RawMatch(m.start(), len(m.group(0)), iso))
    return out


def match_numeric_mdy(text: str, today: date | None = None) -> list[RawMatch]:
    """Scan for 'M/D/YY' or 'M/D/YYYY' (US order). The year is mandatory."""
    out: list[RawMatch] = []
    for m in _NUMERIC_MDY_RE.finditer(text):
        try:
            iso = canonical_date(normalize_year(m.group(3)), m.group(1), m.group(2))
        except InvalidCalendarDate:
            continue
        out.append(RawMatch(m.start(), len(m.group(0)), iso))
    return out


# Scan order matters: earlier scanners win when two produce the same date.
PATTERNS = (match_month_day_year, match_day_of_month, match_numeric_mdy)


def extract_context(text: str, index: int, length: int) -> str:
    """Return up to 80 chars either side of a match, whitespace collapsed."""
    start = max(0, index - CONTEXT_RADIUS)
    return collapse_whitespace(text[start:index + length + CONTEXT_RADIUS])


def extract_label(text: str, index: int, length: int) -> str:
    """Guess a short description for the date found at text[index:index+length].

    Prefers the clause leading up to the date ('Proposal due by' ->
    'Proposal due'); falls back to the clause that follows it when that is
    too short. Best effort only: the result may be empty.
    """
    before = text[max(0, index - LABEL_LOOKBEHIND):index]
    after = text[index + length:index + length + LABEL_LOOKAHEAD]

    label = _BEFORE_SPLIT_RE.split(before)[-1].strip()
    label = _TRAILING_CONNECTIVE_RE.sub('', label).strip()
    label = _TRAILING_PUNCT_RE.sub('', label).strip()

    if len(label) < LABEL_MIN_LEN:
        label = _AFTER_SPLIT_RE.split(after)[0]
        label = _LEADING_PUNCT_RE.sub('', label).strip()
        label = _LEADING_CONNECTIVE_RE.sub('', label).strip()

    if len(label) > LABEL_MAX_LEN:
        label = label[:LABEL_MAX_LEN - 3] + ELLIPSIS
    return label


def extract_dates(text: str | None, today: date | None = None) -> list[dict]:
    """Extract dated occurrences from text.

    Returns a list of ``{'date', 'label', 'context'}`` dicts, one per
    distinct date, ordered by date. ``today`` supplies the year for dates
    written without one; it defaults to the configured local date.
    """
    if not text:
        return []
    if today is None:
        today = local_today()
    results: list[dict] = []
    seen: set[str] = set()
    try:
        for scan in PATTERNS:
            for raw in scan(text, today):
                if raw.date in seen:
                    continue
                seen.add(raw.date)
                results.append({
                    'date': raw.date,
                    'label': extract_label(text, raw.index, raw.length),
                    'context': extract_context(text, raw.index, raw.length),
                })
    except Exception:
        logger.exception('extract_dates failed')
        return []
    results.sort(key=lambda occ: occ['date'])
    return results
