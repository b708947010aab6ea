from datetime import date, datetime, timezone
import logging
import re
import uuid

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    """Return timezone-aware current UTC datetime."""
    return datetime.now(timezone.utc)


def local_today() -> date:
    """Return today's calendar date in the configured timezone.

    Falls back to the server local date when DEFAULT_TIMEZONE is unset or
    unknown.
    """
    from . import config
    tz_name = getattr(config, 'DEFAULT_TIMEZONE', '') or ''
    if tz_name:
        import zoneinfo
        try:
            return datetime.now(zoneinfo.ZoneInfo(tz_name)).date()
        except zoneinfo.ZoneInfoNotFoundError:
            logger.warning('unknown DEFAULT_TIMEZONE %s; using server local date', tz_name)
    return date.today()


def new_record_id() -> str:
    """Default identity factory for new projects, tasks and date entries."""
    return uuid.uuid4().hex


def slugify(name: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', trim dashes."""
    s = re.sub(r'[^a-z0-9]+', '-', (name or '').lower())
    return s.strip('-')


def collapse_whitespace(text: str | None) -> str:
    if not text:
        return ''
    return re.sub(r'\s+', ' ', text).strip()
