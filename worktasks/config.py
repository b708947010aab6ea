"""Simple runtime configuration for the Work Tasks service.

Control flags are read from environment variables to allow toggling in
development or production without code changes.
"""
import os


def _trueish(v: str | None) -> bool:
    if not v:
        return False
    return v.lower() in ('1', 'true', 'yes', 'on')


# Timezone (IANA name) whose calendar date counts as "today" when a scanned
# date has no year and when splitting the timeline into upcoming/past.
# Leave empty to use the server's local date.
DEFAULT_TIMEZONE = os.getenv('DEFAULT_TIMEZONE', '')

# Web page import: the fetch is abandoned after this many seconds and the
# user is asked to try again. There is no automatic retry.
try:
    FETCH_TIMEOUT_SECONDS = float(os.getenv('FETCH_TIMEOUT_SECONDS', '12'))
except ValueError:
    FETCH_TIMEOUT_SECONDS = 12.0

FETCH_USER_AGENT = os.getenv('FETCH_USER_AGENT', 'Mozilla/5.0 (compatible; WorkTasksApp/1.0)')

# Number of characters of decoded document/page text echoed back to the
# client next to the extracted dates.
try:
    IMPORT_PREVIEW_CHARS = int(os.getenv('IMPORT_PREVIEW_CHARS', '5000'))
except ValueError:
    IMPORT_PREVIEW_CHARS = 5000

# When true, init_db() creates the default project list on an empty store.
SEED_DEFAULT_PROJECTS = _trueish(os.getenv('SEED_DEFAULT_PROJECTS', '1'))

DEFAULT_PROJECTS = [
    ('Pre-Major Advising', '#60a5fa'),
    ('Major and Minor Advising', '#a78bfa'),
    ('Faculty Hiring', '#f97316'),
    ('Course Rostering', '#2dd4bf'),
    ('Department Budgeting', '#4ade80'),
    ('Curriculum Committee', '#f87171'),
    ('Campus Partner Events', '#fbbf24'),
]


# Optional local overrides: define variables in worktasks/local_config.py to
# override the defaults above without changing versioned config.
try:
    from .local_config import *  # type: ignore  # noqa: F401,F403
except ImportError:
    # No local overrides present; proceed with defaults.
    pass
