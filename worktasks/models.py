from typing import List, Optional
from datetime import datetime
from .utils import now_utc
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON

TASK_STATUSES = ('not-started', 'in-progress', 'done', 'blocked')
TASK_PRIORITIES = ('high', 'medium', 'low')
STATUS_NOT_STARTED = 'not-started'
STATUS_DONE = 'done'


class Project(SQLModel, table=True):
    id: str = Field(primary_key=True)
    name: str
    # Derived from name (see utils.slugify); used to address projects in URLs.
    slug: str = Field(index=True)
    color: str = Field(default='#60a5fa')


class Task(SQLModel, table=True):
    id: str = Field(primary_key=True)
    # Projects this task belongs to; stored as a JSON array of project ids.
    project_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    title: str
    # Canonical YYYY-MM-DD strings; lexicographic order is date order.
    start_date: Optional[str] = None
    due_date: str = Field(index=True)
    status: str = Field(default=STATUS_NOT_STARTED, index=True)
    priority: str = Field(default='medium')
    # One of recurrence.RecurrencePeriod; None means the task does not repeat.
    repeat: Optional[str] = None
    notes: Optional[str] = None
    url: Optional[str] = None
    created_at: datetime | None = Field(default_factory=now_utc)
    updated_at: datetime | None = Field(default_factory=now_utc)


class DateEntry(SQLModel, table=True):
    """A standalone calendar marker (deadline, event) attached to projects."""
    id: str = Field(primary_key=True)
    project_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    title: str
    date: str = Field(index=True)
    repeat: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime | None = Field(default_factory=now_utc)
    updated_at: datetime | None = Field(default_factory=now_utc)
