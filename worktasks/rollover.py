"""Completing a recurring task or date entry produces its next occurrence.

The two record kinds roll over differently:

- a task is kept as history: it stays in the store with status 'done' and
  its original dates, and a fresh 'not-started' copy is appended with the
  due date (and start date, if any) moved forward one period;
- a date entry is not kept: it is deleted and replaced by a single new
  entry with a new id and the advanced date.

Both refuse records without a repeat period (NoRecurrenceConfigured) and
leave the store untouched in that case. Completing a task twice is refused
with AlreadyCompleted, so one task never spawns two successors. Identity and clock are injected so
callers and tests can make the result deterministic.
"""
import logging
from typing import Callable

from sqlmodel.ext.asyncio.session import AsyncSession

from .errors import AlreadyCompleted, NoRecurrenceConfigured, RecordNotFound
from .models import DateEntry, Task, STATUS_DONE, STATUS_NOT_STARTED
from .recurrence import advance_date, parse_period
from .utils import new_record_id, now_utc

logger = logging.getLogger(__name__)


def next_task(task: Task, new_id: Callable[[], str] = new_record_id, now=now_utc) -> Task:
    """Build the next occurrence of a repeating task (not added to any session)."""
    if not task.repeat:
        raise NoRecurrenceConfigured(task.id)
    period = parse_period(task.repeat)
    ts = now()
    return Task(
        id=new_id(),
        project_ids=list(task.project_ids or []),
        title=task.title,
        start_date=advance_date(task.start_date, period) if task.start_date else None,
        due_date=advance_date(task.due_date, period),
        status=STATUS_NOT_STARTED,
        priority=task.priority,
        repeat=task.repeat,
        notes=task.notes,
        url=task.url,
        created_at=ts,
        updated_at=ts,
    )


def next_date_entry(entry: DateEntry, new_id: Callable[[], str] = new_record_id, now=now_utc) -> DateEntry:
    """Build the replacement for a repeating date entry."""
    if not entry.repeat:
        raise NoRecurrenceConfigured(entry.id)
    ts = now()
    return DateEntry(
        id=new_id(),
        project_ids=list(entry.project_ids or []),
        title=entry.title,
        date=advance_date(entry.date, entry.repeat),
        repeat=entry.repeat,
        notes=entry.notes,
        created_at=ts,
        updated_at=ts,
    )


async def complete_task(sess: AsyncSession, task_id: str, new_id: Callable[[], str] = new_record_id, now=now_utc) -> Task:
    """Mark a repeating task done and append its next occurrence.

    Returns the new task. The completed task keeps its id and dates. A task
    that is already done raises AlreadyCompleted and nothing is written.
    """
    task = await sess.get(Task, task_id)
    if task is None:
        raise RecordNotFound('task', task_id)
    if task.status == STATUS_DONE:
        raise AlreadyCompleted(task_id)
    nxt = next_task(task, new_id=new_id, now=now)
    task.status = STATUS_DONE
    task.updated_at = nxt.created_at
    sess.add(task)
    sess.add(nxt)
    await sess.commit()
    logger.info('task %s completed; next occurrence %s due %s', task_id, nxt.id, nxt.due_date)
    return nxt


async def complete_date_entry(sess: AsyncSession, entry_id: str, new_id: Callable[[], str] = new_record_id, now=now_utc) -> DateEntry:
    """Replace a repeating date entry with its next occurrence.

    Returns the new entry; the old id no longer exists afterwards.
    """
    entry = await sess.get(DateEntry, entry_id)
    if entry is None:
        raise RecordNotFound('date', entry_id)
    nxt = next_date_entry(entry, new_id=new_id, now=now)
    await sess.delete(entry)
    sess.add(nxt)
    await sess.commit()
    logger.info('date %s rolled over to %s on %s', entry_id, nxt.id, nxt.date)
    return nxt
