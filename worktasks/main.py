from contextlib import asynccontextmanager
from typing import List, Literal, Optional
import logging
import sys

from fastapi import FastAPI, File, HTTPException, UploadFile
from pydantic import BaseModel, Field
from sqlmodel import select

from .db import async_session, init_db
from .errors import AlreadyCompleted, DocumentDecodeError, FetchFailed, InvalidCalendarDate, NoRecurrenceConfigured, RecordNotFound
from .extract import extract_dates, parse_canonical_date
from .importers import decode_document, fetch_page_text, preview
from .models import DateEntry, Project, Task, STATUS_DONE
from .recurrence import RecurrencePeriod
from .rollover import complete_date_entry, complete_task, next_task
from .timeline import build_timeline
from .utils import local_today, new_record_id, now_utc, slugify

logger = logging.getLogger(__name__)
# INFO messages from this module go to stdout when nothing else is configured.
if not logger.handlers:
    handler = logging.StreamHandler(sys.stdout)
    formatter = logging.Formatter('%(asctime)s %(levelname)s:%(name)s: %(message)s')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
logger.setLevel(logging.INFO)

TaskStatus = Literal['not-started', 'in-progress', 'done', 'blocked']
TaskPriority = Literal['high', 'medium', 'low']


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    from . import db as _dbmod
    logger.info('starting server using DATABASE_URL=%s', _dbmod.DATABASE_URL)
    yield


app = FastAPI(lifespan=lifespan)


class ProjectBody(BaseModel):
    name: str
    color: str = '#60a5fa'


class TaskCreate(BaseModel):
    title: str
    due_date: str
    project_ids: List[str] = Field(default_factory=list)
    start_date: Optional[str] = None
    status: TaskStatus = 'not-started'
    priority: TaskPriority = 'medium'
    repeat: Optional[RecurrencePeriod] = None
    notes: Optional[str] = None
    url: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    due_date: Optional[str] = None
    project_ids: Optional[List[str]] = None
    start_date: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    repeat: Optional[RecurrencePeriod] = None
    notes: Optional[str] = None
    url: Optional[str] = None


class DateCreate(BaseModel):
    title: str
    date: str
    project_ids: List[str] = Field(default_factory=list)
    repeat: Optional[RecurrencePeriod] = None
    notes: Optional[str] = None


class DateUpdate(BaseModel):
    title: Optional[str] = None
    date: Optional[str] = None
    project_ids: Optional[List[str]] = None
    repeat: Optional[RecurrencePeriod] = None
    notes: Optional[str] = None


class ExtractRequest(BaseModel):
    text: str = ''


class UrlImportRequest(BaseModel):
    url: str


class ImportItem(BaseModel):
    date: str
    label: str = ''


class ImportCommit(BaseModel):
    kind: Literal['task', 'date']
    project_id: Optional[str] = None
    items: List[ImportItem]


def _check_date(value: str | None, field: str, required: bool = True) -> None:
    if value is None:
        if required:
            raise HTTPException(status_code=400, detail=f'{field} is required')
        return
    try:
        parse_canonical_date(value)
    except InvalidCalendarDate:
        raise HTTPException(status_code=400, detail=f'invalid {field}: {value}')


def _changes(body: BaseModel) -> dict:
    data = body.model_dump(exclude_unset=True)
    if data.get('repeat') is not None:
        data['repeat'] = RecurrencePeriod(data['repeat']).value
    return data


@app.get('/store')
async def get_store():
    async with async_session() as sess:
        projects = (await sess.exec(select(Project))).all()
        tasks = (await sess.exec(select(Task).order_by(Task.due_date))).all()
        dates = (await sess.exec(select(DateEntry).order_by(DateEntry.date))).all()
    return {'projects': projects, 'tasks': tasks, 'dates': dates}


@app.post('/projects')
async def create_project(body: ProjectBody):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail='name is required')
    project = Project(id=new_record_id(), name=name, slug=slugify(name), color=body.color)
    async with async_session() as sess:
        sess.add(project)
        await sess.commit()
    return project


@app.patch('/projects/{project_id}')
async def update_project(project_id: str, body: ProjectBody):
    name = body.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail='name is required')
    async with async_session() as sess:
        project = await sess.get(Project, project_id)
        if not project:
            raise HTTPException(status_code=404, detail='project not found')
        project.name = name
        project.slug = slugify(name)
        project.color = body.color
        sess.add(project)
        await sess.commit()
    return project


@app.post('/tasks')
async def create_task(body: TaskCreate):
    _check_date(body.due_date, 'due_date')
    _check_date(body.start_date, 'start_date', required=False)
    task = Task(id=new_record_id(), **_changes(body))
    async with async_session() as sess:
        sess.add(task)
        await sess.commit()
    return task


@app.patch('/tasks/{task_id}')
async def update_task(task_id: str, body: TaskUpdate):
    """Apply a partial update.

    Moving a repeating task to 'done' also appends its next occurrence,
    the same as POST /tasks/{id}/complete.
    """
    data = _changes(body)
    if 'due_date' in data:
        _check_date(data['due_date'], 'due_date')
    if 'start_date' in data:
        _check_date(data['start_date'], 'start_date', required=False)
    for field in ('title', 'status', 'priority', 'project_ids'):
        if field in data and data[field] is None:
            raise HTTPException(status_code=400, detail=f'{field} cannot be null')
    async with async_session() as sess:
        task = await sess.get(Task, task_id)
        if not task:
            raise HTTPException(status_code=404, detail='task not found')
        was_done = task.status == STATUS_DONE
        for k, v in data.items():
            setattr(task, k, v)
        task.updated_at = now_utc()
        sess.add(task)
        if data.get('status') == STATUS_DONE and not was_done and task.repeat:
            nxt = next_task(task)
            sess.add(nxt)
            logger.info('task %s marked done; next occurrence %s due %s', task.id, nxt.id, nxt.due_date)
        await sess.commit()
    return task


@app.delete('/tasks/{task_id}')
async def delete_task(task_id: str):
    async with async_session() as sess:
        task = await sess.get(Task, task_id)
        if task:
            await sess.delete(task)
            await sess.commit()
    return {'ok': True}


@app.post('/tasks/{task_id}/complete')
async def api_complete_task(task_id: str):
    async with async_session() as sess:
        try:
            nxt = await complete_task(sess, task_id)
        except RecordNotFound:
            raise HTTPException(status_code=404, detail='task not found')
        except AlreadyCompleted:
            raise HTTPException(status_code=409, detail='task is already done')
        except NoRecurrenceConfigured:
            raise HTTPException(status_code=400, detail='this item does not repeat')
        completed = await sess.get(Task, task_id)
    return {'completed': completed, 'next': nxt}


@app.post('/dates')
async def create_date(body: DateCreate):
    _check_date(body.date, 'date')
    entry = DateEntry(id=new_record_id(), **_changes(body))
    async with async_session() as sess:
        sess.add(entry)
        await sess.commit()
    return entry


@app.patch('/dates/{entry_id}')
async def update_date(entry_id: str, body: DateUpdate):
    data = _changes(body)
    if 'date' in data:
        _check_date(data['date'], 'date')
    for field in ('title', 'project_ids'):
        if field in data and data[field] is None:
            raise HTTPException(status_code=400, detail=f'{field} cannot be null')
    async with async_session() as sess:
        entry = await sess.get(DateEntry, entry_id)
        if not entry:
            raise HTTPException(status_code=404, detail='date not found')
        for k, v in data.items():
            setattr(entry, k, v)
        entry.updated_at = now_utc()
        sess.add(entry)
        await sess.commit()
    return entry


@app.delete('/dates/{entry_id}')
async def delete_date(entry_id: str):
    async with async_session() as sess:
        entry = await sess.get(DateEntry, entry_id)
        if entry:
            await sess.delete(entry)
            await sess.commit()
    return {'ok': True}


@app.post('/dates/{entry_id}/complete')
async def api_complete_date(entry_id: str):
    async with async_session() as sess:
        try:
            return await complete_date_entry(sess, entry_id)
        except RecordNotFound:
            raise HTTPException(status_code=404, detail='date not found')
        except NoRecurrenceConfigured:
            raise HTTPException(status_code=400, detail='this item does not repeat')


@app.post('/extract')
async def api_extract(body: ExtractRequest):
    return {'dates': extract_dates(body.text)}


@app.post('/import/file')
async def import_file(file: UploadFile = File(...)):
    data = await file.read()
    try:
        text = decode_document(data, file.filename or '')
    except DocumentDecodeError:
        raise HTTPException(status_code=400, detail='failed to parse file')
    dates = extract_dates(text)
    logger.info('import file %s: %d chars, %d dates', file.filename, len(text), len(dates))
    return {'text': preview(text), 'dates': dates}


@app.post('/import/url')
async def import_url(body: UrlImportRequest):
    try:
        text = await fetch_page_text(body.url)
    except FetchFailed:
        raise HTTPException(status_code=502, detail='failed to fetch page; check the URL and try again')
    dates = extract_dates(text)
    logger.info('import url %s: %d chars, %d dates', body.url, len(text), len(dates))
    return {'text': preview(text), 'dates': dates}


@app.post('/import/commit')
async def import_commit(body: ImportCommit):
    """Save selected extracted dates as tasks or date entries."""
    for item in body.items:
        _check_date(item.date, 'date')
    project_ids = [body.project_id] if body.project_id else []
    created = []
    async with async_session() as sess:
        if body.project_id and not await sess.get(Project, body.project_id):
            raise HTTPException(status_code=404, detail='project not found')
        for item in body.items:
            title = item.label.strip() or item.date
            if body.kind == 'task':
                rec = Task(id=new_record_id(), title=title, due_date=item.date, project_ids=list(project_ids))
            else:
                rec = DateEntry(id=new_record_id(), title=title, date=item.date, project_ids=list(project_ids))
            sess.add(rec)
            created.append(rec)
        await sess.commit()
    logger.info('imported %d %s records', len(created), body.kind)
    return {'created': created}


@app.get('/timeline')
async def get_timeline(project: Optional[str] = None, status: Optional[TaskStatus] = None):
    async with async_session() as sess:
        project_id = None
        if project:
            proj = (await sess.exec(select(Project).where(Project.slug == project))).first()
            if not proj:
                raise HTTPException(status_code=404, detail='project not found')
            project_id = proj.id
        tasks = (await sess.exec(select(Task))).all()
        dates = (await sess.exec(select(DateEntry))).all()
    return build_timeline(tasks, dates, local_today(), status=status, project_id=project_id)
