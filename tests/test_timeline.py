from datetime import date

from worktasks.models import DateEntry, Task
from worktasks.timeline import build_timeline, month_key

TODAY = date(2025, 3, 10)


def _tasks():
    return [
        Task(id='t1', title='Grant report', due_date='2025-04-02', status='in-progress', project_ids=['p1']),
        Task(id='t2', title='Roster draft', due_date='2025-03-10', status='not-started', project_ids=['p2']),
        Task(id='t3', title='Old budget', due_date='2025-02-20', status='done', project_ids=['p1']),
        Task(id='t4', title='Older budget', due_date='2025-01-05', status='done', project_ids=['p1']),
    ]


def _dates():
    return [
        DateEntry(id='d1', title='Spring break', date='2025-03-17', project_ids=['p2']),
        DateEntry(id='d2', title='Census day', date='2025-02-01', project_ids=['p1']),
    ]


def _ids(groups):
    return [(g['month'], [i['id'] for i in g['items']]) for g in groups]


def test_month_key():
    assert month_key('2025-03-10') == '2025-03'


def test_timeline_splits_and_groups():
    tl = build_timeline(_tasks(), _dates(), TODAY)
    assert tl['today'] == '2025-03-10'
    assert _ids(tl['upcoming']) == [('2025-03', ['t2', 'd1']), ('2025-04', ['t1'])]
    assert _ids(tl['past']) == [('2025-02', ['t3', 'd2']), ('2025-01', ['t4'])]


def test_timeline_status_filter_applies_to_tasks_only():
    tl = build_timeline(_tasks(), _dates(), TODAY, status='done')
    assert _ids(tl['upcoming']) == [('2025-03', ['d1'])]
    assert _ids(tl['past']) == [('2025-02', ['t3', 'd2']), ('2025-01', ['t4'])]


def test_timeline_project_filter():
    tl = build_timeline(_tasks(), _dates(), TODAY, project_id='p2')
    assert _ids(tl['upcoming']) == [('2025-03', ['t2', 'd1'])]
    assert tl['past'] == []


def test_timeline_empty():
    assert build_timeline([], [], TODAY) == {'today': '2025-03-10', 'upcoming': [], 'past': []}
