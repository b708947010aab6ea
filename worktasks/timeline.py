from datetime import date


def month_key(iso_date: str) -> str:
    return iso_date[:7]


def _group_by_month(items: list[dict]) -> list[dict]:
    groups: list[dict] = []
    for item in items:
        key = month_key(item['sort_key'])
        if not groups or groups[-1]['month'] != key:
            groups.append({'month': key, 'items': []})
        groups[-1]['items'].append(item)
    return groups


def build_timeline(tasks, dates, today: date, status: str | None = None, project_id: str | None = None) -> dict:
    """Merge tasks and date entries into upcoming/past month groups.

    Tasks sort on due_date, date entries on date. ``status`` filters tasks
    only; ``project_id`` filters both kinds. Upcoming items (on or after
    today) run oldest first, past items newest first.
    """
    today_iso = today.isoformat()
    items: list[dict] = []
    for t in tasks:
        if status and t.status != status:
            continue
        if project_id and project_id not in (t.project_ids or []):
            continue
        items.append({'kind': 'task', 'id': t.id, 'title': t.title, 'sort_key': t.due_date,
                      'status': t.status, 'priority': t.priority, 'repeat': t.repeat,
                      'project_ids': list(t.project_ids or [])})
    for d in dates:
        if project_id and project_id not in (d.project_ids or []):
            continue
        items.append({'kind': 'date', 'id': d.id, 'title': d.title, 'sort_key': d.date,
                      'repeat': d.repeat, 'project_ids': list(d.project_ids or [])})
    items.sort(key=lambda i: i['sort_key'])
    upcoming = [i for i in items if i['sort_key'] >= today_iso]
    past = [i for i in items if i['sort_key'] < today_iso]
    past.reverse()
    return {
        'today': today_iso,
        'upcoming': _group_by_month(upcoming),
        'past': _group_by_month(past),
    }
