import json
from datetime import date
from pathlib import Path

import pytest

from worktasks import extract
from worktasks.extract import extract_dates

HERE = Path(__file__).parent
TODAY = date(2026, 10, 17)

SENTENCE = 'The proposal is due by March 3rd, 2025 and the review meeting follows on 3/10/2025.'


def load_expectations():
    p = HERE / 'fixtures' / 'extract_expected.json'
    with open(p, 'r', encoding='utf-8') as fh:
        return json.load(fh)


@pytest.mark.parametrize('phrase,expected', load_expectations())
def test_extract_matches_expected(phrase, expected):
    """Each phrase yields exactly the expected canonical dates, in order."""
    results = extract_dates(phrase, today=TODAY)
    assert [r['date'] for r in results] == expected, f"for phrase '{phrase}'"


def test_proposal_sentence_end_to_end():
    results = extract_dates(SENTENCE, today=TODAY)
    assert [r['date'] for r in results] == ['2025-03-03', '2025-03-10']
    assert all(r['label'] for r in results)
    assert results[0]['label'] == 'The proposal is due'
    assert results[1]['label'] == 'The proposal is due by March 3rd, 2025 and the review meeti…'
    assert results[1]['context'].endswith('follows on 3/10/2025.')


def test_duplicate_across_patterns_keeps_first_pattern():
    text = 'Kickoff on March 3, 2025. Reminder: 3/3/2025 again.'
    results = extract_dates(text, today=TODAY)
    assert len(results) == 1
    assert results[0]['date'] == '2025-03-03'
    assert results[0]['label'] == 'Kickoff'


def test_duplicate_within_pattern_keeps_earliest_position():
    text = 'Draft due March 3, 2025. Final due March 3, 2025.'
    results = extract_dates(text, today=TODAY)
    assert len(results) == 1
    assert results[0]['label'] == 'Draft due'


def test_missing_year_uses_today():
    assert [r['date'] for r in extract_dates('Party on Dec 24', today=TODAY)] == ['2026-12-24']


def test_missing_year_defaults_to_configured_today(monkeypatch):
    monkeypatch.setattr(extract, 'local_today', lambda: date(2030, 1, 1))
    assert [r['date'] for r in extract_dates('Event Jan 5')] == ['2030-01-05']


def test_results_sorted_by_date():
    text = 'Final exam 12/15/2025. Midterm October 20, 2025. Orientation 1st of September 2025.'
    results = extract_dates(text, today=TODAY)
    assert [r['date'] for r in results] == ['2025-09-01', '2025-10-20', '2025-12-15']
    assert results[0]['label'] == 'Orientation'


def test_impossible_dates_are_dropped():
    assert extract_dates('Meet on February 30, 2025 or 2/31/2025', today=TODAY) == []


@pytest.mark.parametrize('text', [None, '', '   ', '\x00\x01', '////', 'March', '99/99/9999',
                                  'May may MAY 1st of may of May 2 2',
                                  '1st of ' * 500, 'Jan 1, ' * 300])
def test_never_raises_and_always_sorted(text):
    results = extract_dates(text, today=TODAY)
    assert isinstance(results, list)
    dates = [r['date'] for r in results]
    assert dates == sorted(dates)
    assert len(dates) == len(set(dates))
    for r in results:
        assert set(r) == {'date', 'label', 'context'}
        assert len(r['label']) <= 62


def test_idempotent():
    assert extract_dates(SENTENCE, today=TODAY) == extract_dates(SENTENCE, today=TODAY)


def test_internal_failure_is_swallowed(monkeypatch):
    def boom(text, today):
        raise RuntimeError('scanner exploded')
    monkeypatch.setattr(extract, 'PATTERNS', (extract.match_month_day_year, boom))
    assert extract_dates(SENTENCE, today=TODAY) == []


@pytest.mark.parametrize('text', ['Due ３/１０/２０２５', 'Due ٣/١٠/٢٠٢٥', 'March ３, 2025', '３rd of March'])
def test_non_ascii_digits_are_not_dates(text):
    assert extract_dates(text, today=TODAY) == []
