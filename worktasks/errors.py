"""Exception types raised by the extraction and recurrence code.

UnrecognizedToken and InvalidCalendarDate are internal to extraction: the
pipeline catches them and drops the candidate. The rest propagate to the
caller (the API layer turns them into HTTP errors).
"""


class WorkTasksError(Exception):
    """Base class for all errors raised by this package."""


class UnrecognizedToken(WorkTasksError):
    """A date-like fragment whose month name or numeric field can't be resolved."""


class InvalidCalendarDate(WorkTasksError, ValueError):
    """A syntactically valid date that does not exist on the calendar."""


class InvalidRecurrencePeriod(WorkTasksError, ValueError):
    """A repeat value outside daily/weekly/biweekly/monthly/yearly."""


class NoRecurrenceConfigured(WorkTasksError):
    """Completion/rollover requested on a record that does not repeat."""

    def __init__(self, record_id: str):
        super().__init__(f'record {record_id} does not repeat')
        self.record_id = record_id


class AlreadyCompleted(WorkTasksError):
    """Completion requested on a task that is already done."""

    def __init__(self, record_id: str):
        super().__init__(f'record {record_id} is already done')
        self.record_id = record_id


class RecordNotFound(WorkTasksError):
    def __init__(self, kind: str, record_id: str):
        super().__init__(f'{kind} {record_id} not found')
        self.kind = kind
        self.record_id = record_id


class DocumentDecodeError(WorkTasksError):
    """An uploaded .docx/.pdf could not be turned into text."""


class FetchFailed(WorkTasksError):
    """A web page could not be fetched in time; the user may retry."""
