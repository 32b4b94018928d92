class ChecklistError(Exception):
    """Base class for checklist engine errors."""


class ChecklistValidationError(ChecklistError):
    """
    Input the caller can correct. Never persisted.

    ``blocking`` holds the questions (or field names) that caused the refusal
    so the UI can show a precise list instead of a generic message.
    """

    def __init__(self, message, blocking=None):
        super().__init__(message)
        self.message = message
        self.blocking = list(blocking or [])


class DuplicateChecklistError(ChecklistValidationError):
    pass


class ChecklistLockedError(ChecklistValidationError):
    pass


class PersistenceError(ChecklistError):
    """Transient database or storage failure; the operation can be retried."""


class DocumentExportError(PersistenceError):
    pass


class VisitSessionMissing(ChecklistError):
    """No visit session is open for the requesting technician."""
