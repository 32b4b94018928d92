"""
Visit sessions: the technician-facing operations of the checklist engine.

A VisitSession covers one technician working through the elevators of one
client. It owns the answer store and autosave scheduler of the checklist
being edited, tracks the status of every checklist touched in the sitting,
and ends with a single signature for all completed ones.
"""
import logging
from dataclasses import dataclass

from django.core.cache import cache

from . import repository
from .answers import AnswerStateStore
from .autosave import COMPLETE, AutoSaveScheduler
from .catalog import questions_for
from .certification import record_certification
from .conf import get_setting
from .exceptions import ChecklistLockedError, ChecklistValidationError, PersistenceError
from .signing import SigningCoordinator
from .storage import store_evidence_photo
from .validation import evaluate_completion, progress

logger = logging.getLogger(__name__)

SESSION_CACHE_KEY = 'maintenance:visit-session:{}'


@dataclass
class MutationResult:
    answer: object
    flush: object = None
    pending: int = 0

    def as_dict(self):
        answer = self.answer
        return {
            'answer': {
                'question_id': answer.question_id,
                'status': answer.status,
                'observations': answer.observations,
                'photo_1_url': answer.photo_1_url,
                'photo_2_url': answer.photo_2_url,
            },
            'flush': self.flush.as_dict() if self.flush else None,
            'pending_changes': self.pending,
        }


class ChecklistEditor:
    def __init__(self, checklist, questions, store, scheduler):
        self.checklist = checklist
        self.questions = questions
        self.store = store
        self.scheduler = scheduler
        self.question_ids = {q.pk for q in questions}

    @classmethod
    def open(cls, checklist, threshold=None):
        questions = questions_for(checklist.elevator, checklist.month)
        store = AnswerStateStore.from_rows(repository.load_answer_rows(checklist.pk))
        scheduler = AutoSaveScheduler(repository.ChecklistAnswerWriter(checklist.pk), threshold)
        return cls(checklist, questions, store, scheduler)

    def require_question(self, question_id):
        if question_id not in self.question_ids:
            raise ChecklistValidationError(
                "La pregunta no corresponde a este checklist.", blocking=[question_id])

    def require_editable(self):
        if self.checklist.is_completed:
            raise ChecklistLockedError("El checklist ya fue completado.")

    @property
    def pending_changes(self):
        return self.scheduler.pending(self.store)

    def close(self):
        return self.scheduler.flush_on_exit(self.store)


class VisitSession:

    def __init__(self, technician, client, threshold=None):
        self.technician = technician
        self.client = client
        self.threshold = threshold
        self.progress = {}
        self.editor = None

    # Checklist selection

    def start_or_resume_checklist(self, elevator, month, year):
        checklist = repository.start_or_resume_checklist(
            self.client, elevator, self.technician, month, year)
        if self.editor is not None and self.editor.checklist.pk != checklist.pk:
            self.editor.close()
            self.editor = None
        if self.editor is None:
            self.editor = ChecklistEditor.open(checklist, self.threshold)
        self.progress[checklist.pk] = checklist.status
        return checklist

    def active(self, checklist_id=None):
        if self.editor is None:
            raise ChecklistValidationError("No hay un checklist abierto en esta visita.")
        if checklist_id is not None and self.editor.checklist.pk != checklist_id:
            raise ChecklistValidationError("El checklist indicado no es el que está abierto.")
        return self.editor

    # Answers

    def _after_mutation(self, editor):
        result = editor.scheduler.mutation_recorded(editor.store)
        if result is not None and result.ok:
            self._refresh_status(editor)
        return result

    def _refresh_status(self, editor):
        if editor.checklist.status == 'pending':
            editor.checklist.status = 'in_progress'
        self.progress[editor.checklist.pk] = editor.checklist.status

    def mutate_answer(self, question_id, status=None, observations=None, photos=None, checklist_id=None):
        editor = self.active(checklist_id)
        editor.require_editable()
        editor.require_question(question_id)

        flush = None
        answer = editor.store.get(question_id)
        if status is not None:
            try:
                answer = editor.store.set_status(question_id, status)
            except ValueError as exc:
                raise ChecklistValidationError(str(exc), blocking=[question_id])
            flush = self._after_mutation(editor) or flush
        if observations is not None:
            answer = editor.store.set_observations(question_id, observations)
            flush = self._after_mutation(editor) or flush
        if photos is not None:
            photo_1, photo_2 = (list(photos) + [None, None])[:2]
            answer = editor.store.set_photos(question_id, photo_1, photo_2)
            flush = self._after_mutation(editor) or flush
        return MutationResult(answer=answer, flush=flush, pending=editor.pending_changes)

    def upload_photo(self, question_id, slot, upload, checklist_id=None):
        """
        Stores an evidence photo and attaches it to the answer.

        While the upload runs the slot is marked pending, and a pending first
        photo does not count as evidence for a rejected answer.
        """
        editor = self.active(checklist_id)
        editor.require_editable()
        editor.require_question(question_id)
        try:
            editor.store.begin_upload(question_id, slot)
        except ValueError as exc:
            raise ChecklistValidationError(str(exc), blocking=[question_id])
        try:
            url = store_evidence_photo(upload, editor.checklist.pk, question_id, slot)
        except PersistenceError:
            editor.store.abort_upload(question_id, slot)
            raise
        answer = editor.store.confirm_upload(question_id, slot, url)
        flush = self._after_mutation(editor)
        return MutationResult(answer=answer, flush=flush, pending=editor.pending_changes)

    def record_certification(self, last_date=None, next_month=None, next_year=None,
                             unreadable=False, checklist_id=None, now=None):
        editor = self.active(checklist_id)
        return record_certification(editor.checklist, last_date, next_month, next_year, unreadable, now)

    def save(self, checklist_id=None):
        editor = self.active(checklist_id)
        result = editor.scheduler.flush(editor.store)
        if result.ok:
            self._refresh_status(editor)
        return result

    def progress_summary(self, checklist_id=None):
        editor = self.active(checklist_id)
        summary = progress(editor.questions, editor.store)
        summary['pending_changes'] = editor.pending_changes
        summary['saving'] = editor.scheduler.saving
        summary['last_error'] = editor.scheduler.last_error
        return summary

    # Completion

    def request_completion(self, checklist_id=None, now=None):
        """
        Validates the open checklist and, when it passes, flushes the answers
        and marks it completed. Returns the CompletionReport either way.
        """
        editor = self.active(checklist_id)
        editor.require_editable()
        if editor.scheduler.saving:
            raise ChecklistValidationError("Hay un guardado en curso, espera a que termine.", blocking=['saving'])

        report = evaluate_completion(editor.questions, editor.store)
        if not report.may_complete:
            logger.info("Completion refused for checklist %s: %d blocking questions",
                        editor.checklist.pk, len(report.blocking))
            return report

        result = editor.scheduler.flush(editor.store, reason=COMPLETE)
        if not result.ok:
            raise PersistenceError(result.error or "No se pudieron guardar las respuestas.")
        repository.mark_completed(editor.checklist, now)
        self.progress[editor.checklist.pk] = editor.checklist.status
        return report

    # Signing

    def resume_signing(self):
        """
        Adds the completed checklists of this client whose signing never
        finished, so a lost session can still be signed.
        """
        for pk in repository.unfinished_signing(self.client, self.technician):
            self.progress.setdefault(pk, 'completed')

    def completed_ids(self):
        return [pk for pk, status in self.progress.items() if status == 'completed']

    def sign(self, signer_name, signature_image, coordinator=None, now=None):
        self.resume_signing()
        if not self.completed_ids():
            raise ChecklistValidationError("No hay checklists completados para firmar.", blocking=['checklists'])
        if self.editor is not None and not self.editor.checklist.is_completed:
            self.editor.close()
        coordinator = coordinator or SigningCoordinator()
        outcome = coordinator.sign(list(self.progress), signer_name, signature_image, now)
        self.clear()
        return outcome

    def clear(self):
        self.editor = None
        self.progress = {}

    def close(self):
        """Navigation away: one best-effort flush, then drop everything."""
        result = self.editor.close() if self.editor is not None else None
        self.clear()
        return result


def session_cache_key(user):
    return SESSION_CACHE_KEY.format(user.pk)


def get_visit_session(user):
    return cache.get(session_cache_key(user))


def save_visit_session(session):
    cache.set(session_cache_key(session.technician), session, get_setting('VISIT_SESSION_TIMEOUT'))


def start_visit_session(technician, client, threshold=None):
    discard_visit_session(technician)
    session = VisitSession(technician, client, threshold)
    session.resume_signing()
    save_visit_session(session)
    logger.info("Visit session started: technician %s, client %s", technician.pk, client.pk)
    return session


def discard_visit_session(user):
    session = get_visit_session(user)
    result = None
    if session is not None:
        result = session.close()
        cache.delete(session_cache_key(user))
    return result


def forget_visit_session(user):
    """Drops the cached session without flushing it."""
    cache.delete(session_cache_key(user))
