from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings

from maintenance.answers import APPROVED, NOT_APPLICABLE, REJECTED
from maintenance.exceptions import (
    ChecklistLockedError, ChecklistValidationError, DuplicateChecklistError, PersistenceError,
)
from maintenance.models import ChecklistAnswer, Elevator, MaintenanceChecklist
from maintenance.validation import MISSING_OBSERVATIONS, MISSING_PHOTO
from maintenance.workflow import (
    VisitSession, discard_visit_session, get_visit_session, save_visit_session, start_visit_session,
)

from .utils import MaintenanceTestCase


class VisitSessionTests(MaintenanceTestCase):
    def setUp(self):
        super().setUp()
        self.technician = self.create_technician()
        self.questions = self.create_catalog()
        self.client_obj, self.elevator = self.create_building()
        self.session = VisitSession(self.technician, self.client_obj)

    def answer_all(self, status=APPROVED):
        for question in self.session.editor.questions:
            self.session.mutate_answer(question.pk, status=status)

    def test_start_creates_pending_checklist_with_filtered_questions(self):
        checklist = self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        self.assertEqual(checklist.status, 'pending')
        self.assertEqual(checklist.technician, self.technician)
        self.assertEqual([q.number for q in self.session.editor.questions], [1, 2, 3])
        self.assertEqual(self.session.progress, {checklist.pk: 'pending'})

    def test_resume_reuses_open_checklist_and_answers(self):
        checklist = self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        self.session.mutate_answer(self.questions[0].pk, status=APPROVED)
        self.session.save()

        other = VisitSession(self.technician, self.client_obj)
        resumed = other.start_or_resume_checklist(self.elevator, 1, 2025)

        self.assertEqual(resumed.pk, checklist.pk)
        self.assertEqual(resumed.status, 'in_progress')
        self.assertEqual(other.editor.store.get(self.questions[0].pk).status, APPROVED)
        self.assertEqual(MaintenanceChecklist.objects.count(), 1)

    def test_completed_period_is_refused(self):
        self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        self.answer_all()
        self.session.request_completion()

        with self.assertRaises(DuplicateChecklistError):
            VisitSession(self.technician, self.client_obj).start_or_resume_checklist(self.elevator, 1, 2025)

    def test_elevator_must_belong_to_client(self):
        other_client, _ = self.create_building(company_name='Otra SpA')
        foreign = Elevator.objects.create(client=other_client, elevator_number=2)
        with self.assertRaises(ChecklistValidationError):
            self.session.start_or_resume_checklist(foreign, 1, 2025)

    def test_invalid_month(self):
        with self.assertRaises(ChecklistValidationError):
            self.session.start_or_resume_checklist(self.elevator, 13, 2025)

    def test_question_outside_filtered_set_is_refused(self):
        self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        quarterly = self.questions[3]
        with self.assertRaises(ChecklistValidationError) as ctx:
            self.session.mutate_answer(quarterly.pk, status=APPROVED)
        self.assertEqual(ctx.exception.blocking, [quarterly.pk])

    def test_unknown_status_is_a_validation_error(self):
        self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        with self.assertRaises(ChecklistValidationError):
            self.session.mutate_answer(self.questions[0].pk, status='bueno')

    def test_no_open_checklist(self):
        with self.assertRaises(ChecklistValidationError):
            self.session.mutate_answer(self.questions[0].pk, status=APPROVED)

    def test_threshold_autosave(self):
        checklist = self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        q1, q2, q3 = self.session.editor.questions
        self.session.mutate_answer(q1.pk, status=APPROVED)
        self.session.mutate_answer(q2.pk, status=APPROVED)
        self.session.mutate_answer(q3.pk, status=REJECTED)
        self.session.mutate_answer(q3.pk, observations='Botón atascado')
        self.assertEqual(ChecklistAnswer.objects.filter(checklist=checklist).count(), 0)

        result = self.session.mutate_answer(q3.pk, photos=['/media/evidence/boton.jpg'])

        self.assertTrue(result.flush.ok)
        self.assertEqual(result.pending, 0)
        self.assertEqual(ChecklistAnswer.objects.filter(checklist=checklist).count(), 3)
        self.assertEqual(self.session.progress[checklist.pk], 'in_progress')

    def test_completion_is_refused_with_blocking_questions(self):
        checklist = self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        q1, q2, q3 = self.session.editor.questions
        self.session.mutate_answer(q1.pk, status=APPROVED)
        self.session.mutate_answer(q2.pk, status=NOT_APPLICABLE)
        self.session.mutate_answer(q3.pk, status=REJECTED)

        report = self.session.request_completion()

        self.assertFalse(report.may_complete)
        self.assertEqual(report.blocking_ids, [q3.pk])
        self.assertEqual(report.blocking[0].reasons, [MISSING_OBSERVATIONS, MISSING_PHOTO])
        checklist.refresh_from_db()
        self.assertNotEqual(checklist.status, 'completed')

    def test_completion_flushes_and_locks(self):
        checklist = self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        self.answer_all()

        report = self.session.request_completion()

        self.assertTrue(report.may_complete)
        checklist.refresh_from_db()
        self.assertEqual(checklist.status, 'completed')
        self.assertIsNotNone(checklist.completion_date)
        self.assertEqual(checklist.answers.filter(status=APPROVED).count(), 3)
        self.assertEqual(self.session.completed_ids(), [checklist.pk])

        with self.assertRaises(ChecklistLockedError):
            self.session.mutate_answer(self.questions[0].pk, status=REJECTED)

    def test_switching_elevator_flushes_previous_checklist(self):
        first = self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        self.session.mutate_answer(self.questions[0].pk, status=APPROVED)
        second_elevator = Elevator.objects.create(client=self.client_obj, elevator_number=2)

        second = self.session.start_or_resume_checklist(second_elevator, 1, 2025)

        self.assertNotEqual(first.pk, second.pk)
        self.assertTrue(ChecklistAnswer.objects.filter(checklist=first).exists())
        self.assertEqual(set(self.session.progress), {first.pk, second.pk})

    def test_upload_photo_attaches_url(self):
        self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        question = self.questions[0]
        self.session.mutate_answer(question.pk, status=REJECTED)
        upload = SimpleUploadedFile('motor.jpg', b'jpeg-bytes', content_type='image/jpeg')

        result = self.session.upload_photo(question.pk, 1, upload)

        self.assertTrue(result.answer.photo_1_url.startswith('/media/evidence/'))
        self.assertTrue(result.answer.photo_1_url.endswith(f'q{question.pk}_1.jpg'))
        self.assertFalse(self.session.editor.store.has_pending_uploads)

    def test_progress_summary(self):
        self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        self.session.mutate_answer(self.questions[0].pk, status=APPROVED)
        summary = self.session.progress_summary()
        self.assertEqual(summary['answered'], 1)
        self.assertEqual(summary['total'], 3)
        self.assertEqual(summary['percentage'], 33)
        self.assertEqual(summary['pending_changes'], 1)

    def test_completion_fails_when_final_flush_fails(self):
        checklist = self.session.start_or_resume_checklist(self.elevator, 1, 2025)
        self.answer_all()
        with mock.patch.object(self.session.editor.scheduler, 'writer', side_effect=PersistenceError('sin conexión')):
            with self.assertRaises(PersistenceError):
                self.session.request_completion()
        checklist.refresh_from_db()
        self.assertNotEqual(checklist.status, 'completed')
        self.assertEqual(self.session.editor.pending_changes, 3)

    @override_settings(MAINTENANCE={'AUTOSAVE_THRESHOLD': 2})
    def test_threshold_from_settings(self):
        session = VisitSession(self.technician, self.client_obj)
        checklist = session.start_or_resume_checklist(self.elevator, 1, 2025)
        session.mutate_answer(self.questions[0].pk, status=APPROVED)
        result = session.mutate_answer(self.questions[1].pk, status=APPROVED)
        self.assertTrue(result.flush.ok)
        self.assertEqual(ChecklistAnswer.objects.filter(checklist=checklist).count(), 2)


class VisitSessionCacheTests(MaintenanceTestCase):
    def setUp(self):
        super().setUp()
        self.technician = self.create_technician()
        self.questions = self.create_catalog()
        self.client_obj, self.elevator = self.create_building()

    def test_session_survives_a_cache_round_trip(self):
        session = start_visit_session(self.technician, self.client_obj)
        checklist = session.start_or_resume_checklist(self.elevator, 1, 2025)
        session.mutate_answer(self.questions[0].pk, status=APPROVED)
        save_visit_session(session)

        restored = get_visit_session(self.technician)

        self.assertEqual(restored.editor.checklist.pk, checklist.pk)
        self.assertEqual(restored.editor.store.get(self.questions[0].pk).status, APPROVED)
        self.assertEqual(restored.editor.pending_changes, 1)

    def test_discard_flushes_pending_answers(self):
        session = start_visit_session(self.technician, self.client_obj)
        checklist = session.start_or_resume_checklist(self.elevator, 1, 2025)
        session.mutate_answer(self.questions[0].pk, status=APPROVED)
        save_visit_session(session)

        result = discard_visit_session(self.technician)

        self.assertTrue(result.ok)
        self.assertIsNone(get_visit_session(self.technician))
        self.assertTrue(ChecklistAnswer.objects.filter(checklist=checklist, status=APPROVED).exists())
