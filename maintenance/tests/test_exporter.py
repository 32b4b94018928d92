from django.core.files.storage import default_storage
from django.test import override_settings

from maintenance.catalog import load_catalog
from maintenance.exporter import OUT_OF_PERIOD, ChecklistDocumentExporter, build_report_rows, media_link_callback
from maintenance.models import ChecklistAnswer, MaintenanceChecklist
from maintenance.signing import SigningCoordinator

from .utils import PNG_DATA_URL, MaintenanceTestCase


class ReportRowsTests(MaintenanceTestCase):
    def setUp(self):
        super().setUp()
        self.technician = self.create_technician()
        self.questions = self.create_catalog()
        self.client_obj, self.elevator = self.create_building()
        self.checklist = MaintenanceChecklist.objects.create(
            client=self.client_obj, elevator=self.elevator, technician=self.technician,
            month=1, year=2025, status='completed')
        ChecklistAnswer.objects.create(checklist=self.checklist, question=self.questions[0], status='approved')
        ChecklistAnswer.objects.create(
            checklist=self.checklist, question=self.questions[1], status='rejected',
            observations='Luz intermitente', photo_1_url='/media/evidence/luz.jpg')

    def test_every_catalog_question_has_a_row(self):
        rows = build_report_rows(self.checklist, list(self.checklist.answers.all()), load_catalog())
        by_number = {row['number']: row for row in rows}

        self.assertEqual(len(rows), 6)
        self.assertEqual(by_number[1]['status'], 'approved')
        self.assertEqual(by_number[2]['status'], 'rejected')
        self.assertEqual(by_number[2]['photos'], ['/media/evidence/luz.jpg'])
        self.assertEqual(by_number[3]['status'], 'pending')
        # Quarterly, semestral and hydraulic-only questions do not apply in January
        for number in (4, 5, 6):
            self.assertEqual(by_number[number]['status'], OUT_OF_PERIOD)
            self.assertEqual(by_number[number]['status_label'], 'Fuera de periodo')

    def test_link_callback_resolves_media(self):
        with override_settings(MEDIA_URL='/media/', MEDIA_ROOT='/srv/media'):
            self.assertEqual(media_link_callback('/media/signatures/a.png', None), '/srv/media/signatures/a.png')
            self.assertEqual(media_link_callback('https://example.com/logo.png', None), 'https://example.com/logo.png')

    def test_export_renders_and_stores_pdf(self):
        document = ChecklistDocumentExporter().export(self.checklist)

        self.assertTrue(document.content.startswith(b'%PDF'))
        self.assertTrue(document.reference.startswith('checklists/'))
        self.assertTrue(default_storage.exists(document.reference))
        self.checklist.refresh_from_db()
        self.assertFalse(self.checklist.document)

    def test_signed_checklist_document_is_recorded(self):
        outcome = SigningCoordinator().sign([self.checklist.pk], 'María Soto', PNG_DATA_URL)

        self.assertEqual(outcome.export_failures, 0)
        self.checklist.refresh_from_db()
        self.assertTrue(default_storage.exists(self.checklist.document.name))
        with self.checklist.document.open('rb') as handle:
            self.assertTrue(handle.read().startswith(b'%PDF'))
