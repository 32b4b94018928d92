from django.test import SimpleTestCase

from maintenance.answers import APPROVED, NOT_APPLICABLE, PENDING, REJECTED, AnswerStateStore


class AnswerStateStoreTests(SimpleTestCase):
    def setUp(self):
        self.store = AnswerStateStore()

    def test_untouched_question_reads_as_pending(self):
        self.assertEqual(self.store.get(10).status, PENDING)
        self.assertNotIn(10, self.store)
        self.assertEqual(self.store.mutations, 0)

    def test_every_mutation_is_counted(self):
        self.store.set_status(1, REJECTED)
        self.store.set_observations(1, 'Cable desgastado')
        self.store.set_photos(1, '/media/a.jpg')
        self.assertEqual(self.store.mutations, 3)
        self.assertEqual(len(self.store), 1)

    def test_unknown_status_is_refused(self):
        with self.assertRaises(ValueError):
            self.store.set_status(1, 'maybe')
        self.assertEqual(self.store.mutations, 0)

    def test_leaving_rejected_clears_evidence(self):
        self.store.set_status(1, REJECTED)
        self.store.set_observations(1, 'Puerta no cierra')
        self.store.set_photos(1, '/media/a.jpg', '/media/b.jpg')
        self.store.begin_upload(1, 2)

        answer = self.store.set_status(1, APPROVED)

        self.assertEqual(answer.observations, '')
        self.assertIsNone(answer.photo_1_url)
        self.assertIsNone(answer.photo_2_url)
        self.assertFalse(self.store.upload_pending(1))

    def test_staying_rejected_keeps_evidence(self):
        self.store.set_status(1, REJECTED)
        self.store.set_observations(1, 'Ruido en poleas')
        answer = self.store.set_status(1, REJECTED)
        self.assertEqual(answer.observations, 'Ruido en poleas')

    def test_get_returns_a_copy(self):
        self.store.set_status(1, NOT_APPLICABLE)
        copy = self.store.get(1)
        copy.status = APPROVED
        self.assertEqual(self.store.get(1).status, NOT_APPLICABLE)

    def test_upload_lifecycle(self):
        self.store.set_status(3, REJECTED)
        self.store.begin_upload(3, 1)
        self.assertTrue(self.store.upload_pending(3, 1))
        self.assertTrue(self.store.has_pending_uploads)

        answer = self.store.confirm_upload(3, 1, '/media/evidence/3.jpg')
        self.assertEqual(answer.photo_1_url, '/media/evidence/3.jpg')
        self.assertFalse(self.store.has_pending_uploads)

        self.store.begin_upload(3, 2)
        self.store.abort_upload(3, 2)
        self.assertFalse(self.store.upload_pending(3))
        self.assertIsNone(self.store.get(3).photo_2_url)

    def test_invalid_photo_slot(self):
        with self.assertRaises(ValueError):
            self.store.begin_upload(1, 3)

    def test_snapshot_is_sorted_and_detached(self):
        self.store.set_status(5, APPROVED)
        self.store.set_status(2, APPROVED)
        snapshot = self.store.snapshot()
        self.assertEqual([a.question_id for a in snapshot], [2, 5])
        snapshot[0].status = REJECTED
        self.assertEqual(self.store.get(2).status, APPROVED)
