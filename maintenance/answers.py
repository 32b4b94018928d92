from dataclasses import dataclass, replace

PENDING = 'pending'
APPROVED = 'approved'
REJECTED = 'rejected'
NOT_APPLICABLE = 'not_applicable'

STATUSES = (PENDING, APPROVED, REJECTED, NOT_APPLICABLE)

PHOTO_SLOTS = (1, 2)


@dataclass
class AnswerState:
    question_id: int
    status: str = PENDING
    observations: str = ''
    photo_1_url: str = None
    photo_2_url: str = None

    def photo(self, slot):
        return self.photo_1_url if slot == 1 else self.photo_2_url

    @property
    def has_observations(self):
        return bool((self.observations or '').strip())


class AnswerStateStore:
    """
    In-memory answers of the checklist being edited, keyed by question id.

    Answers are created lazily as ``pending`` the first time a question is
    touched. Every mutation bumps ``mutations``; the autosave scheduler reads
    that counter to decide when to flush.
    """

    def __init__(self, answers=None):
        self._answers = {}
        self._uploads = set()
        self.mutations = 0
        for answer in answers or []:
            self._answers[answer.question_id] = answer

    @classmethod
    def from_rows(cls, rows):
        return cls([
            AnswerState(
                question_id=row.question_id,
                status=row.status,
                observations=row.observations or '',
                photo_1_url=row.photo_1_url,
                photo_2_url=row.photo_2_url,
            )
            for row in rows
        ])

    def __contains__(self, question_id):
        return question_id in self._answers

    def __len__(self):
        return len(self._answers)

    def get(self, question_id):
        answer = self._answers.get(question_id)
        if answer is None:
            return AnswerState(question_id=question_id)
        return replace(answer)

    def _touch(self, question_id):
        answer = self._answers.get(question_id)
        if answer is None:
            answer = AnswerState(question_id=question_id)
            self._answers[question_id] = answer
        return answer

    def _mutated(self):
        self.mutations += 1

    def set_status(self, question_id, status):
        if status not in STATUSES:
            raise ValueError(f"Unknown answer status: {status!r}")
        answer = self._touch(question_id)
        if answer.status == REJECTED and status != REJECTED:
            # Evidence only belongs to a rejection
            answer.observations = ''
            answer.photo_1_url = None
            answer.photo_2_url = None
            self._uploads = {u for u in self._uploads if u[0] != question_id}
        answer.status = status
        self._mutated()
        return replace(answer)

    def set_observations(self, question_id, text):
        answer = self._touch(question_id)
        answer.observations = text or ''
        self._mutated()
        return replace(answer)

    def set_photos(self, question_id, photo_1_url, photo_2_url=None):
        answer = self._touch(question_id)
        answer.photo_1_url = photo_1_url or None
        answer.photo_2_url = photo_2_url or None
        self._mutated()
        return replace(answer)

    def begin_upload(self, question_id, slot):
        if slot not in PHOTO_SLOTS:
            raise ValueError(f"Unknown photo slot: {slot!r}")
        self._touch(question_id)
        self._uploads.add((question_id, slot))

    def confirm_upload(self, question_id, slot, url):
        self._uploads.discard((question_id, slot))
        answer = self._touch(question_id)
        if slot == 1:
            return self.set_photos(question_id, url, answer.photo_2_url)
        return self.set_photos(question_id, answer.photo_1_url, url)

    def abort_upload(self, question_id, slot):
        self._uploads.discard((question_id, slot))

    def upload_pending(self, question_id, slot=None):
        if slot is None:
            return any(u[0] == question_id for u in self._uploads)
        return (question_id, slot) in self._uploads

    @property
    def has_pending_uploads(self):
        return bool(self._uploads)

    def snapshot(self):
        """Copies of every answer held, ordered by question id."""
        return [replace(self._answers[k]) for k in sorted(self._answers)]
