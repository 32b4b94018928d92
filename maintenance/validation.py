from dataclasses import dataclass, field

from .answers import PENDING, REJECTED

MISSING_ANSWER = 'pending'
MISSING_OBSERVATIONS = 'missing_observations'
MISSING_PHOTO = 'missing_photo'
PHOTO_UPLOAD_PENDING = 'photo_upload_pending'


@dataclass
class BlockingQuestion:
    question_id: int
    number: int
    section: str
    reasons: list

    def as_dict(self):
        return {
            'question_id': self.question_id,
            'number': self.number,
            'section': self.section,
            'reasons': list(self.reasons),
        }


@dataclass
class CompletionReport:
    may_complete: bool
    blocking: list = field(default_factory=list)

    @property
    def blocking_ids(self):
        return [b.question_id for b in self.blocking]

    def as_dict(self):
        return {
            'may_complete': self.may_complete,
            'blocking': [b.as_dict() for b in self.blocking],
        }


def blocking_reasons(answer, store):
    if answer.status == PENDING:
        return [MISSING_ANSWER]
    if answer.status != REJECTED:
        return []
    reasons = []
    if not answer.has_observations:
        reasons.append(MISSING_OBSERVATIONS)
    if not answer.photo_1_url:
        if store.upload_pending(answer.question_id, 1):
            reasons.append(PHOTO_UPLOAD_PENDING)
        else:
            reasons.append(MISSING_PHOTO)
    return reasons


def evaluate_completion(questions, store):
    """
    Decides whether the checklist may be closed.

    Only ``questions`` (the filtered set for this visit) are evaluated. A
    question blocks when it is still pending, or when it is rejected without
    observations or without a confirmed first photo.
    """
    blocking = []
    for question in questions:
        reasons = blocking_reasons(store.get(question.pk), store)
        if reasons:
            blocking.append(BlockingQuestion(
                question_id=question.pk,
                number=question.number,
                section=question.section,
                reasons=reasons,
            ))
    return CompletionReport(may_complete=not blocking, blocking=blocking)


def progress(questions, store):
    total = len(questions)
    answered = sum(1 for q in questions if store.get(q.pk).status != PENDING)
    percentage = int(answered * 100 / total + 0.5) if total else 0
    return {'answered': answered, 'total': total, 'percentage': percentage}
