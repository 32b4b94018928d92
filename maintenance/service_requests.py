import logging
from dataclasses import dataclass, field

from django.db import DatabaseError, transaction
from django.utils import timezone

from .answers import REJECTED
from .conf import get_setting
from .models import ChecklistAnswer, ServiceRequest
from .text import normalize_text

logger = logging.getLogger(__name__)

HIGH = 'high'
NORMAL = 'medium'


def is_critical_section(section, critical_sections=None):
    if critical_sections is None:
        critical_sections = get_setting('CRITICAL_SECTIONS')
    return normalize_text(section) in {normalize_text(s) for s in critical_sections}


@dataclass
class DerivationResult:
    created: list = field(default_factory=list)
    failed: int = 0

    @property
    def count(self):
        return len(self.created)


def create_service_request(checklist, answer):
    question = answer.question
    critical = is_critical_section(question.section)
    return ServiceRequest.objects.create(
        request_type='repair',
        source_type='maintenance_checklist',
        source_checklist=checklist,
        elevator_id=checklist.elevator_id,
        client_id=checklist.client_id,
        created_by_technician_id=checklist.technician_id,
        title=f"Pregunta {question.number}: {question.text}"[:300],
        description=answer.observations.strip(),
        priority=HIGH if critical else NORMAL,
        photo_1_url=answer.photo_1_url,
        photo_2_url=answer.photo_2_url,
    )


class ServiceRequestDeriver:
    """
    Turns rejected answers with observations into follow-up service requests.

    One request per qualifying answer, never deduplicated across visits.
    Each checklist is derived at most once: its requests and its
    ``service_requests_derived_at`` mark are written in one transaction, so
    an interrupted run is picked up again on the next signing attempt.
    A failed query or insert is logged and skipped; it never blocks signing.
    """

    def __init__(self, create=create_service_request):
        self.create = create

    def qualifying_answers(self, checklist):
        answers = (ChecklistAnswer.objects
                   .filter(checklist=checklist, status=REJECTED)
                   .select_related('question')
                   .order_by('question__number'))
        return [a for a in answers if (a.observations or '').strip()]

    def derive(self, checklists, now=None):
        now = now or timezone.now()
        result = DerivationResult()
        for checklist in checklists:
            if checklist.service_requests_derived_at is not None:
                continue
            created = []
            try:
                with transaction.atomic():
                    for answer in self.qualifying_answers(checklist):
                        try:
                            with transaction.atomic():
                                created.append(self.create(checklist, answer))
                        except DatabaseError:
                            result.failed += 1
                            logger.exception("Service request for checklist %s question %s could not be created",
                                             checklist.pk, answer.question.number)
                    checklist.service_requests_derived_at = now
                    checklist.save(update_fields=['service_requests_derived_at', 'updated_at'])
            except DatabaseError:
                checklist.service_requests_derived_at = None
                result.failed += 1
                logger.exception("Service requests for checklist %s could not be derived", checklist.pk)
                continue
            result.created.extend(created)
        logger.info("Derived %d service requests (%d failed)", result.count, result.failed)
        return result
