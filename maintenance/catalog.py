import logging

from django.core.cache import cache

from .conf import get_setting
from .models import ChecklistQuestion

logger = logging.getLogger(__name__)

MONTHLY = 'M'
QUARTERLY = 'T'
SEMESTRAL = 'S'

CATALOG_CACHE_KEY = 'maintenance:question-catalog'


def applies_this_month(question, month, is_hydraulic):
    if question.is_hydraulic_only and not is_hydraulic:
        return False
    if question.frequency == MONTHLY:
        return True
    if question.frequency == QUARTERLY:
        return month % 3 == 0
    if question.frequency == SEMESTRAL:
        return month % 6 == 0
    return False


def filter_questions(questions, month, is_hydraulic):
    """
    Returns the questions that must be answered on a visit in ``month``.

    Monthly questions always apply, quarterly ones on months 3/6/9/12 and
    semestral ones on months 6/12. Hydraulic-only questions are dropped for
    electromechanical elevators. Catalog order (question number) is kept.
    """
    ordered = sorted(questions, key=lambda q: q.number)
    return [q for q in ordered if applies_this_month(q, month, is_hydraulic)]


def load_catalog():
    """The full question catalog, cached process-wide. Read-only."""
    questions = cache.get(CATALOG_CACHE_KEY)
    if questions is None:
        questions = list(ChecklistQuestion.objects.order_by('number'))
        cache.set(CATALOG_CACHE_KEY, questions, get_setting('CATALOG_CACHE_TIMEOUT'))
        logger.debug("Question catalog loaded (%d questions)", len(questions))
    return questions


def invalidate_catalog():
    cache.delete(CATALOG_CACHE_KEY)


def questions_for(elevator, month):
    return filter_questions(load_catalog(), month, elevator.is_hydraulic)
