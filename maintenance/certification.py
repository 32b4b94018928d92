import datetime
import logging

from django.db import DatabaseError
from django.utils import timezone

from .conf import get_setting
from .exceptions import ChecklistLockedError, ChecklistValidationError, PersistenceError

logger = logging.getLogger(__name__)

VIGENTE = 'vigente'
VENCIDA = 'vencida'
UNREADABLE = 'no_legible'


def validity_cutoff(month, year):
    """Last day the certification counts as valid (inclusive, end of day)."""
    return datetime.date(year, month, get_setting('CERTIFICATION_CUTOFF_DAY'))


def certification_status(month, year, unreadable=False, now=None):
    """
    Tri-state validity of a certification expiring in ``month``/``year``.

    Pure function of its inputs: ``vigente`` up to and including the cutoff
    day of that month, ``vencida`` from the next day on, ``no_legible`` when
    the dates could not be read (no date math at all in that case).
    """
    if unreadable:
        return UNREADABLE
    if month is None or year is None:
        return None
    now = now or timezone.now()
    if isinstance(now, datetime.datetime):
        if timezone.is_aware(now):
            now = timezone.localtime(now)
        today = now.date()
    else:
        today = now
    return VIGENTE if today <= validity_cutoff(month, year) else VENCIDA


def parse_month_year(value):
    """
    Accepts ``YYYY-MM``, ``YYYY-MM-DD`` or a date and returns (month, year).

    Raises ChecklistValidationError on anything else.
    """
    if value is None or value == '':
        return None, None
    if isinstance(value, datetime.date):
        return value.month, value.year
    parts = str(value).strip().split('-')
    try:
        if len(parts) not in (2, 3):
            raise ValueError(value)
        year, month = int(parts[0]), int(parts[1])
        if len(parts) == 3:
            datetime.date(year, month, int(parts[2]))
    except ValueError:
        raise ChecklistValidationError(
            "Fecha de próxima certificación inválida.", blocking=['next_certification'])
    check_month_year(month, year)
    return month, year


def check_month_year(month, year):
    if not 1 <= month <= 12:
        raise ChecklistValidationError("Mes de certificación inválido.", blocking=['next_certification'])
    if not 1900 <= year <= 9999:
        raise ChecklistValidationError("Año de certificación inválido.", blocking=['next_certification'])


def record_certification(checklist, last_date=None, next_month=None, next_year=None,
                         unreadable=False, now=None):
    """
    Stores the certification fields on ``checklist`` with their derived status.

    Either next month/year or ``unreadable`` must be given. Completed
    checklists are locked: their certification history is append-only.
    """
    if checklist.is_completed:
        raise ChecklistLockedError("El checklist ya fue completado; la certificación no puede modificarse.")

    if unreadable:
        next_month = next_year = None
    elif next_month is None or next_year is None:
        raise ChecklistValidationError(
            "Ingresa la fecha de la próxima certificación o marca que el certificado no es legible.",
            blocking=['next_certification'])
    else:
        check_month_year(next_month, next_year)

    checklist.last_certification_date = None if unreadable else last_date
    checklist.next_certification_month = next_month
    checklist.next_certification_year = next_year
    checklist.certification_dates_unreadable = bool(unreadable)
    checklist.certification_status = certification_status(next_month, next_year, unreadable, now)

    try:
        checklist.save(update_fields=[
            'last_certification_date', 'next_certification_month', 'next_certification_year',
            'certification_dates_unreadable', 'certification_status', 'updated_at',
        ])
    except DatabaseError as exc:
        logger.warning("Certification flush failed for checklist %s: %s", checklist.pk, exc)
        raise PersistenceError("No se pudo guardar la certificación.") from exc

    logger.info("Checklist %s certification recorded: %s", checklist.pk, checklist.certification_status)
    return checklist.certification_status
