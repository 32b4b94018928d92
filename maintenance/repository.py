import logging

from django.db import DatabaseError, transaction
from django.db.models import Max, Q
from django.utils import timezone

from .exceptions import ChecklistValidationError, DuplicateChecklistError, PersistenceError
from .models import ChecklistAnswer, MaintenanceChecklist

logger = logging.getLogger(__name__)


class ChecklistAnswerWriter:
    """
    Upserts a full answer snapshot keyed by (checklist, question).

    Writing the same snapshot twice leaves exactly one row per question.
    The first successful write moves a ``pending`` checklist to
    ``in_progress``.
    """

    def __init__(self, checklist_id):
        self.checklist_id = checklist_id

    def __call__(self, snapshot):
        try:
            with transaction.atomic():
                for answer in snapshot:
                    ChecklistAnswer.objects.update_or_create(
                        checklist_id=self.checklist_id,
                        question_id=answer.question_id,
                        defaults={
                            'status': answer.status,
                            'observations': answer.observations or '',
                            'photo_1_url': answer.photo_1_url,
                            'photo_2_url': answer.photo_2_url,
                        },
                    )
                MaintenanceChecklist.objects.filter(pk=self.checklist_id, status='pending').update(
                    status='in_progress', updated_at=timezone.now())
                MaintenanceChecklist.objects.filter(pk=self.checklist_id).update(updated_at=timezone.now())
        except DatabaseError as exc:
            raise PersistenceError(f"No se pudieron guardar las respuestas del checklist {self.checklist_id}.") from exc


def start_or_resume_checklist(client, elevator, technician, month, year):
    """
    Returns the open checklist for (client, elevator, period), creating it if needed.

    Any non-completed checklist for the period is reused. A period that
    already has a completed checklist is refused.
    """
    if not 1 <= int(month) <= 12:
        raise ChecklistValidationError("Mes inválido.", blocking=['month'])
    if elevator.client_id != client.pk:
        raise ChecklistValidationError("El ascensor no pertenece al cliente seleccionado.", blocking=['elevator'])

    try:
        existing = MaintenanceChecklist.objects.filter(
            client=client, elevator=elevator, month=month, year=year)
        if existing.filter(status='completed').exists():
            raise DuplicateChecklistError(
                f"Ya existe un checklist completado para el ascensor {elevator.elevator_number} en {int(month):02d}/{year}.",
                blocking=['period'])

        checklist = existing.exclude(status='completed').order_by('created_at').first()
        if checklist is not None:
            logger.info("Resuming checklist %s (%s)", checklist.pk, checklist.status)
            return checklist

        checklist = MaintenanceChecklist.objects.create(
            client=client, elevator=elevator, technician=technician,
            month=month, year=year, status='pending')
    except DatabaseError as exc:
        raise PersistenceError("No se pudo abrir el checklist.") from exc

    logger.info("Checklist %s created for elevator %s, period %02d/%s",
                checklist.pk, elevator.pk, int(month), year)
    return checklist


def unfinished_signing(client, technician):
    """
    Completed checklists of this client and technician whose signing did not
    finish: unsigned, without a document, or without derived service requests.
    """
    try:
        return list(MaintenanceChecklist.objects
                    .filter(client=client, technician=technician, status='completed')
                    .filter(Q(signature__isnull=True) | Q(document='') | Q(document__isnull=True)
                            | Q(service_requests_derived_at__isnull=True))
                    .order_by('pk')
                    .values_list('pk', flat=True))
    except DatabaseError as exc:
        raise PersistenceError("No se pudieron cargar los checklists pendientes de firma.") from exc


def load_answer_rows(checklist_id):
    try:
        return list(ChecklistAnswer.objects.filter(checklist_id=checklist_id))
    except DatabaseError as exc:
        raise PersistenceError("No se pudieron cargar las respuestas.") from exc


def mark_completed(checklist, now=None):
    checklist.status = 'completed'
    checklist.completion_date = now or timezone.now()
    try:
        checklist.save(update_fields=['status', 'completion_date', 'updated_at'])
    except DatabaseError as exc:
        raise PersistenceError("No se pudo completar el checklist.") from exc
    logger.info("Checklist %s completed", checklist.pk)
    return checklist


def next_folio_number():
    current = MaintenanceChecklist.objects.aggregate(top=Max('folio_number'))['top']
    return (current or 0) + 1
