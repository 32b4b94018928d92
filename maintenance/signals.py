import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from .catalog import invalidate_catalog
from .models import ChecklistQuestion, Notification, ServiceRequest, UserProfile

logger = logging.getLogger(__name__)


@receiver(post_save, sender=ServiceRequest)
def notify_admins_of_service_request(sender, instance, created, **kwargs):
    """
    Notifies every administrator when a service request is opened.
    """
    if not created:
        return

    elevator = instance.elevator
    client_name = str(instance.client) if instance.client_id else "N/A"
    admins = UserProfile.objects.filter(role='admin').select_related('user')
    for profile in admins:
        Notification.objects.create(
            recipient=profile.user,
            title=f"Nueva solicitud: {instance.get_priority_display()}",
            message=f"{instance.title}\nCliente: {client_name} - Ascensor N° {elevator.elevator_number}.",
            notification_type='service_request',
            related_request=instance,
        )
    logger.debug("Service request %s notified to %d admins", instance.pk, len(admins))


@receiver(post_save, sender=ChecklistQuestion)
@receiver(post_delete, sender=ChecklistQuestion)
def refresh_question_catalog(sender, **kwargs):
    invalidate_catalog()
