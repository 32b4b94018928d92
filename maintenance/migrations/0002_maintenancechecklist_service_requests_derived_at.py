from django.db import migrations, models
from django.db.models import F


def mark_signed_checklists_derived(apps, schema_editor):
    MaintenanceChecklist = apps.get_model('maintenance', 'MaintenanceChecklist')
    MaintenanceChecklist.objects.filter(signature__isnull=False).update(
        service_requests_derived_at=F('updated_at'))


class Migration(migrations.Migration):

    dependencies = [
        ('maintenance', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='maintenancechecklist',
            name='service_requests_derived_at',
            field=models.DateTimeField(blank=True, null=True, verbose_name='Solicitudes Generadas'),
        ),
        migrations.RunPython(mark_signed_checklists_derived, migrations.RunPython.noop),
    ]
