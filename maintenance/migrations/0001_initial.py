import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ChecklistQuestion',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('number', models.PositiveIntegerField(unique=True, verbose_name='Número')),
                ('section', models.CharField(max_length=200, verbose_name='Sección')),
                ('text', models.TextField(verbose_name='Pregunta')),
                ('frequency', models.CharField(choices=[('M', 'Mensual'), ('T', 'Trimestral'), ('S', 'Semestral')], default='M', max_length=1, verbose_name='Frecuencia')),
                ('is_hydraulic_only', models.BooleanField(default=False, verbose_name='Solo Hidráulicos')),
            ],
            options={
                'verbose_name': 'Pregunta de Checklist',
                'verbose_name_plural': 'Preguntas de Checklist',
                'ordering': ['number'],
            },
        ),
        migrations.CreateModel(
            name='Client',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(max_length=200, verbose_name='Razón Social')),
                ('building_name', models.CharField(blank=True, max_length=200, null=True, verbose_name='Edificio')),
                ('address', models.TextField(blank=True, null=True, verbose_name='Dirección')),
                ('email', models.EmailField(blank=True, max_length=254, null=True, verbose_name='Email de Contacto')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Cliente',
                'verbose_name_plural': 'Clientes',
            },
        ),
        migrations.CreateModel(
            name='SignatureRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('signer_name', models.CharField(max_length=200, verbose_name='Nombre de quien firma')),
                ('image', models.ImageField(upload_to='signatures/', verbose_name='Firma')),
                ('signed_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='Firmado en')),
            ],
            options={
                'verbose_name': 'Firma',
                'verbose_name_plural': 'Firmas',
            },
        ),
        migrations.CreateModel(
            name='SystemSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('allow_checklist_pdf_debug', models.BooleanField(default=False, help_text='Si está marcado, permite generar el PDF de checklists no firmados para pruebas.', verbose_name='Liberar PDF de Checklist (Debug)')),
            ],
            options={
                'verbose_name': 'Configuración del Sistema',
                'verbose_name_plural': 'Configuración del Sistema',
            },
        ),
        migrations.CreateModel(
            name='Elevator',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('elevator_number', models.PositiveIntegerField(default=1, verbose_name='Número de Ascensor')),
                ('location_name', models.CharField(blank=True, max_length=200, null=True, verbose_name='Ubicación')),
                ('elevator_type', models.CharField(choices=[('hydraulic', 'Hidráulico'), ('electromechanical', 'Electromecánico')], default='electromechanical', max_length=20, verbose_name='Tipo')),
                ('classification', models.CharField(blank=True, choices=[('ascensor_residencial', 'Ascensor residencial'), ('ascensor_corporativo', 'Ascensor corporativo'), ('montacargas', 'Montacargas'), ('montaplatos', 'Montaplatos')], max_length=30, null=True, verbose_name='Clasificación')),
                ('capacity_kg', models.PositiveIntegerField(blank=True, null=True, verbose_name='Capacidad (kg)')),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='elevators', to='maintenance.client', verbose_name='Cliente')),
            ],
            options={
                'verbose_name': 'Ascensor',
                'verbose_name_plural': 'Ascensores',
                'ordering': ['client', 'elevator_number'],
            },
        ),
        migrations.CreateModel(
            name='MaintenanceChecklist',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('month', models.PositiveSmallIntegerField(verbose_name='Mes')),
                ('year', models.PositiveSmallIntegerField(verbose_name='Año')),
                ('status', models.CharField(choices=[('pending', 'Pendiente'), ('in_progress', 'En Progreso'), ('completed', 'Completado')], default='pending', max_length=20, verbose_name='Estado')),
                ('last_certification_date', models.DateField(blank=True, null=True, verbose_name='Última Certificación')),
                ('next_certification_month', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Mes Próxima Certificación')),
                ('next_certification_year', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Año Próxima Certificación')),
                ('certification_dates_unreadable', models.BooleanField(default=False, verbose_name='Fechas no legibles')),
                ('certification_status', models.CharField(blank=True, choices=[('vigente', 'Vigente'), ('vencida', 'Vencida'), ('no_legible', 'No legible')], max_length=20, null=True, verbose_name='Estado de Certificación')),
                ('document', models.FileField(blank=True, null=True, upload_to='checklists/', verbose_name='Informe PDF')),
                ('folio_number', models.PositiveIntegerField(blank=True, null=True, unique=True, verbose_name='Folio')),
                ('completion_date', models.DateTimeField(blank=True, null=True, verbose_name='Fecha de Término')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='checklists', to='maintenance.client', verbose_name='Cliente')),
                ('elevator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='checklists', to='maintenance.elevator', verbose_name='Ascensor')),
                ('signature', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='checklists', to='maintenance.signaturerecord', verbose_name='Firma')),
                ('technician', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='maintenance_checklists', to=settings.AUTH_USER_MODEL, verbose_name='Técnico')),
            ],
            options={
                'verbose_name': 'Checklist de Mantenimiento',
                'verbose_name_plural': 'Checklists de Mantenimiento',
                'ordering': ['-year', '-month', 'elevator'],
            },
        ),
        migrations.CreateModel(
            name='ChecklistAnswer',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('status', models.CharField(choices=[('pending', 'Pendiente'), ('approved', 'Aprobado'), ('rejected', 'Rechazado'), ('not_applicable', 'No Aplica')], default='pending', max_length=20, verbose_name='Estado')),
                ('observations', models.TextField(blank=True, default='', verbose_name='Observaciones')),
                ('photo_1_url', models.CharField(blank=True, max_length=500, null=True, verbose_name='Foto 1')),
                ('photo_2_url', models.CharField(blank=True, max_length=500, null=True, verbose_name='Foto 2')),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('checklist', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='answers', to='maintenance.maintenancechecklist')),
                ('question', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='answers', to='maintenance.checklistquestion')),
            ],
            options={
                'verbose_name': 'Respuesta de Checklist',
                'verbose_name_plural': 'Respuestas de Checklist',
                'ordering': ['question__number'],
                'unique_together': {('checklist', 'question')},
            },
        ),
        migrations.CreateModel(
            name='ServiceRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('request_type', models.CharField(choices=[('repair', 'Reparación'), ('parts', 'Repuestos'), ('support', 'Soporte'), ('inspection', 'Inspección')], default='repair', max_length=20, verbose_name='Tipo')),
                ('source_type', models.CharField(choices=[('maintenance_checklist', 'Mantenimiento'), ('emergency_visit', 'Emergencia'), ('manual', 'Manual')], default='maintenance_checklist', max_length=30, verbose_name='Origen')),
                ('title', models.CharField(max_length=300, verbose_name='Título')),
                ('description', models.TextField(verbose_name='Descripción')),
                ('priority', models.CharField(choices=[('low', 'Baja'), ('medium', 'Media'), ('high', 'Alta'), ('critical', 'Crítica')], default='medium', max_length=10, verbose_name='Prioridad')),
                ('status', models.CharField(choices=[('pending', 'Pendiente'), ('analyzing', 'En Análisis'), ('in_progress', 'En Progreso'), ('completed', 'Completada'), ('rejected', 'Rechazada')], default='pending', max_length=20, verbose_name='Estado')),
                ('photo_1_url', models.CharField(blank=True, max_length=500, null=True, verbose_name='Foto 1')),
                ('photo_2_url', models.CharField(blank=True, max_length=500, null=True, verbose_name='Foto 2')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('client', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='service_requests', to='maintenance.client', verbose_name='Cliente')),
                ('created_by_technician', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_service_requests', to=settings.AUTH_USER_MODEL, verbose_name='Técnico')),
                ('elevator', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='service_requests', to='maintenance.elevator', verbose_name='Ascensor')),
                ('source_checklist', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='service_requests', to='maintenance.maintenancechecklist', verbose_name='Checklist de Origen')),
            ],
            options={
                'verbose_name': 'Solicitud de Servicio',
                'verbose_name_plural': 'Solicitudes de Servicio',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200, verbose_name='Título')),
                ('message', models.TextField(verbose_name='Mensaje')),
                ('notification_type', models.CharField(choices=[('service_request', 'Solicitud de Servicio'), ('alert', 'Alerta de Sistema')], default='alert', max_length=20)),
                ('is_read', models.BooleanField(default=False, verbose_name='Leída')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('recipient', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL, verbose_name='Destinatario')),
                ('related_request', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='maintenance.servicerequest')),
            ],
            options={
                'verbose_name': 'Notificación',
                'verbose_name_plural': 'Notificaciones',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('token', models.CharField(default=uuid.uuid4, max_length=100, unique=True)),
                ('role', models.CharField(choices=[('admin', 'Administrador'), ('technician', 'Técnico'), ('client', 'Cliente')], default='technician', max_length=20)),
                ('phone', models.CharField(blank=True, max_length=20, null=True, verbose_name='Teléfono')),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
