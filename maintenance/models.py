from django.db import models
from django.contrib.auth.models import User
from django.utils import timezone
import uuid

class UserProfile(models.Model):
    ROLE_CHOICES = (
        ('admin', 'Administrador'),
        ('technician', 'Técnico'),
        ('client', 'Cliente'),
    )

    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    token = models.CharField(max_length=100, unique=True, default=uuid.uuid4)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='technician')
    phone = models.CharField(max_length=20, verbose_name="Teléfono", blank=True, null=True)

    def __str__(self):
        return f"{self.user.username} - {self.role}"

class Client(models.Model):
    company_name = models.CharField(max_length=200, verbose_name="Razón Social")
    building_name = models.CharField(max_length=200, verbose_name="Edificio", blank=True, null=True)
    address = models.TextField(verbose_name="Dirección", blank=True, null=True)
    email = models.EmailField(verbose_name="Email de Contacto", blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.building_name or self.company_name

    class Meta:
        verbose_name = "Cliente"
        verbose_name_plural = "Clientes"

class Elevator(models.Model):
    TYPE_CHOICES = (
        ('hydraulic', 'Hidráulico'),
        ('electromechanical', 'Electromecánico'),
    )

    CLASSIFICATION_CHOICES = (
        ('ascensor_residencial', 'Ascensor residencial'),
        ('ascensor_corporativo', 'Ascensor corporativo'),
        ('montacargas', 'Montacargas'),
        ('montaplatos', 'Montaplatos'),
    )

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='elevators', verbose_name="Cliente")
    elevator_number = models.PositiveIntegerField(default=1, verbose_name="Número de Ascensor")
    location_name = models.CharField(max_length=200, verbose_name="Ubicación", blank=True, null=True)
    elevator_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='electromechanical', verbose_name="Tipo")
    classification = models.CharField(max_length=30, choices=CLASSIFICATION_CHOICES, blank=True, null=True, verbose_name="Clasificación")
    capacity_kg = models.PositiveIntegerField(blank=True, null=True, verbose_name="Capacidad (kg)")

    @property
    def is_hydraulic(self):
        return self.elevator_type == 'hydraulic'

    def __str__(self):
        return f"Ascensor {self.elevator_number} - {self.client}"

    class Meta:
        ordering = ['client', 'elevator_number']
        verbose_name = "Ascensor"
        verbose_name_plural = "Ascensores"

class ChecklistQuestion(models.Model):
    FREQUENCY_CHOICES = (
        ('M', 'Mensual'),
        ('T', 'Trimestral'),
        ('S', 'Semestral'),
    )

    number = models.PositiveIntegerField(unique=True, verbose_name="Número")
    section = models.CharField(max_length=200, verbose_name="Sección")
    text = models.TextField(verbose_name="Pregunta")
    frequency = models.CharField(max_length=1, choices=FREQUENCY_CHOICES, default='M', verbose_name="Frecuencia")
    is_hydraulic_only = models.BooleanField(default=False, verbose_name="Solo Hidráulicos")

    def __str__(self):
        return f"{self.number}. {self.text}"

    class Meta:
        ordering = ['number']
        verbose_name = "Pregunta de Checklist"
        verbose_name_plural = "Preguntas de Checklist"

class SignatureRecord(models.Model):
    signer_name = models.CharField(max_length=200, verbose_name="Nombre de quien firma")
    image = models.ImageField(upload_to='signatures/', verbose_name="Firma")
    signed_at = models.DateTimeField(default=timezone.now, verbose_name="Firmado en")

    def __str__(self):
        return f"{self.signer_name} - {self.signed_at:%d/%m/%Y %H:%M}"

    class Meta:
        verbose_name = "Firma"
        verbose_name_plural = "Firmas"

class MaintenanceChecklist(models.Model):
    STATUS_CHOICES = (
        ('pending', 'Pendiente'),
        ('in_progress', 'En Progreso'),
        ('completed', 'Completado'),
    )

    CERTIFICATION_STATUS_CHOICES = (
        ('vigente', 'Vigente'),
        ('vencida', 'Vencida'),
        ('no_legible', 'No legible'),
    )

    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='checklists', verbose_name="Cliente")
    elevator = models.ForeignKey(Elevator, on_delete=models.CASCADE, related_name='checklists', verbose_name="Ascensor")
    technician = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='maintenance_checklists', verbose_name="Técnico")
    month = models.PositiveSmallIntegerField(verbose_name="Mes")
    year = models.PositiveSmallIntegerField(verbose_name="Año")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', verbose_name="Estado")

    # Certification
    last_certification_date = models.DateField(blank=True, null=True, verbose_name="Última Certificación")
    next_certification_month = models.PositiveSmallIntegerField(blank=True, null=True, verbose_name="Mes Próxima Certificación")
    next_certification_year = models.PositiveSmallIntegerField(blank=True, null=True, verbose_name="Año Próxima Certificación")
    certification_dates_unreadable = models.BooleanField(default=False, verbose_name="Fechas no legibles")
    certification_status = models.CharField(max_length=20, choices=CERTIFICATION_STATUS_CHOICES, blank=True, null=True, verbose_name="Estado de Certificación")

    signature = models.ForeignKey(SignatureRecord, on_delete=models.PROTECT, null=True, blank=True, related_name='checklists', verbose_name="Firma")
    document = models.FileField(upload_to='checklists/', null=True, blank=True, verbose_name="Informe PDF")
    folio_number = models.PositiveIntegerField(unique=True, null=True, blank=True, verbose_name="Folio")
    service_requests_derived_at = models.DateTimeField(null=True, blank=True, verbose_name="Solicitudes Generadas")

    completion_date = models.DateTimeField(null=True, blank=True, verbose_name="Fecha de Término")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_completed(self):
        return self.status == 'completed'

    @property
    def is_signed(self):
        return self.signature_id is not None

    @property
    def period_label(self):
        return f"{self.month:02d}/{self.year}"

    def __str__(self):
        return f"Checklist {self.elevator} - {self.period_label}"

    class Meta:
        ordering = ['-year', '-month', 'elevator']
        verbose_name = "Checklist de Mantenimiento"
        verbose_name_plural = "Checklists de Mantenimiento"

class ChecklistAnswer(models.Model):
    STATUS_CHOICES = (
        ('pending', 'Pendiente'),
        ('approved', 'Aprobado'),
        ('rejected', 'Rechazado'),
        ('not_applicable', 'No Aplica'),
    )

    checklist = models.ForeignKey(MaintenanceChecklist, on_delete=models.CASCADE, related_name='answers')
    question = models.ForeignKey(ChecklistQuestion, on_delete=models.PROTECT, related_name='answers')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', verbose_name="Estado")
    observations = models.TextField(blank=True, default='', verbose_name="Observaciones")
    photo_1_url = models.CharField(max_length=500, blank=True, null=True, verbose_name="Foto 1")
    photo_2_url = models.CharField(max_length=500, blank=True, null=True, verbose_name="Foto 2")
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.checklist_id} / {self.question.number}: {self.status}"

    class Meta:
        unique_together = ('checklist', 'question')
        ordering = ['question__number']
        verbose_name = "Respuesta de Checklist"
        verbose_name_plural = "Respuestas de Checklist"

class ServiceRequest(models.Model):
    REQUEST_TYPE_CHOICES = (
        ('repair', 'Reparación'),
        ('parts', 'Repuestos'),
        ('support', 'Soporte'),
        ('inspection', 'Inspección'),
    )

    SOURCE_TYPE_CHOICES = (
        ('maintenance_checklist', 'Mantenimiento'),
        ('emergency_visit', 'Emergencia'),
        ('manual', 'Manual'),
    )

    PRIORITY_CHOICES = (
        ('low', 'Baja'),
        ('medium', 'Media'),
        ('high', 'Alta'),
        ('critical', 'Crítica'),
    )

    STATUS_CHOICES = (
        ('pending', 'Pendiente'),
        ('analyzing', 'En Análisis'),
        ('in_progress', 'En Progreso'),
        ('completed', 'Completada'),
        ('rejected', 'Rechazada'),
    )

    request_type = models.CharField(max_length=20, choices=REQUEST_TYPE_CHOICES, default='repair', verbose_name="Tipo")
    source_type = models.CharField(max_length=30, choices=SOURCE_TYPE_CHOICES, default='maintenance_checklist', verbose_name="Origen")
    source_checklist = models.ForeignKey(MaintenanceChecklist, on_delete=models.SET_NULL, null=True, blank=True, related_name='service_requests', verbose_name="Checklist de Origen")
    elevator = models.ForeignKey(Elevator, on_delete=models.CASCADE, related_name='service_requests', verbose_name="Ascensor")
    client = models.ForeignKey(Client, on_delete=models.CASCADE, related_name='service_requests', verbose_name="Cliente")
    created_by_technician = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='created_service_requests', verbose_name="Técnico")

    title = models.CharField(max_length=300, verbose_name="Título")
    description = models.TextField(verbose_name="Descripción")
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium', verbose_name="Prioridad")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', verbose_name="Estado")
    photo_1_url = models.CharField(max_length=500, blank=True, null=True, verbose_name="Foto 1")
    photo_2_url = models.CharField(max_length=500, blank=True, null=True, verbose_name="Foto 2")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    @property
    def is_critical(self):
        return self.priority in ('high', 'critical')

    def __str__(self):
        return f"{self.get_priority_display()} - {self.title}"

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Solicitud de Servicio"
        verbose_name_plural = "Solicitudes de Servicio"

class Notification(models.Model):
    TYPE_CHOICES = (
        ('service_request', 'Solicitud de Servicio'),
        ('alert', 'Alerta de Sistema'),
    )

    recipient = models.ForeignKey(User, on_delete=models.CASCADE, related_name='notifications', verbose_name="Destinatario")
    title = models.CharField(max_length=200, verbose_name="Título")
    message = models.TextField(verbose_name="Mensaje")
    notification_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='alert')
    related_request = models.ForeignKey(ServiceRequest, on_delete=models.CASCADE, null=True, blank=True, related_name='notifications')

    is_read = models.BooleanField(default=False, verbose_name="Leída")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = "Notificación"
        verbose_name_plural = "Notificaciones"

    def __str__(self):
        return f"{self.title} - {self.recipient.username}"

class SystemSettings(models.Model):
    allow_checklist_pdf_debug = models.BooleanField(
        default=False,
        verbose_name="Liberar PDF de Checklist (Debug)",
        help_text="Si está marcado, permite generar el PDF de checklists no firmados para pruebas."
    )

    def __str__(self):
        return "Configuración del Sistema"

    class Meta:
        verbose_name = "Configuración del Sistema"
        verbose_name_plural = "Configuración del Sistema"
