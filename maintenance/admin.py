from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from .models import (
    ChecklistAnswer, ChecklistQuestion, Client, Elevator, MaintenanceChecklist, Notification,
    ServiceRequest, SignatureRecord, SystemSettings, UserProfile,
)


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'role', 'phone')
    list_filter = ('role',)
    search_fields = ('user__username', 'user__first_name', 'user__last_name')
    readonly_fields = ('token',)


class ElevatorInline(admin.TabularInline):
    model = Elevator
    extra = 0


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ('company_name', 'building_name', 'email')
    search_fields = ('company_name', 'building_name', 'address')
    inlines = [ElevatorInline]


@admin.register(Elevator)
class ElevatorAdmin(admin.ModelAdmin):
    list_display = ('elevator_number', 'client', 'location_name', 'elevator_type', 'classification')
    list_filter = ('elevator_type', 'classification')
    search_fields = ('client__company_name', 'client__building_name', 'location_name')


@admin.register(ChecklistQuestion)
class ChecklistQuestionAdmin(admin.ModelAdmin):
    list_display = ('number', 'section', 'text', 'frequency', 'is_hydraulic_only')
    list_filter = ('section', 'frequency', 'is_hydraulic_only')
    search_fields = ('text', 'section')


class ChecklistAnswerInline(admin.TabularInline):
    model = ChecklistAnswer
    extra = 0
    readonly_fields = ('question', 'status', 'observations', 'photo_1_url', 'photo_2_url', 'updated_at')
    can_delete = False


@admin.register(MaintenanceChecklist)
class MaintenanceChecklistAdmin(admin.ModelAdmin):
    list_display = ('id', 'folio_number', 'client', 'elevator', 'period_label', 'status', 'certification_status', 'pdf_link')
    list_filter = ('status', 'certification_status', 'year', 'month')
    search_fields = ('client__company_name', 'client__building_name', 'technician__username')
    readonly_fields = ('signature', 'folio_number', 'document', 'service_requests_derived_at', 'completion_date', 'created_at', 'updated_at')
    inlines = [ChecklistAnswerInline]

    def pdf_link(self, obj):
        return format_html('<a href="{}">PDF</a>', reverse('checklist_pdf', args=[obj.pk]))
    pdf_link.short_description = 'Informe'


@admin.register(SignatureRecord)
class SignatureRecordAdmin(admin.ModelAdmin):
    list_display = ('signer_name', 'signed_at')
    search_fields = ('signer_name',)


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'client', 'elevator', 'priority', 'status', 'created_at')
    list_filter = ('priority', 'status', 'request_type', 'source_type')
    search_fields = ('title', 'description', 'client__company_name')
    actions = ['mark_as_completed']

    @admin.action(description='Marcar solicitudes seleccionadas como Completadas')
    def mark_as_completed(self, request, queryset):
        updated = queryset.update(status='completed')
        self.message_user(request, f"{updated} solicitudes marcadas como completadas.")


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('title', 'recipient', 'notification_type', 'is_read', 'created_at')
    list_filter = ('notification_type', 'is_read')


admin.site.register(SystemSettings)
