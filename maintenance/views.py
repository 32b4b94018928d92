import logging

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.views import View

from .exceptions import PersistenceError
from .exporter import ChecklistDocumentExporter
from .models import MaintenanceChecklist, SystemSettings

logger = logging.getLogger(__name__)


class ChecklistPDFView(LoginRequiredMixin, View):
    """
    Downloads the report of a checklist.

    Signed checklists serve their stored document, regenerating it when it
    went missing. Unsigned ones are only rendered when the debug switch in
    SystemSettings is on, and never stored.
    """

    def get(self, request, pk):
        checklist = get_object_or_404(
            MaintenanceChecklist.objects.select_related('client', 'elevator', 'technician', 'signature'), pk=pk)
        filename = f"checklist_{checklist.folio_number or checklist.pk}_{checklist.year}_{checklist.month:02d}.pdf"

        if not checklist.is_signed:
            system_settings = SystemSettings.objects.first()
            if not (system_settings and system_settings.allow_checklist_pdf_debug):
                return HttpResponse("El checklist aún no ha sido firmado.", status=403)
            try:
                content = ChecklistDocumentExporter().render(checklist, list(checklist.answers.all()), None)
            except PersistenceError:
                logger.exception("Debug render failed for checklist %s", checklist.pk)
                return HttpResponse("No se pudo generar el PDF.", status=503)
            return self.pdf_response(content, filename)

        content = self.stored_document(checklist)
        if content is None:
            try:
                document = ChecklistDocumentExporter().export(checklist)
            except PersistenceError:
                logger.exception("Could not regenerate document for checklist %s", checklist.pk)
                return HttpResponse("No se pudo generar el PDF.", status=503)
            checklist.document.name = document.reference
            checklist.save(update_fields=['document', 'updated_at'])
            content = document.content
        return self.pdf_response(content, filename)

    def stored_document(self, checklist):
        if not checklist.document:
            return None
        try:
            with checklist.document.open('rb') as handle:
                return handle.read()
        except OSError:
            logger.warning("Stored document %s for checklist %s is missing", checklist.document.name, checklist.pk)
            return None

    def pdf_response(self, content, filename):
        response = HttpResponse(content, content_type='application/pdf')
        response['Content-Disposition'] = f'attachment; filename="{filename}"'
        return response
