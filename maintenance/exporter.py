import logging
import os
from dataclasses import dataclass
from io import BytesIO

from django.conf import settings
from django.core.files.base import ContentFile
from django.template.loader import render_to_string
from django.utils import timezone
from xhtml2pdf import pisa

from .catalog import applies_this_month, load_catalog
from .conf import get_setting
from .exceptions import DocumentExportError, PersistenceError
from .models import ChecklistAnswer
from .storage import store_file

logger = logging.getLogger(__name__)

OUT_OF_PERIOD = 'out_of_period'

MONTHS = [
    'Enero', 'Febrero', 'Marzo', 'Abril', 'Mayo', 'Junio',
    'Julio', 'Agosto', 'Septiembre', 'Octubre', 'Noviembre', 'Diciembre'
]

STATUS_LABELS = {
    'approved': 'Aprobado',
    'rejected': 'Rechazado',
    'not_applicable': 'No aplica',
    'pending': 'Pendiente',
    OUT_OF_PERIOD: 'Fuera de periodo',
}


@dataclass
class ExportedDocument:
    content: bytes
    reference: str


def build_report_rows(checklist, answers, catalog=None):
    """
    One row per catalog question. Questions that do not apply to this
    visit are reported as out of period instead of being left out.
    """
    catalog = catalog if catalog is not None else load_catalog()
    by_question = {a.question_id: a for a in answers}
    is_hydraulic = checklist.elevator.is_hydraulic
    rows = []
    for question in catalog:
        if not applies_this_month(question, checklist.month, is_hydraulic):
            status, observations, photos = OUT_OF_PERIOD, '', []
        else:
            answer = by_question.get(question.pk)
            status = answer.status if answer else 'pending'
            observations = (answer.observations or '') if answer else ''
            photos = [p for p in ((answer.photo_1_url, answer.photo_2_url) if answer else ()) if p]
        rows.append({
            'number': question.number,
            'section': question.section,
            'text': question.text,
            'status': status,
            'status_label': STATUS_LABELS.get(status, status),
            'observations': observations,
            'photos': photos,
        })
    return rows


def build_report_context(checklist, answers, signature):
    rows = build_report_rows(checklist, answers)
    sections = []
    for row in rows:
        if not sections or sections[-1]['name'] != row['section']:
            sections.append({'name': row['section'], 'rows': []})
        sections[-1]['rows'].append(row)

    technician = checklist.technician
    return {
        'checklist': checklist,
        'client': checklist.client,
        'elevator': checklist.elevator,
        'period': f"{MONTHS[checklist.month - 1]} {checklist.year}",
        'folio': checklist.folio_number or 'PENDIENTE',
        'technician_name': (technician.get_full_name() or technician.username) if technician else '',
        'certification_status': checklist.get_certification_status_display() if checklist.certification_status else 'Sin información',
        'sections': sections,
        'rejected': [r for r in rows if r['status'] == 'rejected'],
        'signature': signature,
        'signature_url': signature.image.url if signature and signature.image else None,
        'generated_at': timezone.now(),
    }


def media_link_callback(uri, rel):
    """Resolves MEDIA_URL references to local files so pisa can embed them."""
    if settings.MEDIA_URL and uri.startswith(settings.MEDIA_URL):
        return os.path.join(settings.MEDIA_ROOT, uri[len(settings.MEDIA_URL):])
    return uri


class ChecklistDocumentExporter:
    """
    Renders a finalized checklist to PDF and stores it.

    The checklist row is not touched here; the caller records the returned
    reference. Failures raise DocumentExportError.
    """

    template_name = 'maintenance/checklist_pdf.html'

    def render(self, checklist, answers, signature):
        html = render_to_string(self.template_name, build_report_context(checklist, answers, signature))
        result = BytesIO()
        pdf = pisa.CreatePDF(html, dest=result, encoding='utf-8', link_callback=media_link_callback)
        if pdf.err:
            raise DocumentExportError(f"Error al generar el PDF del checklist {checklist.pk}.")
        return result.getvalue()

    def export(self, checklist, answers=None, signature=None):
        if answers is None:
            answers = list(ChecklistAnswer.objects.filter(checklist=checklist))
        signature = signature or checklist.signature
        content = self.render(checklist, answers, signature)
        filename = f"checklist_{checklist.folio_number or checklist.pk}_{checklist.year}_{checklist.month:02d}.pdf"
        try:
            reference = store_file(ContentFile(content), get_setting('DOCUMENT_UPLOAD_TO'), filename)
        except PersistenceError as exc:
            raise DocumentExportError(str(exc)) from exc
        logger.info("Document exported for checklist %s: %s", checklist.pk, reference)
        return ExportedDocument(content=content, reference=reference)
