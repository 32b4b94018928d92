import logging
from dataclasses import dataclass, field

from django.core.files.base import File
from django.db import DatabaseError, transaction
from django.utils import timezone

from .exceptions import ChecklistValidationError, PersistenceError
from .exporter import ChecklistDocumentExporter
from .models import MaintenanceChecklist, SignatureRecord
from .repository import next_folio_number
from .service_requests import ServiceRequestDeriver
from .storage import decode_data_url

logger = logging.getLogger(__name__)


@dataclass
class ExportOutcome:
    checklist_id: int
    ok: bool
    reference: str = None
    error: str = None

    def as_dict(self):
        return {'checklist_id': self.checklist_id, 'ok': self.ok,
                'reference': self.reference, 'error': self.error}


@dataclass
class SigningOutcome:
    signature: SignatureRecord = None
    signed: list = field(default_factory=list)
    exports: list = field(default_factory=list)
    service_requests: int = 0
    derivation_failures: int = 0

    @property
    def export_failures(self):
        return sum(1 for e in self.exports if not e.ok)

    def as_dict(self):
        return {
            'signature_id': self.signature.pk if self.signature else None,
            'signed': list(self.signed),
            'exports': [e.as_dict() for e in self.exports],
            'export_failures': self.export_failures,
            'service_requests': self.service_requests,
            'derivation_failures': self.derivation_failures,
        }


class SigningCoordinator:
    """
    End-of-visit signing for every completed checklist of a visit session.

    1. One SignatureRecord is attached to each completed, unsigned checklist
       in a single transaction; each gets the next folio number.
    2. Each signed checklist without a document is exported on its own. An
       export failure is counted, never rolled back into the signatures.
    3. Service requests are derived for every signed checklist that has
       not been derived yet.

    Checklists already signed by an interrupted earlier run are not
    re-signed, but a missing document is regenerated and a skipped
    derivation runs.
    """

    def __init__(self, exporter=None, deriver=None):
        self.exporter = exporter or ChecklistDocumentExporter()
        self.deriver = deriver or ServiceRequestDeriver()

    def _signature_file(self, signature_image):
        if isinstance(signature_image, File):
            return signature_image
        return decode_data_url(signature_image)

    def _attach_signature(self, checklists, signer_name, image, now):
        try:
            with transaction.atomic():
                signature = SignatureRecord(signer_name=signer_name, signed_at=now)
                signature.image.save(image.name or 'firma.png', image, save=False)
                signature.save()
                folio = next_folio_number()
                for checklist in checklists:
                    checklist.signature = signature
                    checklist.folio_number = folio
                    folio += 1
                    checklist.save(update_fields=['signature', 'folio_number', 'updated_at'])
        except (DatabaseError, OSError) as exc:
            for checklist in checklists:
                checklist.signature = None
                checklist.folio_number = None
            logger.warning("Signature attachment failed: %s", exc)
            raise PersistenceError("No se pudo guardar la firma. Intenta nuevamente.") from exc
        logger.info("Signature %s (%s) attached to checklists %s",
                    signature.pk, signer_name, [c.pk for c in checklists])
        return signature

    def _export(self, checklist):
        try:
            document = self.exporter.export(checklist, signature=checklist.signature)
            checklist.document.name = document.reference
            checklist.save(update_fields=['document', 'updated_at'])
        except Exception as exc:
            logger.exception("Document export failed for checklist %s", checklist.pk)
            return ExportOutcome(checklist_id=checklist.pk, ok=False, error=str(exc))
        return ExportOutcome(checklist_id=checklist.pk, ok=True, reference=document.reference)

    def sign(self, checklist_ids, signer_name, signature_image, now=None):
        signer_name = (signer_name or '').strip()
        if not signer_name:
            raise ChecklistValidationError("Debes ingresar el nombre de quien firma.", blocking=['signer_name'])
        image = self._signature_file(signature_image)
        now = now or timezone.now()

        try:
            checklists = list(MaintenanceChecklist.objects
                              .filter(pk__in=list(checklist_ids))
                              .select_related('client', 'elevator', 'technician', 'signature')
                              .order_by('pk'))
        except DatabaseError as exc:
            raise PersistenceError("No se pudieron cargar los checklists de la visita.") from exc

        completed = [c for c in checklists if c.is_completed]
        if not completed:
            raise ChecklistValidationError("No hay checklists completados para firmar.", blocking=['checklists'])

        outcome = SigningOutcome()
        to_sign = [c for c in completed if not c.is_signed]
        if to_sign:
            outcome.signature = self._attach_signature(to_sign, signer_name, image, now)
            outcome.signed = [c.pk for c in to_sign]

        for checklist in completed:
            if checklist.is_signed and not checklist.document:
                outcome.exports.append(self._export(checklist))

        pending = [c for c in completed if c.is_signed and c.service_requests_derived_at is None]
        derivation = self.deriver.derive(pending, now)
        outcome.service_requests = derivation.count
        outcome.derivation_failures = derivation.failed

        if outcome.export_failures:
            logger.warning("Signing finished with %d export failures", outcome.export_failures)
        return outcome
