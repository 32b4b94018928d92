import base64
import binascii
import logging
import uuid

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from .exceptions import ChecklistValidationError, PersistenceError

logger = logging.getLogger(__name__)


def store_file(content, folder, filename):
    """Saves ``content`` to the blob store and returns its storage name."""
    name = f"{folder.rstrip('/')}/{uuid.uuid4().hex}_{filename}"
    try:
        return default_storage.save(name, content)
    except OSError as exc:
        logger.warning("Upload to %s failed: %s", folder, exc)
        raise PersistenceError("No se pudo subir el archivo.") from exc


def store_evidence_photo(upload, checklist_id, question_id, slot):
    """Stores an evidence photo and returns a stable URL for it."""
    extension = (getattr(upload, 'name', '') or '').rsplit('.', 1)[-1].lower() or 'jpg'
    name = store_file(upload, f"evidence/{checklist_id}", f"q{question_id}_{slot}.{extension}")
    return default_storage.url(name)


def decode_data_url(data_url):
    """
    Turns a ``data:image/png;base64,...`` URL (signature pads produce these)
    into a ContentFile.
    """
    if not data_url or not str(data_url).startswith('data:image/'):
        raise ChecklistValidationError("Debes dibujar la firma.", blocking=['signature'])
    header, _, payload = str(data_url).partition(',')
    if ';base64' not in header or not payload:
        raise ChecklistValidationError("Formato de firma inválido.", blocking=['signature'])
    try:
        raw = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ChecklistValidationError("Formato de firma inválido.", blocking=['signature'])
    if not raw:
        raise ChecklistValidationError("Debes dibujar la firma.", blocking=['signature'])
    extension = header[len('data:image/'):].split(';', 1)[0] or 'png'
    return ContentFile(raw, name=f"firma.{extension}")
