from django.conf import settings

DEFAULTS = {
    'AUTOSAVE_THRESHOLD': 5,
    'CERTIFICATION_CUTOFF_DAY': 14,
    'CRITICAL_SECTIONS': [
        'Sala de Máquinas',
        'Central Hidráulica',
        'Unidad Hidráulica',
        'Seguridad',
    ],
    'CATALOG_CACHE_TIMEOUT': 60 * 60,
    'VISIT_SESSION_TIMEOUT': 60 * 60 * 12,
    'DOCUMENT_UPLOAD_TO': 'checklists/',
}


def get_setting(name):
    """Reads a key from settings.MAINTENANCE, falling back to DEFAULTS."""
    overrides = getattr(settings, 'MAINTENANCE', {}) or {}
    if name in overrides:
        return overrides[name]
    return DEFAULTS[name]
