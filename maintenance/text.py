import unicodedata


def normalize_text(value):
    """Lowercase, trimmed and without accents, for loose comparisons."""
    decomposed = unicodedata.normalize('NFKD', value or '')
    return ''.join(c for c in decomposed if not unicodedata.combining(c)).strip().casefold()
