# -*- coding: utf-8 -*-
"""
Normalizers

Centralized text normalization used by the brand/part parsers, the query
parser and the fusion engine. All comparisons use normalized values for
consistency.
"""

import re
import unicodedata
from typing import Optional


# =============================================================================
# BRAND ALIASES
# =============================================================================

# Surface form (uppercase) -> canonical brand.
# Declaration order matters: the brand parser scans keys in this order and
# the first alias found in the query wins.
BRAND_ALIASES = {
    'VW': 'VOLKSWAGEN',
    'VOLKSWAGEN': 'VOLKSWAGEN',
    'VAG': 'VOLKSWAGEN',
    'MERCEDES-BENZ': 'MERCEDES-BENZ',
    'MERCEDES BENZ': 'MERCEDES-BENZ',
    'MERCEDES': 'MERCEDES-BENZ',
    'BENZ': 'MERCEDES-BENZ',
    'MB': 'MERCEDES-BENZ',
    'BMW': 'BMW',
    'AUDI': 'AUDI',
    'SEAT': 'SEAT',
    'SKODA': 'SKODA',
    'OPEL': 'OPEL',
    'GM': 'OPEL',
    'FORD': 'FORD',
    'PEUGEOT': 'PEUGEOT',
    'CITROEN': 'CITROEN',
    'RENAULT': 'RENAULT',
    'DACIA': 'DACIA',
    'FIAT': 'FIAT',
    'ALFA': 'ALFA ROMEO',
    'ALFA ROMEO': 'ALFA ROMEO',
    'LANCIA': 'LANCIA',
    'TOYOTA': 'TOYOTA',
    'LEXUS': 'LEXUS',
    'NISSAN': 'NISSAN',
    'INFINITI': 'INFINITI',
    'HYUNDAI': 'HYUNDAI',
    'KIA': 'KIA',
    'MITSUBISHI': 'MITSUBISHI',
    'SUBARU': 'SUBARU',
    'MAZDA': 'MAZDA',
    'HONDA': 'HONDA',
    'SUZUKI': 'SUZUKI',
    'ISUZU': 'ISUZU',
    'CHEVROLET': 'CHEVROLET',
    'CHEVY': 'CHEVROLET',
    'CADILLAC': 'CADILLAC',
    'BUICK': 'BUICK',
    'GMC': 'GMC',
    'VOLVO': 'VOLVO',
    'SAAB': 'SAAB',
    'TESLA': 'TESLA',
    'PORSCHE': 'PORSCHE',
    'JAGUAR': 'JAGUAR',
    'LANDROVER': 'LAND ROVER',
    'LAND ROVER': 'LAND ROVER',
    'MINI': 'MINI',
}


# =============================================================================
# TEXT NORMALIZATION
# =============================================================================

def strip_diacritics(value: str) -> str:
    """Remove combining marks ("Zündkerze" -> "Zundkerze")."""
    decomposed = unicodedata.normalize('NFD', value)
    return ''.join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_text(value: Optional[str]) -> str:
    """
    Normalize free text for fuzzy substring matching.

    Strips diacritics, lowercases, replaces every non-alphanumeric run with a
    single space and trims.

    Args:
        value: Raw text

    Returns:
        Normalized text (lowercase) or empty string
    """
    if not value:
        return ''

    text = strip_diacritics(value).lower()
    text = re.sub(r'[^a-z0-9]+', ' ', text)
    return text.strip()


# =============================================================================
# BRAND NORMALIZATION
# =============================================================================

def normalize_brand(value: Optional[str]) -> str:
    """
    Normalize a brand name to its canonical form.

    Unknown brands pass through uppercased ("Lada" -> "LADA").

    Args:
        value: Raw brand string

    Returns:
        Canonical brand (uppercase) or empty string
    """
    if not value:
        return ''

    cleaned = strip_diacritics(value).strip().upper()
    return BRAND_ALIASES.get(cleaned, cleaned)


def brand_aliases_for(canonical: str):
    """All alias keys that map to the given canonical brand, in table order."""
    return [alias for alias, brand in BRAND_ALIASES.items() if brand == canonical]


# =============================================================================
# OEM NORMALIZATION
# =============================================================================

def normalize_oem(value: Optional[str]) -> str:
    """
    Canonicalize an OEM part number: uppercase, keep only [0-9A-Z].

    This is the grouping key used by the fusion engine, so it must stay
    idempotent: normalize_oem(normalize_oem(x)) == normalize_oem(x).
    """
    if not value:
        return ''

    return re.sub(r'[^0-9A-Z]', '', value.upper()).strip()
