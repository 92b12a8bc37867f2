# -*- coding: utf-8 -*-
"""
Part parser

Maps free text or an explicit part hint to a canonical part name and its
taxonomy path (System > Subsystem > Part).
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional

from normalizers import normalize_text


# =============================================================================
# PART VOCABULARY
# =============================================================================

# Surface form -> canonical part name. Includes German catalog terms.
# Scanned in declaration order, first substring match wins.
PART_SYNONYMS = {
    'spark plug': 'spark plug',
    'zundkerze': 'spark plug',
    'zündkerze': 'spark plug',
    'ignition plug': 'spark plug',
    'oil filter': 'oil filter',
    'olfilter': 'oil filter',
    'ölfilter': 'oil filter',
    'luftfilter': 'air filter',
    'air filter': 'air filter',
    'cabin filter': 'cabin filter',
    'pollenfilter': 'cabin filter',
    'fuel filter': 'fuel filter',
    'bremsbelag': 'brake pad',
    'bremsbelage': 'brake pad',
    'brake pad': 'brake pad',
    'brake pads': 'brake pad',
    'bremsscheibe': 'brake disc',
    'bremsscheiben': 'brake disc',
    'brake disc': 'brake disc',
    'brake rotor': 'brake disc',
    'shock absorber': 'shock absorber',
    'stoßdämpfer': 'shock absorber',
    'stossdampfer': 'shock absorber',
    'rear shocks': 'shock absorber',
    'front shocks': 'shock absorber',
    'motorlager': 'engine mount',
    'engine mount': 'engine mount',
    'aircon compressor': 'ac compressor',
    'ac compressor': 'ac compressor',
    'wasserpumpe': 'water pump',
    'water pump': 'water pump',
}

# Canonical part name -> taxonomy path (1-3 levels)
PART_GROUPS = {
    'spark plug': ['Engine', 'Ignition', 'Spark plug'],
    'oil filter': ['Engine', 'Lubrication', 'Oil filter'],
    'air filter': ['Engine', 'Air intake', 'Air filter'],
    'cabin filter': ['HVAC', 'Filter'],
    'fuel filter': ['Fuel system', 'Filter'],
    'brake pad': ['Brakes', 'Pads'],
    'brake disc': ['Brakes', 'Discs'],
    'shock absorber': ['Suspension', 'Shock absorber'],
    'engine mount': ['Engine', 'Mounting'],
    'water pump': ['Engine', 'Cooling', 'Water pump'],
    'ac compressor': ['HVAC', 'Compressor'],
}


@dataclass(frozen=True)
class PartParseResult:
    remaining_text: str
    part_query: Optional[str] = None
    normalized_part_query: Optional[str] = None
    group_path: List[str] = field(default_factory=list)


def parse_part(raw_query: str, explicit_part: Optional[str] = None) -> PartParseResult:
    """
    Determine the part a query asks for.

    An explicit hint is looked up directly; if it has no canonical match it is
    kept as bare normalized text with no taxonomy path. Without a hint the
    synonym table is scanned in declaration order against the normalized
    query, first match wins (same policy as the brand parser).
    """
    if explicit_part:
        canonical = normalize_to_canonical(explicit_part)
        normalized = canonical or normalize_text(explicit_part)
        return PartParseResult(
            part_query=explicit_part,
            normalized_part_query=normalized,
            group_path=list(PART_GROUPS.get(canonical, [])) if canonical else [],
            remaining_text=remove_part_tokens(raw_query, normalized),
        )

    normalized_text = normalize_text(raw_query)
    for alias, canonical in PART_SYNONYMS.items():
        alias_norm = normalize_text(alias)
        if alias_norm and alias_norm in normalized_text:
            return PartParseResult(
                part_query=canonical,
                normalized_part_query=canonical,
                group_path=list(PART_GROUPS.get(canonical, [])),
                remaining_text=remove_part_tokens(raw_query, alias),
            )

    return PartParseResult(remaining_text=raw_query)


def normalize_to_canonical(value: str) -> Optional[str]:
    """Canonical part name for a surface form, or None if unknown."""
    norm = normalize_text(value)
    if not norm:
        return None
    if norm in PART_SYNONYMS:
        return PART_SYNONYMS[norm]
    for alias, canonical in PART_SYNONYMS.items():
        if normalize_text(alias) == norm:
            return canonical
    return None


def remove_part_tokens(text: str, token: str) -> str:
    """
    Strip a part alias from text.

    Internal spaces of the alias match any whitespace run, so "spark  Plug"
    is removed by the alias "spark plug".
    """
    norm_token = normalize_text(token)
    if not norm_token:
        return re.sub(r'\s+', ' ', text).strip()

    pattern = r'\s+'.join(re.escape(part) for part in norm_token.split(' '))
    result = re.sub(pattern, ' ', text, flags=re.IGNORECASE)
    return re.sub(r'\s+', ' ', result).strip()
