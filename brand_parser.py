# -*- coding: utf-8 -*-
"""
Brand parser

Resolves the vehicle brand from an explicit hint or from the free-text query,
and strips every alias of that brand from the text so the remainder can be
mined for model/year/engine code.
"""

import re
from dataclasses import dataclass
from typing import Optional

from normalizers import BRAND_ALIASES, brand_aliases_for, normalize_brand, normalize_text


@dataclass(frozen=True)
class BrandParseResult:
    remaining_text: str
    brand: Optional[str] = None
    normalized_brand: Optional[str] = None


def parse_brand(raw_query: str, explicit_brand: Optional[str] = None) -> BrandParseResult:
    """
    Determine the brand of a query.

    With an explicit hint the hint wins and is only normalized. Otherwise the
    alias table is scanned in declaration order and the first alias whose
    normalized form is a substring of the normalized query decides the brand.
    This is first-match, not longest-match: a short alias declared early can
    shadow a more specific one declared later.

    Args:
        raw_query: Free-text query
        explicit_brand: Optional brand hint

    Returns:
        BrandParseResult (brand fields are None when nothing matched)
    """
    if explicit_brand:
        normalized = normalize_brand(explicit_brand)
        return BrandParseResult(
            brand=explicit_brand,
            normalized_brand=normalized,
            remaining_text=remove_brand_tokens(raw_query, normalized),
        )

    normalized_text = normalize_text(raw_query)
    found = None

    for alias in BRAND_ALIASES:
        token = normalize_text(alias)
        if token and token in normalized_text:
            found = BRAND_ALIASES[alias]
            break

    if found:
        return BrandParseResult(
            brand=found,
            normalized_brand=found,
            remaining_text=remove_brand_tokens(raw_query, found),
        )

    return BrandParseResult(remaining_text=raw_query)


def remove_brand_tokens(text: str, normalized_brand: str) -> str:
    """Remove the canonical brand and all of its aliases (case-insensitive, every occurrence)."""
    tokens = [normalized_brand] + brand_aliases_for(normalized_brand)

    result = text
    for token in tokens:
        if not token:
            continue
        result = re.sub(re.escape(token), ' ', result, flags=re.IGNORECASE)

    return re.sub(r'\s+', ' ', result).strip()
