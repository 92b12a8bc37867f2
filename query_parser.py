# -*- coding: utf-8 -*-
"""
Query parser

Turns a RawQuery into a ParsedQuery: brand and part resolution, then year,
engine code and model extraction from whatever text the two parsers leave
behind. Explicit hints always win over derived values.
"""

import re
from typing import Optional

from brand_parser import parse_brand
from models import ParsedQuery, RawQuery
from normalizers import normalize_brand, normalize_text
from part_parser import parse_part


MIN_YEAR = 1980
MAX_YEAR = 2035
MAX_MODEL_TOKENS = 5

# A standalone 4-digit run starting with 19 or 20
YEAR_PATTERN = re.compile(r'(?<!\d)(19\d{2}|20\d{2})(?!\d)')

# Uppercase only: "N47" is an engine code, "320d" is a model
ENGINE_CODE_PATTERN = re.compile(r'^[A-Z0-9-]{3,8}$')


def extract_year(text: str) -> Optional[int]:
    """First 19xx/20xx run, accepted only within [MIN_YEAR, MAX_YEAR]."""
    if not text:
        return None
    match = YEAR_PATTERN.search(text)
    if not match:
        return None
    year = int(match.group(1))
    if year < MIN_YEAR or year > MAX_YEAR:
        return None
    return year


def extract_engine_code(text: str) -> Optional[str]:
    """
    First token of 3-8 uppercase letters, digits or dashes mixing at least
    one digit and one letter, e.g. "N47", "M54B30", "1KR-FE".

    Lowercase tokens are model designations ("320d"), not engine codes.
    """
    if not text:
        return None
    for raw_token in text.split():
        token = re.sub(r'[^a-zA-Z0-9-]', '', raw_token)
        if not ENGINE_CODE_PATTERN.match(token):
            continue
        if re.search(r'[0-9]', token) and re.search(r'[A-Z]', token):
            return token
    return None


def derive_model(text: str, year: Optional[int] = None, engine_code: Optional[str] = None) -> Optional[str]:
    """Residual text minus year and engine code, first 5 tokens, uppercased."""
    if not text:
        return None

    cleaned = text
    if year:
        cleaned = cleaned.replace(str(year), ' ')
    if engine_code:
        cleaned = re.sub(re.escape(engine_code), ' ', cleaned, flags=re.IGNORECASE)

    tokens = cleaned.split()
    if not tokens:
        return None
    return ' '.join(tokens[:MAX_MODEL_TOKENS]).upper()


def build_parsed_query(raw: RawQuery) -> ParsedQuery:
    """
    Build the normalized query object.

    Args:
        raw: Validated resolver input

    Returns:
        Frozen ParsedQuery
    """
    brand_result = parse_brand(raw.raw_query, raw.brand)
    part_result = parse_part(raw.raw_query, raw.part_query)

    residual = ' '.join(
        t for t in (brand_result.remaining_text, part_result.remaining_text) if t
    )

    year = raw.year if raw.year is not None else extract_year(residual)
    engine_code = raw.engine_code or extract_engine_code(residual)
    model = raw.model or derive_model(residual, year, engine_code)

    normalized_brand = brand_result.normalized_brand
    if not normalized_brand and raw.brand:
        normalized_brand = normalize_brand(raw.brand)

    normalized_part_query = part_result.normalized_part_query
    if not normalized_part_query and raw.part_query:
        normalized_part_query = normalize_text(raw.part_query)

    return ParsedQuery(
        raw_query=raw.raw_query,
        vin=raw.vin or None,
        brand=brand_result.brand or raw.brand or None,
        normalized_brand=normalized_brand or None,
        model=model or None,
        year=year,
        engine_code=engine_code or None,
        part_query=part_result.part_query or raw.part_query or None,
        normalized_part_query=normalized_part_query or None,
        part_group_path=list(part_result.group_path),
        locale=raw.locale,
        country_code=raw.country_code,
    )
