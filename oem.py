# -*- coding: utf-8 -*-
"""
OEM number helpers

Validity filter for provider candidates and extraction of OEM-shaped tokens
from page text.
"""

import re
from typing import Iterable, List, Optional, Tuple

import config
from models import OemCandidate
from normalizers import normalize_oem, normalize_text


# Run of letters/digits/dashes/spaces within one line, at least 6 chars,
# starting alphanumeric
OEM_TOKEN_PATTERN = re.compile(r"[A-Z0-9][A-Z0-9\- ]{5,}", re.IGNORECASE)

# Digit-bearing tokens joined by spaces, dashes or dots: "12 12 0 037 244",
# "1K0-698-151", "A0001802609". Used where the surrounding text is a
# listing rather than arbitrary prose.
PART_NUMBER_PATTERN = re.compile(
    r"(?<![A-Za-z0-9])[A-Za-z]*\d[A-Za-z0-9]*(?:[ .\-]+[A-Za-z]*\d[A-Za-z0-9]*)*"
)


def looks_like_oem(raw: Optional[str], min_length: Optional[int] = None) -> bool:
    """True if the normalized string is long enough to be a real part number."""
    if min_length is None:
        min_length = config.MIN_OEM_LENGTH
    return len(normalize_oem(raw)) >= min_length


def extract_oem_tokens_from_text(text: Optional[str], min_length: Optional[int] = None) -> List[Tuple[str, str]]:
    """
    Scan free text for OEM-looking tokens. Runs without a digit are skipped.

    Returns:
        List of (normalized_oem, raw_oem), deduplicated on the normalized
        value, in first-seen order
    """
    if not text:
        return []

    seen = set()
    found = []
    for match in OEM_TOKEN_PATTERN.finditer(text):
        raw = match.group(0).strip()
        if not re.search(r"\d", raw):
            continue
        if not looks_like_oem(raw, min_length):
            continue
        oem = normalize_oem(raw)
        if oem in seen:
            continue
        seen.add(oem)
        found.append((oem, raw))

    return found


def extract_part_numbers(text: Optional[str], min_length: Optional[int] = None) -> List[Tuple[str, str]]:
    """
    Digit-bearing part numbers from a listing or cross-reference block
    ("OE numbers: 1K0 698 151, 5K0 698 151A").

    Returns:
        List of (normalized_oem, raw_oem), deduplicated, in first-seen order
    """
    if not text:
        return []

    seen = set()
    found = []
    for match in PART_NUMBER_PATTERN.finditer(text):
        raw = match.group(0).strip(' .-')
        if not looks_like_oem(raw, min_length):
            continue
        oem = normalize_oem(raw)
        if oem in seen:
            continue
        seen.add(oem)
        found.append((oem, raw))
    return found


def extract_oem_rows(text: Optional[str], keyword: Optional[str] = None) -> List[Tuple[str, str]]:
    """
    Line-oriented extraction for catalog listings.

    Every non-empty line whose normalized text contains the normalized keyword
    (every line when no keyword is given) contributes its part numbers.

    Returns:
        List of (raw_oem, description) where description is the line itself
    """
    if not text:
        return []

    keyword_norm = normalize_text(keyword)
    rows = []
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        if keyword_norm and keyword_norm not in normalize_text(line):
            continue
        for _, raw in extract_part_numbers(line):
            rows.append((raw, line))

    return rows


def filter_candidates(candidates: Iterable[OemCandidate], min_length: Optional[int] = None) -> List[OemCandidate]:
    """
    Normalize candidate OEMs and drop those that are too short.

    The original string is kept in raw_oem. Dropped candidates are noise, not
    provider errors.
    """
    if min_length is None:
        min_length = config.MIN_OEM_LENGTH

    kept = []
    for candidate in candidates:
        oem = normalize_oem(candidate.oem)
        if len(oem) < min_length:
            continue
        kept.append(candidate.model_copy(update={
            'oem': oem,
            'raw_oem': candidate.raw_oem or candidate.oem,
        }))

    return kept
