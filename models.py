# -*- coding: utf-8 -*-
"""
Data model for queries, provider candidates and fused results.
"""
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError


# =============================================================================
# ENUMS
# =============================================================================

class ProviderId(str, Enum):
    REALOEM = 'REALOEM'
    SEVENZAP = '7ZAP'
    PARTSOUQ = 'PARTSOUQ'
    AUTODOC = 'AUTODOC'
    FALLBACK = 'FALLBACK'


class SourceKind(str, Enum):
    EPC = 'EPC'              # structured parts-catalog lookup
    CROSSREF = 'CROSSREF'    # aftermarket cross-reference listing
    FALLBACK = 'FALLBACK'    # OEM-shaped tokens scraped from free text


# =============================================================================
# QUERIES
# =============================================================================

class RawQuery(BaseModel):
    """One resolver input: free text plus optional structured hints."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    raw_query: str = Field(alias='rawQuery')
    vin: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    engine_code: Optional[str] = Field(default=None, alias='engineCode')
    part_query: Optional[str] = Field(default=None, alias='partQuery')
    locale: Optional[str] = None
    country_code: Optional[str] = Field(default=None, alias='countryCode')


class BatchQueries(BaseModel):
    queries: List[RawQuery]


class ParsedQuery(BaseModel):
    """Normalized view of a RawQuery. Built once, never mutated."""
    model_config = ConfigDict(frozen=True)

    raw_query: str
    vin: Optional[str] = None
    brand: Optional[str] = None
    normalized_brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    engine_code: Optional[str] = None
    part_query: Optional[str] = None
    normalized_part_query: Optional[str] = None
    part_group_path: List[str] = []
    locale: Optional[str] = None
    country_code: Optional[str] = None


# =============================================================================
# CANDIDATES / RESULTS
# =============================================================================

class OemCandidate(BaseModel):
    """A single provider observation of an OEM number."""
    oem: str
    raw_oem: Optional[str] = None
    description: Optional[str] = None
    group_path: List[str] = []
    provider: str
    url: Optional[str] = None
    confidence: Optional[float] = Field(default=None, ge=0, lt=1)
    source_kind: Optional[SourceKind] = None
    meta: Dict[str, Any] = {}


class FusedOemResult(BaseModel):
    """All observations of one normalized OEM, with a combined confidence."""
    oem: str
    confidence: float = Field(ge=0, le=0.99)
    label: str
    providers: List[str]
    candidates: List[OemCandidate]
    # Representative (highest individually-confident) member
    raw_oem: Optional[str] = None
    description: Optional[str] = None
    url: Optional[str] = None
    group_path: List[str] = []
    provider: Optional[str] = None
    source_kind: Optional[SourceKind] = None


class ParsedInputEcho(BaseModel):
    brand: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    engine_code: Optional[str] = None
    part_query: Optional[str] = None
    vin: Optional[str] = None


class ResolutionOutput(BaseModel):
    parsed_input: ParsedInputEcho
    parsed_query: ParsedQuery
    candidates: List[FusedOemResult] = []
    primary: Optional[FusedOemResult] = None
    decision: str
    providers_run: List[str] = []
    providers_failed: List[str] = []


# =============================================================================
# BATCH INPUT
# =============================================================================

class BatchValidationError(ValueError):
    """Malformed batch or query shape. Raised before any provider work."""


def parse_batch_input(data: Union[Dict[str, Any], List[Any], Any]) -> List[RawQuery]:
    """
    Validate a batch payload.

    Accepts either a single query object or {"queries": [query, ...]}.

    Raises:
        BatchValidationError: if the payload matches neither shape
    """
    if not isinstance(data, dict):
        raise BatchValidationError(
            f"Batch input must be an object, got {type(data).__name__}"
        )

    try:
        if 'queries' in data:
            return BatchQueries.model_validate(data).queries
        return [RawQuery.model_validate(data)]
    except ValidationError as e:
        raise BatchValidationError(str(e)) from e
