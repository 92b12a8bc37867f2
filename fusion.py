# -*- coding: utf-8 -*-
"""
Candidate fusion - grouping, scoring and ranking of provider observations

All candidates for one query are grouped by normalized OEM. Each group gets a
combined confidence:

    base + corroboration + diversity + taxonomy + source kind, clamped to [0, 0.99]

- base: highest member confidence (a member without one falls back to its
  provider's trust weight). The 'provider_sum' profile instead sums the trust
  weights of the distinct contributing providers.
- corroboration: +step per extra observation, capped
- diversity: flat bonus when more than one provider contributed
- taxonomy: flat bonus when a member's group path overlaps the query's
- source kind: flat bonus when a member came from a structured catalog (EPC)

1.0 is never asserted. Ranking is a stable sort on descending confidence, so
ties keep grouping order. Fusion is a pure function of the candidate list and
the expected group path.
"""

from typing import Dict, List, Optional, Tuple

from models import FusedOemResult, OemCandidate, SourceKind
from normalizers import normalize_oem


# =============================================================================
# SCORING PROFILES
# =============================================================================

SCORING_PROFILES = {
    'default': {
        'base_mode': 'max',
        'corroboration_step': 0.05,
        'corroboration_cap': 0.15,
        'diversity_bonus': 0.05,
        'taxonomy_bonus': 0.03,
        'source_kind_bonus': 0.02,
        'max_confidence': 0.99,
    },
    'provider_sum': {
        'base_mode': 'provider_sum',
        'corroboration_step': 0.05,
        'corroboration_cap': 0.15,
        'diversity_bonus': 0.05,
        'taxonomy_bonus': 0.03,
        'source_kind_bonus': 0.0,
        'max_confidence': 0.99,
    },
}

DEFAULT_PROFILE = 'default'

# Static trust per provider, used when an observation carries no confidence
PROVIDER_WEIGHTS = {
    'REALOEM': 0.92,
    'PARTSOUQ': 0.90,
    '7ZAP': 0.88,
    'AUTODOC': 0.72,
    'FALLBACK': 0.45,
}

DEFAULT_PROVIDER_WEIGHT = 0.4


def get_profile(name: Optional[str] = None) -> Dict:
    """Look up a scoring profile, raising KeyError for unknown names."""
    name = name or DEFAULT_PROFILE
    if name not in SCORING_PROFILES:
        raise KeyError(f"Unknown scoring profile: {name}. Available: {list(SCORING_PROFILES)}")
    return SCORING_PROFILES[name]


def provider_weight(provider: str) -> float:
    return PROVIDER_WEIGHTS.get(provider, DEFAULT_PROVIDER_WEIGHT)


def clamp(value: float, low: float = 0.0, high: float = 0.99) -> float:
    return max(low, min(high, value))


# =============================================================================
# SCORING FUNCTIONS
# =============================================================================

def score_base(group: List[OemCandidate], profile: Dict) -> float:
    """Base confidence for a group."""
    if profile['base_mode'] == 'provider_sum':
        providers = dict.fromkeys(c.provider for c in group)
        return sum(provider_weight(p) for p in providers)

    return max(c.confidence or provider_weight(c.provider) for c in group)


def score_corroboration(group: List[OemCandidate], profile: Dict) -> float:
    """Each observation beyond the first adds a step, up to the cap."""
    extra = len(group) - 1
    return min(extra * profile['corroboration_step'], profile['corroboration_cap'])


def score_diversity(group: List[OemCandidate], profile: Dict) -> float:
    """Cross-source agreement."""
    providers = {c.provider for c in group}
    return profile['diversity_bonus'] if len(providers) > 1 else 0.0


def score_taxonomy(group: List[OemCandidate], expected_group_path: Optional[List[str]], profile: Dict) -> float:
    """Bonus when any member's group path shares a label with the expected path."""
    if not expected_group_path:
        return 0.0

    expected = set(expected_group_path)
    for candidate in group:
        if candidate.group_path and expected.intersection(candidate.group_path):
            return profile['taxonomy_bonus']
    return 0.0


def score_source_kind(group: List[OemCandidate], profile: Dict) -> float:
    """Bonus when a member came from a structured catalog lookup."""
    if any(c.source_kind == SourceKind.EPC for c in group):
        return profile['source_kind_bonus']
    return 0.0


def score_group(
    group: List[OemCandidate],
    expected_group_path: Optional[List[str]] = None,
    profile: Optional[Dict] = None,
) -> Tuple[float, Dict[str, float]]:
    """
    Score one OEM group.

    Returns:
        Tuple of (combined_confidence, breakdown_dict)
    """
    p = profile or SCORING_PROFILES[DEFAULT_PROFILE]
    breakdown = {
        'base': score_base(group, p),
        'corroboration': score_corroboration(group, p),
        'diversity': score_diversity(group, p),
        'taxonomy': score_taxonomy(group, expected_group_path, p),
        'source_kind': score_source_kind(group, p),
    }

    total = clamp(sum(breakdown.values()), 0.0, p['max_confidence'])
    return total, breakdown


def get_confidence_label(confidence: float) -> str:
    """
    Confidence band for a combined score.

    - CONFIRMED: >= 0.90
    - LIKELY:    >= 0.75
    - POSSIBLE:  >= 0.50
    - UNLIKELY:  < 0.50
    """
    if confidence >= 0.9:
        return 'CONFIRMED'
    elif confidence >= 0.75:
        return 'LIKELY'
    elif confidence >= 0.5:
        return 'POSSIBLE'
    else:
        return 'UNLIKELY'


# =============================================================================
# FUSION
# =============================================================================

def group_candidates(candidates: List[OemCandidate]) -> Dict[str, List[OemCandidate]]:
    """Group by normalized OEM, in first-appearance order. Empty keys are dropped."""
    grouped: Dict[str, List[OemCandidate]] = {}
    for candidate in candidates:
        key = normalize_oem(candidate.oem)
        if not key:
            continue
        grouped.setdefault(key, []).append(candidate.model_copy(update={'oem': key}))
    return grouped


def fuse_candidates(
    candidates: List[OemCandidate],
    expected_group_path: Optional[List[str]] = None,
    profile: Optional[Dict] = None,
) -> List[FusedOemResult]:
    """
    Group, score and rank candidates.

    Args:
        candidates: Normalized, filtered candidates from every provider
        expected_group_path: Taxonomy path of the queried part
        profile: Scoring profile dict (defaults to SCORING_PROFILES['default'])

    Returns:
        FusedOemResults sorted by confidence (highest first)
    """
    fused = []

    for oem, group in group_candidates(candidates).items():
        confidence, _ = score_group(group, expected_group_path, profile)

        # First member with the highest own confidence represents the group
        best = max(group, key=lambda c: c.confidence or 0)

        fused.append(FusedOemResult(
            oem=oem,
            confidence=confidence,
            label=get_confidence_label(confidence),
            providers=list(dict.fromkeys(c.provider for c in group)),
            candidates=group,
            raw_oem=best.raw_oem,
            description=best.description,
            url=best.url,
            group_path=best.group_path,
            provider=best.provider,
            source_kind=best.source_kind,
        ))

    fused.sort(key=lambda r: -r.confidence)
    return fused


def pick_primary(ranked: List[FusedOemResult]) -> Optional[FusedOemResult]:
    return ranked[0] if ranked else None
