# -*- coding: utf-8 -*-
"""
OEM resolver

Pipeline for one query:
    RawQuery -> ParsedQuery -> eligible providers -> raw candidates
             -> normalized/filtered candidates -> fused ranked result

Providers run one at a time on a single shared session by default. With
max_workers > 1 they run in a thread pool, each call on its own session.
Fusion still only starts once every provider has returned or failed, and
candidates are concatenated in registration order so the result does not
depend on completion order.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests

import config
from fusion import fuse_candidates, get_confidence_label, get_profile, pick_primary
from models import (
    OemCandidate, ParsedInputEcho, ParsedQuery, RawQuery, ResolutionOutput,
    parse_batch_input,
)
from oem import filter_candidates
from providers import Provider, ProviderContext, create_session
from query_parser import build_parsed_query
from registry import ProviderRegistry

logger = logging.getLogger(__name__)


class OemResolver:
    """
    Resolves queries against a provider registry.

    Args:
        registry: Providers available to this resolver
        profile: Scoring profile name (see fusion.SCORING_PROFILES)
        max_workers: Provider concurrency per query (1 = sequential)
        session_factory: Builds an HTTP session (one per query, or one per pooled provider call)
        min_oem_length: Validity threshold for normalized OEMs
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        profile: Optional[str] = None,
        max_workers: Optional[int] = None,
        session_factory: Callable[[], requests.Session] = create_session,
        min_oem_length: Optional[int] = None,
    ):
        self.registry = registry
        self.profile_name = profile or config.SCORING_PROFILE
        self.profile = get_profile(self.profile_name)
        self.max_workers = max(1, max_workers or config.MAX_PROVIDER_WORKERS)
        self.session_factory = session_factory
        self.min_oem_length = min_oem_length or config.MIN_OEM_LENGTH

    # -------------------------------------------------------------------------
    # Provider execution boundary
    # -------------------------------------------------------------------------

    def _run_provider(
        self,
        provider: Provider,
        query: ParsedQuery,
        ctx: ProviderContext,
    ) -> Tuple[List[OemCandidate], bool]:
        """Run one provider. Returns (candidates, ok); failures yield no candidates."""
        try:
            ctx.log.info(f"Running provider {provider.id}")
            return list(provider.fetch(query, ctx) or []), True
        except Exception as e:
            logger.warning(f"Provider {provider.id} failed: {e}")
            return [], False

    def _run_with_own_session(self, provider: Provider, query: ParsedQuery) -> Tuple[List[OemCandidate], bool]:
        """Pooled run. requests sessions are not thread-safe, so each call gets its own."""
        session = self.session_factory()
        try:
            return self._run_provider(provider, query, ProviderContext(session=session, log=logger))
        finally:
            session.close()

    def _run_providers(self, providers: List[Provider], query: ParsedQuery) -> Tuple[List[OemCandidate], List[str]]:
        if self.max_workers == 1 or len(providers) == 1:
            session = self.session_factory()
            ctx = ProviderContext(session=session, log=logger)
            try:
                outcomes = [self._run_provider(p, query, ctx) for p in providers]
            finally:
                session.close()
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [executor.submit(self._run_with_own_session, p, query) for p in providers]
                outcomes = [f.result() for f in futures]

        candidates: List[OemCandidate] = []
        failed = []
        for provider, (results, ok) in zip(providers, outcomes):
            candidates.extend(results)
            if not ok:
                failed.append(provider.id)
        return candidates, failed

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def parse(self, raw: RawQuery) -> ParsedQuery:
        return build_parsed_query(raw)

    def resolve(self, raw: RawQuery) -> ResolutionOutput:
        """Resolve one query to a ranked, scored list of OEMs."""
        parsed = self.parse(raw)
        logger.info(f"Parsed input: {parsed.model_dump(exclude_none=True)}")

        selected = self.registry.select(parsed)
        if not selected:
            logger.info(f"No provider could handle brand={parsed.brand} vin={parsed.vin}")
            return build_output(parsed, [], decision='NO_PROVIDER')

        raw_candidates, failed = self._run_providers(selected, parsed)
        candidates = filter_candidates(raw_candidates, self.min_oem_length)
        dropped = len(raw_candidates) - len(candidates)
        if dropped:
            logger.debug(f"Dropped {dropped} candidate(s) below OEM length {self.min_oem_length}")

        ranked = fuse_candidates(candidates, parsed.part_group_path, self.profile)

        return build_output(
            parsed,
            ranked,
            providers_run=[p.id for p in selected],
            providers_failed=failed,
        )

    def resolve_batch(self, data: Dict[str, Any]) -> List[ResolutionOutput]:
        """
        Validate and resolve a batch payload, one query after another.

        Raises:
            BatchValidationError: before any provider runs, if the payload is malformed
        """
        queries = parse_batch_input(data)
        logger.info(f"Resolving {len(queries)} query(ies)")
        return [self.resolve(q) for q in queries]


def build_output(
    parsed: ParsedQuery,
    ranked,
    decision: Optional[str] = None,
    providers_run: Optional[List[str]] = None,
    providers_failed: Optional[List[str]] = None,
) -> ResolutionOutput:
    primary = pick_primary(ranked)
    if decision is None:
        decision = get_confidence_label(primary.confidence) if primary else 'NO_CANDIDATES'

    return ResolutionOutput(
        parsed_input=ParsedInputEcho(
            brand=parsed.brand or parsed.normalized_brand,
            model=parsed.model,
            year=parsed.year,
            engine_code=parsed.engine_code,
            part_query=parsed.part_query,
            vin=parsed.vin,
        ),
        parsed_query=parsed,
        candidates=ranked,
        primary=primary,
        decision=decision,
        providers_run=providers_run or [],
        providers_failed=providers_failed or [],
    )
