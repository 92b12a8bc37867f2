# -*- coding: utf-8 -*-
"""
Fallback search - scrapes OEM-shaped strings from web search results.

Only engages when there is neither a brand nor a VIN, i.e. when no catalog
provider can take the query. Recall over precision; lowest trust.
"""
from typing import List

from models import OemCandidate, ParsedQuery, ProviderId, SourceKind
from oem import extract_oem_tokens_from_text
from providers.base import Provider, ProviderContext


class FallbackSearchProvider(Provider):
    id = ProviderId.FALLBACK.value
    supported_brands = frozenset()
    source_kind = SourceKind.FALLBACK
    search_url = 'https://duckduckgo.com/html/'
    site_filter = 'site:7zap.com'
    base_confidence = 0.4

    def can_handle(self, query: ParsedQuery) -> bool:
        has_text = bool(query.part_query or query.raw_query)
        has_brand_or_vin = bool(query.vin or query.normalized_brand or query.brand)
        return has_text and not has_brand_or_vin

    def search_terms(self, query: ParsedQuery) -> List[str]:
        terms = [
            f"{query.model or ''} {query.part_query or ''}",
            query.raw_query,
        ]
        # Unique, non-empty, in order
        return list(dict.fromkeys(t.strip() for t in terms if t and t.strip()))

    def fetch(self, query: ParsedQuery, ctx: ProviderContext) -> List[OemCandidate]:
        seen = set()
        results = []

        for term in self.search_terms(query):
            ctx.log.info(f"{self.id}: search for term: {term}")
            text = self.get_page_text(ctx, self.search_url, params={'q': f"{self.site_filter} {term}"})

            for oem, raw_oem in extract_oem_tokens_from_text(text):
                if oem in seen:
                    continue
                seen.add(oem)
                results.append(self.make_candidate(
                    query,
                    oem=oem,
                    raw_oem=raw_oem,
                    description='Fallback extracted OEM-like string',
                    url=self.search_url,
                    confidence=self.base_confidence,
                    term=term,
                ))

        return results
