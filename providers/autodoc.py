# -*- coding: utf-8 -*-
"""
Autodoc - aftermarket shop used as an OE cross-reference.

Works for most brands. Its OE number blocks are less precise than a catalog,
so it stays below the EPC providers and only gains ground when another source
confirms the same number.
"""
import re
from typing import List
from urllib.parse import quote

from models import OemCandidate, ParsedQuery, ProviderId, SourceKind
from oem import extract_part_numbers
from providers.base import Provider, ProviderContext

OE_BLOCK_PATTERN = re.compile(r'\bOEM?\b|\bOE\s*(number|nummer|no)', re.IGNORECASE)


class AutodocProvider(Provider):
    id = ProviderId.AUTODOC.value
    supported_brands = frozenset()
    source_kind = SourceKind.CROSSREF
    base_url = 'https://www.autodoc.de/auto-teile/'
    base_confidence = 0.7

    def can_handle(self, query: ParsedQuery) -> bool:
        if not query.part_query:
            return False
        looks_like_oem_query = re.search(r'\d{5,}', query.part_query) is not None
        return bool(query.normalized_brand) or looks_like_oem_query

    def fetch(self, query: ParsedQuery, ctx: ProviderContext) -> List[OemCandidate]:
        url = self.base_url + quote(query.part_query)
        ctx.log.info(f"{self.id}: searching {query.part_query}")
        text = self.get_page_text(ctx, url)

        seen = set()
        results = []
        for line in text.splitlines():
            if not OE_BLOCK_PATTERN.search(line):
                continue
            for oem, raw_oem in extract_part_numbers(line):
                if oem in seen:
                    continue
                seen.add(oem)
                results.append(self.make_candidate(
                    query,
                    oem=oem,
                    raw_oem=raw_oem,
                    description='Autodoc cross-reference',
                    url=url,
                    confidence=self.base_confidence,
                ))

        ctx.log.info(f"{self.id}: parsed {len(results)} cross-reference OEM(s)")
        return results
