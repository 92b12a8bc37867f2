# -*- coding: utf-8 -*-
"""
Provider contract

A provider declares which brands it serves (empty = all), decides whether it
can handle a parsed query, and fetches raw OEM candidates. fetch() may raise;
the resolver isolates the failure.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

import lxml.html
import requests

import config
from models import OemCandidate, ParsedQuery, SourceKind
from oem import extract_oem_rows

logger = logging.getLogger(__name__)


@dataclass
class ProviderContext:
    """Execution context shared by every provider run for one query."""
    session: requests.Session
    timeout: float = config.PROVIDER_TIMEOUT
    log: logging.Logger = field(default_factory=lambda: logger)


def create_session() -> requests.Session:
    session = requests.Session()
    session.headers.update({
        "User-Agent": config.USER_AGENT,
        "Accept": "text/html,application/xhtml+xml",
    })
    return session


BLOCK_TAGS = ('tr', 'p', 'div', 'li', 'table', 'h1', 'h2', 'h3', 'h4', 'h5', 'h6')
CELL_TAGS = ('td', 'th')


def html_to_text(markup: str) -> str:
    """
    Flatten HTML to text, one line per block/row element.

    Table cells are separated by " | " so digit groups in adjacent cells never
    run together. Scripts and styles are dropped.
    """
    if not markup or not markup.strip():
        return ''

    doc = lxml.html.document_fromstring(markup)
    for element in doc.xpath('//script|//style'):
        element.drop_tree()

    for element in doc.iter('br', *BLOCK_TAGS):
        element.tail = '\n' + (element.tail or '')
    for element in doc.iter(*CELL_TAGS):
        element.tail = ' | ' + (element.tail or '')

    text = doc.text_content()
    lines = (re.sub(r'[ \t\r\f\v\xa0]+', ' ', line).strip() for line in text.split('\n'))
    return '\n'.join(line for line in lines if line)


class Provider:
    """Base class for all OEM data sources."""

    id: str = ''
    supported_brands: FrozenSet[str] = frozenset()
    source_kind: Optional[SourceKind] = None

    def can_handle(self, query: ParsedQuery) -> bool:
        raise NotImplementedError

    def fetch(self, query: ParsedQuery, ctx: ProviderContext) -> List[OemCandidate]:
        raise NotImplementedError

    def get_page_text(self, ctx: ProviderContext, url: str, params: Optional[Dict[str, Any]] = None) -> str:
        """GET a page through the shared session and return its flattened text."""
        response = ctx.session.get(url, params=params, timeout=ctx.timeout)
        response.raise_for_status()
        return html_to_text(response.text)

    def make_candidate(
        self,
        query: ParsedQuery,
        oem: str,
        confidence: float,
        raw_oem: Optional[str] = None,
        description: Optional[str] = None,
        url: Optional[str] = None,
        group_path: Optional[List[str]] = None,
        **meta: Any,
    ) -> OemCandidate:
        """Build a candidate tagged with this provider and the query provenance."""
        provenance = {
            'brand': query.normalized_brand or query.brand,
            'model': query.model,
            'year': query.year,
            'vin': query.vin,
        }
        provenance.update(meta)
        return OemCandidate(
            oem=oem,
            raw_oem=raw_oem,
            description=description,
            group_path=group_path or [],
            provider=self.id,
            url=url,
            confidence=confidence,
            source_kind=self.source_kind,
            meta={k: v for k, v in provenance.items() if v is not None},
        )

    def describe(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'supported_brands': sorted(self.supported_brands),
            'source_kind': self.source_kind.value if self.source_kind else None,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"


class CatalogProvider(Provider):
    """
    Brand-scoped electronic parts catalog (EPC).

    Subclasses set the brand list, search URL and confidences; the catalog
    listing is read row by row and rows mentioning the part are kept.
    """

    source_kind = SourceKind.EPC
    search_url: str = ''
    base_confidence: float = 0.85
    vin_confidence: float = 0.9

    def can_handle(self, query: ParsedQuery) -> bool:
        brand = query.normalized_brand
        return bool(query.part_query) and bool(brand) and brand in self.supported_brands

    def search_params(self, query: ParsedQuery) -> Dict[str, Any]:
        params = {'q': query.part_query}
        if query.vin:
            params['vin'] = query.vin
        return params

    def fetch(self, query: ParsedQuery, ctx: ProviderContext) -> List[OemCandidate]:
        ctx.log.info(f"{self.id}: searching {query.normalized_brand} {query.part_query or ''}")
        text = self.get_page_text(ctx, self.search_url, params=self.search_params(query))
        confidence = self.vin_confidence if query.vin else self.base_confidence

        results = []
        for raw_oem, description in extract_oem_rows(text, query.normalized_part_query):
            results.append(self.make_candidate(
                query,
                oem=raw_oem,
                raw_oem=raw_oem,
                description=description,
                url=self.search_url,
                group_path=query.part_group_path,
                confidence=confidence,
            ))

        ctx.log.info(f"{self.id}: parsed {len(results)} OEM row(s)")
        return results
