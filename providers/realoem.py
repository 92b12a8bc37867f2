# -*- coding: utf-8 -*-
"""RealOEM - BMW parts catalog."""
from typing import Any, Dict

from models import ParsedQuery, ProviderId
from providers.base import CatalogProvider


class RealOemProvider(CatalogProvider):
    id = ProviderId.REALOEM.value
    supported_brands = frozenset(['BMW'])
    search_url = 'https://www.realoem.com/bmw/enUS/partxref'
    base_confidence = 0.92
    vin_confidence = 0.97

    def search_params(self, query: ParsedQuery) -> Dict[str, Any]:
        # RealOEM decodes the last 7 VIN characters
        params = {'q': query.part_query}
        if query.vin:
            params['vin'] = query.vin[-7:]
        return params
