# -*- coding: utf-8 -*-
"""Partsouq - Japanese/Korean genuine parts catalog."""
from typing import Any, Dict

from models import ParsedQuery, ProviderId
from providers.base import CatalogProvider


class PartsouqProvider(CatalogProvider):
    id = ProviderId.PARTSOUQ.value
    supported_brands = frozenset([
        'TOYOTA', 'LEXUS', 'NISSAN', 'INFINITI', 'HYUNDAI', 'KIA',
        'MITSUBISHI', 'SUBARU', 'MAZDA', 'HONDA', 'SUZUKI',
    ])
    search_url = 'https://partsouq.com/en/search/all'
    base_confidence = 0.87
    vin_confidence = 0.94

    def search_params(self, query: ParsedQuery) -> Dict[str, Any]:
        # A VIN search lands directly on the vehicle catalog
        if query.vin:
            return {'q': query.vin, 'part': query.part_query}
        terms = [query.normalized_brand, query.model, query.part_query]
        return {'q': ' '.join(t for t in terms if t)}
