# -*- coding: utf-8 -*-
"""7zap - multi-brand European/Japanese parts catalog."""
from typing import Any, Dict

from models import ParsedQuery, ProviderId
from providers.base import CatalogProvider


class SevenZapProvider(CatalogProvider):
    id = ProviderId.SEVENZAP.value
    supported_brands = frozenset([
        'VOLKSWAGEN',
        'AUDI',
        'SEAT',
        'SKODA',
        'MERCEDES-BENZ',
        'OPEL',
        'FORD',
        'RENAULT',
        'PEUGEOT',
        'CITROEN',
        'FIAT',
        'MAZDA',
        'TOYOTA',
    ])
    search_url = 'https://7zap.com/en/search/'
    base_confidence = 0.84
    vin_confidence = 0.93

    def search_params(self, query: ParsedQuery) -> Dict[str, Any]:
        params = {
            'brand': query.normalized_brand.lower().replace(' ', '-'),
            'q': query.part_query,
        }
        if query.vin:
            params['vin'] = query.vin
        elif query.model:
            params['model'] = query.model
        return params
