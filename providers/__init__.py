# -*- coding: utf-8 -*-
"""OEM data providers."""
from typing import List

from providers.autodoc import AutodocProvider
from providers.base import CatalogProvider, Provider, ProviderContext, create_session
from providers.fallback import FallbackSearchProvider
from providers.partsouq import PartsouqProvider
from providers.realoem import RealOemProvider
from providers.sevenzap import SevenZapProvider


def default_providers() -> List[Provider]:
    """All built-in providers, in run order."""
    return [
        RealOemProvider(),
        SevenZapProvider(),
        PartsouqProvider(),
        AutodocProvider(),
        FallbackSearchProvider(),
    ]


__all__ = [
    'AutodocProvider',
    'CatalogProvider',
    'FallbackSearchProvider',
    'PartsouqProvider',
    'Provider',
    'ProviderContext',
    'RealOemProvider',
    'SevenZapProvider',
    'create_session',
    'default_providers',
]
