# -*- coding: utf-8 -*-
"""
Provider registry and selection policy.

The registry is built once at startup and handed to the resolver; it is
read-only afterwards.
"""
from typing import Iterable, List, Optional

from models import ParsedQuery
from providers import Provider, default_providers


class ProviderRegistry:

    def __init__(self, providers: Iterable[Provider]):
        self._providers = tuple(providers)

        ids = [p.id for p in self._providers]
        duplicates = {i for i in ids if ids.count(i) > 1}
        if duplicates:
            raise ValueError(f"Duplicate provider ids: {sorted(duplicates)}")

    @property
    def providers(self) -> List[Provider]:
        return list(self._providers)

    def get(self, provider_id: str) -> Optional[Provider]:
        for provider in self._providers:
            if provider.id == provider_id:
                return provider
        return None

    def select(self, query: ParsedQuery) -> List[Provider]:
        """
        Providers eligible for a query, in registration order.

        A provider is eligible iff its brand set is empty or contains the
        query's canonical brand, and its can_handle() accepts the query.
        """
        return [p for p in self._providers if is_eligible(p, query)]

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self):
        return iter(self._providers)


def is_eligible(provider: Provider, query: ParsedQuery) -> bool:
    if provider.supported_brands:
        if not query.normalized_brand:
            return False
        if query.normalized_brand not in provider.supported_brands:
            return False
    return provider.can_handle(query)


def build_default_registry() -> ProviderRegistry:
    return ProviderRegistry(default_providers())
