from pathlib import Path
import sys
from typing import Callable, Iterable, List, Optional

import pytest
import requests


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from models import OemCandidate, ParsedQuery, SourceKind  # noqa: E402
from providers.base import Provider, ProviderContext  # noqa: E402


class FakeSession:
    """Stands in for requests.Session; serves canned HTML per URL prefix."""

    def __init__(self, pages=None, error=None):
        self.pages = pages or {}
        self.error = error
        self.calls = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.calls.append((url, params, timeout))
        if self.error:
            raise self.error
        for prefix, body in self.pages.items():
            if url.startswith(prefix):
                return FakeResponse(body)
        return FakeResponse('', status=404)

    def close(self):
        self.closed = True


class FakeResponse:

    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


class StaticProvider(Provider):
    """Provider returning fixed candidates, or raising."""

    def __init__(
        self,
        provider_id: str,
        candidates: Iterable[OemCandidate] = (),
        brands: Iterable[str] = (),
        accepts: Optional[Callable[[ParsedQuery], bool]] = None,
        error: Optional[Exception] = None,
    ):
        self.id = provider_id
        self.supported_brands = frozenset(brands)
        self._candidates = list(candidates)
        self._accepts = accepts
        self._error = error
        self.calls = 0

    def can_handle(self, query: ParsedQuery) -> bool:
        return self._accepts(query) if self._accepts else True

    def fetch(self, query: ParsedQuery, ctx: ProviderContext) -> List[OemCandidate]:
        self.calls += 1
        if self._error:
            raise self._error
        return list(self._candidates)


def make_candidate(
    oem: str,
    provider: str = 'REALOEM',
    confidence: Optional[float] = 0.9,
    group_path=None,
    source_kind: Optional[SourceKind] = None,
    description: Optional[str] = None,
) -> OemCandidate:
    return OemCandidate(
        oem=oem,
        provider=provider,
        confidence=confidence,
        group_path=group_path or [],
        source_kind=source_kind,
        description=description,
    )


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def provider_ctx(fake_session):
    return ProviderContext(session=fake_session, timeout=5)
