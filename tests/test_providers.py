"""
Tests for the built-in providers, run against canned HTML.
"""

import pytest
import requests

from conftest import FakeSession
from models import ParsedQuery, SourceKind
from providers import (
    AutodocProvider,
    FallbackSearchProvider,
    PartsouqProvider,
    ProviderContext,
    RealOemProvider,
    SevenZapProvider,
)
from providers.base import html_to_text

SPARK_PLUG = ["Engine", "Ignition", "Spark plug"]

REALOEM_PAGE = """
<html><head><script>var x = "12 34 5 678 901";</script></head>
<body><table>
<tr><th>Description</th><th>Qty</th><th>Part number</th></tr>
<tr><td>Spark plug</td><td>4</td><td>12 12 0 037 244</td></tr>
<tr><td>Oil filter</td><td>1</td><td>11 42 7 953 129</td></tr>
<tr><td>Spark plug &amp; high power</td><td>4</td><td>12 12 2 158 252</td></tr>
</table></body></html>
"""

AUTODOC_PAGE = """
<div class="product">Bosch FR7DC+ spark plug 0 242 235 666</div>
<div class="oe">OE-Nummer: 1K0 698 151, 5K0-698-151A</div>
<div class="oe">OEM 1K0698151</div>
<div>Price 9.99 EUR</div>
"""

SEARCH_PAGE = """
<div class="result">Spark plug OEM: 1212-0037-244</div>
<div class="result">see also: 12120037244</div>
"""


def bmw_spark_plug(**kwargs):
    fields = dict(
        raw_query="2014 BMW 320d spark plug",
        brand="BMW",
        normalized_brand="BMW",
        model="320D",
        year=2014,
        part_query="spark plug",
        normalized_part_query="spark plug",
        part_group_path=SPARK_PLUG,
    )
    fields.update(kwargs)
    return ParsedQuery(**fields)


def ctx_for(pages=None, error=None):
    session = FakeSession(pages, error)
    return session, ProviderContext(session=session, timeout=5)


class TestHtmlToText:

    def test_rows_become_lines_and_cells_are_separated(self):
        text = html_to_text(REALOEM_PAGE)
        lines = text.splitlines()
        assert "Spark plug | 4 | 12 12 0 037 244 |" in lines
        assert "Spark plug & high power | 4 | 12 12 2 158 252 |" in lines

    def test_scripts_dropped(self):
        assert "678 901" not in html_to_text(REALOEM_PAGE)

    def test_empty(self):
        assert html_to_text("") == ""
        assert html_to_text("   \n ") == ""

    def test_attribute_containing_angle_bracket(self):
        markup = '<table><tr><td title="qty > 1">Spark plug</td><td>12 12 0 037 244</td></tr></table>'
        assert html_to_text(markup) == "Spark plug | 12 12 0 037 244 |"

    def test_unclosed_cells(self):
        markup = "<table><tr><td>Spark plug<td>4<td>12 12 0 037 244</tr><tr><td>Oil filter<td>1</table>"
        assert html_to_text(markup).splitlines() == [
            "Spark plug | 4 | 12 12 0 037 244 |",
            "Oil filter | 1 |",
        ]

    def test_line_breaks_and_nbsp(self):
        assert html_to_text("<p>OE&nbsp;number:<br>1K0 698 151</p>").splitlines() == [
            "OE number:",
            "1K0 698 151",
        ]


class TestRealOem:

    def test_can_handle(self):
        provider = RealOemProvider()
        assert provider.can_handle(bmw_spark_plug())
        assert not provider.can_handle(bmw_spark_plug(part_query=None))
        assert not provider.can_handle(bmw_spark_plug(normalized_brand="TOYOTA"))

    def test_fetch_keeps_matching_rows(self):
        session, ctx = ctx_for({"https://www.realoem.com/": REALOEM_PAGE})
        results = RealOemProvider().fetch(bmw_spark_plug(), ctx)

        assert [c.oem for c in results] == ["12 12 0 037 244", "12 12 2 158 252"]
        first = results[0]
        assert first.provider == "REALOEM"
        assert first.confidence == pytest.approx(0.92)
        assert first.source_kind == SourceKind.EPC
        assert first.group_path == SPARK_PLUG
        assert first.description.startswith("Spark plug")
        assert first.meta == {"brand": "BMW", "model": "320D", "year": 2014}

        url, params, timeout = session.calls[0]
        assert params == {"q": "spark plug"}
        assert timeout == 5

    def test_vin_raises_confidence_and_sends_short_vin(self):
        session, ctx = ctx_for({"https://www.realoem.com/": REALOEM_PAGE})
        results = RealOemProvider().fetch(bmw_spark_plug(vin="WBA8E9C50GK000001"), ctx)

        assert results[0].confidence == pytest.approx(0.97)
        assert session.calls[0][1] == {"q": "spark plug", "vin": "K000001"}

    def test_http_error_propagates(self):
        _, ctx = ctx_for({})
        with pytest.raises(requests.exceptions.HTTPError):
            RealOemProvider().fetch(bmw_spark_plug(), ctx)

    def test_connection_error_propagates(self):
        _, ctx = ctx_for(error=requests.exceptions.ConnectionError("down"))
        with pytest.raises(requests.exceptions.ConnectionError):
            RealOemProvider().fetch(bmw_spark_plug(), ctx)

    def test_describe(self):
        assert RealOemProvider().describe() == {
            "id": "REALOEM",
            "supported_brands": ["BMW"],
            "source_kind": "EPC",
        }


class TestCatalogSearchParams:

    def test_sevenzap_brand_slug_and_model(self):
        query = bmw_spark_plug(normalized_brand="MERCEDES-BENZ", model="C200")
        assert SevenZapProvider().search_params(query) == {
            "brand": "mercedes-benz",
            "q": "spark plug",
            "model": "C200",
        }

    def test_sevenzap_vin_replaces_model(self):
        query = bmw_spark_plug(normalized_brand="AUDI", vin="WAUZZZ8V0GA000001")
        params = SevenZapProvider().search_params(query)
        assert params["vin"] == "WAUZZZ8V0GA000001"
        assert "model" not in params

    def test_partsouq_terms(self):
        query = bmw_spark_plug(normalized_brand="TOYOTA", model=None, part_query="oil filter")
        assert PartsouqProvider().search_params(query) == {"q": "TOYOTA oil filter"}

    def test_partsouq_vin(self):
        query = bmw_spark_plug(normalized_brand="TOYOTA", vin="JTDBR32E000000001")
        assert PartsouqProvider().search_params(query) == {"q": "JTDBR32E000000001", "part": "spark plug"}

    def test_brand_coverage(self):
        assert "TOYOTA" in SevenZapProvider.supported_brands
        assert "TOYOTA" in PartsouqProvider.supported_brands
        assert "BMW" not in SevenZapProvider.supported_brands


class TestAutodoc:

    def test_can_handle(self):
        provider = AutodocProvider()
        assert provider.can_handle(bmw_spark_plug())
        assert not provider.can_handle(bmw_spark_plug(part_query=None))
        assert not provider.can_handle(ParsedQuery(raw_query="spark plug", part_query="spark plug"))
        assert provider.can_handle(ParsedQuery(raw_query="1K0698151", part_query="1K0698151"))

    def test_fetch_reads_oe_blocks_only(self):
        session, ctx = ctx_for({"https://www.autodoc.de/": AUTODOC_PAGE})
        results = AutodocProvider().fetch(bmw_spark_plug(part_query="brake disc"), ctx)

        assert [c.oem for c in results] == ["1K0698151", "5K0698151A"]
        assert results[0].raw_oem == "1K0 698 151"
        assert results[0].source_kind == SourceKind.CROSSREF
        assert results[0].confidence == pytest.approx(0.7)
        assert session.calls[0][0].endswith("brake%20disc")


class TestFallback:

    def test_can_handle_only_without_brand_or_vin(self):
        provider = FallbackSearchProvider()
        assert provider.can_handle(ParsedQuery(raw_query="spark plug", part_query="spark plug"))
        assert not provider.can_handle(bmw_spark_plug())
        assert not provider.can_handle(ParsedQuery(raw_query="spark plug", vin="WBA00000000000000"))
        assert not provider.can_handle(ParsedQuery(raw_query=""))

    def test_search_terms_unique(self):
        query = ParsedQuery(raw_query="spark plug", part_query="spark plug")
        assert FallbackSearchProvider().search_terms(query) == ["spark plug"]

        query = ParsedQuery(raw_query="golf 7 spark plug", model="GOLF 7", part_query="spark plug")
        assert FallbackSearchProvider().search_terms(query) == ["GOLF 7 spark plug", "golf 7 spark plug"]

    def test_fetch_dedupes_across_terms(self):
        session, ctx = ctx_for({"https://duckduckgo.com/": SEARCH_PAGE})
        query = ParsedQuery(raw_query="golf 7 spark plug", model="GOLF 7", part_query="spark plug")

        results = FallbackSearchProvider().fetch(query, ctx)

        assert [c.oem for c in results] == ["12120037244"]
        assert results[0].raw_oem == "1212-0037-244"
        assert results[0].source_kind == SourceKind.FALLBACK
        assert results[0].meta["term"] == "GOLF 7 spark plug"
        assert len(session.calls) == 2
        assert session.calls[0][1] == {"q": "site:7zap.com GOLF 7 spark plug"}
