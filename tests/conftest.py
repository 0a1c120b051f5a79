from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from webmaster_cli.consumer import OAuthConsumer
from webmaster_cli.transport import RequestsTransport

FIXED_NONCE = "fixednonce"
FIXED_TIMESTAMP = 1300000000


@dataclass
class FakeResponse:
    status_code: int = 200
    reason: str = "OK"
    text: str = ""
    headers: Dict[str, str] = field(default_factory=lambda: {"Content-Type": "application/atom+xml"})
    raw: Any = field(default_factory=lambda: SimpleNamespace(version=11))


class FakeSession:
    """Stands in for requests.Session and records every request."""

    def __init__(self) -> None:
        self.responses: List[Any] = []
        self.calls: List[SimpleNamespace] = []
        self.closed = 0

    def queue(self, status_code: int = 200, text: str = "", reason: str = "OK", **kwargs: Any) -> None:
        self.responses.append(FakeResponse(status_code=status_code, text=text, reason=reason, **kwargs))

    def queue_error(self, exc: Exception) -> None:
        self.responses.append(exc)

    def request(self, method: str, url: str, **kwargs: Any):
        self.calls.append(SimpleNamespace(method=method, url=url, **kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed += 1


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def consumer(fake_session: FakeSession) -> OAuthConsumer:
    return OAuthConsumer(
        "example.com",
        "consumer-secret",
        transport_factory=lambda: RequestsTransport(session=fake_session),
        nonce_factory=lambda: FIXED_NONCE,
        clock=lambda: FIXED_TIMESTAMP,
    )


SITES_FEED = """<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005'
      xmlns:wt='http://schemas.google.com/webmasters/tools/2007' gd:etag='W/"feed-etag"'>
  <id>https://www.google.com/webmasters/tools/feeds/sites/</id>
  <updated>2011-05-10T10:00:00.000Z</updated>
  <title>Sites</title>
  <entry gd:etag='W/"site-one"'>
    <id>https://www.google.com/webmasters/tools/feeds/sites/http%3A%2F%2Fexample.com%2F</id>
    <updated>2011-05-09T08:00:00.000Z</updated>
    <title>http://example.com/</title>
    <wt:verified>true</wt:verified>
    <wt:verification-method type='metatag' in-use='false'>&lt;meta name="google-site-verification" content="abc" /&gt;</wt:verification-method>
    <wt:verification-method type='htmlpage' in-use='true'>google123.html</wt:verification-method>
    <wt:crawl-rate>normal</wt:crawl-rate>
    <wt:geolocation>NL</wt:geolocation>
    <wt:preferred-domain>none</wt:preferred-domain>
    <wt:enhanced-image-search>false</wt:enhanced-image-search>
  </entry>
  <entry gd:etag='W/"site-two"'>
    <id>https://www.google.com/webmasters/tools/feeds/sites/http%3A%2F%2Fexample.org%2F</id>
    <updated>2011-05-08T08:00:00.000Z</updated>
    <title>http://example.org/</title>
    <wt:verified>false</wt:verified>
  </entry>
</feed>
"""

SITE_ENTRY = """<?xml version='1.0' encoding='UTF-8'?>
<entry xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005'
       xmlns:wt='http://schemas.google.com/webmasters/tools/2007' gd:etag='W/"site-one"'>
  <id>https://www.google.com/webmasters/tools/feeds/sites/http%3A%2F%2Fexample.com%2F</id>
  <updated>2011-05-09T08:00:00.000Z</updated>
  <title>http://example.com/</title>
  <wt:verified>true</wt:verified>
  <wt:crawl-rate>slower</wt:crawl-rate>
</entry>
"""

SITEMAPS_FEED = """<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005'
      xmlns:wt='http://schemas.google.com/webmasters/tools/2007' gd:etag='W/"sitemaps-etag"'>
  <id>https://www.google.com/webmasters/tools/feeds/http%3A%2F%2Fexample.com%2F/sitemaps/</id>
  <updated>2011-05-10T10:00:00.000Z</updated>
  <wt:sitemap-mobile>
    <wt:markup-language>XHTML</wt:markup-language>
  </wt:sitemap-mobile>
  <entry gd:etag='W/"sitemap-one"'>
    <id>http://example.com/sitemap.xml</id>
    <updated>2011-05-01T00:00:00.000Z</updated>
    <title>http://example.com/sitemap.xml</title>
    <wt:sitemap-type>WEB</wt:sitemap-type>
    <wt:sitemap-status>Pending</wt:sitemap-status>
    <wt:sitemap-url-count>0012</wt:sitemap-url-count>
  </entry>
</feed>
"""

SITEMAP_ENTRY = """<?xml version='1.0' encoding='UTF-8'?>
<entry xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005'
       xmlns:wt='http://schemas.google.com/webmasters/tools/2007' gd:etag='W/"sitemap-new"'>
  <id>http://example.com/news.xml</id>
  <updated>2011-05-11T00:00:00.000Z</updated>
  <title>http://example.com/news.xml</title>
  <wt:sitemap-type>WEB</wt:sitemap-type>
  <wt:sitemap-last-downloaded>2011-05-11T00:00:00.000Z</wt:sitemap-last-downloaded>
</entry>
"""

KEYWORDS_FEED = """<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005'
      xmlns:wt='http://schemas.google.com/webmasters/tools/2007' gd:etag='W/"keywords-etag"'>
  <id>https://www.google.com/webmasters/tools/feeds/http%3A%2F%2Fexample.com%2F/keywords/</id>
  <updated>2011-05-10T10:00:00.000Z</updated>
  <wt:keyword source='internal'>example</wt:keyword>
  <wt:keyword source='external'>sample site</wt:keyword>
</feed>
"""

CRAWL_ISSUES_FEED = """<?xml version='1.0' encoding='UTF-8'?>
<feed xmlns='http://www.w3.org/2005/Atom' xmlns:gd='http://schemas.google.com/g/2005'
      xmlns:openSearch='http://a9.com/-/spec/opensearch/1.1/'
      xmlns:wt='http://schemas.google.com/webmasters/tools/2007' gd:etag='W/"crawl-etag"'>
  <id>https://www.google.com/webmasters/tools/feeds/http%3A%2F%2Fexample.com%2F/crawlissues/</id>
  <updated>2011-05-10T10:00:00.000Z</updated>
  <openSearch:totalResults>1</openSearch:totalResults>
  <openSearch:startIndex>1</openSearch:startIndex>
  <openSearch:itemsPerPage>100</openSearch:itemsPerPage>
  <entry>
    <id>https://www.google.com/webmasters/tools/feeds/http%3A%2F%2Fexample.com%2F/crawlissues/1</id>
    <updated>2011-05-09T00:00:00.000Z</updated>
    <title>Crawl Issue</title>
    <wt:crawlType>web</wt:crawlType>
    <wt:issueType>http-error</wt:issueType>
    <wt:url>http://example.com/missing</wt:url>
    <wt:dateDetected>2011-05-08T00:00:00.000Z</wt:dateDetected>
    <wt:detail>404 (Not found)</wt:detail>
  </entry>
</feed>
"""
